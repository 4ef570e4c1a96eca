"""
样式解析 - 尺寸/虚线/颜色/字体/对齐 → 绘制参数

所有对照表为模块级只读映射；无法识别的键一律回退到默认值。
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType


class ColorType(str, Enum):
    """颜色表类别"""
    SHAPE = "shape"
    FILL = "fill"
    SEMI_FILL = "semi"
    STICKY = "sticky"


INK_DASH = "draw"
HIGHLIGHT_COLOR = "#fedd00"
HIGHLIGHT_WIDTH_FACTOR = 7
HIGHLIGHT_OPACITY = 0.3

DEFAULT_STROKE_WIDTH = 1
DEFAULT_SHAPE_COLOR = "#0d0d0d"
DEFAULT_FILL_COLOR = "#fbfcfd"
DEFAULT_STICKY_COLOR = "#FED49A"
SEMI_FILL_COLOR = "#f5f9f7"
DEFAULT_FONT_SIZE = 16
DEFAULT_FONT_FAMILY = "Shantell Sans Tldrawish"
ROUND_DASHARRAY = "stroke-linejoin:round;stroke-linecap:round;"

STROKE_WIDTHS = MappingProxyType({
    "s": 2,
    "m": 3.5,
    "l": 5,
    "xl": 10,
})

DASHED_GAPS = MappingProxyType({
    "s": "8 8",
    "m": "14 14",
    "l": "20 20",
    "xl": "40 40",
})

DOTTED_GAPS = MappingProxyType({
    "s": "0.1 8",
    "m": "0.1 14",
    "l": "0.1 20",
    "xl": "0.1 40",
})

SHAPE_COLORS = MappingProxyType({
    "black": "#1d1d1d",
    "grey": "#9fa8b2",
    "light-violet": "#e085f4",
    "violet": "#ae3ec9",
    "blue": "#4465e9",
    "light-blue": "#4ba1f1",
    "yellow": "#f1ac4b",
    "orange": "#e16919",
    "green": "#099268",
    "light-green": "#4cb05e",
    "light-red": "#f87777",
    "red": "#e03131",
    "white": "#ffffff",
})

FILL_COLORS = MappingProxyType({
    "black": "#e8e8e8",
    "grey": "#eceef0",
    "light-violet": "#f5eafa",
    "violet": "#ecdcf2",
    "blue": "#dce1f8",
    "light-blue": "#ddedfa",
    "yellow": "#f9f0e6",
    "orange": "#f8e2d4",
    "green": "#d3e9e3",
    "light-green": "#dbf0e0",
    "light-red": "#f4dadb",
    "red": "#f4dadb",
    "white": "#ffffff",
})

STICKY_COLORS = MappingProxyType({
    "black": "#FEC78C",
    "grey": "#B6BDC3",
    "light-violet": "#E4A1F7",
    "violet": "#B38EDE",
    "blue": "#8AA3FF",
    "light-blue": "#7ACCF8",
    "yellow": "#FED49A",
    "orange": "#FAA475",
    "green": "#6FC896",
    "light-green": "#98D08A",
    "light-red": "#F7A5A1",
    "red": "#FC8282",
    "white": "#FFFFFF",
})

FONT_SIZES = MappingProxyType({
    "s": 18,
    "m": 24,
    "l": 36,
    "xl": 44,
})

FONT_FAMILIES = MappingProxyType({
    "draw": "Shantell Sans Tldrawish",
    "sans": "IBM Plex Sans",
    "serif": "IBM Plex Serif",
    "mono": "IBM Plex Mono",
})

_COLOR_TABLES = MappingProxyType({
    ColorType.SHAPE: (SHAPE_COLORS, DEFAULT_SHAPE_COLOR),
    ColorType.FILL: (FILL_COLORS, DEFAULT_FILL_COLOR),
    ColorType.STICKY: (STICKY_COLORS, DEFAULT_STICKY_COLOR),
})


def stroke_width(size: str | None) -> float:
    return STROKE_WIDTHS.get(size, DEFAULT_STROKE_WIDTH)


def dash_gap(dash: str | None, size: str | None) -> str:
    """虚线间隔（stroke-dasharray 取值）"""
    if dash == "dashed":
        return DASHED_GAPS.get(size, "4, 4")
    if dash == "dotted":
        return DOTTED_GAPS.get(size, "0.1, 4")
    return "0"


def dasharray_style(dash: str | None, gap: str) -> str:
    """虚线样式（写入 style 属性）"""
    if dash == "dashed":
        return f"stroke-linecap:butt;stroke-dasharray:{gap};"
    if dash == "dotted":
        return f"stroke-linecap:round;stroke-dasharray:{gap};"
    return ROUND_DASHARRAY


def color_to_hex(color: str | None, kind: ColorType = ColorType.SHAPE) -> str:
    """颜色名 → 十六进制色值"""
    if kind == ColorType.SEMI_FILL:
        return SEMI_FILL_COLOR
    table, default = _COLOR_TABLES[kind]
    return table.get(color, default)


def font_size(size: str | None) -> int:
    return FONT_SIZES.get(size, DEFAULT_FONT_SIZE)


def font_family(font: str | None) -> str:
    return FONT_FAMILIES.get(font, DEFAULT_FONT_FAMILY)


def normalize_align(align: str | None) -> str | None:
    if align and align.endswith("-legacy"):
        return align[: -len("-legacy")]
    return align


def align_horizontally(align: str | None, width: float) -> float:
    """水平对齐 → 文本锚点 x"""
    align = normalize_align(align)
    if align == "start":
        return 0
    if align == "end":
        return width
    return width / 2


def align_vertically(align: str | None, height: float) -> float:
    """垂直对齐 → 文本锚点 y"""
    align = normalize_align(align)
    if align == "start":
        return 0
    if align == "end":
        return height
    return height / 2


def text_anchor(align: str | None) -> str:
    """水平对齐 → SVG text-anchor"""
    align = normalize_align(align)
    if align in ("start", "end"):
        return align
    return "middle"
