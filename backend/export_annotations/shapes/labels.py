"""
文本标签排版 - 测量文本并在图形包围盒内定位

两种排版：
1. 投票结果（id 以 shape:poll-result 开头）：按包围盒等比缩小字号，使整块文本放得下
2. 其它图形：用 Pillow 字体度量测量每行宽度，超宽按词折行，再按 align/verticalAlign 定位
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache

from PIL import ImageFont

from ..geometry import style


POLL_RESULT_PREFIX = "shape:poll-result"
LINE_HEIGHT_FACTOR = 1.35
LABEL_PADDING = 16
# 无度量时的平均字宽（相对字号）
AVERAGE_CHAR_WIDTH = 0.6


@dataclass
class LabelLine:
    text: str
    x: float
    y: float


@dataclass
class LabelLayout:
    """排版结果（坐标相对图形原点）"""
    lines: list[LabelLine] = field(default_factory=list)
    font_size: float = style.DEFAULT_FONT_SIZE
    font_family: str = style.DEFAULT_FONT_FAMILY
    anchor: str = "middle"
    width: float = 0.0
    height: float = 0.0


@lru_cache(maxsize=64)
def _load_font(family: str, size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    try:
        return ImageFont.truetype(f"{family}.ttf", size)
    except OSError:
        return ImageFont.load_default(size=size)


def measure_text(text: str, font_size: float, family: str = style.DEFAULT_FONT_FAMILY) -> float:
    """测量单行文本宽度（像素）"""
    if not text:
        return 0.0
    size = max(1, int(round(font_size)))
    font = _load_font(family, size)
    left, _, right, _ = font.getbbox(text)
    return float(right - left)


def wrap_text(text: str, max_width: float, font_size: float, family: str) -> list[str]:
    """按词折行；单词本身超宽时独占一行"""
    lines: list[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split(" ")
        if max_width <= 0:
            lines.append(paragraph)
            continue

        current: list[str] = []
        for word in words:
            candidate = " ".join(current + [word])
            if current and measure_text(candidate, font_size, family) > max_width:
                lines.append(" ".join(current))
                current = [word]
            else:
                current.append(word)
        lines.append(" ".join(current))
    return lines


def _estimate_block(lines: list[str], font_size: float) -> tuple[float, float]:
    longest = max((len(line) for line in lines), default=0)
    return longest * font_size * AVERAGE_CHAR_WIDTH, len(lines) * font_size * LINE_HEIGHT_FACTOR


def _block_top(vertical_align: str | None, box_height: float, block_height: float) -> float:
    align = style.normalize_align(vertical_align)
    if align == "start":
        return 0.0
    if align == "end":
        return box_height - block_height
    return (box_height - block_height) / 2


def layout_label(
    shape_id: str,
    text: str,
    width: float,
    height: float,
    *,
    size: str | None = None,
    font: str | None = None,
    align: str | None = None,
    vertical_align: str | None = None,
) -> LabelLayout | None:
    """
    在 (width, height) 包围盒内排版标签

    Returns:
        LabelLayout；文本为空时返回 None
    """
    if not text:
        return None

    font_size = float(style.font_size(size))
    family = style.font_family(font)

    if shape_id.startswith(POLL_RESULT_PREFIX):
        lines = text.split("\n")
        est_w, est_h = _estimate_block(lines, font_size)
        scale = 1.0
        if est_w > 0 and width > 0:
            scale = min(scale, width / est_w)
        if est_h > 0 and height > 0:
            scale = min(scale, height / est_h)
        font_size *= scale
        anchor = "middle"
        x = width / 2
        block_w, block_h = est_w * scale, est_h * scale
        top = (height - block_h) / 2
    else:
        lines = wrap_text(text, width - LABEL_PADDING * 2, font_size, family)
        block_w = max(measure_text(line, font_size, family) for line in lines)
        block_h = len(lines) * font_size * LINE_HEIGHT_FACTOR
        anchor = style.text_anchor(align)
        x = style.align_horizontally(align, width)
        if anchor == "start":
            x += LABEL_PADDING
        elif anchor == "end":
            x -= LABEL_PADDING
        top = _block_top(vertical_align, height, block_h)

    line_height = font_size * LINE_HEIGHT_FACTOR
    placed = [
        LabelLine(text=line, x=x, y=top + line_height * i + line_height / 2)
        for i, line in enumerate(lines)
    ]

    return LabelLayout(
        lines=placed,
        font_size=font_size,
        font_family=family,
        anchor=anchor,
        width=block_w,
        height=block_h,
    )
