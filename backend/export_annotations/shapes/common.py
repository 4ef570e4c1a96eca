"""
图形公共函数 - 变换包装、填充、斜线图案、文本标签
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from xml.etree import ElementTree as ET

from ..geometry import style
from ..geometry.vec import fmt_num, rad_to_degree
from .labels import layout_label

if TYPE_CHECKING:
    from .base import Shape


def wrap_transform(shape: "Shape", fragment: ET.Element) -> ET.Element:
    """
    套用平移、绕中心旋转与透明度

    片段在原点绘制，这里统一包一层 <g>。
    """
    transform = f"translate({fmt_num(shape.x)} {fmt_num(shape.y)})"
    degrees = rad_to_degree(shape.rotation)
    if degrees:
        w, h = shape.box()
        transform += f" rotate({fmt_num(degrees)} {fmt_num(w / 2)} {fmt_num(h / 2)})"

    group = ET.Element("g", {"transform": transform})
    if shape.opacity is not None and shape.opacity != 1:
        group.set("opacity", fmt_num(shape.opacity))
    group.append(fragment)
    return group


def pattern_id(shape_id: str) -> str:
    return f"hash_pattern-{shape_id}"


def fill_pattern_defs(shape_id: str, color: str) -> ET.Element:
    """斜线填充图案 <defs>"""
    defs = ET.Element("defs")
    pattern = ET.SubElement(defs, "pattern", {
        "id": pattern_id(shape_id),
        "width": "8",
        "height": "8",
        "patternUnits": "userSpaceOnUse",
        "patternTransform": "rotate(45 0 0)",
    })
    ET.SubElement(pattern, "rect", {"width": "8", "height": "8", "fill": "white"})
    ET.SubElement(pattern, "line", {
        "x1": "0",
        "y1": "0",
        "x2": "0",
        "y2": "8",
        "stroke": color,
        "stroke-width": "3.5",
        "stroke-dasharray": "4, 4",
    })
    return defs


def apply_fill(element: ET.Element, shape: "Shape", group: ET.Element) -> None:
    """
    按 fill 属性设置填充

    pattern 填充会向 group 插入一次 <defs>。
    """
    fill = shape.fill
    if fill == "solid":
        element.set("fill", style.color_to_hex(shape.color, style.ColorType.FILL))
    elif fill == "semi":
        element.set("fill", style.color_to_hex(fill, style.ColorType.SEMI_FILL))
    elif fill == "pattern":
        pid = pattern_id(shape.id)
        if group.find(f"defs/pattern[@id='{pid}']") is None:
            group.insert(0, fill_pattern_defs(shape.id, shape.shape_color))
        element.set("fill", f"url(#{pid})")
    else:
        element.set("fill", "none")


def stroke_attrs(shape: "Shape") -> dict[str, str]:
    return {
        "stroke": shape.shape_color,
        "stroke-width": fmt_num(shape.thickness),
        "style": shape.dasharray,
    }


def draw_label(
    shape: "Shape",
    group: ET.Element,
    width: float,
    height: float,
    vertical_align: str | None = None,
) -> ET.Element | None:
    """在包围盒内绘制文本标签；无文本时不绘制"""
    props = shape.props
    layout = layout_label(
        shape.id,
        props.get("text") or "",
        width,
        height,
        size=props.get("size"),
        font=props.get("font"),
        align=props.get("align"),
        vertical_align=vertical_align or props.get("verticalAlign"),
    )
    if layout is None:
        return None

    color = style.color_to_hex(props.get("labelColor") or props.get("color"), style.ColorType.SHAPE)
    text = ET.SubElement(group, "text", {
        "font-family": layout.font_family,
        "font-size": fmt_num(layout.font_size),
        "text-anchor": layout.anchor,
        "dominant-baseline": "middle",
        "fill": color,
    })
    for line in layout.lines:
        tspan = ET.SubElement(text, "tspan", {"x": fmt_num(line.x), "y": fmt_num(line.y)})
        tspan.text = line.text
    return text
