"""
图形模型 - 标注记录 → SVG 片段

每种图形从 AnnotationRecord 构造，render() 返回已套用变换的 <g>。
"""

from .arrow import Arrow, Line
from .base import Shape
from .common import apply_fill, draw_label, fill_pattern_defs, wrap_transform
from .draw import Draw, Highlight
from .geo import (
    Diamond,
    Ellipse,
    Geo,
    Hexagon,
    Octagon,
    Pentagon,
    Rectangle,
    Rhombus,
    Trapezoid,
    Triangle,
    create_geo,
)
from .labels import POLL_RESULT_PREFIX, layout_label, measure_text
from .registry import SHAPE_TYPES, create_shape
from .sticky_note import StickyNote
from .text_shape import TextShape

__all__ = [
    "Shape",
    "Arrow",
    "Line",
    "Draw",
    "Highlight",
    "Geo",
    "Rectangle",
    "Ellipse",
    "Diamond",
    "Triangle",
    "Trapezoid",
    "Rhombus",
    "Pentagon",
    "Hexagon",
    "Octagon",
    "create_geo",
    "StickyNote",
    "TextShape",
    "SHAPE_TYPES",
    "create_shape",
    "wrap_transform",
    "apply_fill",
    "fill_pattern_defs",
    "draw_label",
    "layout_label",
    "measure_text",
    "POLL_RESULT_PREFIX",
]
