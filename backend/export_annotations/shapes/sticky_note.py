"""
便签 - 固定宽度的圆角矩形，高度随 growY 增长
"""

from __future__ import annotations

from dataclasses import dataclass
from xml.etree import ElementTree as ET

from ..geometry import style
from ..geometry.vec import fmt_num
from .base import Shape
from .common import draw_label

NOTE_SIZE = 200
NOTE_CORNER_RADIUS = 10


@dataclass
class StickyNote(Shape):
    """便签"""
    type_name = "note"

    @property
    def width(self) -> float:
        return NOTE_SIZE

    @property
    def height(self) -> float:
        return NOTE_SIZE + self._prop_number("growY")

    @property
    def shape_color(self) -> str:
        return style.color_to_hex(self.color, style.ColorType.STICKY)

    def draw(self) -> ET.Element:
        group = ET.Element("g")
        ET.SubElement(group, "rect", {
            "width": fmt_num(self.width),
            "height": fmt_num(self.height),
            "rx": str(NOTE_CORNER_RADIUS),
            "ry": str(NOTE_CORNER_RADIUS),
            "fill": self.shape_color,
        })
        draw_label(self, group, self.width, self.height)
        return group
