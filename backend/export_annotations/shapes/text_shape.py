"""
文本图形 - 按 align 水平对齐、垂直居中
"""

from __future__ import annotations

from dataclasses import dataclass
from xml.etree import ElementTree as ET

from .base import Shape
from .common import draw_label


@dataclass
class TextShape(Shape):
    type_name = "text"

    def draw(self) -> ET.Element:
        group = ET.Element("g")
        draw_label(self, group, self.width, self.height, vertical_align="middle")
        return group
