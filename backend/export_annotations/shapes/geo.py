"""
几何图形族 - 矩形/椭圆/菱形/三角形/梯形/斜方形/正多边形

所有图形内接于 (w, h + growY) 包围盒，共享描边/虚线/填充与可选文本标签。
未知的 geo 类型按矩形绘制。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ClassVar
from xml.etree import ElementTree as ET

from ..geometry import points_attr, regular_polygon_vertices
from ..geometry import style
from ..geometry.vec import Point, fmt_num
from ..models.scene import AnnotationRecord
from .base import Shape
from .common import apply_fill, draw_label, stroke_attrs

logger = logging.getLogger(__name__)

SLANT_RATIO = 0.38


@dataclass
class Geo(Shape):
    """几何图形基类"""
    type_name = "geo"
    geo_kind: ClassVar[str] = ""

    @property
    def grow_y(self) -> float:
        return self._prop_number("growY")

    @property
    def height(self) -> float:
        return self._prop_number("h") + self.grow_y

    def outline(self) -> ET.Element:
        """图形轮廓元素（子类实现）"""
        raise NotImplementedError

    def draw(self) -> ET.Element:
        group = ET.Element("g")
        element = self.outline()
        for key, value in stroke_attrs(self).items():
            element.set(key, value)
        apply_fill(element, self, group)
        group.append(element)
        draw_label(self, group, self.width, self.height)
        return group


class PolygonGeo(Geo):
    """以顶点列表描述的几何图形"""

    def vertices(self) -> list[Point]:
        raise NotImplementedError

    def outline(self) -> ET.Element:
        return ET.Element("polygon", {"points": points_attr(self.vertices())})


@dataclass
class Rectangle(Geo):
    geo_kind = "rectangle"

    def outline(self) -> ET.Element:
        rect = ET.Element("rect", {
            "x": "0",
            "y": "0",
            "width": fmt_num(self.width),
            "height": fmt_num(self.height),
        })
        # 墨迹风格用圆角模拟手绘效果
        if self.dash == style.INK_DASH:
            rect.set("rx", fmt_num(self.thickness))
            rect.set("ry", fmt_num(self.thickness))
        return rect


@dataclass
class Ellipse(Geo):
    geo_kind = "ellipse"

    def outline(self) -> ET.Element:
        rx, ry = self.width / 2, self.height / 2
        return ET.Element("ellipse", {
            "cx": fmt_num(rx),
            "cy": fmt_num(ry),
            "rx": fmt_num(rx),
            "ry": fmt_num(ry),
        })


@dataclass
class Diamond(PolygonGeo):
    geo_kind = "diamond"

    def vertices(self) -> list[Point]:
        w, h = self.width, self.height
        return [(0, h / 2), (w / 2, 0), (w, h / 2), (w / 2, h)]


@dataclass
class Triangle(PolygonGeo):
    geo_kind = "triangle"

    def vertices(self) -> list[Point]:
        w, h = self.width, self.height
        return [(w / 2, 0), (w, h), (0, h)]


@dataclass
class Trapezoid(PolygonGeo):
    geo_kind = "trapezoid"

    def vertices(self) -> list[Point]:
        w, h = self.width, self.height
        offset = min(w * SLANT_RATIO, h * SLANT_RATIO)
        return [(offset, 0), (w - offset, 0), (w, h), (0, h)]


@dataclass
class Rhombus(PolygonGeo):
    geo_kind = "rhombus"

    def vertices(self) -> list[Point]:
        w, h = self.width, self.height
        offset = min(w * SLANT_RATIO, h * SLANT_RATIO)
        return [(offset, 0), (w, 0), (w - offset, h), (0, h)]


class RegularPolygon(PolygonGeo):
    sides: ClassVar[int] = 6

    def vertices(self) -> list[Point]:
        return regular_polygon_vertices(self.width, self.height, self.sides)


@dataclass
class Pentagon(RegularPolygon):
    geo_kind = "pentagon"
    sides = 5


@dataclass
class Hexagon(RegularPolygon):
    geo_kind = "hexagon"
    sides = 6


@dataclass
class Octagon(RegularPolygon):
    geo_kind = "octagon"
    sides = 8


GEO_KINDS: dict[str, type[Geo]] = {
    cls.geo_kind: cls
    for cls in (Rectangle, Ellipse, Diamond, Triangle, Trapezoid, Rhombus, Pentagon, Hexagon, Octagon)
}


def create_geo(record: AnnotationRecord) -> Geo:
    """按 props.geo 创建几何图形；未知类型按矩形绘制"""
    kind = record.props.get("geo")
    cls = GEO_KINDS.get(kind)
    if cls is None:
        logger.warning(f"未知的几何类型 {kind!r}（{record.id}），按矩形绘制")
        cls = Rectangle
    return cls.from_record(record)
