"""
箭头与线段

主干由弯曲量决定为直线或圆弧；箭头为三角形 marker，
朝向取路径端点的切线角，只加在 arrowheadStart/arrowheadEnd 不为 none 的一端。
虚线样式只作用于主干。
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any
from xml.etree import ElementTree as ET

from ..geometry import bent_arc_path, points_attr, tangent_angles_at_ends
from ..geometry.arcs import ShaftPath
from ..geometry.vec import Point, fmt_num
from .base import Shape
from .common import stroke_attrs

ARROWHEAD_PATH = "M 0 0 L 10 5 L 0 10 z"
NO_ARROWHEAD = "none"


def _to_point(value: Any) -> Point:
    """{x, y} / [x, y] → (x, y)；非法值记为原点"""
    x = y = 0.0
    if isinstance(value, dict):
        x, y = value.get("x", 0.0), value.get("y", 0.0)
    elif isinstance(value, (list, tuple)) and len(value) >= 2:
        x, y = value[0], value[1]
    try:
        x, y = float(x), float(y)
    except (TypeError, ValueError):
        return (0.0, 0.0)
    if not (math.isfinite(x) and math.isfinite(y)):
        return (0.0, 0.0)
    return (x, y)


def _points_box(points: list[Point]) -> tuple[float, float]:
    if not points:
        return 0.0, 0.0
    return max(0.0, *(p[0] for p in points)), max(0.0, *(p[1] for p in points))


def arrowhead_marker(marker_id: str, color: str, angle: float) -> ET.Element:
    marker = ET.Element("marker", {
        "id": marker_id,
        "viewBox": "0 0 10 10",
        "refX": "5",
        "refY": "5",
        "markerWidth": "6",
        "markerHeight": "6",
        "orient": fmt_num(angle),
    })
    ET.SubElement(marker, "path", {"d": ARROWHEAD_PATH, "fill": color})
    return marker


@dataclass
class Arrow(Shape):
    """箭头"""
    type_name = "arrow"

    @property
    def start(self) -> Point:
        return _to_point(self.props.get("start"))

    @property
    def end(self) -> Point:
        return _to_point(self.props.get("end"))

    @property
    def bend(self) -> float:
        return self._prop_number("bend")

    @property
    def arrowhead_start(self) -> str:
        return self.props.get("arrowheadStart") or NO_ARROWHEAD

    @property
    def arrowhead_end(self) -> str:
        return self.props.get("arrowheadEnd") or NO_ARROWHEAD

    def box(self) -> tuple[float, float]:
        return _points_box([self.start, self.end])

    def shaft(self) -> ShaftPath:
        return bent_arc_path(self.start, self.end, self.bend)

    def draw(self) -> ET.Element:
        group = ET.Element("g")
        shaft = self.shaft()
        path = ET.Element("path", {"d": shaft.d, **stroke_attrs(self), "fill": "none"})

        heads = [
            (self.arrowhead_start, "start"),
            (self.arrowhead_end, "end"),
        ]
        if any(head != NO_ARROWHEAD for head, _ in heads):
            start_angle, end_angle = tangent_angles_at_ends(shaft)
            defs = ET.SubElement(group, "defs")
            for head, end in heads:
                if head == NO_ARROWHEAD:
                    continue
                marker_id = f"{head}-{self.id}-{end}"
                angle = start_angle if end == "start" else end_angle
                defs.append(arrowhead_marker(marker_id, self.shape_color, angle))
                path.set(f"marker-{end}", f"url(#{marker_id})")

        group.append(path)
        return group


@dataclass
class Line(Shape):
    """线段（由手柄点确定，无箭头）"""
    type_name = "line"

    def handle_points(self) -> list[Point]:
        """按 index 排序的手柄点"""
        handles = self.props.get("handles") or self.props.get("points") or {}
        if isinstance(handles, dict):
            handles = list(handles.values())
        ordered = sorted(
            (h for h in handles if isinstance(h, dict)),
            key=lambda h: str(h.get("index", "")),
        )
        return [_to_point(h) for h in ordered]

    def box(self) -> tuple[float, float]:
        return _points_box(self.handle_points())

    def draw(self) -> ET.Element:
        group = ET.Element("g")
        points = self.handle_points()
        if len(points) < 2:
            return group

        if len(points) == 2:
            shaft = bent_arc_path(points[0], points[1], self._prop_number("bend"))
            ET.SubElement(group, "path", {"d": shaft.d, **stroke_attrs(self), "fill": "none"})
        else:
            ET.SubElement(group, "polyline", {
                "points": points_attr(points),
                **stroke_attrs(self),
                "fill": "none",
            })
        return group
