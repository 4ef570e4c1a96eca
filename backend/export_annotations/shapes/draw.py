"""
手绘与荧光笔

Draw: dash 为 draw（墨迹）时绘制压感轮廓并实心填充；否则绘制带描边的中心线。
      中心线的填充（solid/semi/pattern/none）独立按 fill 属性设置。
Highlight: 固定覆盖 fill=none、不闭合、颜色 #fedd00、线宽×7、透明度0.3。
"""

from __future__ import annotations

from dataclasses import dataclass
from xml.etree import ElementTree as ET

from ..geometry import (
    StrokeOptions,
    freehand_stroke,
    pressure_options_for,
    quadratic_path,
)
from ..geometry import style
from ..geometry.vec import Point, fmt_num
from .base import Shape
from .common import apply_fill


@dataclass
class Draw(Shape):
    """手绘笔迹"""
    type_name = "draw"

    @property
    def is_ink(self) -> bool:
        return self.dash == style.INK_DASH

    @property
    def is_closed(self) -> bool:
        return bool(self.props.get("isClosed"))

    @property
    def is_complete(self) -> bool:
        return bool(self.props.get("isComplete"))

    def samples(self) -> list:
        """所有分段的原始采样点（按顺序拼接）"""
        points: list = []
        for segment in self.props.get("segments") or []:
            if isinstance(segment, dict):
                points.extend(segment.get("points") or [])
        return points

    def box(self) -> tuple[float, float]:
        xs, ys = [], []
        for p in self.samples():
            if isinstance(p, dict):
                xs.append(p.get("x") or 0.0)
                ys.append(p.get("y") or 0.0)
            elif isinstance(p, (list, tuple)) and len(p) >= 2:
                xs.append(p[0])
                ys.append(p[1])
        return (max(xs, default=0.0), max(ys, default=0.0))

    def stroke_options(self, samples: list) -> StrokeOptions:
        return StrokeOptions(
            size=1 + self.thickness * 1.5,
            thinning=0.65,
            streamline=0.65,
            smoothing=0.65,
            last=self.is_complete,
            **pressure_options_for(samples),
        )

    def _centerline_path(self, centerline: list[Point], group: ET.Element) -> ET.Element:
        path = ET.Element("path", {"d": quadratic_path(centerline, self.is_closed)})
        if not self.is_ink:
            path.set("stroke", self.shape_color)
            path.set("stroke-width", fmt_num(self.thickness))
            path.set("style", self.dasharray)
        apply_fill(path, self, group)
        return path

    def draw(self) -> ET.Element:
        group = ET.Element("g")
        samples = self.samples()
        if not samples:
            return group

        stroke = freehand_stroke(samples, self.stroke_options(samples), with_outline=self.is_ink)
        if not stroke.centerline:
            return group

        centerline = self._centerline_path(stroke.centerline, group)

        if self.is_ink and stroke.outline:
            ET.SubElement(group, "path", {
                "d": quadratic_path(stroke.outline, True),
                "fill": self.shape_color,
            })

        group.append(centerline)
        return group


@dataclass
class Highlight(Draw):
    """荧光笔"""
    type_name = "highlight"

    def __post_init__(self) -> None:
        self.opacity = style.HIGHLIGHT_OPACITY

    @property
    def fill(self) -> str | None:
        return "none"

    @property
    def is_closed(self) -> bool:
        return False

    @property
    def shape_color(self) -> str:
        return style.HIGHLIGHT_COLOR

    @property
    def thickness(self) -> float:
        return style.stroke_width(self.size) * style.HIGHLIGHT_WIDTH_FACTOR
