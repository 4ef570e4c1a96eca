"""
图形基类 - 所有标注图形共享的字段与样式解析

各图形为同一族数据类：公共字段 {id, x, y, rotation, opacity, props}，
draw() 在原点绘制片段，render() 统一套用平移/旋转/透明度。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar
from xml.etree import ElementTree as ET

from ..geometry import style
from ..models.scene import AnnotationRecord
from .common import wrap_transform


@dataclass
class Shape:
    """标注图形（公共字段）"""
    id: str
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0
    opacity: float = 1.0
    props: dict[str, Any] = field(default_factory=dict)

    type_name: ClassVar[str] = ""

    @classmethod
    def from_record(cls, record: AnnotationRecord) -> "Shape":
        return cls(
            id=record.id,
            x=record.x,
            y=record.y,
            rotation=record.rotation,
            opacity=record.opacity,
            props=dict(record.props),
        )

    # ========== 样式 ==========

    @property
    def size(self) -> str | None:
        return self.props.get("size")

    @property
    def color(self) -> str | None:
        return self.props.get("color")

    @property
    def dash(self) -> str | None:
        return self.props.get("dash")

    @property
    def fill(self) -> str | None:
        return self.props.get("fill")

    @property
    def thickness(self) -> float:
        return style.stroke_width(self.size)

    @property
    def shape_color(self) -> str:
        return style.color_to_hex(self.color, style.ColorType.SHAPE)

    @property
    def dasharray(self) -> str:
        return style.dasharray_style(self.dash, style.dash_gap(self.dash, self.size))

    # ========== 几何 ==========

    def _prop_number(self, key: str, default: float = 0.0) -> float:
        value = self.props.get(key)
        try:
            return float(value) if value is not None else default
        except (TypeError, ValueError):
            return default

    @property
    def width(self) -> float:
        return self._prop_number("w")

    @property
    def height(self) -> float:
        return self._prop_number("h")

    def box(self) -> tuple[float, float]:
        """局部包围盒尺寸（旋转中心为其中点）"""
        return self.width, self.height

    # ========== 绘制 ==========

    def draw(self) -> ET.Element:
        """在原点绘制图形片段（子类实现）"""
        return ET.Element("g")

    def render(self) -> ET.Element:
        return wrap_transform(self, self.draw())
