"""
图形注册表 - 按标注 type 分派到图形类
"""

from __future__ import annotations

from collections.abc import Callable
from types import MappingProxyType

from ..models.scene import AnnotationRecord
from .arrow import Arrow, Line
from .base import Shape
from .draw import Draw, Highlight
from .geo import create_geo
from .sticky_note import StickyNote
from .text_shape import TextShape

ShapeFactory = Callable[[AnnotationRecord], Shape]

SHAPE_TYPES: MappingProxyType[str, ShapeFactory] = MappingProxyType({
    "arrow": Arrow.from_record,
    "line": Line.from_record,
    "draw": Draw.from_record,
    "highlight": Highlight.from_record,
    "geo": create_geo,
    "note": StickyNote.from_record,
    "text": TextShape.from_record,
})


def create_shape(record: AnnotationRecord) -> Shape | None:
    """按 type 创建图形；未注册的类型返回 None"""
    factory = SHAPE_TYPES.get(record.type)
    if factory is None:
        return None
    return factory(record)
