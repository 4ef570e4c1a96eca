"""
场景模型 - 白板标注场景/页面/标注记录

场景文件结构：
    { pages: [{ page: int, annotations: [{ id, annotationInfo: AnnotationRecord }] }] }

共享存储中的 pages 字段是JSON字符串，这里统一解码。
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class AnnotationRecord(BaseModel):
    """单条标注记录"""
    id: str = ""
    z_order_key: str = Field("", alias="index", description="绘制顺序键（按字符串比较）")
    type: str = ""

    x: float = 0.0
    y: float = 0.0
    rotation: float = Field(0.0, description="旋转角（弧度）")
    opacity: float = 1.0

    props: dict[str, Any] = Field(default_factory=dict)

    # 仅 group 类型使用
    children: list[str] = Field(default_factory=list)
    parent_id: str | None = Field(None, alias="parentId")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @field_validator("x", "y", "rotation", mode="before")
    @classmethod
    def _none_to_zero(cls, v: Any) -> Any:
        return 0.0 if v is None else v

    @field_validator("opacity", mode="before")
    @classmethod
    def _none_to_opaque(cls, v: Any) -> Any:
        return 1.0 if v is None else v

    @field_validator("props", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return v or {}

    @property
    def is_group(self) -> bool:
        return self.type == "group"


class AnnotationEntry(BaseModel):
    """页面中的一条标注（外层包装）"""
    id: str
    annotation_info: AnnotationRecord = Field(..., alias="annotationInfo")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _propagate_id(cls, data: Any) -> Any:
        """标注记录缺少id时沿用外层id"""
        if isinstance(data, dict):
            info = data.get("annotationInfo")
            if isinstance(info, dict) and not info.get("id") and data.get("id"):
                data = {**data, "annotationInfo": {**info, "id": data["id"]}}
        return data


class Page(BaseModel):
    """单页幻灯片的标注集合"""
    page: int
    annotations: list[AnnotationEntry] = Field(default_factory=list)


class Scene(BaseModel):
    """整个白板场景"""
    pages: list[Page] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @field_validator("pages", mode="before")
    @classmethod
    def _decode_pages(cls, v: Any) -> Any:
        if isinstance(v, (str, bytes)):
            return json.loads(v)
        return v

    @property
    def total_pages(self) -> int:
        return len(self.pages)
