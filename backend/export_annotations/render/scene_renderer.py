"""
场景渲染器 - 单页标注 → 叠加层 <g class="wb">

职责：
1. 按 z-order 键做稳定的字符串排序（不是数值排序）
2. 每页建立一次 id → 标注记录 映射，group 按 children 顺序展开（只有一层）
3. 其它记录按 type 分派到图形类

未知类型、悬空的子节点、单个图形绘制异常只记录日志并跳过，不中断整页。

测试要点：
- test_lexicographic_order: a1 < a1V < a2
- test_group_expands_children_in_order: 组本身不产生几何
- test_dangling_child_skipped: 悬空子节点不影响兄弟节点
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from xml.etree import ElementTree as ET

from ..models.scene import AnnotationRecord, Page
from ..shapes import create_shape

logger = logging.getLogger(__name__)

OVERLAY_CLASS = "wb"


def sort_by_z_order(records: Iterable[AnnotationRecord]) -> list[AnnotationRecord]:
    """按 z-order 键稳定排序"""
    return sorted(records, key=lambda r: r.z_order_key)


class SceneRenderer:
    """单页标注渲染"""

    def render_page(self, page: Page) -> ET.Element:
        """渲染一页，返回叠加层"""
        overlay = ET.Element("g", {"class": OVERLAY_CLASS})

        records = [entry.annotation_info for entry in page.annotations]
        by_id = {record.id: record for record in records}
        grouped_ids = {
            child_id
            for record in records if record.is_group
            for child_id in record.children
        }

        for record in sort_by_z_order(records):
            if record.is_group:
                self._render_group(record, by_id, overlay, page.page)
            elif record.id in grouped_ids:
                # 已在所属 group 中绘制
                continue
            else:
                self._render_record(record, overlay, page.page)

        return overlay

    def _render_group(
        self,
        group: AnnotationRecord,
        by_id: dict[str, AnnotationRecord],
        overlay: ET.Element,
        page_number: int,
    ) -> None:
        for child_id in group.children:
            child = by_id.get(child_id)
            if child is None:
                logger.warning(f"第{page_number}页 group {group.id} 的子节点 {child_id} 不存在，已跳过")
                continue
            if child.is_group:
                logger.warning(f"第{page_number}页 group {group.id} 含嵌套 group {child_id}，已跳过")
                continue
            self._render_record(child, overlay, page_number)

    def _render_record(self, record: AnnotationRecord, overlay: ET.Element, page_number: int) -> None:
        shape = create_shape(record)
        if shape is None:
            logger.warning(f"第{page_number}页 未知的标注类型 {record.type!r}（{record.id}），已跳过")
            return

        try:
            overlay.append(shape.render())
        except Exception as e:
            logger.warning(f"第{page_number}页 标注 {record.id} 绘制失败: {e}")
