"""
数据模型层 - 定义系统核心数据结构

所有模块通过这些模型交互，实现解耦：
- ExportJob: 任务描述（只读）
- JobContext: 阶段内任务上下文与状态
- Scene/Page/AnnotationRecord: 白板标注场景
"""

from .job import (
    ExportJob,
    JobContext,
    JobState,
    JobType,
    NOTES_CAPTURE_TYPES,
    SCENE_EXPORT_TYPES,
    sanitize_filename,
)
from .scene import AnnotationEntry, AnnotationRecord, Page, Scene

__all__ = [
    "ExportJob",
    "JobContext",
    "JobState",
    "JobType",
    "SCENE_EXPORT_TYPES",
    "NOTES_CAPTURE_TYPES",
    "sanitize_filename",
    "Scene",
    "Page",
    "AnnotationEntry",
    "AnnotationRecord",
]
