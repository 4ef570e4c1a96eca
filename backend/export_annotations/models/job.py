"""
任务模型 - 定义任务描述、状态与生命周期

任务描述文件（dropbox/<jobId>/job）由外部启动方写入，三个阶段只读。
"""

from __future__ import annotations

import re
import unicodedata
from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class JobType(str, Enum):
    """任务类型（值为外部应用使用的消息名称）"""
    ANNOTATION_EXPORT = "PresentationWithAnnotationExportJob"      # 导出并上传回会议
    ANNOTATION_DOWNLOAD = "PresentationWithAnnotationDownloadJob"  # 仅供下载
    ROOM_SNAPSHOT = "RoomSnapshotJob"                              # 分组讨论室快照
    NOTES_CAPTURE = "PadCaptureJob"                                # 共享笔记导出
    NOTES_CAPTURE_MARKDOWN = "PadCaptureMarkdownJob"               # 共享笔记转幻灯片

    @property
    def is_scene_export(self) -> bool:
        return self in SCENE_EXPORT_TYPES

    @property
    def is_notes_capture(self) -> bool:
        return self in NOTES_CAPTURE_TYPES


SCENE_EXPORT_TYPES = frozenset({
    JobType.ANNOTATION_EXPORT,
    JobType.ANNOTATION_DOWNLOAD,
    JobType.ROOM_SNAPSHOT,
})

NOTES_CAPTURE_TYPES = frozenset({
    JobType.NOTES_CAPTURE,
    JobType.NOTES_CAPTURE_MARKDOWN,
})


class JobState(str, Enum):
    """任务状态（错误标记独立于状态，见 JobContext.error）"""
    CREATED = "created"
    COLLECTING = "collecting"
    PROCESSING = "processing"
    NOTIFYING = "notifying"
    DONE = "done"


class ExportJob(BaseModel):
    """任务描述（字段名与外部JSON保持一致）"""
    job_id: str = Field(..., alias="jobId")
    job_type: JobType = Field(..., alias="jobType")
    pres_id: str = Field(..., alias="presId", description="演示文稿ID（笔记任务为padId）")
    pres_location: Path = Field(Path("."), alias="presLocation", description="演示文稿资源目录")
    parent_meeting_id: str = Field("", alias="parentMeetingId")
    filename: str = Field("annotated_slides", description="输出文件名（未清洗）")
    presentation_upload_token: str = Field("", alias="presentationUploadToken")
    module: str = Field("whiteboard", description="消息发送方模块")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @property
    def output_basename(self) -> str:
        """清洗后的输出文件名（不含扩展名）"""
        return sanitize_filename(re.sub(r"\s", "_", self.filename)) or self.job_id

    def to_descriptor(self) -> dict:
        """序列化为任务描述文件内容"""
        return self.model_dump(mode="json", by_alias=True)


class JobContext(BaseModel):
    """任务上下文 - 在阶段内部传递的类型化状态"""
    job: ExportJob
    dropbox: Path

    state: JobState = JobState.CREATED
    error: bool = False

    flags: list[str] = Field(default_factory=list, description="告警标记（页级失败）")
    errors: list[str] = Field(default_factory=list, description="错误信息（任务级失败）")

    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: datetime | None = None

    model_config = {"arbitrary_types_allowed": True}

    @property
    def job_id(self) -> str:
        return self.job.job_id

    def mark_state(self, state: JobState) -> None:
        """切换到下一状态"""
        self.state = state
        if state == JobState.DONE:
            self.finished_at = datetime.now()

    def mark_failed(self, error: str) -> None:
        """标记任务级失败（后续阶段不再启动）"""
        self.error = True
        self.finished_at = datetime.now()
        self.errors.append(error)

    def add_flag(self, flag: str) -> None:
        """添加告警标记（不中断）"""
        self.error = True
        if flag not in self.flags:
            self.flags.append(flag)

    @property
    def failed(self) -> bool:
        return bool(self.errors)


_ILLEGAL_CHARS = re.compile(r'[/?<>\\:*|"]')
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x80-\x9f]")
_RESERVED_NAMES = re.compile(r"^\.+$")
_WINDOWS_RESERVED = re.compile(r"^(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?$", re.IGNORECASE)
_WINDOWS_TRAILING = re.compile(r"[. ]+$")


def sanitize_filename(name: str, max_bytes: int = 255) -> str:
    """移除文件名中的非法字符、保留名及结尾的点/空格，并按字节截断"""
    name = unicodedata.normalize("NFC", name)
    name = _ILLEGAL_CHARS.sub("", name)
    name = _CONTROL_CHARS.sub("", name)
    name = _RESERVED_NAMES.sub("", name)
    name = _WINDOWS_RESERVED.sub("", name)
    name = _WINDOWS_TRAILING.sub("", name)

    encoded = name.encode("utf-8")[:max_bytes]
    return encoded.decode("utf-8", errors="ignore")
