"""
消息构建 - 进度/状态消息与“新文件可用”通知

消息外层结构与协作应用保持一致：
    {envelope: {name, routing: {sender}, timestamp}, core: {header: {...}, body: {...}}}
"""

from __future__ import annotations

import json
import time
from enum import Enum
from typing import Any

from ..models.job import ExportJob


class ExportStatus(str, Enum):
    COLLECTING = "COLLECTING"
    PROCESSING = "PROCESSING"
    DONE = "DONE"


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


def _envelope(name: str, sender: str, meeting_id: str, body: dict[str, Any]) -> dict[str, Any]:
    return {
        "envelope": {
            "name": name,
            "routing": {"sender": sender},
            "timestamp": _timestamp_ms(),
        },
        "core": {
            "header": {
                "name": name,
                "meetingId": meeting_id,
                "userId": "",
            },
            "body": body,
        },
    }


class StatusMessageBuilder:
    """
    进度/状态消息构建器

    每条消息都带页码，错误标记按页设置，不会延续到下一页。
    """

    def __init__(self, job: ExportJob, status: ExportStatus, total_pages: int, msg_name: str):
        self.job = job
        self.status = status
        self.total_pages = total_pages
        self.msg_name = msg_name

    def build_dict(self, page_number: int, error: bool = False, status: str | None = None) -> dict[str, Any]:
        body = {
            "presId": self.job.pres_id,
            "pageNumber": page_number,
            "totalPages": self.total_pages,
            "status": status or self.status.value,
            "error": error,
        }
        return _envelope(self.msg_name, self.job.module, self.job.parent_meeting_id, body)

    def build(self, page_number: int, error: bool = False, status: str | None = None) -> str:
        return json.dumps(self.build_dict(page_number, error=error, status=status))


def build_file_available_message(job: ExportJob, link: str, msg_name: str) -> str:
    """下载任务完成通知（附带相对链接）"""
    body = {
        "annotatedFileURI": link,
        "originalFileURI": "",
        "convertedFileURI": "",
        "presId": job.pres_id,
        "fileStateType": "Annotated",
    }
    return json.dumps(_envelope(msg_name, job.module, job.parent_meeting_id, body))
