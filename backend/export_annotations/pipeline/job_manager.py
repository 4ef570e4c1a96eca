"""
任务管理器 - 任务暂存目录（dropbox）的读写

目录结构：
    <dropbox_dir>/<jobId>/
        job                      任务描述（JSON，外部写入，只读）
        whiteboard               标注场景（JSON，Collector 写入）
        slide<N>.png|jpeg|jpg    幻灯片背景
        annotated-slide<N>.svg   每页合成结果
        annotated-slide<N>.pdf

测试要点：
- test_create_and_open: 写入描述后可读回
- test_open_missing_descriptor: 描述文件缺失
- test_scene_roundtrip_keeps_extra_keys: 场景保存后保留未知字段
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..config import RuntimeConfig, get_config
from ..interfaces import IJobManager, JobDescriptorError, SceneError
from ..models import ExportJob, JobContext, Scene

logger = logging.getLogger(__name__)

JOB_FILE = "job"
SCENE_FILE = "whiteboard"
BACKGROUND_FORMATS = ("png", "jpeg", "jpg")


class JobManager(IJobManager):
    """任务管理器实现"""

    def __init__(self, config: RuntimeConfig | None = None):
        self.config = config or get_config()

    def create_job(self, job: ExportJob) -> JobContext:
        """创建暂存目录并写入任务描述"""
        dropbox = self.config.get_dropbox_dir(job.job_id)
        dropbox.mkdir(parents=True, exist_ok=True)

        with open(dropbox / JOB_FILE, "w", encoding="utf-8") as f:
            json.dump(job.to_descriptor(), f, ensure_ascii=False, indent=2)

        return JobContext(job=job, dropbox=dropbox)

    def open(self, job_id: str) -> JobContext:
        dropbox = self.config.get_dropbox_dir(job_id)
        job_file = dropbox / JOB_FILE

        if not job_file.exists():
            raise JobDescriptorError(f"任务描述文件不存在: {job_file}")

        try:
            with open(job_file, encoding="utf-8") as f:
                data = json.load(f)
            job = ExportJob.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise JobDescriptorError(f"任务描述文件无法解析: {job_file}: {e}") from e

        return JobContext(job=job, dropbox=dropbox)

    def parse_scene(self, raw: dict[str, Any] | str | bytes) -> Scene:
        """原始场景数据 → Scene"""
        try:
            if isinstance(raw, (str, bytes)):
                return Scene.model_validate_json(raw)
            return Scene.model_validate(raw)
        except (ValidationError, json.JSONDecodeError) as e:
            raise SceneError(f"标注场景无法解析: {e}") from e

    def save_scene(self, ctx: JobContext, scene: Scene) -> Path:
        path = ctx.dropbox / SCENE_FILE
        with open(path, "w", encoding="utf-8") as f:
            json.dump(scene.model_dump(mode="json", by_alias=True), f, ensure_ascii=False)
        return path

    def load_scene(self, ctx: JobContext) -> Scene:
        path = ctx.dropbox / SCENE_FILE
        if not path.exists():
            raise SceneError(f"场景文件不存在: {path}")
        return self.parse_scene(path.read_bytes())

    def slide_background(self, ctx: JobContext, page: int) -> Path | None:
        """已暂存的第 page 页背景；不存在时返回 None"""
        for fmt in BACKGROUND_FORMATS:
            candidate = ctx.dropbox / f"slide{page}.{fmt}"
            if candidate.exists():
                return candidate
        return None

    def remove(self, ctx: JobContext) -> None:
        if ctx.dropbox.exists():
            shutil.rmtree(ctx.dropbox)
            logger.info(f"[{ctx.job_id}] 已删除暂存目录: {ctx.dropbox}")
