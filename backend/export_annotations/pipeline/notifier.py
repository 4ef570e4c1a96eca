"""
Notifier 阶段 - 交付结果并清理暂存目录

按任务类型分支：
- 仅下载：发布“新文件可用”消息，附带相对链接
- 导出/分组讨论室快照：multipart 上传合并后的PDF
- 共享笔记：直接上传下载到的文件；markdown 笔记先用 pandoc 转成幻灯片PDF

上传失败只记录日志；无论结果如何，最后都删除暂存目录。

测试要点：
- test_download_publishes_link: 链接格式
- test_export_uploads_multipart: 上传字段
- test_upload_failure_logged_and_dropbox_removed
- test_unknown_job_type_fails_job: 未知任务类型记为任务失败，仍删除暂存目录
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx

from ..external import SlidesConverter
from ..interfaces import ExportAnnotationsError, JobDescriptorError, SceneError, ToolError, UploadError
from ..messaging import ExportStatus, StatusMessageBuilder, build_file_available_message
from ..models import JobContext, JobState, JobType
from .stages import StageName, StageRunner

if TYPE_CHECKING:
    from ..config import RuntimeConfig
    from ..interfaces import IMessageBus
    from .job_manager import JobManager

logger = logging.getLogger(__name__)

UPLOAD_TYPES = frozenset({JobType.ANNOTATION_EXPORT, JobType.ROOM_SNAPSHOT})


class Notifier(StageRunner):
    """Notifier 阶段"""

    stage = StageName.NOTIFIER

    def __init__(
        self,
        config: RuntimeConfig,
        job_manager: JobManager,
        bus: IMessageBus,
        slides_converter: SlidesConverter,
        http_client: httpx.Client | None = None,
    ):
        super().__init__(config, job_manager, bus)
        self.slides_converter = slides_converter
        self.http_client = http_client

    def run(self, job_id: str, **kwargs: Any) -> JobContext:
        ctx = self.job_manager.open(job_id)
        ctx.mark_state(self.definition.state)
        logger.info(f"[{job_id}] 开始阶段: {self.stage.value}")

        try:
            self.execute(ctx, **kwargs)
            ctx.mark_state(JobState.DONE)
        except ExportAnnotationsError as e:
            logger.error(f"[{job_id}] 阶段失败 {self.stage.value}: {e}")
            ctx.mark_failed(str(e))
        finally:
            self.job_manager.remove(ctx)

        return ctx

    def execute(self, ctx: JobContext, job_type: str | None = None, filename: str = "", **kwargs) -> None:
        job = ctx.job
        kind = self.resolve_job_type(ctx, job_type)
        filename = filename or f"{job.output_basename}.pdf"

        if kind == JobType.ANNOTATION_DOWNLOAD:
            self.notify_file_available(ctx, filename)
        elif kind in UPLOAD_TYPES:
            output_dir = self.config.get_output_dir(job.pres_location, ctx.job_id)
            self.upload_logged(ctx, output_dir / filename)
        elif kind == JobType.NOTES_CAPTURE:
            self.upload_logged(ctx, ctx.dropbox / filename)
        elif kind == JobType.NOTES_CAPTURE_MARKDOWN:
            source = ctx.dropbox / filename
            try:
                pdf = self.slides_converter.convert(source, source.with_suffix(".pdf"))
            except ToolError as e:
                logger.error(f"[{ctx.job_id}] 笔记转幻灯片失败: {e}")
                ctx.add_flag("笔记转换失败")
            else:
                self.upload_logged(ctx, pdf)

        self.publish_final_status(ctx)

    def resolve_job_type(self, ctx: JobContext, job_type: str | None) -> JobType:
        """
        命令行传入的任务类型优先，缺省取任务描述中的类型

        Raises:
            JobDescriptorError: 未知的任务类型
        """
        if not job_type:
            return ctx.job.job_type
        try:
            return JobType(job_type)
        except ValueError as e:
            raise JobDescriptorError(f"未知的任务类型: {job_type}") from e

    # ========== 交付 ==========

    def file_link(self, ctx: JobContext, filename: str) -> str:
        job = ctx.job
        meeting = job.parent_meeting_id
        return "/".join(["presentation", meeting, meeting, job.pres_id, "pdf", ctx.job_id, filename])

    def notify_file_available(self, ctx: JobContext, filename: str) -> None:
        link = self.file_link(ctx, filename)
        message = build_file_available_message(ctx.job, link, self.config.messages.file_available_msg_name)
        self.bus.publish(message)
        logger.info(f"[{ctx.job_id}] 标注PDF可下载: {link}")

    def upload_url(self, ctx: JobContext) -> str:
        token = ctx.job.presentation_upload_token
        return f"{self.config.endpoints.web_api}/bigbluebutton/presentation/{token}/upload"

    def upload(self, ctx: JobContext, file_path: Path) -> None:
        """
        multipart 上传到演示文稿服务

        Raises:
            UploadError: 文件不存在或HTTP请求失败
        """
        if not file_path.exists():
            raise UploadError(f"待上传文件不存在: {file_path}")

        notifier_config = self.config.notifier
        data = {
            "conference": ctx.job.parent_meeting_id,
            "pod_id": notifier_config.pod_id,
            "is_downloadable": str(notifier_config.is_downloadable).lower(),
            "temporaryPresentationId": ctx.job_id,
            "current": "true",
        }

        client = self.http_client or httpx.Client(timeout=self.config.timeouts.http_sec)
        try:
            with open(file_path, "rb") as f:
                files = {"fileUpload": (file_path.name, f, "application/octet-stream")}
                response = client.post(self.upload_url(ctx), data=data, files=files)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise UploadError(f"上传失败: {e}") from e
        finally:
            if self.http_client is None:
                client.close()

        logger.info(f"[{ctx.job_id}] 上传完成: {response.status_code} {response.text[:200]}")

    def upload_logged(self, ctx: JobContext, file_path: Path) -> bool:
        """上传；失败只记录日志并标记"""
        try:
            self.upload(ctx, file_path)
        except UploadError as e:
            logger.error(f"[{ctx.job_id}] {e}")
            ctx.add_flag("上传失败")
            return False
        return True

    def publish_final_status(self, ctx: JobContext) -> None:
        try:
            total_pages = self.job_manager.load_scene(ctx).total_pages
        except SceneError:
            total_pages = 1

        status = StatusMessageBuilder(
            ctx.job, ExportStatus.DONE, total_pages, self.config.messages.status_msg_name,
        )
        self.bus.publish(status.build(total_pages, error=ctx.error))
