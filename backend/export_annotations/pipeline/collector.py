"""
Collector 阶段 - 收集任务输入到暂存目录

职责：
1. 标注导出任务：原子读取并清除共享存储中的标注场景，保存为场景文件
2. 暂存幻灯片背景：优先从演示文稿PDF逐页提取PNG，否则复制单张图片为第1页
   （每页发布进度；任一页提取失败则任务失败，不启动Process）
3. 共享笔记任务：HTTP下载笔记导出文件，遇429按 Retry-After 等待重试
4. 成功后启动下一阶段（标注任务 → Process，笔记任务 → Notifier）

测试要点：
- test_scene_saved_and_process_launched: 场景落盘并启动Process
- test_pdf_pages_rasterized: 每页调用一次光栅化并发布进度
- test_page_rasterize_failure_fails_job: 单页提取失败发布该页错误状态，不启动Process
- test_missing_presentation_asset: 无PDF/PNG/JPEG/JPG时发布错误状态并失败
- test_notes_retry_after_429: 按 Retry-After 等待后重试成功
- test_notes_retries_exhausted: 重试耗尽后失败，不启动Notifier
"""

from __future__ import annotations

import logging
import shutil
import time
from collections.abc import Callable
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

from ..external import PdfPageRasterizer
from ..interfaces import (
    IAnnotationStore,
    MissingBackgroundAssetError,
    NotesFetchError,
    SceneError,
    ToolError,
)
from ..messaging import ExportStatus, StatusMessageBuilder
from ..models import JobContext, JobType, Scene
from .stages import StageName, StageRunner

if TYPE_CHECKING:
    from ..config import RuntimeConfig
    from ..interfaces import IMessageBus, IStageLauncher
    from .job_manager import JobManager

logger = logging.getLogger(__name__)

SINGLE_IMAGE_FORMATS = ("png", "jpeg", "jpg")


class Collector(StageRunner):
    """Collector 阶段"""

    stage = StageName.COLLECTOR

    def __init__(
        self,
        config: RuntimeConfig,
        job_manager: JobManager,
        bus: IMessageBus,
        store: IAnnotationStore,
        rasterizer: PdfPageRasterizer,
        launcher: IStageLauncher | None = None,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        super().__init__(config, job_manager, bus, launcher)
        self.store = store
        self.rasterizer = rasterizer
        self.http_client = http_client
        self.sleep = sleep

    def execute(self, ctx: JobContext, **kwargs) -> None:
        job_type = ctx.job.job_type
        if job_type.is_scene_export:
            self.collect_annotations(ctx)
        elif job_type.is_notes_capture:
            self.collect_notes(ctx)

    # ========== 标注导出 ==========

    def collect_annotations(self, ctx: JobContext) -> None:
        raw = self.store.fetch_and_clear(ctx.job_id)
        if not raw:
            raise SceneError(f"共享存储中没有任务 {ctx.job_id} 的标注场景")

        scene = self.job_manager.parse_scene(raw)
        self.job_manager.save_scene(ctx, scene)
        logger.info(f"[{ctx.job_id}] 标注场景已保存，共{scene.total_pages}页")

        self.stage_backgrounds(ctx, scene)
        self.launch_next(ctx)

    def stage_backgrounds(self, ctx: JobContext, scene: Scene) -> None:
        """
        暂存幻灯片背景

        Raises:
            MissingBackgroundAssetError: 演示文稿没有可用的PDF或图片或任一页提取失败
        """
        job = ctx.job
        pres_file = job.pres_location / job.pres_id
        pdf_file = Path(f"{pres_file}.pdf")
        status = StatusMessageBuilder(
            job, ExportStatus.COLLECTING, scene.total_pages, self.config.messages.status_msg_name,
        )

        if pdf_file.exists():
            width = self.config.collector.png_width_rasterized_slides
            failed: list[int] = []
            for page in scene.pages:
                error = False
                try:
                    self.rasterizer.rasterize(pdf_file, page.page, width, ctx.dropbox / f"slide{page.page}")
                except ToolError as e:
                    logger.error(f"[{ctx.job_id}] 第{page.page}页提取失败: {e}")
                    ctx.add_flag(f"提取失败:slide{page.page}")
                    failed.append(page.page)
                    error = True
                self.bus.publish(status.build(page.page, error=error))
            if failed:
                raise MissingBackgroundAssetError(f"以下页面背景提取失败: {failed}")
            return

        for fmt in SINGLE_IMAGE_FORMATS:
            image = Path(f"{pres_file}.{fmt}")
            if image.exists():
                shutil.copyfile(image, ctx.dropbox / f"slide1.{fmt}")
                self.bus.publish(status.build(1))
                return

        self.bus.publish(status.build(1, error=True))
        raise MissingBackgroundAssetError(f"演示文稿文件缺失: {pres_file}.(pdf|png|jpeg|jpg)")

    # ========== 共享笔记 ==========

    def notes_format(self, job_type: JobType) -> str:
        if job_type == JobType.NOTES_CAPTURE_MARKDOWN:
            return self.config.collector.notes_markdown_format
        return self.config.collector.notes_format

    def collect_notes(self, ctx: JobContext) -> None:
        job = ctx.job
        fmt = self.notes_format(job.job_type)
        filename = f"{job.output_basename}.{fmt}"
        url = f"{self.config.endpoints.pads_api}/p/{job.pres_id}/export/{fmt}"

        self.download_notes(ctx, url, ctx.dropbox / filename)
        logger.info(f"[{ctx.job_id}] 共享笔记已下载: {filename}")

        self.launch_notifier(ctx, filename)

    def launch_notifier(self, ctx: JobContext, filename: str) -> None:
        """笔记任务跳过 Process，直接启动 Notifier"""
        if self.launcher is None:
            return
        logger.info(f"[{ctx.job_id}] 启动下一阶段: {StageName.NOTIFIER.value}")
        self.launcher.launch(
            StageName.NOTIFIER.value,
            job_id=ctx.job_id,
            job_type=ctx.job.job_type.value,
            filename=filename,
        )

    def download_notes(self, ctx: JobContext, url: str, path: Path) -> Path:
        """
        下载笔记导出文件

        429 时按 Retry-After 等待后重试，最多重试 notes_max_retries 次。

        Raises:
            NotesFetchError: 重试耗尽或其它HTTP错误
        """
        max_retries = self.config.retries.notes_max_retries
        client = self.http_client or httpx.Client(timeout=self.config.timeouts.http_sec)
        retries = 0

        try:
            while True:
                with client.stream("GET", url) as response:
                    if response.status_code == 429 and retries < max_retries:
                        delay = self.retry_after(response)
                        retries += 1
                        logger.info(f"[{ctx.job_id}] 笔记服务限流，{delay}秒后第{retries}次重试")
                        self.sleep(delay)
                        continue

                    response.raise_for_status()
                    with open(path, "wb") as f:
                        for chunk in response.iter_bytes():
                            f.write(chunk)
                    return path
        except httpx.HTTPError as e:
            raise NotesFetchError(f"共享笔记下载失败({url}): {e}") from e
        finally:
            if self.http_client is None:
                client.close()

    def retry_after(self, response: httpx.Response) -> float:
        """解析 Retry-After（秒数或HTTP日期）"""
        default = self.config.retries.default_retry_after_sec
        value = response.headers.get("retry-after")
        if not value:
            return default

        value = value.strip()
        try:
            return max(0.0, float(value))
        except ValueError:
            pass

        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return default
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())
