"""
Process 阶段 - 逐页合成 SVG、转 PDF 并合并

职责：
1. 渲染前校验每页都有已暂存的背景（缺失则整个任务失败，不写任何文件）
2. 逐页：探测背景尺寸 → 缩放到最大画布 → 背景 + 叠加层 → 写 SVG → 按原尺寸转 PDF
3. 每页发布一条进度消息；单页失败只标记该页，继续下一页
4. 按页码顺序合并成功的单页PDF；合并失败为任务级失败，不启动Notifier
   背景缺失或合并失败时发布一条 error 状态后结束任务

测试要点：
- test_missing_background_aborts: 背景缺失时不写合成文件
- test_page_failure_continues: 单页转换失败仍合并其它页
- test_svg_write_failure_continues: 单页SVG写入失败只标记该页
- test_merge_failure_is_fatal: 合并失败不启动Notifier
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ..external import PdfMerger, SvgToPdfConverter
from ..interfaces import MergeError, MissingBackgroundAssetError, ToolError
from ..messaging import ExportStatus, StatusMessageBuilder
from ..models import JobContext, Page, Scene
from ..render import (
    ProbeError,
    SceneRenderer,
    build_slide_svg,
    fit_to_box,
    probe_dimensions,
    to_print_size,
    write_slide_svg,
)
from .stages import StageName, StageRunner

if TYPE_CHECKING:
    from ..config import RuntimeConfig
    from ..interfaces import IMessageBus, IStageLauncher
    from .job_manager import JobManager

logger = logging.getLogger(__name__)


class Process(StageRunner):
    """Process 阶段"""

    stage = StageName.PROCESS

    def __init__(
        self,
        config: RuntimeConfig,
        job_manager: JobManager,
        bus: IMessageBus,
        svg_converter: SvgToPdfConverter,
        merger: PdfMerger,
        launcher: IStageLauncher | None = None,
        renderer: SceneRenderer | None = None,
    ):
        super().__init__(config, job_manager, bus, launcher)
        self.svg_converter = svg_converter
        self.merger = merger
        self.renderer = renderer or SceneRenderer()

    def execute(self, ctx: JobContext, **kwargs) -> None:
        scene = self.job_manager.load_scene(ctx)
        pages = sorted(scene.pages, key=lambda p: p.page)
        last_page = pages[-1].page if pages else 1
        status = StatusMessageBuilder(
            ctx.job, ExportStatus.PROCESSING, scene.total_pages, self.config.messages.status_msg_name,
        )

        try:
            backgrounds = self.require_backgrounds(ctx, scene)
        except MissingBackgroundAssetError:
            self.bus.publish(status.build(last_page, error=True))
            raise

        pdfs: list[Path] = []
        for page in pages:
            pdf = self.process_page(ctx, page, backgrounds[page.page])
            self.bus.publish(status.build(page.page, error=pdf is None))
            if pdf is not None:
                pdfs.append(pdf)

        try:
            output = self.merge(ctx, pdfs)
        except MergeError:
            self.bus.publish(status.build(last_page, error=True))
            raise

        logger.info(f"[{ctx.job_id}] PDF已保存: {output}")
        self.launch_next(ctx, job_type=ctx.job.job_type.value, filename=output.name)

    def require_backgrounds(self, ctx: JobContext, scene: Scene) -> dict[int, Path]:
        """
        校验每页背景均已暂存

        Raises:
            MissingBackgroundAssetError: 任一页缺少背景
        """
        backgrounds: dict[int, Path] = {}
        missing: list[int] = []
        for page in scene.pages:
            background = self.job_manager.slide_background(ctx, page.page)
            if background is None:
                missing.append(page.page)
            else:
                backgrounds[page.page] = background

        if missing:
            raise MissingBackgroundAssetError(f"以下页面缺少背景: {missing}")
        return backgrounds

    def process_page(self, ctx: JobContext, page: Page, background: Path) -> Path | None:
        """合成并转换单页；失败返回 None"""
        n = page.page
        svg_background = ctx.job.pres_location / "svgs" / f"slide{n}.svg"
        process_config = self.config.process

        try:
            size = probe_dimensions(svg_background if svg_background.exists() else background)
            canvas = fit_to_box(size, process_config.max_image_width, process_config.max_image_height)

            overlay = self.renderer.render_page(page)
            root = build_slide_svg(background, canvas, overlay)
            svg_path = write_slide_svg(root, ctx.dropbox / f"annotated-slide{n}.svg")

            return self.svg_converter.convert(
                svg_path,
                ctx.dropbox / f"annotated-slide{n}.pdf",
                to_print_size(size.width, process_config.points_per_inch, process_config.pixels_per_inch),
                to_print_size(size.height, process_config.points_per_inch, process_config.pixels_per_inch),
            )
        except (ToolError, ProbeError, OSError) as e:
            logger.error(f"[{ctx.job_id}] 第{n}页处理失败: {e}")
            ctx.add_flag(f"转换失败:slide{n}")
            return None

    def merge(self, ctx: JobContext, pdfs: list[Path]) -> Path:
        """
        按顺序合并单页PDF到 <presLocation>/pdfs/<jobId>/<文件名>.pdf

        Raises:
            MergeError: 无可合并页面或合并工具失败
        """
        if not pdfs:
            raise MergeError("没有成功转换的页面")

        output_dir = self.config.get_output_dir(ctx.job.pres_location, ctx.job_id)
        output = output_dir / f"{ctx.job.output_basename}.pdf"

        try:
            return self.merger.merge(pdfs, output)
        except ToolError as e:
            raise MergeError(f"PDF合并失败: {e}") from e
