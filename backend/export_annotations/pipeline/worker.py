"""
阶段工作进程 - 每个阶段在独立进程中运行

用法：
    python -m export_annotations.pipeline.worker collector <job_id>
    python -m export_annotations.pipeline.worker notifier <job_id> --job-type PadCaptureJob --filename notes.pdf

阶段之间只通过暂存目录和消息通道交接；上一阶段成功后由 WorkerStarter 拉起下一阶段。
"""

from __future__ import annotations

import argparse
import logging
import multiprocessing
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from ..config import RuntimeConfig, configure_logging, get_config, reload_config
from ..external import (
    PdfMerger,
    PdfPageRasterizer,
    SlidesConverter,
    SubprocessTool,
    SvgToPdfConverter,
)
from ..interfaces import IStageLauncher
from ..messaging import RedisAnnotationStore, RedisMessageBus, create_redis_client
from ..models import JobContext
from .collector import Collector
from .job_manager import JobManager
from .notifier import Notifier
from .process import Process
from .stages import StageName, StageRunner

logger = logging.getLogger(__name__)


class WorkerStarter:
    """在新进程中启动阶段（spawn，不共享进程内状态）"""

    def __init__(self, config_path: str | Path | None = None):
        self.config_path = str(config_path) if config_path else None
        self._mp = multiprocessing.get_context("spawn")

    def launch(self, stage: str, **kwargs: Any) -> None:
        process = self._mp.Process(
            target=run_stage,
            args=(stage,),
            kwargs={**kwargs, "config_path": self.config_path},
            name=f"export-annotations-{stage}",
        )
        process.start()
        logger.info(f"已启动阶段进程 {stage} (pid={process.pid})")


def build_stage(stage: str, config: RuntimeConfig, launcher: IStageLauncher | None) -> StageRunner:
    """按阶段名组装真实依赖"""
    name = StageName(stage)
    job_manager = JobManager(config)
    client = create_redis_client(config.redis)
    bus = RedisMessageBus(client, config.redis.publish_channel)
    shared = config.shared

    if name == StageName.COLLECTOR:
        return Collector(
            config,
            job_manager,
            bus,
            store=RedisAnnotationStore(client),
            rasterizer=PdfPageRasterizer(SubprocessTool(shared.pdftocairo, "pdftocairo")),
            launcher=launcher,
        )
    if name == StageName.PROCESS:
        return Process(
            config,
            job_manager,
            bus,
            svg_converter=SvgToPdfConverter(SubprocessTool(shared.cairosvg, "cairosvg")),
            merger=PdfMerger(SubprocessTool(shared.ghostscript, "ghostscript")),
            launcher=launcher,
        )
    return Notifier(
        config,
        job_manager,
        bus,
        slides_converter=SlidesConverter(
            SubprocessTool(shared.pandoc, "pandoc"),
            config.notifier.beamer_template,
        ),
    )


def run_stage(stage: str, job_id: str, config_path: str | None = None, **kwargs: Any) -> JobContext:
    """工作进程入口：加载配置 → 组装阶段 → 运行"""
    config = reload_config(config_path) if config_path else get_config()
    configure_logging(config)

    runner = build_stage(stage, config, WorkerStarter(config_path))
    try:
        return runner.run(job_id, **kwargs)
    finally:
        runner.bus.close()


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="运行白板标注导出的单个阶段")
    parser.add_argument("stage", choices=[s.value for s in StageName], help="阶段名")
    parser.add_argument("job_id", help="任务ID")
    parser.add_argument("--job-type", default=None, help="Notifier：任务类型（默认读取任务描述）")
    parser.add_argument("--filename", default="", help="Notifier：待交付文件名")
    parser.add_argument("--config", default=None, help="配置文件路径（默认 config/settings.yaml）")
    args = parser.parse_args(argv)

    kwargs: dict[str, Any] = {}
    if args.stage == StageName.NOTIFIER.value:
        kwargs = {"job_type": args.job_type, "filename": args.filename}

    ctx = run_stage(args.stage, args.job_id, config_path=args.config, **kwargs)
    return 1 if ctx.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
