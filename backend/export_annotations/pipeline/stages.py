"""
流水线阶段定义

职责：
1. 定义三个阶段的名称、对应的任务状态与后继阶段
2. 提供阶段运行骨架：读取任务上下文 → 执行 → 任务级失败记入上下文

失败隔离：
- 页级失败（单页转换失败）由各阶段记为告警标记，继续执行
- 任务级失败（ExportAnnotationsError）记入上下文，不启动下一阶段

测试要点：
- test_stage_order: Collector → Process → Notifier
- test_stage_failure_marks_context: 任务级失败不抛出，记入上下文
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..interfaces import ExportAnnotationsError
from ..models.job import JobContext, JobState

if TYPE_CHECKING:
    from ..config import RuntimeConfig
    from ..interfaces import IJobManager, IMessageBus, IStageLauncher

logger = logging.getLogger(__name__)

__all__ = ["JobState", "StageName", "PipelineStage", "PIPELINE_STAGES", "StageRunner"]


class StageName(str, Enum):
    """流水线阶段枚举"""
    COLLECTOR = "collector"
    PROCESS = "process"
    NOTIFIER = "notifier"


@dataclass(frozen=True)
class PipelineStage:
    """流水线阶段"""
    name: StageName
    state: JobState
    next_stage: StageName | None


PIPELINE_STAGES: dict[StageName, PipelineStage] = {
    StageName.COLLECTOR: PipelineStage(StageName.COLLECTOR, JobState.COLLECTING, StageName.PROCESS),
    StageName.PROCESS: PipelineStage(StageName.PROCESS, JobState.PROCESSING, StageName.NOTIFIER),
    StageName.NOTIFIER: PipelineStage(StageName.NOTIFIER, JobState.NOTIFYING, None),
}


class StageRunner:
    """阶段运行骨架"""

    stage: StageName

    def __init__(
        self,
        config: RuntimeConfig,
        job_manager: IJobManager,
        bus: IMessageBus,
        launcher: IStageLauncher | None = None,
    ):
        self.config = config
        self.job_manager = job_manager
        self.bus = bus
        self.launcher = launcher

    @property
    def definition(self) -> PipelineStage:
        return PIPELINE_STAGES[self.stage]

    def run(self, job_id: str, **kwargs: Any) -> JobContext:
        """
        运行本阶段

        任务级失败不向外抛出，记入返回的上下文（ctx.failed）。

        Raises:
            JobDescriptorError: 任务描述文件缺失或无法解析
        """
        ctx = self.job_manager.open(job_id)
        ctx.mark_state(self.definition.state)
        logger.info(f"[{job_id}] 开始阶段: {self.stage.value}")

        try:
            self.execute(ctx, **kwargs)
        except ExportAnnotationsError as e:
            logger.error(f"[{job_id}] 阶段失败 {self.stage.value}: {e}")
            ctx.mark_failed(str(e))
        else:
            logger.info(f"[{job_id}] 完成阶段: {self.stage.value}")

        return ctx

    def execute(self, ctx: JobContext, **kwargs: Any) -> None:
        """阶段逻辑（子类实现）"""
        raise NotImplementedError

    def launch_next(self, ctx: JobContext, **kwargs: Any) -> None:
        """启动后继阶段"""
        next_stage = self.definition.next_stage
        if next_stage is None or self.launcher is None:
            return
        logger.info(f"[{ctx.job_id}] 启动下一阶段: {next_stage.value}")
        self.launcher.launch(next_stage.value, job_id=ctx.job_id, **kwargs)
