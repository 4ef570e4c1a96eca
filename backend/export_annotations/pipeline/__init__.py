"""
流水线 - Collector → Process → Notifier
"""

from .collector import Collector
from .job_manager import JobManager
from .notifier import Notifier
from .process import Process
from .stages import PIPELINE_STAGES, JobState, PipelineStage, StageName, StageRunner

__all__ = [
    "Collector",
    "Process",
    "Notifier",
    "JobManager",
    "JobState",
    "StageName",
    "PipelineStage",
    "PIPELINE_STAGES",
    "StageRunner",
]
