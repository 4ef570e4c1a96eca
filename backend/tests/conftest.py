"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(job_manager, job_ctx, bus):
        assert job_ctx.job_id == "job-1"
"""

from __future__ import annotations

import json
import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, Generator

import pytest
from PIL import Image

from export_annotations.config import RuntimeConfig
from export_annotations.config.runtime_config import NotifierConfig, SharedConfig
from export_annotations.interfaces import (
    IAnnotationStore,
    IExternalTool,
    IMessageBus,
    ToolError,
    ToolResult,
)
from export_annotations.models import ExportJob, JobContext, JobType
from export_annotations.pipeline import JobManager


# ============================================================================
# 配置 Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """临时目录"""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def runtime_config(temp_dir: Path) -> RuntimeConfig:
    """运行期配置（暂存目录指向临时目录）"""
    return RuntimeConfig(
        shared=SharedConfig(dropbox_dir=temp_dir / "dropbox"),
        notifier=NotifierConfig(beamer_template=temp_dir / "beamer_template.tex"),
    )


# ============================================================================
# 任务 Fixtures
# ============================================================================

@pytest.fixture
def pres_location(temp_dir: Path) -> Path:
    """演示文稿资源目录"""
    path = temp_dir / "pres"
    path.mkdir()
    return path


def make_job(pres_location: Path, job_type: JobType = JobType.ANNOTATION_EXPORT, **overrides: Any) -> ExportJob:
    """创建测试任务描述"""
    data = {
        "jobId": "job-1",
        "jobType": job_type.value,
        "presId": "pres-1",
        "presLocation": str(pres_location),
        "parentMeetingId": "meeting-1",
        "filename": "My Slides",
        "presentationUploadToken": "token-1",
    }
    data.update(overrides)
    return ExportJob.model_validate(data)


@pytest.fixture
def sample_job(pres_location: Path) -> ExportJob:
    """标注导出任务"""
    return make_job(pres_location)


@pytest.fixture
def job_manager(runtime_config: RuntimeConfig) -> JobManager:
    return JobManager(runtime_config)


@pytest.fixture
def job_ctx(job_manager: JobManager, sample_job: ExportJob) -> JobContext:
    """已写入任务描述的任务上下文"""
    return job_manager.create_job(sample_job)


# ============================================================================
# 场景 Fixtures
# ============================================================================

def geo_record(record_id: str, index: str, x: float = 0.0, **props: Any) -> dict[str, Any]:
    """几何图形标注记录"""
    return {
        "id": record_id,
        "index": index,
        "type": "geo",
        "x": x,
        "y": 0,
        "rotation": 0,
        "opacity": 1,
        "props": {"geo": "rectangle", "w": 100, "h": 50, **props},
    }


def page_data(page: int, *records: dict[str, Any]) -> dict[str, Any]:
    """单页场景数据"""
    return {
        "page": page,
        "annotations": [{"id": r["id"], "annotationInfo": r} for r in records],
    }


@pytest.fixture
def scene_raw() -> dict[str, Any]:
    """共享存储中的场景（pages 为JSON字符串）"""
    pages = [
        page_data(1, geo_record("shape:r1", "a1", x=10)),
        page_data(2, geo_record("shape:r2", "a1", x=20)),
    ]
    return {"pages": json.dumps(pages)}


def write_png(path: Path, size: tuple[int, int] = (800, 600)) -> Path:
    """写一张纯色PNG"""
    Image.new("RGB", size, "white").save(path)
    return path


# ============================================================================
# 协作方替身
# ============================================================================

class InMemoryBus(IMessageBus):
    """记录已发布消息"""

    def __init__(self):
        self.messages: list[str] = []
        self.closed = False

    def publish(self, message: str) -> None:
        self.messages.append(message)

    def close(self) -> None:
        self.closed = True

    @property
    def bodies(self) -> list[dict[str, Any]]:
        return [json.loads(m)["core"]["body"] for m in self.messages]


class InMemoryStore(IAnnotationStore):
    """内存中的标注共享存储"""

    def __init__(self, scenes: dict[str, dict[str, Any]] | None = None):
        self.scenes = dict(scenes or {})

    def fetch_and_clear(self, job_id: str) -> dict[str, Any] | None:
        return self.scenes.pop(job_id, None)


class RecordingTool(IExternalTool):
    """
    记录调用参数的外部工具替身

    按各工具的输出约定写出输出文件；fail_when 返回 True 时抛出 ToolError。
    """

    def __init__(
        self,
        name: str = "tool",
        fail_when: Callable[[list[str]], bool] | None = None,
        write_output: bool = True,
    ):
        self.name = name
        self.fail_when = fail_when
        self.write_output = write_output
        self.calls: list[list[str]] = []

    def run(self, args: Sequence[str | Path]) -> ToolResult:
        argv = [str(a) for a in args]
        self.calls.append(argv)
        if self.fail_when is not None and self.fail_when(argv):
            raise ToolError(f"{self.name}执行失败(退出码1): boom")

        output = self._output_path(argv)
        if self.write_output and output is not None:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_bytes(b"%PDF-1.4\n")
        return ToolResult(returncode=0)

    @staticmethod
    def _output_path(argv: list[str]) -> Path | None:
        if "-o" in argv:
            return Path(argv[argv.index("-o") + 1])
        for arg in argv:
            if arg.startswith("-sOUTPUTFILE="):
                return Path(arg.split("=", 1)[1])
        if "-png" in argv:
            return Path(argv[-1] + ".png")
        return None


class RecordingLauncher:
    """记录启动的后继阶段"""

    def __init__(self):
        self.launches: list[tuple[str, dict[str, Any]]] = []

    def launch(self, stage: str, **kwargs: Any) -> None:
        self.launches.append((stage, kwargs))


@pytest.fixture
def bus() -> InMemoryBus:
    return InMemoryBus()


@pytest.fixture
def launcher() -> RecordingLauncher:
    return RecordingLauncher()
