"""
模块接口契约 - 定义各模块的抽象接口

设计原则：
1. 流水线各阶段通过接口访问外部协作方（共享存储/消息通道/外部工具）
2. 每个接口定义清晰的输入输出类型
3. 便于单元测试和mock替换

使用方式：
    from export_annotations.interfaces import IMessageBus

    class MyBus(IMessageBus):
        def publish(self, message: str) -> None:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, Sequence

if TYPE_CHECKING:
    from .models import JobContext, Scene


# ============================================================================
# 外部工具接口
# ============================================================================

@dataclass(frozen=True)
class ToolResult:
    """外部工具执行结果"""
    returncode: int
    stdout: str = ""
    stderr: str = ""


class IExternalTool(ABC):
    """外部工具接口 - 单次同步调用一个可执行文件"""

    name: str

    @abstractmethod
    def run(self, args: Sequence[str | Path]) -> ToolResult:
        """
        执行外部工具

        Args:
            args: 命令行参数（不含可执行文件本身）

        Returns:
            执行结果

        Raises:
            ToolError: 可执行文件不存在或退出码非0
        """
        ...


# ============================================================================
# 共享存储与消息通道接口
# ============================================================================

class IAnnotationStore(ABC):
    """标注共享存储接口"""

    @abstractmethod
    def fetch_and_clear(self, job_id: str) -> dict[str, Any] | None:
        """
        原子地读取并删除某任务的标注场景

        同一 job_id 只能被成功读取一次，并发请求中至多一个拿到数据。

        Args:
            job_id: 任务ID

        Returns:
            场景原始数据；不存在时返回 None
        """
        ...


class IMessageBus(ABC):
    """发布订阅通道接口（进度/状态消息）"""

    @abstractmethod
    def publish(self, message: str) -> None:
        """发布一条已序列化的消息"""
        ...

    def close(self) -> None:
        """释放连接（默认无操作）"""
        return None


# ============================================================================
# 流水线与任务管理接口
# ============================================================================

class IStageLauncher(Protocol):
    """阶段启动器协议 - 由上一阶段在成功后启动下一阶段"""

    def launch(self, stage: str, **kwargs: Any) -> None:
        """启动指定阶段"""
        ...


class IJobManager(ABC):
    """任务管理器接口 - 管理任务暂存目录（dropbox）"""

    @abstractmethod
    def open(self, job_id: str) -> JobContext:
        """读取任务描述文件并构建任务上下文"""
        ...

    @abstractmethod
    def save_scene(self, ctx: JobContext, scene: Scene) -> Path:
        """持久化场景文件"""
        ...

    @abstractmethod
    def load_scene(self, ctx: JobContext) -> Scene:
        """读取场景文件"""
        ...

    @abstractmethod
    def remove(self, ctx: JobContext) -> None:
        """删除任务暂存目录"""
        ...


# ============================================================================
# 异常定义
# ============================================================================

class ExportAnnotationsError(Exception):
    """基础异常"""
    pass


class JobDescriptorError(ExportAnnotationsError):
    """任务描述文件缺失或无法解析"""
    pass


class SceneError(ExportAnnotationsError):
    """场景数据缺失或无法解析"""
    pass


class ToolError(ExportAnnotationsError):
    """外部工具调用失败"""
    pass


class MissingBackgroundAssetError(ExportAnnotationsError):
    """幻灯片背景资源缺失"""
    pass


class MergeError(ExportAnnotationsError):
    """PDF合并失败"""
    pass


class NotesFetchError(ExportAnnotationsError):
    """共享笔记下载失败（含限流重试耗尽）"""
    pass


class UploadError(ExportAnnotationsError):
    """上传失败"""
    pass
