"""
外部工具封装 - 单次同步调用可执行文件

职责：
- 校验可执行文件存在
- 调用并收集输出，退出码非0时抛出 ToolError
- 不设内部超时，也不重试（由调用方/启动方负责）

测试要点：
- test_missing_executable: 可执行文件不存在
- test_nonzero_exit: 退出码非0
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

from ..interfaces import IExternalTool, ToolError, ToolResult

logger = logging.getLogger(__name__)


class SubprocessTool(IExternalTool):
    """子进程方式调用的外部工具"""

    def __init__(self, exe_path: str | Path, name: str | None = None):
        self.exe_path = str(exe_path)
        self.name = name or Path(self.exe_path).name

    def _resolve_exe(self) -> str:
        if Path(self.exe_path).exists():
            return self.exe_path
        found = shutil.which(self.exe_path)
        if found is None:
            raise ToolError(f"{self.name}可执行文件不存在: {self.exe_path}")
        return found

    def run(self, args: Sequence[str | Path]) -> ToolResult:
        cmd = [self._resolve_exe(), *(str(a) for a in args)]
        logger.debug(f"执行外部工具: {' '.join(cmd)}")

        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or e.stdout or "").strip()
            raise ToolError(f"{self.name}执行失败(退出码{e.returncode}): {detail}") from e
        except OSError as e:
            raise ToolError(f"{self.name}无法启动: {e}") from e

        return ToolResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
