"""
日志初始化 - 每个工作进程启动时调用一次
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .runtime_config import RuntimeConfig


def configure_logging(config: RuntimeConfig) -> None:
    """按配置设置根日志级别与格式"""
    level = getattr(logging, config.logging.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=config.logging.log_format, force=True)
