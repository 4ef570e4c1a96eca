"""
消息层 - 共享存储、发布订阅通道与消息构建
"""

from .bus import RedisMessageBus, create_redis_client
from .messages import ExportStatus, StatusMessageBuilder, build_file_available_message
from .store import RedisAnnotationStore

__all__ = [
    "RedisMessageBus",
    "create_redis_client",
    "RedisAnnotationStore",
    "ExportStatus",
    "StatusMessageBuilder",
    "build_file_available_message",
]
