"""
消息通道 - Redis 发布订阅
"""

from __future__ import annotations

import logging

import redis

from ..config.runtime_config import RedisConfig
from ..interfaces import IMessageBus

logger = logging.getLogger(__name__)


def create_redis_client(config: RedisConfig) -> redis.Redis:
    """创建Redis客户端（返回字符串）"""
    return redis.Redis(
        host=config.host,
        port=config.port,
        password=config.password,
        decode_responses=True,
    )


class RedisMessageBus(IMessageBus):
    """向配置的频道发布消息"""

    def __init__(self, client: redis.Redis, channel: str):
        self.client = client
        self.channel = channel

    def publish(self, message: str) -> None:
        try:
            self.client.publish(self.channel, message)
        except redis.RedisError as e:
            logger.error(f"消息发布失败({self.channel}): {e}")

    def close(self) -> None:
        self.client.close()
