"""
标注共享存储 - Redis 哈希

读取与删除放在同一个 MULTI/EXEC 事务中，保证同一任务只被收集一次。
"""

from __future__ import annotations

import logging
from typing import Any

import redis

from ..interfaces import IAnnotationStore, SceneError

logger = logging.getLogger(__name__)


class RedisAnnotationStore(IAnnotationStore):
    """以 job_id 为键的标注场景哈希"""

    def __init__(self, client: redis.Redis):
        self.client = client

    def fetch_and_clear(self, job_id: str) -> dict[str, Any] | None:
        try:
            with self.client.pipeline(transaction=True) as pipe:
                pipe.hgetall(job_id)
                pipe.delete(job_id)
                scene, _ = pipe.execute()
        except redis.RedisError as e:
            raise SceneError(f"读取标注场景失败({job_id}): {e}") from e

        if not scene:
            logger.warning(f"[{job_id}] 共享存储中没有标注场景")
            return None
        return scene
