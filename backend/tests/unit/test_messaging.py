"""
消息层单元测试

覆盖：状态消息结构、新文件可用通知、Redis 共享存储原子读取、发布失败不抛出
"""

import json
from unittest.mock import MagicMock

import pytest
import redis

from export_annotations.interfaces import SceneError
from export_annotations.messaging import (
    ExportStatus,
    RedisAnnotationStore,
    RedisMessageBus,
    StatusMessageBuilder,
    build_file_available_message,
)
from export_annotations.models import ExportJob


class TestStatusMessage:
    """进度/状态消息测试"""

    def test_status_message_shape(self, sample_job: ExportJob):
        builder = StatusMessageBuilder(sample_job, ExportStatus.PROCESSING, 3, "PresAnnStatusMsg")
        message = json.loads(builder.build(2))

        assert message["envelope"]["name"] == "PresAnnStatusMsg"
        assert message["envelope"]["routing"]["sender"] == "whiteboard"
        assert message["core"]["header"]["meetingId"] == "meeting-1"
        assert message["core"]["body"] == {
            "presId": "pres-1",
            "pageNumber": 2,
            "totalPages": 3,
            "status": "PROCESSING",
            "error": False,
        }

    def test_error_is_per_message(self, sample_job: ExportJob):
        """错误标记不延续到下一条消息"""
        builder = StatusMessageBuilder(sample_job, ExportStatus.COLLECTING, 2, "PresAnnStatusMsg")
        first = builder.build_dict(1, error=True)["core"]["body"]
        second = builder.build_dict(2)["core"]["body"]

        assert first["error"] is True
        assert second["error"] is False

    def test_status_override(self, sample_job: ExportJob):
        builder = StatusMessageBuilder(sample_job, ExportStatus.PROCESSING, 1, "PresAnnStatusMsg")
        assert builder.build_dict(1, status="DONE")["core"]["body"]["status"] == "DONE"

    def test_file_available_message(self, sample_job: ExportJob):
        link = "presentation/meeting-1/meeting-1/pres-1/pdf/job-1/My_Slides.pdf"
        message = json.loads(build_file_available_message(sample_job, link, "NewPresFileAvailableMsg"))
        body = message["core"]["body"]

        assert message["envelope"]["name"] == "NewPresFileAvailableMsg"
        assert body["annotatedFileURI"] == link
        assert body["fileStateType"] == "Annotated"
        assert body["presId"] == "pres-1"


class TestRedisAnnotationStore:
    """标注共享存储测试"""

    def _client(self, result=None, error=None):
        client = MagicMock()
        pipe = client.pipeline.return_value.__enter__.return_value
        if error is not None:
            pipe.execute.side_effect = error
        else:
            pipe.execute.return_value = result
        return client, pipe

    def test_fetch_and_clear_in_one_transaction(self):
        client, pipe = self._client(result=[{"pages": "[]"}, 1])
        scene = RedisAnnotationStore(client).fetch_and_clear("job-1")

        assert scene == {"pages": "[]"}
        client.pipeline.assert_called_once_with(transaction=True)
        pipe.hgetall.assert_called_once_with("job-1")
        pipe.delete.assert_called_once_with("job-1")

    def test_missing_scene_returns_none(self):
        client, _ = self._client(result=[{}, 0])
        assert RedisAnnotationStore(client).fetch_and_clear("job-1") is None

    def test_redis_error_raises_scene_error(self):
        client, _ = self._client(error=redis.ConnectionError("down"))
        with pytest.raises(SceneError):
            RedisAnnotationStore(client).fetch_and_clear("job-1")


class TestRedisMessageBus:
    """消息通道测试"""

    def test_publish_to_channel(self):
        client = MagicMock()
        RedisMessageBus(client, "to-akka-apps-redis-channel").publish("{}")
        client.publish.assert_called_once_with("to-akka-apps-redis-channel", "{}")

    def test_publish_error_logged(self):
        client = MagicMock()
        client.publish.side_effect = redis.ConnectionError("down")
        RedisMessageBus(client, "chan").publish("{}")

    def test_close(self):
        client = MagicMock()
        RedisMessageBus(client, "chan").close()
        client.close.assert_called_once()
