"""
数据模型单元测试
"""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from export_annotations.models import (
    AnnotationEntry,
    AnnotationRecord,
    ExportJob,
    JobContext,
    JobState,
    JobType,
    Scene,
    sanitize_filename,
)


class TestJobType:
    """任务类型测试"""

    def test_scene_export_types(self):
        assert JobType.ANNOTATION_EXPORT.is_scene_export
        assert JobType.ANNOTATION_DOWNLOAD.is_scene_export
        assert JobType.ROOM_SNAPSHOT.is_scene_export
        assert not JobType.NOTES_CAPTURE.is_scene_export

    def test_notes_capture_types(self):
        assert JobType.NOTES_CAPTURE.is_notes_capture
        assert JobType.NOTES_CAPTURE_MARKDOWN.is_notes_capture
        assert not JobType.ANNOTATION_EXPORT.is_notes_capture


class TestExportJob:
    """任务描述测试"""

    def _descriptor(self, **overrides):
        data = {
            "jobId": "job-1",
            "jobType": "PresentationWithAnnotationDownloadJob",
            "presId": "pres-1",
            "presLocation": "/var/pres",
            "parentMeetingId": "meeting-1",
            "filename": "Quarterly Review",
        }
        data.update(overrides)
        return data

    def test_parse_aliases(self):
        job = ExportJob.model_validate(self._descriptor())
        assert job.job_id == "job-1"
        assert job.job_type == JobType.ANNOTATION_DOWNLOAD
        assert job.pres_location == Path("/var/pres")
        assert job.module == "whiteboard"

    def test_descriptor_roundtrip(self):
        job = ExportJob.model_validate(self._descriptor(serverSideFilename="upload-1.pdf"))
        data = job.to_descriptor()

        assert data["jobId"] == "job-1"
        assert data["serverSideFilename"] == "upload-1.pdf"
        assert ExportJob.model_validate(data) == job

    def test_unknown_job_type(self):
        with pytest.raises(ValidationError):
            ExportJob.model_validate(self._descriptor(jobType="SomethingElse"))

    def test_output_basename(self):
        assert ExportJob.model_validate(self._descriptor()).output_basename == "Quarterly_Review"
        assert ExportJob.model_validate(self._descriptor(filename="a/b:c?")).output_basename == "abc"

    def test_output_basename_falls_back_to_job_id(self):
        job = ExportJob.model_validate(self._descriptor(filename="..."))
        assert job.output_basename == "job-1"


class TestSanitizeFilename:
    """文件名清洗测试"""

    @pytest.mark.parametrize("raw, expected", [
        ("report", "report"),
        ('a<b>c:"d"', "abcd"),
        ("con", ""),
        ("lpt1.txt", ""),
        ("name. ", "name"),
        ("tab\x07bell", "tabbell"),
    ])
    def test_sanitize(self, raw, expected):
        assert sanitize_filename(raw) == expected

    def test_truncates_by_bytes(self):
        result = sanitize_filename("好" * 200)
        assert len(result.encode("utf-8")) <= 255
        assert result == "好" * 85


class TestJobContext:
    """任务上下文测试"""

    def _ctx(self) -> JobContext:
        job = ExportJob(jobId="job-1", jobType=JobType.ANNOTATION_EXPORT, presId="pres-1")
        return JobContext(job=job, dropbox=Path("/tmp/job-1"))

    def test_flag_does_not_fail_job(self):
        ctx = self._ctx()
        ctx.add_flag("转换失败:slide2")
        ctx.add_flag("转换失败:slide2")

        assert ctx.error
        assert ctx.flags == ["转换失败:slide2"]
        assert not ctx.failed

    def test_mark_failed(self):
        ctx = self._ctx()
        ctx.mark_failed("合并失败")
        assert ctx.failed
        assert ctx.error
        assert ctx.finished_at is not None

    def test_mark_done(self):
        ctx = self._ctx()
        ctx.mark_state(JobState.PROCESSING)
        assert ctx.finished_at is None
        ctx.mark_state(JobState.DONE)
        assert ctx.state == JobState.DONE
        assert ctx.finished_at is not None


class TestScene:
    """场景模型测试"""

    def test_pages_json_string_decoded(self):
        pages = [{"page": 1, "annotations": []}, {"page": 2, "annotations": []}]
        scene = Scene.model_validate({"pages": json.dumps(pages)})
        assert scene.total_pages == 2
        assert [p.page for p in scene.pages] == [1, 2]

    def test_entry_propagates_id(self):
        entry = AnnotationEntry.model_validate({"id": "shape:1", "annotationInfo": {"type": "geo"}})
        assert entry.annotation_info.id == "shape:1"

    def test_record_nulls_defaulted(self):
        record = AnnotationRecord.model_validate({
            "id": "shape:1",
            "type": "geo",
            "x": None,
            "opacity": None,
            "props": None,
        })
        assert record.x == 0.0
        assert record.opacity == 1.0
        assert record.props == {}

    def test_record_keeps_unknown_keys(self):
        record = AnnotationRecord.model_validate({"id": "g", "type": "group", "meta": {"a": 1}})
        assert record.is_group
        assert record.model_dump(by_alias=True)["meta"] == {"a": 1}
