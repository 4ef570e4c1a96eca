"""
Process 阶段单元测试
"""

import json
from pathlib import Path

import pytest

from conftest import RecordingTool, geo_record, page_data, write_png
from export_annotations.external import PdfMerger, SvgToPdfConverter
from export_annotations.pipeline import JobManager, Process


@pytest.fixture
def staged_scene(job_manager: JobManager, job_ctx):
    """两页场景，已写入场景文件"""
    pages = [
        page_data(1, geo_record("shape:r1", "a1", x=10, text="first")),
        page_data(2, geo_record("shape:r2", "a1", x=20)),
    ]
    scene = job_manager.parse_scene({"pages": json.dumps(pages)})
    job_manager.save_scene(job_ctx, scene)
    return scene


def build_process(config, job_manager, bus, launcher, svg_tool=None, merge_tool=None):
    svg_tool = svg_tool or RecordingTool("cairosvg")
    merge_tool = merge_tool or RecordingTool("ghostscript")
    process = Process(
        config,
        job_manager,
        bus,
        svg_converter=SvgToPdfConverter(svg_tool),
        merger=PdfMerger(merge_tool),
        launcher=launcher,
    )
    return process, svg_tool, merge_tool


class TestProcess:
    """Process 阶段测试"""

    def test_pages_rendered_and_merged(
        self, runtime_config, job_manager, job_ctx, staged_scene, bus, launcher, pres_location: Path
    ):
        write_png(job_ctx.dropbox / "slide1.png", (1600, 1200))
        write_png(job_ctx.dropbox / "slide2.png", (1600, 1200))
        process, svg_tool, merge_tool = build_process(runtime_config, job_manager, bus, launcher)

        ctx = process.run("job-1")

        assert not ctx.failed
        svg = (ctx.dropbox / "annotated-slide1.svg").read_text(encoding="utf-8")
        assert 'width="1440"' in svg
        assert 'class="wb"' in svg
        assert "first" in svg

        # 按原始像素尺寸换算输出尺寸
        assert svg_tool.calls[0][1:5] == ["--output-width", "2133.33", "--output-height", "1600"]

        output = pres_location / "pdfs" / "job-1" / "My_Slides.pdf"
        assert output.exists()
        assert merge_tool.calls[0][4:] == [
            str(ctx.dropbox / "annotated-slide1.pdf"),
            str(ctx.dropbox / "annotated-slide2.pdf"),
        ]
        assert [(b["pageNumber"], b["status"], b["error"]) for b in bus.bodies] == [
            (1, "PROCESSING", False),
            (2, "PROCESSING", False),
        ]
        assert launcher.launches == [(
            "notifier",
            {"job_id": "job-1", "job_type": "PresentationWithAnnotationExportJob", "filename": "My_Slides.pdf"},
        )]

    def test_svg_background_preferred_for_size(
        self, runtime_config, job_manager, job_ctx, staged_scene, bus, launcher, pres_location: Path
    ):
        """存在矢量背景时按其尺寸换算"""
        write_png(job_ctx.dropbox / "slide1.png", (2560, 1440))
        write_png(job_ctx.dropbox / "slide2.png", (2560, 1440))
        svgs = pres_location / "svgs"
        svgs.mkdir()
        (svgs / "slide1.svg").write_text(
            '<svg xmlns="http://www.w3.org/2000/svg" width="720" height="540"/>', encoding="utf-8",
        )
        process, svg_tool, _ = build_process(runtime_config, job_manager, bus, launcher)

        process.run("job-1")

        assert svg_tool.calls[0][1:5] == ["--output-width", "960", "--output-height", "720"]
        assert svg_tool.calls[1][1:5] == ["--output-width", "3413.33", "--output-height", "1920"]

    def test_missing_background_aborts(
        self, runtime_config, job_manager, job_ctx, staged_scene, bus, launcher
    ):
        """背景缺失时不写合成文件，发布一条错误状态后结束"""
        write_png(job_ctx.dropbox / "slide1.png")
        process, svg_tool, merge_tool = build_process(runtime_config, job_manager, bus, launcher)

        ctx = process.run("job-1")

        assert ctx.failed
        assert list(ctx.dropbox.glob("annotated-slide*")) == []
        assert svg_tool.calls == []
        assert merge_tool.calls == []
        assert launcher.launches == []
        assert [(b["pageNumber"], b["status"], b["error"]) for b in bus.bodies] == [(2, "PROCESSING", True)]

    def test_page_failure_continues(
        self, runtime_config, job_manager, job_ctx, staged_scene, bus, launcher, pres_location: Path
    ):
        """单页转换失败仍合并其它页"""
        write_png(job_ctx.dropbox / "slide1.png")
        write_png(job_ctx.dropbox / "slide2.png")
        svg_tool = RecordingTool("cairosvg", fail_when=lambda argv: argv[0].endswith("annotated-slide1.svg"))
        process, _, merge_tool = build_process(runtime_config, job_manager, bus, launcher, svg_tool=svg_tool)

        ctx = process.run("job-1")

        assert not ctx.failed
        assert ctx.flags == ["转换失败:slide1"]
        assert merge_tool.calls[0][4:] == [str(ctx.dropbox / "annotated-slide2.pdf")]
        assert [b["error"] for b in bus.bodies] == [True, False]
        assert launcher.launches

    def test_svg_write_failure_continues(
        self, runtime_config, job_manager, job_ctx, staged_scene, bus, launcher
    ):
        """单页SVG写入失败只标记该页"""
        write_png(job_ctx.dropbox / "slide1.png")
        write_png(job_ctx.dropbox / "slide2.png")
        (job_ctx.dropbox / "annotated-slide1.svg").mkdir()
        process, svg_tool, merge_tool = build_process(runtime_config, job_manager, bus, launcher)

        ctx = process.run("job-1")

        assert not ctx.failed
        assert ctx.flags == ["转换失败:slide1"]
        assert [call[0] for call in svg_tool.calls] == [str(ctx.dropbox / "annotated-slide2.svg")]
        assert merge_tool.calls[0][4:] == [str(ctx.dropbox / "annotated-slide2.pdf")]
        assert [b["error"] for b in bus.bodies] == [True, False]
        assert launcher.launches

    def test_merge_failure_is_fatal(
        self, runtime_config, job_manager, job_ctx, staged_scene, bus, launcher
    ):
        """合并失败不启动Notifier"""
        write_png(job_ctx.dropbox / "slide1.png")
        write_png(job_ctx.dropbox / "slide2.png")
        merge_tool = RecordingTool("ghostscript", fail_when=lambda argv: True)
        process, _, _ = build_process(runtime_config, job_manager, bus, launcher, merge_tool=merge_tool)

        ctx = process.run("job-1")

        assert ctx.failed
        assert launcher.launches == []
        assert bus.bodies[-1]["error"] is True

    def test_all_pages_failed(
        self, runtime_config, job_manager, job_ctx, staged_scene, bus, launcher
    ):
        write_png(job_ctx.dropbox / "slide1.png")
        write_png(job_ctx.dropbox / "slide2.png")
        svg_tool = RecordingTool("cairosvg", fail_when=lambda argv: True)
        process, _, merge_tool = build_process(runtime_config, job_manager, bus, launcher, svg_tool=svg_tool)

        ctx = process.run("job-1")

        assert ctx.failed
        assert merge_tool.calls == []
        assert launcher.launches == []
