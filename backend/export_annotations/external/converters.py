"""
外部转换器 - 在外部工具之上固定各自的命令行约定

- PdfPageRasterizer: pdftocairo 提取单页PNG
- SvgToPdfConverter: cairosvg 按指定尺寸转PDF
- PdfMerger: ghostscript 按顺序合并PDF
- SlidesConverter: pandoc 将markdown笔记转为beamer幻灯片PDF

各方法在工具返回后校验输出文件存在，否则抛出 ToolError。
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from ..geometry.vec import fmt_num
from ..interfaces import IExternalTool, ToolError


def _require_output(path: Path, tool: IExternalTool) -> Path:
    if not path.exists():
        raise ToolError(f"{tool.name}未生成输出文件: {path}")
    return path


class PdfPageRasterizer:
    """PDF单页 → PNG"""

    def __init__(self, tool: IExternalTool):
        self.tool = tool

    def rasterize(self, pdf_path: Path, page: int, width: int, output_stem: Path) -> Path:
        """
        提取第 page 页为 <output_stem>.png

        Args:
            pdf_path: 演示文稿PDF
            page: 页码（从1开始）
            width: 目标宽度（像素，按比例缩放）
            output_stem: 输出路径（不含扩展名）
        """
        self.tool.run([
            "-png",
            "-f", str(page),
            "-l", str(page),
            "-scale-to", str(width),
            "-singlefile",
            "-cropbox",
            pdf_path,
            output_stem,
        ])
        return _require_output(output_stem.with_suffix(".png"), self.tool)


class SvgToPdfConverter:
    """SVG → PDF"""

    def __init__(self, tool: IExternalTool):
        self.tool = tool

    def convert(self, svg_path: Path, pdf_path: Path, width: float, height: float) -> Path:
        self.tool.run([
            svg_path,
            "--output-width", fmt_num(width),
            "--output-height", fmt_num(height),
            "-o", pdf_path,
        ])
        return _require_output(pdf_path, self.tool)


class PdfMerger:
    """多个PDF → 单个PDF（保持输入顺序）"""

    def __init__(self, tool: IExternalTool):
        self.tool = tool

    def merge(self, pdf_paths: Sequence[Path], output_path: Path) -> Path:
        if not pdf_paths:
            raise ToolError("没有可合并的PDF")

        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.tool.run([
            "-dNOPAUSE",
            "-sDEVICE=pdfwrite",
            f"-sOUTPUTFILE={output_path}",
            "-dBATCH",
            *pdf_paths,
        ])
        return _require_output(output_path, self.tool)


class SlidesConverter:
    """markdown → beamer 幻灯片 PDF"""

    def __init__(self, tool: IExternalTool, template: Path):
        self.tool = tool
        self.template = template

    def convert(self, source: Path, pdf_path: Path) -> Path:
        self.tool.run([
            "-t", "beamer",
            source,
            f"--template={self.template}",
            "-o", pdf_path,
        ])
        return _require_output(pdf_path, self.tool)
