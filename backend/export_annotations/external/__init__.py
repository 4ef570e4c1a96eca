"""
外部工具层 - 子进程封装与各转换器的命令行约定
"""

from .converters import PdfMerger, PdfPageRasterizer, SlidesConverter, SvgToPdfConverter
from .tool import SubprocessTool

__all__ = [
    "SubprocessTool",
    "PdfPageRasterizer",
    "SvgToPdfConverter",
    "PdfMerger",
    "SlidesConverter",
]
