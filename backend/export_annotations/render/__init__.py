"""
渲染层 - 场景叠加层与整页 SVG 合成
"""

from .scene_renderer import SceneRenderer, sort_by_z_order
from .slide import (
    ProbeError,
    SlideSize,
    build_slide_svg,
    fit_to_box,
    probe_dimensions,
    serialize_svg,
    to_print_size,
    write_slide_svg,
)

__all__ = [
    "SceneRenderer",
    "sort_by_z_order",
    "ProbeError",
    "SlideSize",
    "probe_dimensions",
    "fit_to_box",
    "to_print_size",
    "build_slide_svg",
    "serialize_svg",
    "write_slide_svg",
]
