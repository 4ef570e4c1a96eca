"""
几何引擎 - 纯函数，不抛异常，非法输入退化为安全的默认几何
"""

from .arcs import (
    BEND_TOLERANCE,
    Circle,
    ShaftPath,
    bent_arc_path,
    circle_from_three_points,
    tangent_angles_at_ends,
)
from .freehand import (
    FreehandStroke,
    StrokeOptions,
    freehand_stroke,
    pressure_options_for,
)
from .paths import points_attr, quadratic_path, regular_polygon_vertices

__all__ = [
    "BEND_TOLERANCE",
    "Circle",
    "ShaftPath",
    "bent_arc_path",
    "circle_from_three_points",
    "tangent_angles_at_ends",
    "FreehandStroke",
    "StrokeOptions",
    "freehand_stroke",
    "pressure_options_for",
    "quadratic_path",
    "regular_polygon_vertices",
    "points_attr",
]
