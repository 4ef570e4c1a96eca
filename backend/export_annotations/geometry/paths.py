"""
路径工具 - 二次曲线路径、正多边形顶点、polygon points 属性
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from .vec import TAU, Point, fmt_num


def _fixed(value: float) -> str:
    """固定两位小数（与曲线锚点格式一致）"""
    if value is None or not math.isfinite(value):
        value = 0.0
    text = f"{value:.2f}"
    return "0.00" if text == "-0.00" else text


def quadratic_path(points: Sequence[Point], closed: bool = True) -> str:
    """
    点序列 → 二次曲线路径

    每个点作为控制点，与下一点的中点作为曲线经过点：
        M p0 Q p0 mid(p0,p1) p1 mid(p1,p2) ... [Z]
    """
    if not points:
        return ""

    x0, y0 = points[0][0], points[0][1]
    parts = ["M", _fixed(x0), _fixed(y0), "Q"]
    for (ax, ay), (bx, by) in zip(points, points[1:]):
        parts.extend([
            _fixed(ax),
            _fixed(ay),
            _fixed((ax + bx) / 2),
            _fixed((ay + by) / 2),
        ])

    if closed:
        parts.append("Z")
    return " ".join(parts)


def regular_polygon_vertices(width: float, height: float, sides: int) -> list[Point]:
    """
    内接于 (width, height) 包围盒的正多边形顶点

    第一个顶点位于顶部正中，顺时针排列；结果平移使最小 x/y 为0。
    """
    if sides < 3 or not (math.isfinite(width) and math.isfinite(height)):
        return []

    cx, cy = width / 2, height / 2
    points = []
    for i in range(sides):
        t = -TAU / 4 + i * TAU / sides
        points.append((cx + cx * math.cos(t), cy + cy * math.sin(t)))

    min_x = min(p[0] for p in points)
    min_y = min(p[1] for p in points)
    return [(x - min_x, y - min_y) for x, y in points]


def points_attr(points: Sequence[Point]) -> str:
    """SVG polygon/polyline 的 points 属性"""
    return " ".join(f"{fmt_num(x)},{fmt_num(y)}" for x, y in points)
