"""
圆弧几何 - 三点定圆、弯曲线段、端点切线角

职责：
1. 三点外接圆（共线时返回退化结果 None，由调用方退回直线）
2. 由起点/终点/弯曲量生成直线或圆弧路径（SVG A 命令的大弧/扫描标志）
3. 在路径两端按弧长采样求切线角，用于箭头朝向

测试要点：
- test_circle_equidistant: 外接圆圆心到三点等距
- test_collinear_degenerate: 共线返回 None
- test_straight_when_bend_small: |bend| < 0.005 恒为直线
- test_arc_radius_matches_circumradius: 弧半径等于外接圆半径
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .vec import (
    Point,
    add,
    dist,
    fmt_num,
    is_finite_point,
    lrp,
    med,
    mul,
    per,
    sub,
    uni,
)

BEND_TOLERANCE = 0.005
TANGENT_EPSILON = 0.01
_DEGENERATE_DENOMINATOR = 1e-9


@dataclass(frozen=True)
class Circle:
    """圆"""
    center: Point
    radius: float


def circle_from_three_points(a: Point, b: Point, c: Point) -> Circle | None:
    """
    三点外接圆（行列式解法）

    Returns:
        Circle；三点共线或半径非有限值时返回 None
    """
    if not (is_finite_point(a) and is_finite_point(b) and is_finite_point(c)):
        return None

    (x1, y1), (x2, y2), (x3, y3) = a, b, c

    denom = x1 * (y2 - y3) - y1 * (x2 - x3) + x2 * y3 - x3 * y2
    if abs(denom) < _DEGENERATE_DENOMINATOR:
        return None

    s1 = x1 * x1 + y1 * y1
    s2 = x2 * x2 + y2 * y2
    s3 = x3 * x3 + y3 * y3

    bx = s1 * (y3 - y2) + s2 * (y1 - y3) + s3 * (y2 - y1)
    by = s1 * (x2 - x3) + s2 * (x3 - x1) + s3 * (x1 - x2)

    cx = -bx / (2 * denom)
    cy = -by / (2 * denom)
    radius = math.hypot(cx - x1, cy - y1)

    if not (math.isfinite(cx) and math.isfinite(cy) and math.isfinite(radius)):
        return None
    return Circle(center=(cx, cy), radius=radius)


def bend_midpoint(start: Point, end: Point, bend: float) -> Point:
    """弦中点沿垂直方向偏移 bend 后的点"""
    unit = uni(sub(end, start))
    offset = mul(per(unit), -bend)
    return add(med(start, end), offset)


def inscribed_theta(start: Point, middle: Point, end: Point) -> float:
    """
    余弦定理求终点处内角并加倍（起点到中点所对的圆心角）

    非法输入返回0。
    """
    ab = dist(start, middle)
    bc = dist(middle, end)
    ca = dist(end, start)
    if bc == 0 or ca == 0:
        return 0.0
    cos_value = (bc * bc + ca * ca - ab * ab) / (2 * bc * ca)
    theta = math.acos(max(-1.0, min(1.0, cos_value))) * 2
    return theta if math.isfinite(theta) else 0.0


@dataclass(frozen=True)
class ShaftPath:
    """箭头/线段主干：直线或单段圆弧"""
    start: Point
    end: Point
    circle: Circle | None = None
    middle: Point | None = None
    large_arc: int = 0
    sweep: int = 0

    @property
    def is_straight(self) -> bool:
        return self.circle is None

    @property
    def d(self) -> str:
        """SVG path 数据"""
        sx, sy = fmt_num(self.start[0]), fmt_num(self.start[1])
        ex, ey = fmt_num(self.end[0]), fmt_num(self.end[1])
        if self.circle is None:
            return f"M {sx} {sy} L {ex} {ey}"
        r = fmt_num(self.circle.radius)
        return f"M {sx} {sy} A {r} {r} 0 {self.large_arc} {self.sweep} {ex} {ey}"

    def _arc_params(self) -> tuple[Point, float, float]:
        """按大弧/扫描标志求实际绘制的圆心、起始角与有符号张角"""
        assert self.circle is not None
        center = self.circle.center
        for _ in range(2):
            a0 = math.atan2(self.start[1] - center[1], self.start[0] - center[0])
            a1 = math.atan2(self.end[1] - center[1], self.end[0] - center[0])
            if self.sweep:
                delta = (a1 - a0) % math.tau
            else:
                delta = -((a0 - a1) % math.tau)
            if (abs(delta) > math.pi) == bool(self.large_arc):
                return center, a0, delta
            # 另一侧的圆心（关于弦中点对称）
            center = sub(add(self.start, self.end), center)
        return center, a0, delta

    @property
    def length(self) -> float:
        if self.circle is None:
            return dist(self.start, self.end)
        _, _, delta = self._arc_params()
        return abs(delta) * self.circle.radius

    def point_at(self, distance: float) -> Point:
        """按弧长取路径上的点"""
        total = self.length
        if total <= 0:
            return self.start
        t = max(0.0, min(1.0, distance / total))
        if self.circle is None:
            return lrp(self.start, self.end, t)
        center, a0, delta = self._arc_params()
        angle = a0 + delta * t
        r = self.circle.radius
        return (center[0] + r * math.cos(angle), center[1] + r * math.sin(angle))


def bent_arc_path(start: Point, end: Point, bend: float | None) -> ShaftPath:
    """
    由起点、终点和弯曲量生成主干路径

    |bend| < 0.005 时为直线；外接圆退化时同样退回直线。
    """
    straight = ShaftPath(start=start, end=end)
    if bend is None or not math.isfinite(bend) or abs(bend) < BEND_TOLERANCE:
        return straight
    if not (is_finite_point(start) and is_finite_point(end)):
        return straight

    middle = bend_midpoint(start, end, bend)
    circle = circle_from_three_points(start, middle, end)
    if circle is None:
        return straight

    # 整段弧的圆心角 = 2θ，超过半圈取大弧
    theta = inscribed_theta(start, middle, end)
    large_arc = 1 if theta * 2 > math.pi else 0

    chord_cross = (
        (end[0] - start[0]) * (middle[1] - start[1])
        - (middle[0] - start[0]) * (end[1] - start[1])
    )
    sweep = 0 if chord_cross > 0 else 1

    return ShaftPath(
        start=start,
        end=end,
        circle=circle,
        middle=middle,
        large_arc=large_arc,
        sweep=sweep,
    )


def tangent_angles_at_ends(path: ShaftPath, epsilon: float = TANGENT_EPSILON) -> tuple[float, float]:
    """
    路径两端切线角（角度制）

    起点角额外旋转半圈，使起点箭头朝外。

    Returns:
        (start_angle_degrees, end_angle_degrees)
    """
    total = path.length
    eps = min(epsilon, total) if total > 0 else 0.0

    start = path.point_at(0)
    start_tangent = path.point_at(eps)
    end = path.point_at(total)
    end_tangent = path.point_at(total - eps)

    if start_tangent == start:
        # 零长度路径：退回弦方向
        start_tangent = add(start, sub(path.end, path.start))
    if end_tangent == end:
        end_tangent = sub(end, sub(path.end, path.start))

    start_angle = math.atan2(start_tangent[1] - start[1], start_tangent[0] - start[0]) + math.pi
    end_angle = math.atan2(end[1] - end_tangent[1], end[0] - end_tangent[0])

    return math.degrees(start_angle), math.degrees(end_angle)
