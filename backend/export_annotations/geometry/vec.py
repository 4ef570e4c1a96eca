"""
二维向量工具 - 以 (x, y) 元组表示点与向量
"""

from __future__ import annotations

import math

Point = tuple[float, float]

TAU = math.pi * 2


def add(a: Point, b: Point) -> Point:
    return (a[0] + b[0], a[1] + b[1])


def sub(a: Point, b: Point) -> Point:
    return (a[0] - b[0], a[1] - b[1])


def mul(a: Point, n: float) -> Point:
    return (a[0] * n, a[1] * n)


def neg(a: Point) -> Point:
    return (-a[0], -a[1])


def per(a: Point) -> Point:
    """顺时针旋转90°"""
    return (a[1], -a[0])


def dpr(a: Point, b: Point) -> float:
    """点积"""
    return a[0] * b[0] + a[1] * b[1]


def length(a: Point) -> float:
    return math.hypot(a[0], a[1])


def uni(a: Point) -> Point:
    """单位向量；零向量返回 (0, 0)"""
    n = length(a)
    if n == 0 or not math.isfinite(n):
        return (0.0, 0.0)
    return (a[0] / n, a[1] / n)


def dist(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def dist2(a: Point, b: Point) -> float:
    dx, dy = a[0] - b[0], a[1] - b[1]
    return dx * dx + dy * dy


def lrp(a: Point, b: Point, t: float) -> Point:
    """线性插值"""
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)


def med(a: Point, b: Point) -> Point:
    return lrp(a, b, 0.5)


def prj(a: Point, b: Point, c: float) -> Point:
    """沿方向 b 投射距离 c"""
    return add(a, mul(b, c))


def rot_around(a: Point, c: Point, r: float) -> Point:
    """点 a 绕中心 c 旋转 r 弧度"""
    s, co = math.sin(r), math.cos(r)
    px, py = a[0] - c[0], a[1] - c[1]
    return (px * co - py * s + c[0], px * s + py * co + c[1])


def is_equal(a: Point, b: Point) -> bool:
    return a[0] == b[0] and a[1] == b[1]


def is_finite_point(a: Point) -> bool:
    return math.isfinite(a[0]) and math.isfinite(a[1])


def rad_to_degree(angle: float) -> float:
    """弧度转角度（保留两位小数）；非法值返回0"""
    if angle is None or not math.isfinite(angle):
        return 0.0
    return round(angle * (360 / TAU), 2)


def fmt_num(value: float, digits: int = 2) -> str:
    """SVG数值格式化：最多保留 digits 位小数并去掉多余的0"""
    if value is None or not math.isfinite(value):
        return "0"
    text = f"{value:.{digits}f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text
