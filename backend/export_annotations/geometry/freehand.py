"""
手绘笔迹 - 平滑中心线与压感轮廓多边形

职责：
1. get_stroke_points: 对原始采样点做流线平滑，得到带压力/方向/累计长度的笔迹点
2. get_stroke_outline_points: 按压力计算半径，生成左右两侧偏移点并加圆头，得到轮廓多边形
3. freehand_stroke: 组合以上两步，并处理单点笔迹

算法与常量与白板前端使用的 perfect-freehand 保持一致，保证导出结果与屏幕显示相同。
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from .vec import (
    TAU,
    Point,
    add,
    dist,
    dist2,
    dpr,
    is_equal,
    lrp,
    mul,
    neg,
    per,
    prj,
    rot_around,
    sub,
    uni,
)

RATE_OF_PRESSURE_CHANGE = 0.275
FIXED_PI = math.pi + 0.0001

DEFAULT_PRESSURE = 0.5
FIRST_POINT_PRESSURE = 0.25

# 第二个采样点压力恰为该值时表示设备无压感，改用模拟压力
SIMULATED_PRESSURE_SENTINEL = 0.5

Easing = Callable[[float], float]


def _linear(t: float) -> float:
    return t


def _ease_out_quad(t: float) -> float:
    return t * (2 - t)


def _ease_out_cubic(t: float) -> float:
    t -= 1
    return t * t * t + 1


def simulated_pressure_easing(t: float) -> float:
    return math.sin((t * TAU) / 4)


def real_pressure_easing(t: float) -> float:
    return t * t


@dataclass
class StrokeOptions:
    """笔迹参数"""
    size: float = 16.0
    thinning: float = 0.5
    streamline: float = 0.5
    smoothing: float = 0.5
    simulate_pressure: bool = True
    easing: Easing = _linear
    last: bool = False

    # 起止端渐细长度（0 表示不渐细，改为圆头）
    taper_start: float = 0.0
    taper_end: float = 0.0
    cap_start: bool = True
    cap_end: bool = True
    taper_start_easing: Easing = _ease_out_quad
    taper_end_easing: Easing = _ease_out_cubic


@dataclass
class StrokePoint:
    """平滑后的笔迹点"""
    point: Point
    pressure: float
    vector: Point
    distance: float
    running_length: float


@dataclass
class FreehandStroke:
    """手绘笔迹结果"""
    centerline: list[Point] = field(default_factory=list)
    outline: list[Point] = field(default_factory=list)


def _as_sample(raw: Sequence[float] | dict) -> tuple[float, float, float]:
    """原始采样点统一为 (x, y, pressure)，缺失压力记为 -1"""
    if isinstance(raw, dict):
        x, y, z = raw.get("x"), raw.get("y"), raw.get("z")
    else:
        x = raw[0] if len(raw) > 0 else None
        y = raw[1] if len(raw) > 1 else None
        z = raw[2] if len(raw) > 2 else None
    x = float(x) if x is not None else 0.0
    y = float(y) if y is not None else 0.0
    pressure = float(z) if z is not None else -1.0
    if not math.isfinite(x):
        x = 0.0
    if not math.isfinite(y):
        y = 0.0
    if not math.isfinite(pressure):
        pressure = -1.0
    return (x, y, pressure)


def pressure_options_for(points: Sequence) -> dict:
    """
    按第二个采样点的压力选择压感模式

    Returns:
        {"simulate_pressure": bool, "easing": callable}
    """
    if len(points) > 1 and _as_sample(points[1])[2] == SIMULATED_PRESSURE_SENTINEL:
        return {"simulate_pressure": True, "easing": simulated_pressure_easing}
    return {"simulate_pressure": False, "easing": real_pressure_easing}


def get_stroke_points(points: Sequence, options: StrokeOptions) -> list[StrokePoint]:
    """原始采样点 → 平滑笔迹点"""
    if not points:
        return []

    t = 0.15 + (1 - options.streamline) * 0.85
    samples = [_as_sample(p) for p in points]

    # 两点时插值补足，便于平滑
    if len(samples) == 2:
        last = samples[1]
        samples = samples[:1]
        for i in range(1, 5):
            x, y = lrp(samples[0][:2], last[:2], i / 4)
            samples.append((x, y, samples[0][2]))

    if len(samples) == 1:
        x, y, z = samples[0]
        samples.append((x + 1, y + 1, z))

    first = samples[0]
    stroke_points = [
        StrokePoint(
            point=(first[0], first[1]),
            pressure=first[2] if first[2] >= 0 else FIRST_POINT_PRESSURE,
            vector=(1.0, 1.0),
            distance=0.0,
            running_length=0.0,
        )
    ]

    has_reached_minimum_length = False
    running_length = 0.0
    prev = stroke_points[0]
    max_index = len(samples) - 1

    for i in range(1, len(samples)):
        sample = samples[i]
        if options.last and i == max_index:
            point = (sample[0], sample[1])
        else:
            point = lrp(prev.point, (sample[0], sample[1]), t)

        if is_equal(prev.point, point):
            continue

        distance = dist(point, prev.point)
        running_length += distance

        # 起笔处未达到最小长度前丢弃抖动点
        if i < max_index and not has_reached_minimum_length:
            if running_length < options.size:
                continue
            has_reached_minimum_length = True

        prev = StrokePoint(
            point=point,
            pressure=sample[2] if sample[2] >= 0 else DEFAULT_PRESSURE,
            vector=uni(sub(prev.point, point)),
            distance=distance,
            running_length=running_length,
        )
        stroke_points.append(prev)

    stroke_points[0].vector = stroke_points[1].vector if len(stroke_points) > 1 else (0.0, 0.0)
    return stroke_points


def get_stroke_radius(size: float, thinning: float, pressure: float, easing: Easing = _linear) -> float:
    return size * easing(0.5 - thinning * (0.5 - pressure))


def _simulated_pressure(prev_pressure: float, distance: float, size: float) -> float:
    sp = min(1.0, distance / size)
    rp = min(1.0, 1 - sp)
    return min(1.0, prev_pressure + (rp - prev_pressure) * (sp * RATE_OF_PRESSURE_CHANGE))


def get_stroke_outline_points(points: list[StrokePoint], options: StrokeOptions) -> list[Point]:
    """平滑笔迹点 → 轮廓多边形顶点"""
    size = options.size
    if not points or size <= 0:
        return []

    total_length = points[-1].running_length
    taper_start = options.taper_start
    taper_end = options.taper_end
    min_distance = (size * options.smoothing) ** 2

    left_pts: list[Point] = []
    right_pts: list[Point] = []

    # 前10个点预热压力，避免起笔过粗
    prev_pressure = points[0].pressure
    for sp in points[:10]:
        pressure = sp.pressure
        if options.simulate_pressure:
            pressure = _simulated_pressure(prev_pressure, sp.distance, size)
        prev_pressure = (prev_pressure + pressure) / 2

    radius = get_stroke_radius(size, options.thinning, points[-1].pressure, options.easing)
    first_radius: float | None = None
    prev_vector = points[0].vector
    pl = points[0].point
    pr = pl
    tl = pl
    tr = pr
    is_prev_point_sharp_corner = False

    for i, sp in enumerate(points):
        pressure = sp.pressure
        point, vector, distance, running_length = sp.point, sp.vector, sp.distance, sp.running_length
        is_last = i == len(points) - 1

        # 末端过近的点会产生毛刺
        if not is_last and total_length - running_length < 3:
            continue

        if options.thinning:
            if options.simulate_pressure:
                pressure = _simulated_pressure(prev_pressure, distance, size)
            radius = get_stroke_radius(size, options.thinning, pressure, options.easing)
        else:
            radius = size / 2

        if first_radius is None:
            first_radius = radius

        ts = options.taper_start_easing(running_length / taper_start) if running_length < taper_start else 1
        remaining = total_length - running_length
        te = options.taper_end_easing(remaining / taper_end) if remaining < taper_end else 1
        radius = max(0.01, radius * min(ts, te))

        next_vector = points[i + 1].vector if not is_last else vector
        next_dpr = dpr(vector, next_vector) if not is_last else 1.0
        prev_dpr = dpr(vector, prev_vector)

        is_point_sharp_corner = prev_dpr < 0 and not is_prev_point_sharp_corner
        is_next_point_sharp_corner = next_dpr < 0

        if is_point_sharp_corner or is_next_point_sharp_corner:
            # 急转处画半圆
            offset = mul(per(prev_vector), radius)
            for k in range(14):
                step = k / 13
                tl = rot_around(sub(point, offset), point, FIXED_PI * step)
                left_pts.append(tl)
                tr = rot_around(add(point, offset), point, FIXED_PI * -step)
                right_pts.append(tr)
            pl = tl
            pr = tr
            if is_next_point_sharp_corner:
                is_prev_point_sharp_corner = True
            continue

        is_prev_point_sharp_corner = False

        if is_last:
            offset = mul(per(vector), radius)
            left_pts.append(sub(point, offset))
            right_pts.append(add(point, offset))
            continue

        offset = mul(per(lrp(next_vector, vector, next_dpr)), radius)

        tl = sub(point, offset)
        if i <= 1 or dist2(pl, tl) > min_distance:
            left_pts.append(tl)
            pl = tl

        tr = add(point, offset)
        if i <= 1 or dist2(pr, tr) > min_distance:
            right_pts.append(tr)
            pr = tr

        prev_pressure = pressure
        prev_vector = vector

    first_point = points[0].point
    last_point = points[-1].point if len(points) > 1 else add(points[0].point, (1, 1))

    if len(points) == 1:
        # 单点：画一个圆点
        if not (taper_start or taper_end) or options.last:
            start = prj(first_point, uni(per(sub(first_point, last_point))), -(first_radius or radius))
            return [rot_around(start, first_point, FIXED_PI * 2 * (k / 13)) for k in range(1, 14)]
        return []

    start_cap: list[Point] = []
    if taper_start:
        pass
    elif options.cap_start and right_pts:
        start_cap = [rot_around(right_pts[0], first_point, FIXED_PI * (k / 13)) for k in range(1, 14)]
    elif left_pts and right_pts:
        corners = sub(left_pts[0], right_pts[0])
        offset_a = mul(corners, 0.5)
        offset_b = mul(corners, 0.51)
        start_cap = [
            sub(first_point, offset_a),
            sub(first_point, offset_b),
            add(first_point, offset_b),
            add(first_point, offset_a),
        ]

    end_cap: list[Point] = []
    direction = per(neg(points[-1].vector))
    if taper_end:
        end_cap = [last_point]
    elif options.cap_end:
        start = prj(last_point, direction, radius)
        end_cap = [rot_around(start, last_point, FIXED_PI * 3 * (k / 29)) for k in range(1, 29)]
    else:
        end_cap = [
            add(last_point, mul(direction, radius)),
            add(last_point, mul(direction, radius * 0.99)),
            sub(last_point, mul(direction, radius * 0.99)),
            sub(last_point, mul(direction, radius)),
        ]

    return left_pts + end_cap + list(reversed(right_pts)) + start_cap


def freehand_stroke(points: Sequence, options: StrokeOptions, with_outline: bool = False) -> FreehandStroke:
    """
    原始采样点 → 中心线（可选轮廓）

    单点笔迹补一个末点，保证仍能画出。
    """
    stroke_points = get_stroke_points(points, options)
    if not stroke_points:
        return FreehandStroke()

    last_raw = _as_sample(points[-1])
    if is_equal(stroke_points[0].point, last_raw[:2]):
        stroke_points.append(StrokePoint(
            point=(last_raw[0], last_raw[1]),
            pressure=last_raw[2] if last_raw[2] >= 0 else DEFAULT_PRESSURE,
            vector=stroke_points[-1].vector,
            distance=0.0,
            running_length=stroke_points[-1].running_length,
        ))

    centerline = [sp.point for sp in stroke_points]
    outline = get_stroke_outline_points(stroke_points, options) if with_outline else []
    return FreehandStroke(centerline=centerline, outline=outline)
