"""
几何引擎单元测试

覆盖：三点定圆、弯曲主干、端点切线角、二次曲线路径、正多边形、手绘笔迹
"""

import math

import pytest

from export_annotations.geometry import (
    StrokeOptions,
    bent_arc_path,
    circle_from_three_points,
    freehand_stroke,
    pressure_options_for,
    quadratic_path,
    regular_polygon_vertices,
    tangent_angles_at_ends,
)
from export_annotations.geometry.freehand import real_pressure_easing, simulated_pressure_easing
from export_annotations.geometry.vec import dist, fmt_num, rad_to_degree


class TestCircleFromThreePoints:
    """三点外接圆测试"""

    def test_circle_equidistant(self):
        """圆心到三点等距"""
        a, b, c = (0.0, 0.0), (4.0, 0.0), (0.0, 3.0)
        circle = circle_from_three_points(a, b, c)

        assert circle is not None
        assert circle.center == pytest.approx((2.0, 1.5))
        assert circle.radius == pytest.approx(2.5)
        for p in (a, b, c):
            assert dist(circle.center, p) == pytest.approx(circle.radius)

    def test_collinear_degenerate(self):
        """共线返回 None"""
        assert circle_from_three_points((0, 0), (50, 0), (100, 0)) is None

    def test_non_finite_degenerate(self):
        """非有限坐标返回 None"""
        assert circle_from_three_points((0, 0), (math.nan, 1), (2, 0)) is None


class TestBentArcPath:
    """弯曲主干测试"""

    @pytest.mark.parametrize("bend", [0, 0.004, -0.004, None, math.inf])
    def test_straight_when_bend_small(self, bend):
        """|bend| < 0.005 或非法值恒为直线"""
        path = bent_arc_path((0, 0), (100, 0), bend)
        assert path.is_straight
        assert path.d == "M 0 0 L 100 0"

    def test_arc_radius_matches_circumradius(self):
        """弧半径等于起点/弯曲中点/终点的外接圆半径"""
        path = bent_arc_path((0, 0), (100, 0), 20)

        assert not path.is_straight
        assert path.middle == pytest.approx((50.0, 20.0))
        assert path.circle.center == pytest.approx((50.0, -52.5))
        assert path.circle.radius == pytest.approx(72.5)

    def test_arc_path_data(self):
        """bend=20 的圆弧路径"""
        path = bent_arc_path((0, 0), (100, 0), 20)
        assert path.d == "M 0 0 A 72.5 72.5 0 0 0 100 0"

    def test_negative_bend_flips_sweep(self):
        """反向弯曲翻转扫描标志"""
        assert bent_arc_path((0, 0), (100, 0), 20).sweep == 0
        assert bent_arc_path((0, 0), (100, 0), -20).sweep == 1

    def test_large_arc_flag(self):
        """弯曲超过半圆时取大弧"""
        assert bent_arc_path((0, 0), (100, 0), 20).large_arc == 0
        assert bent_arc_path((0, 0), (100, 0), 80).large_arc == 1

    def test_arc_endpoints_on_path(self):
        """按弧长取点：两端与中点落在弧上"""
        path = bent_arc_path((0, 0), (100, 0), 20)
        assert path.point_at(0) == pytest.approx((0.0, 0.0), abs=1e-6)
        assert path.point_at(path.length) == pytest.approx((100.0, 0.0), abs=1e-6)
        assert path.point_at(path.length / 2) == pytest.approx((50.0, 20.0), abs=1e-6)


class TestTangentAngles:
    """端点切线角测试"""

    def test_straight_arrow_angles(self):
        """水平直线：起点朝外180°，终点0°"""
        start, end = tangent_angles_at_ends(bent_arc_path((0, 0), (100, 0), 0))
        assert start == pytest.approx(180.0)
        assert end == pytest.approx(0.0, abs=1e-9)

    def test_arc_arrow_angles(self):
        """圆弧：两端切线关于弦的垂线对称"""
        start, end = tangent_angles_at_ends(bent_arc_path((0, 0), (100, 0), 20))
        assert end == pytest.approx(-43.6, abs=0.1)
        assert start == pytest.approx(223.6, abs=0.1)

    def test_zero_length_path(self):
        """零长度路径不产生非法值"""
        start, end = tangent_angles_at_ends(bent_arc_path((5, 5), (5, 5), 0))
        assert math.isfinite(start)
        assert math.isfinite(end)


class TestPaths:
    """路径工具测试"""

    def test_quadratic_path_open(self):
        """控制点 + 中点 序列"""
        d = quadratic_path([(0, 0), (10, 0), (10, 10)], closed=False)
        assert d == "M 0.00 0.00 Q 0.00 0.00 5.00 0.00 10.00 0.00 10.00 5.00"

    def test_quadratic_path_closed(self):
        assert quadratic_path([(0, 0), (10, 0)]).endswith(" Z")

    def test_quadratic_path_empty(self):
        assert quadratic_path([]) == ""

    def test_regular_polygon_vertices(self):
        """顶点数正确，第一个顶点在顶边"""
        vertices = regular_polygon_vertices(100, 100, 6)
        assert len(vertices) == 6
        assert vertices[0][1] == pytest.approx(0.0)
        assert min(x for x, _ in vertices) == pytest.approx(0.0)

    def test_regular_polygon_too_few_sides(self):
        assert regular_polygon_vertices(100, 100, 2) == []

    def test_number_formatting(self):
        assert fmt_num(72.5) == "72.5"
        assert fmt_num(180.0) == "180"
        assert fmt_num(-0.001) == "0"
        assert fmt_num(math.nan) == "0"
        assert rad_to_degree(math.pi / 2) == 90.0


class TestFreehand:
    """手绘笔迹测试"""

    def _samples(self, pressure=0.5):
        return [{"x": i * 5.0, "y": (i % 3) * 2.0, "z": pressure} for i in range(20)]

    def test_pressure_mode_selection(self):
        """第二个采样点压力为0.5时使用模拟压力"""
        simulated = pressure_options_for(self._samples(0.5))
        real = pressure_options_for(self._samples(0.8))

        assert simulated["simulate_pressure"] is True
        assert simulated["easing"] is simulated_pressure_easing
        assert real["simulate_pressure"] is False
        assert real["easing"] is real_pressure_easing

    def test_stroke_outline_is_finite(self):
        samples = self._samples()
        options = StrokeOptions(size=6.25, thinning=0.65, streamline=0.65, smoothing=0.65,
                                **pressure_options_for(samples))
        stroke = freehand_stroke(samples, options, with_outline=True)

        assert len(stroke.centerline) > 1
        assert len(stroke.outline) > 2
        assert all(math.isfinite(x) and math.isfinite(y) for x, y in stroke.outline)

    def test_single_point_stroke(self):
        """单点笔迹仍能画出"""
        stroke = freehand_stroke([{"x": 3, "y": 4, "z": 0.5}], StrokeOptions(), with_outline=True)
        assert len(stroke.centerline) >= 2
        assert stroke.centerline[0] == (3.0, 4.0)
        assert stroke.outline

    def test_empty_stroke(self):
        stroke = freehand_stroke([], StrokeOptions())
        assert stroke.centerline == []
        assert stroke.outline == []

    def test_list_samples_accepted(self):
        """[x, y, pressure] 形式的采样点"""
        stroke = freehand_stroke([[0, 0, 0.5], [10, 10, 0.5], [20, 0, 0.5]], StrokeOptions())
        assert stroke.centerline[0] == (0.0, 0.0)
