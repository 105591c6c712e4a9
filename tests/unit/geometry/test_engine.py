"""
Tests for the pyclipper-backed polygon engine.
"""

import pytest

from cutpath.core.config import JoinType
from cutpath.geometry.engine import ClipType, EndType, FillRule
from cutpath.geometry.path import CutPath, CutPaths, CutPoint


def _area(paths):
    return sum(p.area() for p in paths)


class TestOffset:
    """Tests for PyclipperEngine.offset."""

    def test_shrink_square(self, engine, square_10k):
        result = engine.offset(square_10k, -1000)
        assert len(result) == 1
        box = result.bbox()
        assert (box.min_x, box.min_y, box.max_x, box.max_y) == (1000, 1000, 9000, 9000)
        assert result[0].is_closed

    def test_grow_square_mitre(self, engine, square_10k):
        box = engine.offset(square_10k, 1000, join_type=JoinType.MITER).bbox()
        assert (box.min_x, box.max_x) == (-1000, 11000)

    def test_grow_square_round_is_smaller(self, engine, square_10k):
        mitre = _area(engine.offset(square_10k, 1000, join_type=JoinType.MITER))
        rounded = _area(engine.offset(square_10k, 1000, join_type=JoinType.ROUND))
        assert rounded < mitre

    def test_sub_unit_offset_symmetric(self, engine):
        quad = CutPaths([CutPath.from_xy([(0, 0), (100, 0), (100, 100), (0, 100)], is_closed=True)])
        box = engine.offset(quad, -0.5).bbox()
        assert (box.min_x, box.min_y, box.max_x, box.max_y) == (0.5, 0.5, 99.5, 99.5)

    def test_shrink_until_empty(self, engine, square_10k):
        assert len(engine.offset(square_10k, -6000)) == 0

    def test_open_path_passes_through(self, engine, open_line):
        result = engine.offset(open_line, 1000)
        assert len(result) == 1
        assert result[0] == open_line[0]

    def test_open_path_round_ends(self, engine, open_line):
        result = engine.offset(open_line, 1000, end_type=EndType.OPEN_ROUND)
        assert len(result) == 1
        assert result[0].is_closed
        box = result.bbox()
        # Round ends are flattened to within the arc tolerance
        assert box.min_x == pytest.approx(-1000, abs=150)
        assert box.max_x == pytest.approx(11000, abs=150)
        assert box.max_y == pytest.approx(1000, abs=5)

    def test_degenerate_paths_skipped(self, engine):
        paths = CutPaths(
            [
                CutPath.from_xy([(0, 0), (10, 0)], is_closed=True),
                CutPath.from_xy([(0, 0), (5, 0), (10, 0)], is_closed=True),
            ]
        )
        assert len(engine.offset(paths, -1)) == 0

    def test_does_not_modify_input(self, engine, square_10k):
        before = square_10k.copy()
        engine.offset(square_10k, -1000)
        assert square_10k == before


class TestBooleans:
    """Tests for union, difference, intersection and xor."""

    def test_union_overlapping(self, engine, make_square):
        a = CutPaths([make_square(0, 0, 10000)])
        b = CutPaths([make_square(5000, 0, 10000)])
        result = engine.union(a, b)
        assert len(result) == 1
        assert _area(result) == pytest.approx(150_000_000)

    def test_difference_makes_hole(self, engine, make_square):
        a = CutPaths([make_square(0, 0, 10000)])
        b = CutPaths([make_square(3000, 3000, 4000)])
        result = engine.difference(a, b)
        assert len(result) == 2
        assert _area(result) == pytest.approx(84_000_000)

    def test_intersection(self, engine, make_square):
        a = CutPaths([make_square(0, 0, 10000)])
        b = CutPaths([make_square(5000, 5000, 10000)])
        assert _area(engine.intersection(a, b)) == pytest.approx(25_000_000)

    def test_xor(self, engine, make_square):
        a = CutPaths([make_square(0, 0, 10000)])
        b = CutPaths([make_square(5000, 0, 10000)])
        assert abs(_area(engine.xor(a, b))) == pytest.approx(100_000_000)

    def test_empty_subject(self, engine, square_10k):
        assert len(engine.intersection(CutPaths(), square_10k)) == 0
        assert len(engine.difference(CutPaths(), square_10k)) == 0


class TestClean:
    """Tests for PyclipperEngine.clean."""

    def test_merges_close_vertices(self, engine):
        path = CutPath.from_xy(
            [(0, 0), (10000, 0), (10000, 10), (10000, 10000), (0, 10000)], is_closed=True
        )
        result = engine.clean(CutPaths([path]), tolerance=100)
        assert len(result) == 1
        assert len(result[0]) == 4

    def test_open_paths_dropped(self, engine, open_line):
        assert len(engine.clean(open_line)) == 0


class TestClipOpen:
    """Tests for open-path clipping with Z interpolation."""

    def test_intersection_interpolates_z(self, engine, make_square):
        line = CutPaths([CutPath.from_xy([(0, 0, 0), (10000, 0, -1000)])])
        clip = CutPaths([make_square(2000, -1000, 2000)])
        result = engine.clip_open(line, clip, ClipType.INTERSECTION)
        assert len(result) == 1
        pts = sorted(result[0], key=lambda p: p.x)
        assert (pts[0].x, pts[-1].x) == (2000, 4000)
        assert pts[0].z == pytest.approx(-200)
        assert pts[-1].z == pytest.approx(-400)

    def test_difference_splits(self, engine, make_square):
        line = CutPaths([CutPath.from_xy([(0, 0), (10000, 0)])])
        clip = CutPaths([make_square(2000, -1000, 2000)])
        result = engine.clip_open(line, clip, ClipType.DIFFERENCE, FillRule.NON_ZERO)
        assert len(result) == 2
        assert sum(p.perimeter() for p in result) == pytest.approx(8000)

    def test_unset_z_stays_unset(self, engine, make_square):
        line = CutPaths([CutPath.from_xy([(0, 0), (10000, 0)])])
        clip = CutPaths([make_square(2000, -1000, 2000)])
        result = engine.clip_open(line, clip, ClipType.INTERSECTION)
        assert all(p.z is None for p in result[0])

    def test_no_clip_polygons(self, engine, open_line):
        assert len(engine.clip_open(open_line, CutPaths(), ClipType.INTERSECTION)) == 0
        assert len(engine.clip_open(open_line, CutPaths(), ClipType.DIFFERENCE)) == 1


class TestCrosses:
    """Tests for the boundary crossing predicate."""

    def test_inside_does_not_cross(self, engine, square_10k):
        assert not engine.crosses(square_10k, CutPoint(1000, 1000), CutPoint(9000, 9000))

    def test_leaving_crosses(self, engine, square_10k):
        assert engine.crosses(square_10k, CutPoint(5000, 5000), CutPoint(15000, 5000))

    def test_fractional_segment_inside(self, engine, square_10k):
        assert not engine.crosses(square_10k, CutPoint(0.5, 0.5), CutPoint(9999.5, 0.5))

    def test_zero_length_never_crosses(self, engine, square_10k):
        assert not engine.crosses(square_10k, CutPoint(50000, 50000), CutPoint(50000, 50000))

    def test_across_hole_crosses(self, engine, square_with_hole):
        assert engine.crosses(square_with_hole, CutPoint(1000, 5000), CutPoint(9000, 5000))

    def test_beside_hole_does_not_cross(self, engine, square_with_hole):
        assert not engine.crosses(square_with_hole, CutPoint(1000, 1000), CutPoint(9000, 1000))
