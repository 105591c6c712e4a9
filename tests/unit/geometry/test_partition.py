"""
Tests for polygon grouping and convex partition.
"""

import pytest

from cutpath.geometry.partition import convex_partition, group_polygons, is_convex
from cutpath.geometry.path import CutPath, CutPaths, CutPoint, Inside


def _centroid(path):
    n = len(path)
    return CutPoint(sum(p.x for p in path) / n, sum(p.y for p in path) / n)


class TestIsConvex:
    """Tests for is_convex."""

    def test_square(self, make_square):
        assert is_convex(make_square(0, 0, 10))
        assert is_convex(make_square(0, 0, 10, ccw=False))

    def test_l_shape(self, l_shape):
        assert not is_convex(l_shape[0])

    def test_collinear_vertex_allowed(self):
        path = CutPath.from_xy([(0, 0), (5, 0), (10, 0), (10, 10), (0, 10)], is_closed=True)
        assert is_convex(path)

    def test_degenerate(self):
        assert not is_convex(CutPath.from_xy([(0, 0), (1, 1)], is_closed=True))


class TestGroupPolygons:
    """Tests for group_polygons."""

    def test_outer_with_hole(self, square_with_hole):
        regions = group_polygons(square_with_hole)
        assert len(regions) == 1
        outer, holes = regions[0]
        assert outer.area() > 0
        assert len(holes) == 1

    def test_separate_outers(self, make_square):
        regions = group_polygons(CutPaths([make_square(0, 0, 10), make_square(20, 0, 10)]))
        assert len(regions) == 2
        assert all(not holes for _, holes in regions)

    def test_hole_goes_to_smallest_container(self, make_square):
        paths = CutPaths(
            [
                make_square(0, 0, 100),
                make_square(10, 10, 80, ccw=False),
                make_square(20, 20, 60),
                make_square(40, 40, 20, ccw=False),
            ]
        )
        regions = group_polygons(paths)
        assert len(regions) == 2
        big, small = regions
        assert big[1][0].bbox().min_x == 10
        assert small[1][0].bbox().min_x == 40

    def test_orphan_hole_dropped(self, make_square):
        regions = group_polygons(CutPaths([make_square(0, 0, 10), make_square(50, 50, 5, ccw=False)]))
        assert len(regions) == 1
        assert regions[0][1] == []


class TestConvexPartition:
    """Tests for convex_partition."""

    def test_convex_returned_as_is(self, make_square):
        sq = make_square(0, 0, 10000)
        assert convex_partition(sq) == [sq]

    def test_l_shape(self, l_shape):
        pieces = convex_partition(l_shape[0])
        assert len(pieces) >= 2
        assert all(is_convex(p) for p in pieces)
        assert all(p.area() > 0 for p in pieces)
        assert sum(p.area() for p in pieces) == pytest.approx(64_000_000)

    def test_with_hole(self, square_with_hole):
        outer, hole = square_with_hole
        pieces = convex_partition(outer, [hole])
        assert all(is_convex(p) for p in pieces)
        assert sum(p.area() for p in pieces) == pytest.approx(84_000_000)
        for piece in pieces:
            assert hole.inside(_centroid(piece)) is Inside.OUTSIDE

    def test_merges_triangles(self, l_shape):
        # Six vertices triangulate into four triangles; an L needs only two pieces
        assert len(convex_partition(l_shape[0])) < 4
