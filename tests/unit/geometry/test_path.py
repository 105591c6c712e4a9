"""
Tests for the path model.
"""

import pytest

from cutpath.core.exceptions import GeometryError
from cutpath.geometry.path import BBox3D, CutPath, CutPaths, CutPoint, Inside


class TestCutPoint:
    """Tests for CutPoint."""

    def test_dist2(self):
        assert CutPoint(0, 0).dist2(CutPoint(3, 4)) == 25

    def test_same_xy_ignores_z(self):
        assert CutPoint(1, 2, 5).same_xy(CutPoint(1, 2))
        assert not CutPoint(1, 2).same_xy(CutPoint(1, 3))

    def test_clamp_z_unset(self):
        assert CutPoint(0, 0).clamp_z(-5).z == -5

    def test_clamp_z_keeps_higher(self):
        assert CutPoint(0, 0, -2).clamp_z(-5).z == -2
        assert CutPoint(0, 0, -8).clamp_z(-5).z == -5

    def test_to_dict_omits_unset_z(self):
        assert CutPoint(1, 2).to_dict() == {"X": 1, "Y": 2}
        assert CutPoint(1, 2, 3).to_dict() == {"X": 1, "Y": 2, "Z": 3}


class TestCutPath:
    """Tests for CutPath."""

    def test_points_stored_as_tuple(self):
        path = CutPath([CutPoint(0, 0), CutPoint(1, 0)])
        assert isinstance(path.points, tuple)

    def test_perimeter_open(self):
        path = CutPath.from_xy([(0, 0), (10, 0), (10, 10)])
        assert path.perimeter() == pytest.approx(20)

    def test_perimeter_closed(self, make_square):
        assert make_square(0, 0, 10).perimeter() == pytest.approx(40)

    def test_area_sign(self, make_square):
        assert make_square(0, 0, 10).area() == pytest.approx(100)
        assert make_square(0, 0, 10, ccw=False).area() == pytest.approx(-100)

    def test_closest_vertex(self, make_square):
        index, d2 = make_square(0, 0, 10).closest_vertex(CutPoint(9, 11))
        assert index == 2
        assert d2 == 2

    def test_closest_vertex_tie_keeps_lowest(self):
        path = CutPath.from_xy([(0, 0), (2, 0)])
        assert path.closest_vertex(CutPoint(1, 0))[0] == 0

    def test_closest_vertex_empty(self):
        assert CutPath().closest_vertex(CutPoint(0, 0)) is None

    def test_closest_endpoint_ignores_middle(self):
        path = CutPath.from_xy([(0, 0), (5, 0), (10, 0)])
        assert path.closest_endpoint(CutPoint(5, 1)) == (0, 26)
        assert path.closest_endpoint(CutPoint(9, 0)) == (2, 1)

    def test_inside(self, make_square):
        sq = make_square(0, 0, 10)
        assert sq.inside(CutPoint(5, 5)) is Inside.INSIDE
        assert sq.inside(CutPoint(15, 5)) is Inside.OUTSIDE
        assert sq.inside(CutPoint(-1, 5)) is Inside.OUTSIDE

    @pytest.mark.parametrize("pt", [(0, 0), (10, 10), (5, 0), (5, 10), (0, 5), (10, 5)])
    def test_inside_on_edge(self, make_square, pt):
        assert make_square(0, 0, 10).inside(CutPoint(*pt)) is Inside.ON_EDGE

    def test_inside_orientation_independent(self, make_square):
        assert make_square(0, 0, 10, ccw=False).inside(CutPoint(5, 5)) is Inside.INSIDE

    def test_inside_concave(self):
        l_path = CutPath.from_xy(
            [(0, 0), (10, 0), (10, 4), (4, 4), (4, 10), (0, 10)], is_closed=True
        )
        assert l_path.inside(CutPoint(2, 8)) is Inside.INSIDE
        assert l_path.inside(CutPoint(8, 8)) is Inside.OUTSIDE

    def test_inside_open_path_raises(self):
        with pytest.raises(GeometryError):
            CutPath.from_xy([(0, 0), (10, 0)]).inside(CutPoint(1, 1))

    def test_make_first(self, make_square):
        rotated = make_square(0, 0, 10).make_first(2)
        assert rotated[0] == CutPoint(10, 10)
        assert rotated.is_closed
        assert len(rotated) == 4

    def test_make_last(self, make_square):
        rotated = make_square(0, 0, 10).make_last(2)
        assert rotated[-1] == CutPoint(10, 10)
        assert rotated[0] == CutPoint(0, 10)

    def test_unduplicated(self):
        path = CutPath.from_xy([(0, 0), (0, 0), (1, 0), (1, 1), (1, 1), (0, 0)], is_closed=True)
        assert [(p.x, p.y) for p in path.unduplicated()] == [(0, 0), (1, 0), (1, 1)]

    def test_unduplicated_open_keeps_end(self):
        path = CutPath.from_xy([(0, 0), (1, 0), (0, 0)])
        assert len(path.unduplicated()) == 3

    def test_closed_explicitly(self, make_square):
        explicit = make_square(0, 0, 10).closed_explicitly()
        assert not explicit.is_closed
        assert len(explicit) == 5
        assert explicit[0] == explicit[-1]

    def test_reversed_is_new_path(self, make_square):
        sq = make_square(0, 0, 10)
        rev = sq.reversed()
        assert rev[0] == sq[-1]
        assert sq[0] == CutPoint(0, 0)

    def test_with_z(self, make_square):
        assert all(p.z == 7 for p in make_square(0, 0, 10).with_z(7))

    def test_bbox(self):
        box = CutPath.from_xy([(0, 5, 1), (10, -5, 3)]).bbox()
        assert (box.min_x, box.min_y, box.max_x, box.max_y) == (0, -5, 10, 5)
        assert (box.min_z, box.max_z) == (1, 3)

    def test_bbox_without_z(self, make_square):
        box = make_square(0, 0, 10).bbox()
        assert box.min_z is None and box.max_z is None


class TestBBox3D:
    """Tests for BBox3D."""

    def test_expand_with_box(self):
        a = BBox3D(0, 0, 1, 1)
        b = BBox3D(-1, 2, 0, 3, 5, 6)
        grown = a.expand(b)
        assert (grown.min_x, grown.min_y, grown.max_x, grown.max_y) == (-1, 0, 1, 3)
        assert (grown.min_z, grown.max_z) == (5, 6)

    def test_grown(self):
        box = BBox3D(0, 0, 10, 10).grown(2)
        assert box.width == 14 and box.height == 14


class TestCutPaths:
    """Tests for CutPaths."""

    def test_closed_and_open(self, make_square):
        paths = CutPaths([make_square(0, 0, 10), CutPath.from_xy([(0, 0), (1, 1)])])
        assert len(paths.closed()) == 1
        assert len(paths.open()) == 1

    def test_closest_vertex(self, make_square):
        paths = CutPaths([make_square(0, 0, 10), make_square(100, 0, 10)])
        assert paths.closest_vertex(CutPoint(99, 1)) == (1, 0, 2)

    def test_closest_vertex_filters_kind(self, make_square):
        paths = CutPaths([make_square(0, 0, 10), CutPath.from_xy([(50, 50), (60, 60)])])
        assert paths.closest_vertex(CutPoint(0, 0), closed=False)[0] == 1

    def test_copy_is_independent(self, make_square):
        paths = CutPaths([make_square(0, 0, 10)])
        copy = paths.copy()
        copy.append(make_square(5, 5, 1))
        assert len(paths) == 1

    def test_json_round_trip(self):
        paths = CutPaths(
            [
                CutPath.from_xy([(0, 0), (10, 0), (10, 10)], is_closed=True),
                CutPath.from_xy([(1, 2, -3), (4, 5, -6)]),
            ]
        )
        restored = CutPaths.from_json(paths.to_json())
        assert restored == paths

    def test_persisted_form(self):
        data = [{"isClosed": True, "pts": [{"X": 0, "Y": 0}, {"X": 5, "Y": 0, "Z": 1}]}]
        paths = CutPaths.from_dict(data)
        assert paths[0].is_closed
        assert paths[0][1].z == 1
        assert paths.to_dict() == data

    def test_clamp_z(self, make_square):
        paths = CutPaths([make_square(0, 0, 10)]).clamp_z(-1)
        assert all(p.z == -1 for path in paths for p in path)

    def test_perimeter_and_bbox(self, make_square):
        paths = CutPaths([make_square(0, 0, 10), make_square(20, 20, 10)])
        assert paths.perimeter() == pytest.approx(80)
        assert paths.bbox().max_x == 30
