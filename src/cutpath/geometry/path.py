"""
Path model: points, polylines and sets of polylines.

Coordinates are in integer units (see ``INTEGER_UNITS_PER_MM``). Paths are
immutable; every operation that changes a path returns a new one. A closed
path never repeats its first vertex as its last, the closing edge is
implied.
"""

import json
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, Optional, Sequence, Union

from cutpath.core.exceptions import GeometryError


class Inside(Enum):
    """Result of a point-in-polygon test."""

    OUTSIDE = 0
    INSIDE = 1
    ON_EDGE = -1


@dataclass(frozen=True)
class CutPoint:
    """A vertex. ``z`` is None until a depth has been assigned."""

    x: float
    y: float
    z: Optional[float] = None

    def dist2(self, other: "CutPoint") -> float:
        """Squared 2D distance to another point."""
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def same_xy(self, other: "CutPoint") -> bool:
        return self.x == other.x and self.y == other.y

    def with_z(self, z: Optional[float]) -> "CutPoint":
        return CutPoint(self.x, self.y, z)

    def clamp_z(self, z: float) -> "CutPoint":
        """Assign ``z`` if unset, otherwise keep whichever of the two is higher."""
        if self.z is None:
            return CutPoint(self.x, self.y, z)
        return CutPoint(self.x, self.y, max(self.z, z))

    def to_dict(self) -> dict[str, float]:
        data = {"X": self.x, "Y": self.y}
        if self.z is not None:
            data["Z"] = self.z
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CutPoint":
        return cls(data["X"], data["Y"], data.get("Z"))


@dataclass(frozen=True)
class BBox3D:
    """Axis-aligned bounds. Z bounds are None when no vertex has a Z."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float
    min_z: Optional[float] = None
    max_z: Optional[float] = None

    @classmethod
    def from_points(cls, points: Iterable[CutPoint]) -> Optional["BBox3D"]:
        box = None
        for pt in points:
            box = box.expand(pt) if box is not None else cls(pt.x, pt.y, pt.x, pt.y, pt.z, pt.z)
        return box

    def expand(self, other: Union[CutPoint, "BBox3D"]) -> "BBox3D":
        """Return a box that also covers a point or another box."""
        if isinstance(other, CutPoint):
            other = BBox3D(other.x, other.y, other.x, other.y, other.z, other.z)
        return BBox3D(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
            _fold(min, self.min_z, other.min_z),
            _fold(max, self.max_z, other.max_z),
        )

    def grown(self, amount: float) -> "BBox3D":
        """Return the box grown by ``amount`` in X and Y."""
        return BBox3D(
            self.min_x - amount,
            self.min_y - amount,
            self.max_x + amount,
            self.max_y + amount,
            self.min_z,
            self.max_z,
        )

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


def _fold(fn, a: Optional[float], b: Optional[float]) -> Optional[float]:
    if a is None:
        return b
    if b is None:
        return a
    return fn(a, b)


@dataclass(frozen=True)
class CutPath:
    """
    An ordered polyline.

    Attributes:
        points: Vertices in order
        is_closed: Whether an edge from the last vertex back to the first
            is implied
    """

    points: tuple[CutPoint, ...] = ()
    is_closed: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.points, tuple):
            object.__setattr__(self, "points", tuple(self.points))

    @classmethod
    def from_xy(
        cls, coords: Iterable[Sequence[float]], is_closed: bool = False
    ) -> "CutPath":
        """Build a path from ``(x, y)`` or ``(x, y, z)`` tuples."""
        return cls(tuple(CutPoint(*c) for c in coords), is_closed)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[CutPoint]:
        return iter(self.points)

    def __getitem__(self, index: int) -> CutPoint:
        return self.points[index]

    def edges(self) -> Iterator[tuple[CutPoint, CutPoint]]:
        """Consecutive vertex pairs, including the closing edge if closed."""
        pts = self.points
        for i in range(len(pts) - 1):
            yield pts[i], pts[i + 1]
        if self.is_closed and len(pts) > 1:
            yield pts[-1], pts[0]

    def perimeter(self) -> float:
        """Sum of 2D edge lengths."""
        return sum(math.sqrt(a.dist2(b)) for a, b in self.edges())

    def area(self) -> float:
        """Signed area of the polygon; positive when counter-clockwise."""
        total = 0.0
        pts = self.points
        for i, a in enumerate(pts):
            b = pts[(i + 1) % len(pts)]
            total += a.x * b.y - b.x * a.y
        return total / 2.0

    def bbox(self) -> Optional[BBox3D]:
        return BBox3D.from_points(self.points)

    def closest_vertex(self, pt: CutPoint) -> Optional[tuple[int, float]]:
        """
        Find the vertex nearest ``pt``.

        Returns:
            ``(index, squared distance)``, or None for an empty path.
            Ties keep the lowest index.
        """
        best = None
        for i, vertex in enumerate(self.points):
            d2 = vertex.dist2(pt)
            if best is None or d2 < best[1]:
                best = (i, d2)
        return best

    def closest_endpoint(self, pt: CutPoint) -> Optional[tuple[int, float]]:
        """Like ``closest_vertex`` but only the first and last vertex compete."""
        if not self.points:
            return None
        first = self.points[0].dist2(pt)
        last = self.points[-1].dist2(pt)
        if last < first:
            return len(self.points) - 1, last
        return 0, first

    def inside(self, pt: CutPoint) -> Inside:
        """
        Classify a point against the polygon (Hormann & Agathos).

        Raises:
            GeometryError: If the path is open.
        """
        if not self.is_closed:
            raise GeometryError("inside() requires a closed path")
        pts = self.points
        if not pts:
            return Inside.OUTSIDE

        result = False
        ip = pts[0]
        for i in range(1, len(pts) + 1):
            nxt = pts[0] if i == len(pts) else pts[i]
            if nxt.y == pt.y:
                if nxt.x == pt.x or (
                    ip.y == pt.y and ((nxt.x > pt.x) == (ip.x < pt.x))
                ):
                    return Inside.ON_EDGE
            if (ip.y < pt.y) != (nxt.y < pt.y):
                if ip.x >= pt.x or nxt.x > pt.x:
                    if ip.x >= pt.x and nxt.x > pt.x:
                        result = not result
                    else:
                        d = (ip.x - pt.x) * (nxt.y - pt.y) - (nxt.x - pt.x) * (ip.y - pt.y)
                        if d == 0:
                            return Inside.ON_EDGE
                        if (d > 0) == (nxt.y > ip.y):
                            result = not result
            ip = nxt
        return Inside.INSIDE if result else Inside.OUTSIDE

    def make_first(self, index: int) -> "CutPath":
        """Rotate a closed path so that vertex ``index`` comes first."""
        index %= max(len(self.points), 1)
        return CutPath(self.points[index:] + self.points[:index], self.is_closed)

    def make_last(self, index: int) -> "CutPath":
        """Rotate a closed path so that vertex ``index`` comes last."""
        return self.make_first(index + 1)

    def unduplicated(self) -> "CutPath":
        """Drop consecutive coincident vertices (and the wrap-around one if closed)."""
        out: list[CutPoint] = []
        for pt in self.points:
            if not out or not out[-1].same_xy(pt):
                out.append(pt)
        if self.is_closed:
            while len(out) > 1 and out[-1].same_xy(out[0]):
                out.pop()
        return CutPath(tuple(out), self.is_closed)

    def reversed(self) -> "CutPath":
        return CutPath(self.points[::-1], self.is_closed)

    def closed_explicitly(self) -> "CutPath":
        """An open copy of a closed path with the first vertex repeated at the end."""
        if not self.is_closed or not self.points:
            return CutPath(self.points, False)
        return CutPath(self.points + (self.points[0],), False)

    def with_z(self, z: Optional[float]) -> "CutPath":
        return CutPath(tuple(p.with_z(z) for p in self.points), self.is_closed)

    def clamp_z(self, z: float) -> "CutPath":
        return CutPath(tuple(p.clamp_z(z) for p in self.points), self.is_closed)

    def to_dict(self) -> dict[str, Any]:
        return {"isClosed": self.is_closed, "pts": [p.to_dict() for p in self.points]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CutPath":
        return cls(
            tuple(CutPoint.from_dict(p) for p in data.get("pts", [])),
            bool(data.get("isClosed", False)),
        )


@dataclass
class CutPaths:
    """
    An ordered, mutable collection of paths.

    Used both for a set of independent passes and for a single polygon
    with holes, in which case the fill rule decides what is inside.
    """

    paths: list[CutPath] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.paths = list(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    def __iter__(self) -> Iterator[CutPath]:
        return iter(self.paths)

    def __getitem__(self, index: int) -> CutPath:
        return self.paths[index]

    def append(self, path: CutPath) -> None:
        self.paths.append(path)

    def extend(self, paths: Iterable[CutPath]) -> None:
        self.paths.extend(paths)

    def copy(self) -> "CutPaths":
        return CutPaths(list(self.paths))

    def closed(self) -> "CutPaths":
        return CutPaths([p for p in self.paths if p.is_closed])

    def open(self) -> "CutPaths":
        return CutPaths([p for p in self.paths if not p.is_closed])

    def perimeter(self) -> float:
        return sum(p.perimeter() for p in self.paths)

    def bbox(self) -> Optional[BBox3D]:
        return BBox3D.from_points(pt for path in self.paths for pt in path)

    def closest_vertex(
        self, pt: CutPoint, closed: Optional[bool] = None
    ) -> Optional[tuple[int, int, float]]:
        """
        Find the vertex nearest ``pt`` across all paths.

        Args:
            pt: Query point
            closed: Restrict the search to closed (True) or open (False)
                paths; None searches all.

        Returns:
            ``(path index, vertex index, squared distance)`` or None.
        """
        best = None
        for pi, path in enumerate(self.paths):
            if closed is not None and path.is_closed != closed:
                continue
            found = path.closest_vertex(pt)
            if found is not None and (best is None or found[1] < best[2]):
                best = (pi, found[0], found[1])
        return best

    def with_z(self, z: Optional[float]) -> "CutPaths":
        return CutPaths([p.with_z(z) for p in self.paths])

    def clamp_z(self, z: float) -> "CutPaths":
        return CutPaths([p.clamp_z(z) for p in self.paths])

    def to_dict(self) -> list[dict[str, Any]]:
        return [p.to_dict() for p in self.paths]

    @classmethod
    def from_dict(cls, data: Iterable[dict[str, Any]]) -> "CutPaths":
        return cls([CutPath.from_dict(p) for p in data])

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, text: str) -> "CutPaths":
        return cls.from_dict(json.loads(text))
