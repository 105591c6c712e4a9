"""
Path merge and ordering.

Generators produce passes as independent paths. Before they are handed on,
passes are ordered to shorten travel between them, and where the move from
one pass to the next stays inside the area the operation is allowed to
cut, the two are joined into a single path so the cutter need not retract.

``GreedyMerge`` is a nearest-neighbour heuristic. Other strategies can be
plugged in by implementing ``MergeStrategy``.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from cutpath.geometry.engine import PolygonEngine, PyclipperEngine
from cutpath.geometry.path import CutPath, CutPaths, CutPoint


class MergeStrategy(ABC):
    """Orders passes and joins them where it is safe to do so."""

    @abstractmethod
    def merge_closed_paths(
        self, paths: CutPaths, bounds: Optional[CutPaths]
    ) -> CutPaths:
        """Order closed passes, joining those whose connecting move stays in ``bounds``."""

    @abstractmethod
    def sort_paths(
        self,
        paths: CutPaths,
        match_z: bool = False,
        start: Optional[CutPoint] = None,
    ) -> CutPaths:
        """Order open paths, joining those whose ends touch."""

    def merge_paths(self, paths: CutPaths, bounds: Optional[CutPaths]) -> CutPaths:
        """Merge closed and open paths separately; closed results come first."""
        result = self.merge_closed_paths(paths.closed(), bounds)
        result.extend(self.sort_paths(paths.open()))
        return result


class GreedyMerge(MergeStrategy):
    """
    Nearest-neighbour merge.

    Args:
        engine: Polygon engine used to test joining moves against the
            bounds. Defaults to ``PyclipperEngine``.
    """

    def __init__(self, engine: Optional[PolygonEngine] = None) -> None:
        self.engine = engine or PyclipperEngine()

    def merge_closed_paths(
        self, paths: CutPaths, bounds: Optional[CutPaths]
    ) -> CutPaths:
        """
        Merge closed passes into as few paths as possible.

        Starting from the first pass, repeatedly pick the remaining pass
        with a vertex nearest the end of the path built so far, rotate it
        to start at that vertex and append it if the move there does not
        leave ``bounds``; otherwise start a new path. Each pass is closed
        explicitly, so the output paths are open.

        With ``bounds`` None nothing is joined. Fewer than two passes are
        returned unchanged.
        """
        passes = [p for p in paths if len(p) > 0]
        if len(passes) < 2:
            return CutPaths(passes)

        result = CutPaths()
        current: List[CutPoint] = list(passes[0].closed_explicitly().points)
        remaining = passes[1:]
        while remaining:
            tail = current[-1]
            best_path, best_vertex, best_d2 = 0, 0, None
            for k, path in enumerate(remaining):
                index, d2 = path.closest_vertex(tail)
                if best_d2 is None or d2 < best_d2:
                    best_path, best_vertex, best_d2 = k, index, d2

            chosen = remaining.pop(best_path)
            if chosen.is_closed:
                chosen = chosen.make_first(best_vertex).closed_explicitly()
            if bounds is not None and not self.engine.crosses(bounds, tail, chosen[0]):
                current.extend(chosen.points)
            else:
                result.append(CutPath(tuple(current), False))
                current = list(chosen.points)

        result.append(CutPath(tuple(current), False))
        return result

    def sort_paths(
        self,
        paths: CutPaths,
        match_z: bool = False,
        start: Optional[CutPoint] = None,
    ) -> CutPaths:
        """
        Order open paths and join those whose endpoints coincide.

        The current path grows from either end whenever a remaining path
        touches it exactly (same X and Y, and same Z when ``match_z``),
        reversing that path if need be. When nothing touches, the current
        path is emitted and the remaining path with an endpoint nearest its
        tail becomes the new current path.

        Args:
            paths: Open paths
            match_z: Require equal Z for paths to be joined
            start: Begin with the path nearest this point and never extend
                the head of a path, so the original order is kept
        """
        remaining = [p for p in paths if len(p) > 0]
        result = CutPaths()
        if not remaining:
            return result

        def touches(a: CutPoint, b: CutPoint) -> bool:
            return a.same_xy(b) and (not match_z or a.z == b.z)

        def take_nearest(pt: CutPoint) -> List[CutPoint]:
            best_k, best_end, best_key = 0, 0, None
            for k, path in enumerate(remaining):
                end, d2 = path.closest_endpoint(pt)
                # On equal distance a path that starts there beats one that ends there
                key = (d2, end != 0)
                if best_key is None or key < best_key:
                    best_k, best_end, best_key = k, end, key
            path = remaining.pop(best_k)
            return list(path.points if best_end == 0 else path.points[::-1])

        if start is not None:
            current = take_nearest(start)
        else:
            current = list(remaining.pop(0).points)

        while remaining:
            joined = False
            for k, path in enumerate(remaining):
                pts = path.points
                if touches(current[-1], pts[0]):
                    current.extend(pts[1:])
                elif touches(current[-1], pts[-1]):
                    current.extend(pts[-2::-1])
                elif start is None and touches(current[0], pts[-1]):
                    current[:0] = pts[:-1]
                elif start is None and touches(current[0], pts[0]):
                    current[:0] = pts[:0:-1]
                else:
                    continue
                remaining.pop(k)
                joined = True
                break
            if not joined:
                result.append(CutPath(tuple(current), False))
                current = take_nearest(current[-1])

        result.append(CutPath(tuple(current), False))
        return result
