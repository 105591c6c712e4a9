"""
Pytest configuration and shared fixtures.

Geometry is given in integer units; the fixtures use round numbers rather
than real-world sizes so expected values are easy to check by hand.
"""

import tempfile
from pathlib import Path

import pytest

from cutpath.geometry.engine import PyclipperEngine
from cutpath.geometry.path import CutPath, CutPaths
from cutpath.toolpaths.merge import GreedyMerge


def square(x0, y0, size, ccw=True):
    """Closed square path with its lower left corner at (x0, y0)."""
    pts = [(x0, y0), (x0 + size, y0), (x0 + size, y0 + size), (x0, y0 + size)]
    if not ccw:
        pts.reverse()
    return CutPath.from_xy(pts, is_closed=True)


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def engine():
    return PyclipperEngine()


@pytest.fixture
def merger(engine):
    return GreedyMerge(engine)


@pytest.fixture
def square_10k():
    """A 10000 x 10000 closed square."""
    return CutPaths([square(0, 0, 10000)])


@pytest.fixture
def square_with_hole():
    """A 10000 square with a 4000 square hole in the middle."""
    return CutPaths([square(0, 0, 10000), square(3000, 3000, 4000, ccw=False)])


@pytest.fixture
def l_shape():
    """A concave L-shaped region."""
    return CutPaths(
        [
            CutPath.from_xy(
                [(0, 0), (10000, 0), (10000, 4000), (4000, 4000), (4000, 10000), (0, 10000)],
                is_closed=True,
            )
        ]
    )


@pytest.fixture
def open_line():
    """A straight open path 10000 long."""
    return CutPaths([CutPath.from_xy([(0, 0), (10000, 0)])])


@pytest.fixture
def sample_config_dir(temp_dir):
    """Create a sample configuration directory structure."""
    config_dir = temp_dir / "config"
    (config_dir / "operations").mkdir(parents=True)

    pocket_preset = """
preset:
  name: "Test Pocket"
  operation: "Pocket"
  description: "Raster pocket with a 1000 unit cutter"

parameters:
  cutterDiameter: 1000
  overlap: 0.5
  strategy: "XRaster"
  climb: false
"""
    (config_dir / "operations" / "test_pocket.yaml").write_text(pocket_preset)

    drill_preset = """
preset:
  name: "Test Drill"
  operation: "Drill"

parameters:
  safeZ: 500
  botZ: -2000
"""
    (config_dir / "operations" / "test_drill.yaml").write_text(drill_preset)

    return config_dir


@pytest.fixture
def make_square():
    """Factory for closed squares: ``make_square(x0, y0, size, ccw=True)``."""
    return square
