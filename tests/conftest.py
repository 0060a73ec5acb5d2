"""Pytest configuration: `src` on the import path and shared spline fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_src_on_sys_path() -> None:
    """Prepend the repository `src` directory to `sys.path` if missing."""
    repo_root: Path = Path(__file__).resolve().parents[1]
    src_path: Path = repo_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_ensure_src_on_sys_path()


@pytest.fixture
def quadratic_knots() -> list[float]:
    """Clamped quadratic knot vector with two interior knots (5 basis functions)."""
    return [0.0, 0.0, 0.0, 0.25, 0.7, 1.0, 1.0, 1.0]


@pytest.fixture
def unit_square_points() -> list[list[tuple[float, float, float]]]:
    """Corners of the unit square in the XY plane, indexed as [u][v]."""
    return [
        [(0.0, 0.0, 0.0), (0.0, 1.0, 0.0)],
        [(1.0, 0.0, 0.0), (1.0, 1.0, 0.0)],
    ]
