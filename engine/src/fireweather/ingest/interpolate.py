"""Missing-hour detection and natural cubic spline filling."""

from __future__ import annotations

import numpy as np
from scipy.interpolate import CubicSpline

MAX_GAP_HOURS = 5


def missing_runs(offsets: list[int]) -> list[tuple[int, int]]:
    """Runs of missing hours between sorted, distinct hour offsets.

    Returns:
        (first missing offset, run length) for each gap
    """
    runs = []
    for before, after in zip(offsets, offsets[1:]):
        if after - before > 1:
            runs.append((before + 1, after - before - 1))
    return runs


def spline_fill(offsets: list[int], values: list[float], missing: list[int]) -> list[float]:
    """Evaluate a natural cubic spline through ``(offsets, values)`` at ``missing``."""
    x = np.asarray(offsets, dtype=float)
    y = np.asarray(values, dtype=float)
    if len(x) < 3:
        return [float(v) for v in np.interp(missing, x, y)]
    spline = CubicSpline(x, y, bc_type="natural")
    return [float(v) for v in spline(np.asarray(missing, dtype=float))]
