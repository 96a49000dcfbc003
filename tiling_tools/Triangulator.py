# tiling_tools/Triangulator.py
"""
Ear-clipping triangulation of prototile outlines via mapbox-earcut.
Indices refer to the outline's own point order, so the caller can reuse
them for every placement of the prototile.
"""
import logging

import mapbox_earcut
import numpy as np

logger = logging.getLogger('Triangulator')


def triangulate(outline):
    """Triangle index list (uint32, length 3 * triangles) for a simple closed polygon."""
    points = np.ascontiguousarray(outline, dtype=np.float64).reshape(-1, 2)
    if len(points) < 3:
        return np.zeros(0, dtype=np.uint32)
    rings = np.array([len(points)], dtype=np.uint32)
    indices = np.asarray(mapbox_earcut.triangulate_float64(points, rings), dtype=np.uint32)
    if len(indices) == 0:
        logger.warning(f"Earcut produced no triangles for a {len(points)}-point outline")
    return indices


def triangulate_tile(outline):
    """Flat [x0, y0, x1, y1, ...] positions plus triangle indices for one outline."""
    points = np.asarray(outline, dtype=np.float64).reshape(-1, 2)
    return points.ravel(), triangulate(points)
