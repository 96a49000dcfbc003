# tiling_tools/OutlineBuilder.py
"""
Prototile outline sampling.
Walks the descriptor's edges in cycle order and emits `samples_per_edge`
points per edge. The end point of an edge is left to the next edge, so the
closed outline has no repeated corners.
"""
import logging
import math

import numpy as np

from tiling_tools.IsohedralOracle import EdgeShape

# Empirical: perpendicular displacement of curved edges, as a fraction of edge length
CURVE_OFFSET_FACTOR = 0.3
# Below this curvature every edge is sampled straight
STRAIGHT_CURVATURE_THRESHOLD = 0.001

DEFAULT_SAMPLES_PER_EDGE = 8


class OutlineBuilder:
    def __init__(self, samples_per_edge=DEFAULT_SAMPLES_PER_EDGE):
        if samples_per_edge < 1:
            raise ValueError(f"samples_per_edge must be at least 1, got {samples_per_edge}")
        self.samples_per_edge = samples_per_edge
        self.logger = logging.getLogger('OutlineBuilder')

    def sample_straight(self, v0, v1):
        t = np.arange(self.samples_per_edge) / self.samples_per_edge
        x = v0[0] + (v1[0] - v0[0]) * t
        y = v0[1] + (v1[1] - v0[1]) * t
        return np.column_stack((x, y))

    def _edge_frame(self, v0, v1, curvature):
        dx = v1[0] - v0[0]
        dy = v1[1] - v0[1]
        length = math.hypot(dx, dy) or 1.0
        normal = (-dy / length, dx / length)
        return dx, dy, normal, curvature * length * CURVE_OFFSET_FACTOR

    def sample_bulge(self, v0, v1, curvature):
        """Quadratic Bezier whose control point is the midpoint pushed along the left normal."""
        _, _, (nx, ny), offset = self._edge_frame(v0, v1, curvature)
        cx = (v0[0] + v1[0]) / 2 + nx * offset
        cy = (v0[1] + v1[1]) / 2 + ny * offset
        t = np.arange(self.samples_per_edge) / self.samples_per_edge
        u = 1 - t
        x = u * u * v0[0] + 2 * u * t * cx + t * t * v1[0]
        y = u * u * v0[1] + 2 * u * t * cy + t * t * v1[1]
        return np.column_stack((x, y))

    def sample_s_curve(self, v0, v1, curvature):
        """Chord plus a sine displacement that changes side at the midpoint."""
        dx, dy, (nx, ny), offset = self._edge_frame(v0, v1, curvature)
        t = np.arange(self.samples_per_edge) / self.samples_per_edge
        side = np.where(t < 0.5, 1.0, -1.0)
        s = np.sin(t * math.pi) * offset * side
        x = v0[0] + dx * t + nx * s
        y = v0[1] + dy * t + ny * s
        return np.column_stack((x, y))

    def sample_edge(self, v0, v1, shape, curvature):
        if EdgeShape.is_straight(shape) or curvature < STRAIGHT_CURVATURE_THRESHOLD:
            return self.sample_straight(v0, v1)
        if shape == EdgeShape.U:
            return self.sample_bulge(v0, v1, curvature)
        return self.sample_s_curve(v0, v1, curvature)

    def build(self, descriptor, curvature):
        """Closed outline as a float64 array of shape (edges * samples_per_edge, 2)."""
        segments = [self.sample_edge(v0, v1, shape, curvature)
                    for v0, v1, shape in descriptor.edges()]
        if not segments:
            return np.zeros((0, 2), dtype=np.float64)
        outline = np.vstack(segments)
        self.logger.debug(
            f"Outline: {descriptor.num_edges} edges, {len(outline)} points, curvature {curvature:.3f}"
        )
        return outline


def build_outline(descriptor, curvature, samples_per_edge=DEFAULT_SAMPLES_PER_EDGE):
    """Sample the prototile outline of `descriptor` at the given edge curvature."""
    return OutlineBuilder(samples_per_edge).build(descriptor, curvature)
