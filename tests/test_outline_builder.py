import math

import numpy as np
import pytest

from tiling_tools.IsohedralOracle import EdgeShape, TilingDescriptor
from tiling_tools.OutlineBuilder import (
    CURVE_OFFSET_FACTOR, OutlineBuilder, build_outline,
)
from tiling_tools.Triangulator import triangulate, triangulate_tile

UNIT_SQUARE = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]


def straight_outline(vertices, samples):
    points = []
    n = len(vertices)
    for i in range(n):
        (x0, y0), (x1, y1) = vertices[i], vertices[(i + 1) % n]
        for k in range(samples):
            t = k / samples
            points.append((x0 + (x1 - x0) * t, y0 + (y1 - y0) * t))
    return np.array(points)


def polygon_area(points):
    x, y = points[:, 0], points[:, 1]
    return 0.5 * abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def triangles_area(points, indices):
    tri = points[np.asarray(indices, dtype=np.int64).reshape(-1, 3)]
    ab = tri[:, 1] - tri[:, 0]
    ac = tri[:, 2] - tri[:, 0]
    return 0.5 * np.abs(ab[:, 0] * ac[:, 1] - ab[:, 1] * ac[:, 0]).sum()


def single_edge(shape):
    # Two-edge "polygon" so the first edge runs (0, 0) -> (1, 0)
    return TilingDescriptor([(0.0, 0.0), (1.0, 0.0)], [shape, EdgeShape.I])


class TestOutlineBuilder:

    def test_zero_curvature_is_straight(self, square_descriptor):
        outline = build_outline(square_descriptor, 0.0, samples_per_edge=8)
        np.testing.assert_allclose(outline, straight_outline(UNIT_SQUARE, 8), rtol=0, atol=1e-12)

    def test_curvature_below_threshold_is_straight(self, square_descriptor):
        outline = build_outline(square_descriptor, 0.0005, samples_per_edge=4)
        np.testing.assert_allclose(outline, straight_outline(UNIT_SQUARE, 4), rtol=0, atol=1e-12)

    def test_straight_shapes_ignore_curvature(self, straight_square_descriptor):
        outline = build_outline(straight_square_descriptor, 1.0, samples_per_edge=5)
        np.testing.assert_allclose(outline, straight_outline(UNIT_SQUARE, 5), rtol=0, atol=1e-12)

    @pytest.mark.parametrize('samples', [1, 3, 8, 16])
    def test_point_count_and_corners(self, square_descriptor, samples):
        outline = build_outline(square_descriptor, 0.7, samples_per_edge=samples)
        assert outline.shape == (4 * samples, 2)
        assert outline.dtype == np.float64
        for i, (x, y) in enumerate(UNIT_SQUARE):
            np.testing.assert_allclose(outline[i * samples], (x, y), atol=1e-12)

    def test_u_edge_bulges_to_the_left(self):
        outline = build_outline(single_edge(EdgeShape.U), 1.0, samples_per_edge=8)
        # Bezier midpoint sits half way to the control point
        np.testing.assert_allclose(outline[4], (0.5, 0.5 * CURVE_OFFSET_FACTOR))
        assert all(outline[1:8, 1] > 0)

    def test_s_edge_changes_side_at_midpoint(self):
        outline = build_outline(single_edge(EdgeShape.S), 1.0, samples_per_edge=8)
        offset = CURVE_OFFSET_FACTOR
        np.testing.assert_allclose(outline[2], (0.25, math.sin(math.pi / 4) * offset))
        np.testing.assert_allclose(outline[6], (0.75, -math.sin(3 * math.pi / 4) * offset))
        np.testing.assert_allclose(outline[4], (0.5, -offset))

    def test_displacement_scales_with_curvature(self):
        builder = OutlineBuilder(8)
        half = builder.build(single_edge(EdgeShape.S), 0.5)
        full = builder.build(single_edge(EdgeShape.S), 1.0)
        np.testing.assert_allclose(full[:8, 1], 2 * half[:8, 1])

    def test_invalid_sample_count(self):
        with pytest.raises(ValueError):
            OutlineBuilder(0)

    def test_empty_descriptor(self):
        outline = build_outline(TilingDescriptor([], []), 0.5)
        assert outline.shape == (0, 2)


class TestTriangulator:

    def test_square(self):
        points = np.array(UNIT_SQUARE)
        indices = triangulate(points)
        assert indices.dtype == np.uint32
        assert len(indices) == 6
        assert indices.max() < 4
        assert triangles_area(points, indices) == pytest.approx(1.0)

    @pytest.mark.parametrize('curvature', [0.0, 0.3, 1.0])
    def test_curved_outline_is_covered(self, square_descriptor, curvature):
        outline = build_outline(square_descriptor, curvature, samples_per_edge=8)
        indices = triangulate(outline)
        assert len(indices) % 3 == 0
        assert indices.max() < len(outline)
        assert triangles_area(outline, indices) == pytest.approx(polygon_area(outline))

    def test_too_few_points(self):
        assert len(triangulate(np.array([(0.0, 0.0), (1.0, 0.0)]))) == 0

    def test_triangulate_tile_flat_positions(self):
        positions, indices = triangulate_tile(UNIT_SQUARE)
        assert list(positions) == [0.0, 0.0, 1.0, 0.0, 1.0, 1.0, 0.0, 1.0]
        assert len(indices) == 6
