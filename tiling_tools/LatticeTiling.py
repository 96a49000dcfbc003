# tiling_tools/LatticeTiling.py
"""
Small built-in isohedral tiling library.

Each type is a convex prototile, a pair of lattice translation vectors and a
list of aspect transforms (one per tile in the lattice cell). Every edge is
either straight (I) or half-turn symmetric (S). Curved S edges match their
neighbour's reversed edge at every sample except the edge midpoint: the sine
displacement switches side at t = 0.5 on both copies, so the two disagree
there by twice the curve offset.
"""
import logging
import math

from tiling_tools.Geometry import (
    IDENTITY_AFFINE, affine_multiply, affine_rotation, affine_translation, apply_affine,
)
from tiling_tools.IsohedralOracle import (
    EdgeShape, IsohedralOracle, Placement, TilingDescriptor, TilingLibrary,
)

SQRT3_2 = math.sqrt(3) / 2


def _square(params):
    vertices = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]
    return vertices, [EdgeShape.S] * 4, (1.0, 0.0), (0.0, 1.0), [IDENTITY_AFFINE]


def _triangle(params):
    vertices = [(0.0, 0.0), (1.0, 0.0), (0.5, SQRT3_2)]
    # Second aspect: half-turn about the midpoint of the slanted right edge
    flipped = (-1.0, 0.0, 1.5, 0.0, -1.0, SQRT3_2)
    return vertices, [EdgeShape.S] * 3, (1.0, 0.0), (0.5, SQRT3_2), [IDENTITY_AFFINE, flipped]


def _hexagon(params):
    stretch = 0.5 + params[0]
    vertices = [(math.cos(math.radians(60 * k)), math.sin(math.radians(60 * k)) * stretch)
                for k in range(6)]
    t1 = (1.5, SQRT3_2 * stretch)
    t2 = (0.0, 2 * SQRT3_2 * stretch)
    return vertices, [EdgeShape.S] * 6, t1, t2, [IDENTITY_AFFINE]


def _parallelogram(params):
    skew = params[0] - 0.5
    height = 0.5 + params[1]
    vertices = [(0.0, 0.0), (1.0, 0.0), (1.0 + skew, height), (skew, height)]
    shapes = [EdgeShape.I, EdgeShape.S, EdgeShape.I, EdgeShape.S]
    return vertices, shapes, (1.0, 0.0), (skew, height), [IDENTITY_AFFINE]


def _pinwheel(params):
    vertices = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]
    aspects = []
    for k, (ox, oy) in enumerate([(0, 0), (1, 0), (1, 1), (0, 1)]):
        # Rotate about the square's center by k quarter turns, then move into the 2x2 cell
        about_center = affine_multiply(
            affine_translation(0.5, 0.5),
            affine_multiply(affine_rotation(90 * k), affine_translation(-0.5, -0.5)),
        )
        aspects.append(affine_multiply(affine_translation(ox, oy), about_center))
    return vertices, [EdgeShape.S] * 4, (2.0, 0.0), (0.0, 2.0), aspects


# name, builder, default parameters
LATTICE_TYPES = [
    ('square', _square, ()),
    ('triangle', _triangle, ()),
    ('hexagon', _hexagon, (0.5,)),
    ('parallelogram', _parallelogram, (0.5, 0.5)),
    ('pinwheel', _pinwheel, ()),
]


class LatticeTiling(IsohedralOracle):
    """One built-in tiling type with its current parameters."""

    def __init__(self, type_index):
        if not 0 <= type_index < len(LATTICE_TYPES):
            raise ValueError(f"No lattice tiling type {type_index}")
        self.logger = logging.getLogger('LatticeTiling')
        self.type_index = type_index
        self.name, self._builder, defaults = LATTICE_TYPES[type_index]
        self.parameters = list(defaults)
        self._rebuild()

    def _rebuild(self):
        self.vertices, self.edge_shapes, self.t1, self.t2, self.aspects = self._builder(self.parameters)

    def num_parameters(self):
        return len(self.parameters)

    def get_parameters(self):
        return list(self.parameters)

    def set_parameters(self, values):
        values = [float(v) for v in values]
        if len(values) != len(self.parameters):
            raise ValueError(
                f"{self.name} takes {len(self.parameters)} parameters, got {len(values)}"
            )
        self.parameters = values
        self._rebuild()

    def num_aspects(self):
        return len(self.aspects)

    def descriptor(self):
        return TilingDescriptor(self.vertices, self.edge_shapes,
                                num_parameters=len(self.parameters),
                                num_aspects=len(self.aspects))

    def _lattice_range(self, xmin, ymin, xmax, ymax):
        """Integer lattice index bounds whose translates can reach the box."""
        (ax, ay), (bx, by) = self.t1, self.t2
        det = ax * by - bx * ay
        corners = [(xmin, ymin), (xmax, ymin), (xmin, ymax), (xmax, ymax)]
        us, vs = [], []
        for x, y in corners:
            us.append((x * by - y * bx) / det)
            vs.append((ax * y - ay * x) / det)
        return (math.floor(min(us)) - 1, math.ceil(max(us)) + 1,
                math.floor(min(vs)) - 1, math.ceil(max(vs)) + 1)

    def fill_region(self, xmin, ymin, xmax, ymax):
        if xmin > xmax or ymin > ymax:
            return

        # Bounding box of each aspect's tile inside the lattice cell
        aspect_boxes = []
        for aspect in self.aspects:
            pts = apply_affine(aspect, self.vertices)
            aspect_boxes.append((pts[:, 0].min(), pts[:, 1].min(), pts[:, 0].max(), pts[:, 1].max()))

        reach_min_x = min(b[0] for b in aspect_boxes)
        reach_min_y = min(b[1] for b in aspect_boxes)
        reach_max_x = max(b[2] for b in aspect_boxes)
        reach_max_y = max(b[3] for b in aspect_boxes)
        i0, i1, j0, j1 = self._lattice_range(xmin - reach_max_x, ymin - reach_max_y,
                                             xmax - reach_min_x, ymax - reach_min_y)

        (ax, ay), (bx, by) = self.t1, self.t2
        for i in range(i0, i1 + 1):
            for j in range(j0, j1 + 1):
                ox = i * ax + j * bx
                oy = i * ay + j * by
                for aspect_id, (aspect, box) in enumerate(zip(self.aspects, aspect_boxes)):
                    if (box[2] + ox < xmin or box[0] + ox > xmax or
                            box[3] + oy < ymin or box[1] + oy > ymax):
                        continue
                    transform = affine_multiply(affine_translation(ox, oy), aspect)
                    yield Placement(transform, aspect_id)

    def __repr__(self):
        return f"LatticeTiling({self.type_index}, name={self.name!r}, parameters={self.parameters})"


class LatticeLibrary(TilingLibrary):
    """Numbered access to the built-in lattice tilings."""

    def num_types(self):
        return len(LATTICE_TYPES)

    def type_names(self):
        return [name for name, _, _ in LATTICE_TYPES]

    def create(self, index):
        return LatticeTiling(index)
