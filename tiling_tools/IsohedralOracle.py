# tiling_tools/IsohedralOracle.py
"""
Interface to an isohedral tiling oracle.

The oracle owns the combinatorics of a tiling type: its prototile vertex cycle,
the shape class of each edge, the shape parameters and the placement lattice.
This package only relies on the contract below; any library that can answer
these questions can be wrapped.
"""
from abc import ABC, abstractmethod


class EdgeShape:
    """Edge shape classes, numbered as in the usual isohedral tiling libraries."""
    J = 0   # unconstrained, drawn straight
    U = 1   # symmetric about the edge's perpendicular bisector
    S = 2   # symmetric under a half-turn about the edge midpoint
    I = 3   # must stay a straight line

    STRAIGHT = (J, I)

    @classmethod
    def is_straight(cls, shape):
        return shape in cls.STRAIGHT


class TilingDescriptor:
    """Prototile vertex cycle with one edge shape per edge (edge i runs v[i] -> v[i+1])."""

    def __init__(self, vertices, edge_shapes, num_parameters=0, num_aspects=1):
        self.vertices = [(float(x), float(y)) for x, y in vertices]
        self.edge_shapes = list(edge_shapes)
        self.num_parameters = num_parameters
        self.num_aspects = num_aspects
        if len(self.vertices) != len(self.edge_shapes):
            raise ValueError(
                f"{len(self.vertices)} vertices but {len(self.edge_shapes)} edge shapes"
            )

    @property
    def num_edges(self):
        return len(self.edge_shapes)

    def edges(self):
        """Yield (v0, v1, shape) for every edge in cycle order."""
        n = len(self.vertices)
        for i, shape in enumerate(self.edge_shapes):
            yield self.vertices[i], self.vertices[(i + 1) % n], shape

    def __repr__(self):
        return (f"TilingDescriptor(vertices={len(self.vertices)}, "
                f"parameters={self.num_parameters}, aspects={self.num_aspects})")


class Placement:
    """One prototile instance: 2x3 affine [a, b, tx, c, d, ty] and aspect id."""
    __slots__ = ('transform', 'aspect')

    def __init__(self, transform, aspect=0):
        self.transform = tuple(float(v) for v in transform)
        self.aspect = int(aspect)
        if len(self.transform) != 6:
            raise ValueError(f"Affine transform needs 6 values, got {len(self.transform)}")

    def __iter__(self):
        return iter((self.transform, self.aspect))

    def __eq__(self, other):
        if not isinstance(other, Placement):
            return NotImplemented
        return self.transform == other.transform and self.aspect == other.aspect

    def __hash__(self):
        return hash((self.transform, self.aspect))

    def __repr__(self):
        return f"Placement(transform={self.transform}, aspect={self.aspect})"


class IsohedralOracle(ABC):
    """One tiling type, with its current parameter values."""

    @abstractmethod
    def descriptor(self):
        """TilingDescriptor for the current parameters."""

    @abstractmethod
    def num_parameters(self):
        """Number of continuous shape parameters."""

    @abstractmethod
    def set_parameters(self, values):
        """Replace the shape parameters; len(values) must equal num_parameters()."""

    @abstractmethod
    def fill_region(self, xmin, ymin, xmax, ymax):
        """
        Yield a Placement for every tile intersecting the box.
        Callers pad the box themselves to avoid gaps at the edges.
        """


class TilingLibrary(ABC):
    """A numbered collection of tiling types."""

    @abstractmethod
    def num_types(self):
        """Number of tiling types; valid indices are 0 .. num_types() - 1."""

    @abstractmethod
    def create(self, index):
        """Fresh IsohedralOracle for the type at `index`."""
