# tiling_tools/KiteDartTile.py
"""
Immutable tile record for the substitution (kite/dart) tiling.
A tile is anchored at its apex position with an orientation angle in degrees.
"""
import math

KITE = 0   # the "wide" prototile
DART = 1   # the "narrow" prototile

KIND_NAMES = {KITE: 'kite', DART: 'dart'}


class KiteDartTile:
    """Value record: position, angle, kind and spatial metric."""
    __slots__ = ('_x', '_y', '_angle', '_kind', '_metric')

    def __init__(self, x, y, angle, kind, metric=0.0):
        if kind not in KIND_NAMES:
            raise ValueError(f"Unknown tile kind: {kind}")
        object.__setattr__(self, '_x', float(x))
        object.__setattr__(self, '_y', float(y))
        object.__setattr__(self, '_angle', float(angle))
        object.__setattr__(self, '_kind', kind)
        object.__setattr__(self, '_metric', float(metric))

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def x(self):
        return self._x

    @property
    def y(self):
        return self._y

    @property
    def angle(self):
        return self._angle

    @property
    def kind(self):
        return self._kind

    @property
    def metric(self):
        """Spatial metric in [0, 10] once assigned; 0 before."""
        return self._metric

    @property
    def position(self):
        return complex(self._x, self._y)

    @property
    def is_kite(self):
        return self._kind == KITE

    @property
    def distance_to_origin(self):
        return math.hypot(self._x, self._y)

    def with_metric(self, metric):
        """Copy of this tile carrying a new spatial metric."""
        return KiteDartTile(self._x, self._y, self._angle, self._kind, metric)

    def _key(self):
        return (self._x, self._y, self._angle, self._kind, self._metric)

    def __eq__(self, other):
        if not isinstance(other, KiteDartTile):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return (f"KiteDartTile(x={self._x:.4f}, y={self._y:.4f}, angle={self._angle:.3f}, "
                f"kind={KIND_NAMES[self._kind]}, metric={self._metric:.3f})")
