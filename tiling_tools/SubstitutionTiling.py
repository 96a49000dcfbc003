# tiling_tools/SubstitutionTiling.py
"""
Kite/dart substitution tiling.
- Seeds a five-fold "sun" of kites at the origin
- Deflates by fixed substitution rules, shrinking the edge length by 1/phi per step
- Removes coincident children after every step with a size-relative tolerance
- Assigns a continuous 0-10 spatial metric from distance to the origin

Cost grows geometrically with the deflation count (roughly 2-3x tiles per step)
and is not bounded here; callers pick the depth and should memoize results
(see TilingCache).
"""
import logging
import math
import time
from collections import OrderedDict

import numpy as np
import scipy.spatial

from tiling_tools.Geometry import PHI, normalize_angle, polar_offset
from tiling_tools.KiteDartTile import KiteDartTile, KITE, DART

SEED_TILE_COUNT = 5
SEED_START_ANGLE = -90.0
SEED_ANGLE_STEP = 72.0

# Empirical tolerances: positions within size / phi**10, angles within 0.001 deg.
DUPLICATE_DISTANCE_EXPONENT = 10
DUPLICATE_ANGLE_TOLERANCE = 0.001

METRIC_RANGE = 10.0


def duplicate_distance(size):
    """Position tolerance for the dedup test at a given (current) edge length."""
    return size / PHI ** DUPLICATE_DISTANCE_EXPONENT


def is_duplicate(tile, other, min_distance):
    """
    True when two tiles coincide: same kind, positions closer than `min_distance`
    on both axes and normalized angles closer than DUPLICATE_ANGLE_TOLERANCE.
    Comparisons are strict, so a pair exactly at the tolerance is kept.
    """
    return (
        tile.kind == other.kind
        and abs(tile.x - other.x) < min_distance
        and abs(tile.y - other.y) < min_distance
        and abs(normalize_angle(tile.angle) - normalize_angle(other.angle)) < DUPLICATE_ANGLE_TOLERANCE
    )


class TilingState:
    """A generation of the tiling: its tiles and the current edge length."""

    def __init__(self, tiles, size):
        self.tiles = list(tiles)
        self.size = size
        self._spatial_index = None

    def __len__(self):
        return len(self.tiles)

    def __iter__(self):
        return iter(self.tiles)

    @property
    def kite_count(self):
        return sum(1 for tile in self.tiles if tile.kind == KITE)

    @property
    def dart_count(self):
        return sum(1 for tile in self.tiles if tile.kind == DART)

    def kind_ratio(self):
        """Kites per dart, or None while there are no darts."""
        darts = self.dart_count
        if darts == 0:
            return None
        return self.kite_count / darts

    def build_spatial_index(self):
        """Build a KD-tree over tile positions for neighborhood queries."""
        if not self.tiles:
            self._spatial_index = None
            return None
        positions = np.array([[tile.x, tile.y] for tile in self.tiles])
        self._spatial_index = scipy.spatial.cKDTree(positions)
        return self._spatial_index

    def nearby_tiles(self, center, radius):
        """Tiles whose position lies within `radius` of `center` (complex or (x, y))."""
        if self._spatial_index is None:
            self.build_spatial_index()
        if self._spatial_index is None:
            return []
        if isinstance(center, complex):
            center = (center.real, center.imag)
        indices = self._spatial_index.query_ball_point(center, radius)
        return [self.tiles[i] for i in sorted(indices)]


class SubstitutionTiling:
    """Generator for the deflated kite/dart tiling."""

    def __init__(self):
        self.logger = logging.getLogger('SubstitutionTiling')

    def create_initial_tiling(self, size):
        """Five kites at the origin, 72 degrees apart, starting pointing up."""
        tiles = [
            KiteDartTile(0.0, 0.0, i * SEED_ANGLE_STEP + SEED_START_ANGLE, KITE)
            for i in range(SEED_TILE_COUNT)
        ]
        return TilingState(tiles, size)

    def deflate_tile(self, tile, size):
        """Children of one tile. Offsets use the parent's (pre-step) edge length."""
        x, y, a = tile.x, tile.y, tile.angle
        dx54, dy54 = polar_offset(size, a - 54)
        dx126, dy126 = polar_offset(size, a - 126)

        if tile.kind == KITE:
            return [
                KiteDartTile(x + dx54, y + dy54, a - 108, KITE),
                KiteDartTile(x + dx126, y + dy126, a + 108, KITE),
                KiteDartTile(x, y, a - 36, DART),
                KiteDartTile(x, y, a + 36, DART),
            ]
        return [
            KiteDartTile(x, y, a, KITE),
            KiteDartTile(x + dx126, y + dy126, a + 144, DART),
            KiteDartTile(x + dx54, y + dy54, a - 144, DART),
        ]

    def deflate(self, state):
        """One substitution step followed by deduplication at the new size."""
        children = []
        for tile in state.tiles:
            children.extend(self.deflate_tile(tile, state.size))
        new_size = state.size / PHI
        tiles = self.remove_duplicates(children, new_size)
        self.logger.debug(
            f"Deflated {len(state.tiles)} tiles into {len(children)} children, "
            f"{len(tiles)} after dedup (size {new_size:.5f})"
        )
        return TilingState(tiles, new_size)

    def remove_duplicates(self, tiles, size):
        """
        Drop tiles that coincide with an earlier accepted tile (first seen wins).

        Accepted tiles are hashed into grid cells as wide as the position
        tolerance, so any candidate duplicate sits in one of the 3x3 cells
        around a tile. The result is identical to comparing every tile with
        every accepted tile.
        """
        min_d = duplicate_distance(size)
        grid = {}
        result = []

        for tile in tiles:
            cx = math.floor(tile.x / min_d)
            cy = math.floor(tile.y / min_d)
            ang = normalize_angle(tile.angle)

            duplicate = False
            for gx in (cx - 1, cx, cx + 1):
                for gy in (cy - 1, cy, cy + 1):
                    for ex, ey, eang in grid.get((gx, gy, tile.kind), ()):
                        if (abs(tile.x - ex) < min_d and abs(tile.y - ey) < min_d
                                and abs(ang - eang) < DUPLICATE_ANGLE_TOLERANCE):
                            duplicate = True
                            break
                    if duplicate:
                        break
                if duplicate:
                    break

            if not duplicate:
                grid.setdefault((cx, cy, tile.kind), []).append((tile.x, tile.y, ang))
                result.append(tile)

        return result

    def assign_spatial_metric(self, tiles):
        """
        Rescale distance-to-origin into [0, 10]. The farthest tile gets exactly 10;
        if every tile sits at the origin all metrics are 0.
        """
        if not tiles:
            return []
        distances = [tile.distance_to_origin for tile in tiles]
        max_distance = max(distances)
        if max_distance == 0:
            return [tile.with_metric(0.0) for tile in tiles]
        return [tile.with_metric((d / max_distance) * METRIC_RANGE)
                for tile, d in zip(tiles, distances)]

    def generate(self, deflations, initial_size):
        """Build the tiling after `deflations` substitution steps."""
        if isinstance(deflations, bool) or int(deflations) != deflations or deflations < 0:
            raise ValueError(f"deflations must be a non-negative integer, got {deflations!r}")
        if not initial_size > 0:
            raise ValueError(f"initial_size must be positive, got {initial_size!r}")

        t0 = time.perf_counter()
        state = self.create_initial_tiling(initial_size)
        for _ in range(int(deflations)):
            state = self.deflate(state)

        state = TilingState(self.assign_spatial_metric(state.tiles), state.size)
        t1 = time.perf_counter()
        self.logger.info(
            f"Generated {len(state.tiles)} tiles ({state.kite_count} kites, "
            f"{state.dart_count} darts) at depth {deflations} in {(t1 - t0) * 1000:.1f}ms"
        )
        return state


class TilingCache:
    """
    Memoizes generated tilings by (deflations, initial_size).
    Owned by the caller; bounded LRU.
    """

    def __init__(self, generator=None, max_entries=16):
        self.generator = generator or SubstitutionTiling()
        self.max_entries = max_entries
        self._entries = OrderedDict()
        self.logger = logging.getLogger('TilingCache')

    def __len__(self):
        return len(self._entries)

    def __contains__(self, key):
        return key in self._entries

    def get(self, deflations, initial_size):
        key = (int(deflations), float(initial_size))
        if key in self._entries:
            self._entries.move_to_end(key)
            return self._entries[key]

        state = self.generator.generate(deflations, initial_size)
        self._entries[key] = state
        if len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self.logger.debug(f"Evicted tiling {evicted}")
        return state

    def invalidate(self, deflations=None, initial_size=None):
        """Drop matching entries; everything when called without arguments."""
        if deflations is None:
            self._entries.clear()
            return
        if initial_size is None:
            for key in [k for k in self._entries if k[0] == int(deflations)]:
                del self._entries[key]
            return
        self._entries.pop((int(deflations), float(initial_size)), None)

    def clear(self):
        self._entries.clear()
