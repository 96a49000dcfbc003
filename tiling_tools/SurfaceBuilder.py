# tiling_tools/SurfaceBuilder.py
"""
End-to-end surface tiling: tiling type + curvature + scale + surface -> MeshBuffer.

- Resolves a (possibly fractional) tiling type value against the library
- Applies deterministic, optionally blended, shape parameters
- Builds and triangulates the prototile outline (cached per prototile key)
- Enumerates placements over the padded surface rectangle and assembles the mesh
- Caches finished meshes per full parameter tuple and rate-limits rebuilds
"""
import logging
import math
import time
from collections import OrderedDict

import numpy as np

from tiling_tools.Geometry import make_rotation_x, make_rotation_y, make_translation
from tiling_tools.LatticeTiling import LatticeLibrary
from tiling_tools.MeshAssembler import MeshAssembler
from tiling_tools.OutlineBuilder import DEFAULT_SAMPLES_PER_EDGE, build_outline
from tiling_tools.ParameterPresets import interpolated_params, resolve_tiling_index
from tiling_tools.Triangulator import triangulate

# Extra tiling units around the surface rectangle so edge tiles leave no gaps
REGION_MARGIN = 2


class Prototile:
    """Everything derived from (type, parameters, curvature) that placements share."""

    def __init__(self, oracle, descriptor, outline, indices, parameters):
        self.oracle = oracle
        self.descriptor = descriptor
        self.outline = outline
        self.indices = indices
        self.parameters = parameters


class RegenerationLimiter:
    """Allows one rebuild per `min_interval` seconds."""

    def __init__(self, min_interval=0.25, clock=time.monotonic):
        self.min_interval = min_interval
        self.clock = clock
        self._last = None

    def ready(self):
        if self._last is None:
            return True
        return self.clock() - self._last >= self.min_interval

    def mark(self):
        self._last = self.clock()

    def reset(self):
        self._last = None


class TilingSurfaceBuilder:
    def __init__(self, library=None, assembler=None, samples_per_edge=DEFAULT_SAMPLES_PER_EDGE,
                 max_cached_meshes=32, limiter=None):
        self.library = library or LatticeLibrary()
        self.assembler = assembler or MeshAssembler()
        self.samples_per_edge = samples_per_edge
        self.max_cached_meshes = max_cached_meshes
        self.limiter = limiter or RegenerationLimiter()
        self.logger = logging.getLogger('TilingSurfaceBuilder')

        self._prototiles = {}
        self._meshes = OrderedDict()
        self._last_mesh = None

    # -------------------------------------------------------------------------
    # Cache management
    # -------------------------------------------------------------------------

    def invalidate(self):
        """Forget every cached prototile and mesh."""
        self._prototiles.clear()
        self._meshes.clear()
        self._last_mesh = None
        self.limiter.reset()

    @property
    def cached_mesh_count(self):
        return len(self._meshes)

    def _mesh_key(self, tiling_type, curvature, tile_scale, width, height, surface_transform):
        matrix = np.asarray(surface_transform, dtype=np.float64)
        index, frac = resolve_tiling_index(tiling_type, self.library.num_types())
        return (index, frac, float(curvature), float(tile_scale),
                float(width), float(height), matrix.tobytes())

    # -------------------------------------------------------------------------
    # Prototile
    # -------------------------------------------------------------------------

    def _cached_mesh(self, key):
        """Live cached mesh for `key`; entries the caller has released are dropped."""
        mesh = self._meshes.get(key)
        if mesh is None:
            return None
        if mesh.is_released:
            del self._meshes[key]
            return None
        self._meshes.move_to_end(key)
        return mesh

    def prototile(self, tiling_type, curvature):
        """
        Build (or fetch) the triangulated prototile for a tiling type value.
        Returns None when the library has no tiling types.
        """
        if self.library.num_types() == 0:
            return None
        index, frac = resolve_tiling_index(tiling_type, self.library.num_types())
        key = (index, frac, float(curvature), self.samples_per_edge)
        cached = self._prototiles.get(key)
        if cached is not None:
            return cached

        oracle = self.library.create(index)
        params = interpolated_params(oracle.num_parameters(), index, frac)
        if params:
            oracle.set_parameters(params)

        descriptor = oracle.descriptor()
        outline = build_outline(descriptor, curvature, self.samples_per_edge)
        indices = triangulate(outline)
        proto = Prototile(oracle, descriptor, outline, indices, params)
        self._prototiles[key] = proto
        self.logger.debug(
            f"Prototile type {index} (+{frac:.3f}): {len(outline)} outline points, "
            f"{len(indices) // 3} triangles"
        )
        return proto

    # -------------------------------------------------------------------------
    # Surfaces
    # -------------------------------------------------------------------------

    def build_surface(self, tiling_type, width, height, tile_scale, surface_transform=None,
                      curvature=0.5):
        """MeshBuffer covering a width x height surface centered on its transform's origin."""
        if not tile_scale > 0:
            raise ValueError(f"tile_scale must be positive, got {tile_scale!r}")
        if surface_transform is None:
            surface_transform = np.identity(4)

        key = self._mesh_key(tiling_type, curvature, tile_scale, width, height, surface_transform)
        cached = self._cached_mesh(key)
        if cached is not None:
            return cached

        proto = self.prototile(tiling_type, curvature)
        if proto is None:
            self.logger.warning("Tiling library is empty; falling back to a flat quad")
            mesh = self.assembler.fallback_quad(width, height, surface_transform)
            self._store_mesh(key, mesh)
            return mesh

        half_w = width / (2 * tile_scale)
        half_h = height / (2 * tile_scale)
        placements = list(proto.oracle.fill_region(
            -half_w - REGION_MARGIN, -half_h - REGION_MARGIN,
            half_w + REGION_MARGIN, half_h + REGION_MARGIN,
        ))

        t0 = time.perf_counter()
        mesh = self.assembler.assemble(proto.descriptor, proto.outline, proto.indices, placements,
                                       tile_scale, surface_transform, surface_size=(width, height))
        t1 = time.perf_counter()
        self.logger.info(
            f"Surface {width}x{height}: {len(placements)} tiles, {mesh.vertex_count} vertices "
            f"in {(t1 - t0) * 1000:.1f}ms"
        )

        self._store_mesh(key, mesh)
        return mesh

    def _store_mesh(self, key, mesh):
        self._meshes[key] = mesh
        if len(self._meshes) > self.max_cached_meshes:
            self._meshes.popitem(last=False)

    def request_surface(self, tiling_type, width, height, tile_scale, surface_transform=None,
                        curvature=0.5):
        """
        Rate-limited build for continuously driven parameters.
        Returns the previous mesh while the limiter is cooling down, unless the
        request is already cached or the previous mesh has been released.
        """
        if surface_transform is None:
            surface_transform = np.identity(4)
        if self._last_mesh is not None and self._last_mesh.is_released:
            self._last_mesh = None

        key = self._mesh_key(tiling_type, curvature, tile_scale, width, height, surface_transform)
        cached = self._cached_mesh(key)
        if cached is None and self._last_mesh is not None and not self.limiter.ready():
            return self._last_mesh

        if cached is None:
            self.limiter.mark()
        self._last_mesh = self.build_surface(tiling_type, width, height, tile_scale,
                                             surface_transform, curvature)
        return self._last_mesh

    def build_room(self, tiling_type, width, height, depth, tile_scale, curvature=0.5):
        """One mesh per room surface, keyed by surface name."""
        return {
            name: self.build_surface(tiling_type, w, h, tile_scale, transform, curvature)
            for name, w, h, transform in room_surfaces(width, height, depth)
        }


def room_surfaces(width, height, depth):
    """
    Surfaces of a rectangular hall standing on y = 0, centered on the z axis.
    Returns (name, surface width, surface height, 4x4 transform) tuples; each
    surface lies in its local XY plane before the transform.
    """
    half_w = width / 2
    half_d = depth / 2
    return [
        ('floor', width, depth, make_rotation_x(-math.pi / 2)),
        ('ceiling', width, depth, make_translation(0, height, 0) @ make_rotation_x(math.pi / 2)),
        ('left', depth, height, make_translation(-half_w, height / 2, 0) @ make_rotation_y(math.pi / 2)),
        ('right', depth, height, make_translation(half_w, height / 2, 0) @ make_rotation_y(-math.pi / 2)),
        ('back', width, height, make_translation(0, height / 2, -half_d)),
        ('front', width, height, make_translation(0, height / 2, half_d) @ make_rotation_y(math.pi)),
    ]
