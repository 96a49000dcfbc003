# tiling_tools/MeshAssembler.py
"""
Instances a triangulated prototile over a set of placements and packs the
result into flat GPU-ready buffers.

Per-vertex color encodes tile identity for the shading stage:
    R = aspect fraction (aspect / num_aspects), used as a hue offset
    G = lightness (base + (aspect % 3) * step)
    B = 0 (unused)
An optional per-vertex centroid (the tile's mean vertex, repeated on each of
its vertices) lets a shader rotate tiles about their own centers.
"""
import colorsys
import logging

import numpy as np

from tiling_tools.Geometry import apply_affines, apply_matrix4

LIGHTNESS_BASE = 0.55
LIGHTNESS_STEP = 0.06
LIGHTNESS_CYCLE = 3

# "hsl" mode writes final vertex colors instead of identity attributes
HSL_HUE_SPREAD = 0.15
HSL_LIGHTNESS_BASE = 0.4
HSL_LIGHTNESS_STEP = 0.1

UINT16_MAX_VERTICES = 65535

COLOR_MODES = ('identity', 'hsl')


def index_dtype_for(vertex_count):
    """16-bit indices while every vertex is addressable by them, else 32-bit."""
    return np.uint32 if vertex_count > UINT16_MAX_VERTICES else np.uint16


def compute_vertex_normals(positions, indices):
    """Area-weighted vertex normals accumulated from the triangles that use each vertex."""
    normals = np.zeros_like(positions, dtype=np.float64)
    if len(indices) == 0:
        return normals.astype(np.float32)
    tri = np.asarray(indices, dtype=np.int64).reshape(-1, 3)
    pos = np.asarray(positions, dtype=np.float64)
    a, b, c = pos[tri[:, 0]], pos[tri[:, 1]], pos[tri[:, 2]]
    face = np.cross(c - b, a - b)
    for k in range(3):
        np.add.at(normals, tri[:, k], face)
    lengths = np.linalg.norm(normals, axis=1)
    nonzero = lengths > 0
    normals[nonzero] /= lengths[nonzero][:, np.newaxis]
    return normals.astype(np.float32)


class MeshBuffer:
    """
    Merged geometry for one surface.
    positions/colors/centroids/normals: float32 (N, 3); indices: uint16 or uint32 (3 * triangles,)
    """

    def __init__(self, positions, colors, indices, centroids=None, normals=None,
                 placement_count=0, vertices_per_tile=0, is_fallback=False):
        self.positions = np.asarray(positions, dtype=np.float32).reshape(-1, 3)
        self.colors = np.asarray(colors, dtype=np.float32).reshape(-1, 3)
        self.centroids = None if centroids is None else np.asarray(centroids, dtype=np.float32).reshape(-1, 3)
        self.indices = np.asarray(indices, dtype=index_dtype_for(len(self.positions)))
        if normals is None:
            normals = compute_vertex_normals(self.positions, self.indices)
        self.normals = np.asarray(normals, dtype=np.float32).reshape(-1, 3)
        self.placement_count = placement_count
        self.vertices_per_tile = vertices_per_tile
        self.is_fallback = is_fallback

    @property
    def vertex_count(self):
        return 0 if self.positions is None else len(self.positions)

    @property
    def triangle_count(self):
        return 0 if self.indices is None else len(self.indices) // 3

    @property
    def is_released(self):
        return self.positions is None

    @property
    def index_dtype(self):
        return self.indices.dtype

    def bounds(self):
        """(min_xyz, max_xyz) of the positions, or None once released."""
        if self.is_released:
            return None
        return self.positions.min(axis=0), self.positions.max(axis=0)

    def interleaved(self):
        """
        One float32 array with a row per vertex:
            [0:3] position, [3:6] color, [6:9] centroid (when present)
        """
        columns = [self.positions, self.colors]
        if self.centroids is not None:
            columns.append(self.centroids)
        return np.ascontiguousarray(np.hstack(columns), dtype=np.float32)

    def save(self, path):
        """Write all attributes to an .npz archive."""
        arrays = {
            'positions': self.positions,
            'colors': self.colors,
            'normals': self.normals,
            'indices': self.indices,
        }
        if self.centroids is not None:
            arrays['centroids'] = self.centroids
        np.savez(path, **arrays)

    def release(self):
        """Drop the buffers. The owner calls this once the geometry is no longer drawn."""
        self.positions = None
        self.colors = None
        self.centroids = None
        self.normals = None
        self.indices = None

    def __repr__(self):
        return (f"MeshBuffer(vertices={self.vertex_count}, triangles={self.triangle_count}, "
                f"tiles={self.placement_count}, fallback={self.is_fallback})")


class MeshAssembler:
    """Turns (outline, triangles, placements) into a MeshBuffer on a target surface."""

    def __init__(self, color_mode='identity', lightness_base=LIGHTNESS_BASE,
                 lightness_step=LIGHTNESS_STEP, hue_base=0.6, saturation=0.5,
                 with_centroids=True):
        if color_mode not in COLOR_MODES:
            raise ValueError(f"Unknown color mode {color_mode!r}; expected one of {COLOR_MODES}")
        self.color_mode = color_mode
        self.lightness_base = lightness_base
        self.lightness_step = lightness_step
        self.hue_base = hue_base
        self.saturation = saturation
        self.with_centroids = with_centroids
        self.logger = logging.getLogger('MeshAssembler')

    def aspect_colors(self, aspects, num_aspects):
        """Per-placement color rows, a pure function of the aspect ids."""
        aspects = np.asarray(aspects, dtype=np.int64)
        fraction = aspects / max(num_aspects, 1)
        colors = np.zeros((len(aspects), 3), dtype=np.float64)

        if self.color_mode == 'identity':
            colors[:, 0] = fraction
            colors[:, 1] = self.lightness_base + (aspects % LIGHTNESS_CYCLE) * self.lightness_step
            return colors

        for i, (aspect, frac) in enumerate(zip(aspects, fraction)):
            hue = (self.hue_base + frac * HSL_HUE_SPREAD) % 1.0
            lightness = HSL_LIGHTNESS_BASE + (aspect % LIGHTNESS_CYCLE) * HSL_LIGHTNESS_STEP
            colors[i] = colorsys.hls_to_rgb(hue, lightness, self.saturation)
        return colors

    def fallback_quad(self, width, height, surface_transform, num_aspects=1):
        """Flat width x height quad centered on the surface, normal along +z before transform."""
        hw, hh = width / 2.0, height / 2.0
        local = np.array([
            [-hw, hh, 0.0],
            [hw, hh, 0.0],
            [-hw, -hh, 0.0],
            [hw, -hh, 0.0],
        ])
        positions = apply_matrix4(surface_transform, local)
        colors = np.repeat(self.aspect_colors([0], num_aspects), 4, axis=0)
        centroids = None
        if self.with_centroids:
            centroids = np.repeat(positions.mean(axis=0)[np.newaxis, :], 4, axis=0)
        indices = np.array([0, 2, 1, 2, 3, 1], dtype=np.uint16)
        return MeshBuffer(positions, colors, indices, centroids=centroids, is_fallback=True)

    def assemble(self, descriptor, outline, triangle_indices, placements, tile_scale,
                 surface_transform, surface_size=None):
        """
        Instance the prototile at every placement.

        Each outline point goes through the placement's affine transform, is
        scaled by `tile_scale`, lifted to z = 0 and moved onto the surface by the
        4x4 `surface_transform`. With no placements (or a degenerate prototile)
        a flat quad of `surface_size` is returned instead, so callers always get
        drawable geometry.
        """
        placements = list(placements)
        outline = np.asarray(outline, dtype=np.float64).reshape(-1, 2)
        triangle_indices = np.asarray(triangle_indices, dtype=np.int64)
        num_aspects = getattr(descriptor, 'num_aspects', 1)
        if surface_size is None:
            surface_size = (tile_scale, tile_scale)

        reason = None
        if not placements:
            reason = "no placements for region"
        elif len(outline) < 3:
            reason = f"degenerate outline ({len(outline)} points)"
        elif len(triangle_indices) == 0:
            reason = "outline did not triangulate"
        if reason is not None:
            self.logger.warning(f"Falling back to a flat quad: {reason}")
            return self.fallback_quad(surface_size[0], surface_size[1], surface_transform, num_aspects)

        n_tiles = len(placements)
        verts_per_tile = len(outline)

        transforms = [p.transform for p in placements]
        aspects = [p.aspect for p in placements]

        local = apply_affines(transforms, outline) * tile_scale          # (P, V, 2)
        lifted = np.zeros((n_tiles * verts_per_tile, 3), dtype=np.float64)
        lifted[:, :2] = local.reshape(-1, 2)
        world = apply_matrix4(surface_transform, lifted)

        colors = np.repeat(self.aspect_colors(aspects, num_aspects), verts_per_tile, axis=0)

        centroids = None
        if self.with_centroids:
            per_tile = world.reshape(n_tiles, verts_per_tile, 3).mean(axis=1)
            centroids = np.repeat(per_tile, verts_per_tile, axis=0)

        total_verts = n_tiles * verts_per_tile
        offsets = (np.arange(n_tiles, dtype=np.int64) * verts_per_tile)[:, np.newaxis]
        indices = (triangle_indices[np.newaxis, :] + offsets).ravel().astype(index_dtype_for(total_verts))

        self.logger.debug(
            f"Assembled {n_tiles} tiles, {total_verts} vertices, {len(indices) // 3} triangles"
        )
        return MeshBuffer(world, colors, indices, centroids=centroids,
                          placement_count=n_tiles, vertices_per_tile=verts_per_tile)
