# tiling_tools/Geometry.py
"""
Shared geometry helpers.
- 2D affine transforms are flat 6-tuples [a, b, tx, c, d, ty]
- Surface transforms are 4x4 numpy matrices (column vectors, translation in last column)
- Angles are in degrees unless a name says otherwise
"""
import math
import numpy as np

PHI = (1 + math.sqrt(5)) / 2

IDENTITY_AFFINE = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0)


def normalize_angle(angle):
    """Map an angle in degrees into [0, 360)."""
    normalized = angle % 360.0
    # -1e-20 % 360 rounds to 360.0
    if normalized >= 360.0:
        normalized -= 360.0
    return normalized


def polar_offset(distance, angle):
    """Offset (dx, dy) of length `distance` in direction `angle` degrees."""
    rad = math.radians(angle)
    return distance * math.cos(rad), distance * math.sin(rad)


# -----------------------------------------------------------------------------
# 2D affine transforms
# -----------------------------------------------------------------------------

def affine_translation(tx, ty):
    return (1.0, 0.0, float(tx), 0.0, 1.0, float(ty))


def affine_rotation(angle):
    c = math.cos(math.radians(angle))
    s = math.sin(math.radians(angle))
    return (c, -s, 0.0, s, c, 0.0)


def affine_multiply(m, n):
    """Compose two affine transforms; the result applies `n` first, then `m`."""
    return (
        m[0] * n[0] + m[1] * n[3],
        m[0] * n[1] + m[1] * n[4],
        m[0] * n[2] + m[1] * n[5] + m[2],
        m[3] * n[0] + m[4] * n[3],
        m[3] * n[1] + m[4] * n[4],
        m[3] * n[2] + m[4] * n[5] + m[5],
    )


def apply_affine(transform, points):
    """Apply one affine transform to an (N, 2) array of points."""
    pts = np.asarray(points, dtype=np.float64)
    a, b, tx, c, d, ty = transform
    out = np.empty_like(pts)
    out[:, 0] = a * pts[:, 0] + b * pts[:, 1] + tx
    out[:, 1] = c * pts[:, 0] + d * pts[:, 1] + ty
    return out


def apply_affines(transforms, points):
    """
    Apply P affine transforms to the same (N, 2) point set.
    Returns an array of shape (P, N, 2).
    """
    T = np.asarray(transforms, dtype=np.float64).reshape(-1, 6)
    pts = np.asarray(points, dtype=np.float64)
    px = pts[:, 0][np.newaxis, :]
    py = pts[:, 1][np.newaxis, :]
    out = np.empty((T.shape[0], pts.shape[0], 2), dtype=np.float64)
    out[:, :, 0] = T[:, 0:1] * px + T[:, 1:2] * py + T[:, 2:3]
    out[:, :, 1] = T[:, 3:4] * px + T[:, 4:5] * py + T[:, 5:6]
    return out


# -----------------------------------------------------------------------------
# 4x4 surface transforms
# -----------------------------------------------------------------------------

def make_translation(x, y, z):
    m = np.identity(4)
    m[0, 3] = x
    m[1, 3] = y
    m[2, 3] = z
    return m


def make_rotation_x(theta):
    c, s = math.cos(theta), math.sin(theta)
    return np.array([
        [1.0, 0.0, 0.0, 0.0],
        [0.0, c, -s, 0.0],
        [0.0, s, c, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def make_rotation_y(theta):
    c, s = math.cos(theta), math.sin(theta)
    return np.array([
        [c, 0.0, s, 0.0],
        [0.0, 1.0, 0.0, 0.0],
        [-s, 0.0, c, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def make_rotation_z(theta):
    c, s = math.cos(theta), math.sin(theta)
    return np.array([
        [c, -s, 0.0, 0.0],
        [s, c, 0.0, 0.0],
        [0.0, 0.0, 1.0, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def surface_matrix(position=(0.0, 0.0, 0.0), rotation=(0.0, 0.0, 0.0)):
    """
    Build a surface transform from a position and intrinsic XYZ Euler angles
    (radians), i.e. translation @ Rx @ Ry @ Rz.
    """
    rx, ry, rz = rotation
    rot = make_rotation_x(rx) @ make_rotation_y(ry) @ make_rotation_z(rz)
    return make_translation(*position) @ rot


def apply_matrix4(matrix, points):
    """Apply a 4x4 transform to an (N, 3) array of points (w = 1)."""
    m = np.asarray(matrix, dtype=np.float64)
    pts = np.asarray(points, dtype=np.float64)
    out = pts @ m[:3, :3].T + m[:3, 3]
    w = pts @ m[3, :3] + m[3, 3]
    if not np.allclose(w, 1.0):
        out = out / w[:, np.newaxis]
    return out
