"""
Local and world transform math for re-parenting.

Euler angles are in degrees and applied Z, then X, then Y, as the editor
does. Matrices are row-major 3x3 tuples. Scale is treated per axis, so a
rotated, non-uniformly scaled parent keeps world position exactly while
rotation and scale are the usual lossy approximation.
"""

import math
from typing import Optional, Sequence

Vector3 = tuple[float, float, float]
Matrix3 = tuple[Vector3, Vector3, Vector3]

IDENTITY: Matrix3 = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))

# |sin(x)| beyond this is treated as gimbal lock
_GIMBAL_LIMIT = 1.0 - 1e-9


def matmul(a: Matrix3, b: Matrix3) -> Matrix3:
    return tuple(
        tuple(sum(a[row][k] * b[k][col] for k in range(3)) for col in range(3))
        for row in range(3)
    )


def transform_vector(m: Matrix3, v: Sequence[float]) -> Vector3:
    return tuple(sum(m[row][k] * v[k] for k in range(3)) for row in range(3))


def transpose(m: Matrix3) -> Matrix3:
    return tuple(tuple(m[row][col] for row in range(3)) for col in range(3))


def diagonal(v: Sequence[float]) -> Matrix3:
    return ((v[0], 0.0, 0.0), (0.0, v[1], 0.0), (0.0, 0.0, v[2]))


def invert(m: Matrix3) -> Optional[Matrix3]:
    """Inverse of m, or None when m is singular (a zero scale axis)."""
    (a, b, c), (d, e, f), (g, h, i) = m
    cofactors = (
        (e * i - f * h, c * h - b * i, b * f - c * e),
        (f * g - d * i, a * i - c * g, c * d - a * f),
        (d * h - e * g, b * g - a * h, a * e - b * d),
    )
    det = a * cofactors[0][0] + b * cofactors[1][0] + c * cofactors[2][0]
    if abs(det) < 1e-12:
        return None
    return tuple(tuple(value / det for value in row) for row in cofactors)


def euler_to_matrix(euler: Sequence[float]) -> Matrix3:
    x, y, z = (math.radians(angle) for angle in euler)
    cx, sx = math.cos(x), math.sin(x)
    cy, sy = math.cos(y), math.sin(y)
    cz, sz = math.cos(z), math.sin(z)
    rx = ((1.0, 0.0, 0.0), (0.0, cx, -sx), (0.0, sx, cx))
    ry = ((cy, 0.0, sy), (0.0, 1.0, 0.0), (-sy, 0.0, cy))
    rz = ((cz, -sz, 0.0), (sz, cz, 0.0), (0.0, 0.0, 1.0))
    return matmul(matmul(ry, rx), rz)


def matrix_to_euler(m: Matrix3) -> Vector3:
    """Inverse of euler_to_matrix, with every angle in [0, 360)."""
    sin_x = max(-1.0, min(1.0, -m[1][2]))
    x = math.asin(sin_x)
    if abs(sin_x) < _GIMBAL_LIMIT:
        y = math.atan2(m[0][2], m[2][2])
        z = math.atan2(m[1][0], m[1][1])
    else:
        # Y and Z rotate about the same axis; fold it all into Y
        y = math.atan2(-m[2][0], m[0][0])
        z = 0.0
    return tuple(_normalize_angle(math.degrees(angle)) for angle in (x, y, z))


def _normalize_angle(degrees: float) -> float:
    return round(degrees, 6) % 360.0


def world_frame(obj) -> tuple[Vector3, Matrix3, Matrix3]:
    """
    World position, linear map and rotation of a GameObject.

    Args:
        obj: GameObject, or None for the scene root frame

    Returns:
        (position, linear, rotation); linear includes every scale on the chain
    """
    if obj is None:
        return (0.0, 0.0, 0.0), IDENTITY, IDENTITY

    parent_position, parent_linear, parent_rotation = world_frame(obj.parent)
    transform = obj.transform
    rotation = euler_to_matrix(transform.rotation)

    offset = transform_vector(parent_linear, transform.position)
    position = tuple(p + o for p, o in zip(parent_position, offset))
    linear = matmul(matmul(parent_linear, rotation), diagonal(transform.scale))
    return position, linear, matmul(parent_rotation, rotation)


def lossy_scale(obj) -> Vector3:
    scale = (1.0, 1.0, 1.0)
    while obj is not None:
        scale = tuple(s * own for s, own in zip(scale, obj.transform.scale))
        obj = obj.parent
    return scale


def local_frame_under(obj, new_parent) -> Optional[tuple[Vector3, Vector3, Vector3]]:
    """
    Local (position, rotation, scale) that keeps obj where it is in the
    world once it hangs under new_parent. None if new_parent's frame is
    degenerate.
    """
    world_position, _, world_rotation = world_frame(obj)
    parent_position, parent_linear, parent_rotation = world_frame(new_parent)

    inverse = invert(parent_linear)
    if inverse is None:
        return None

    delta = tuple(w - p for w, p in zip(world_position, parent_position))
    position = transform_vector(inverse, delta)
    rotation = matrix_to_euler(matmul(transpose(parent_rotation), world_rotation))
    scale = tuple(w / p for w, p in zip(lossy_scale(obj), lossy_scale(new_parent)))
    return position, rotation, scale
