"""Vector and quaternion arithmetic for pose deltas.

Quaternions are numpy arrays in scalar-first order ``(w, x, y, z)``.
Angles are in degrees throughout.
"""

from __future__ import annotations

import math

import numpy as np

AXIS_EPSILON = 1e-6

IDENTITY = np.array([1.0, 0.0, 0.0, 0.0])

_CARDINALS = ("x", "y", "z")


def quat_multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Hamilton product ``a * b`` (apply ``b`` first, then ``a``)."""
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return np.array([
        aw * bw - ax * bx - ay * by - az * bz,
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
    ])


def quat_inverse(q: np.ndarray) -> np.ndarray:
    norm_sq = float(np.dot(q, q))
    if norm_sq < 1e-12:
        return IDENTITY.copy()
    return np.array([q[0], -q[1], -q[2], -q[3]]) / norm_sq


def quat_rotate(q: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Rotate vector ``v`` by unit quaternion ``q``."""
    w = q[0]
    u = np.asarray(q[1:], dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    uv = np.cross(u, v)
    return v + 2.0 * w * uv + 2.0 * np.cross(u, uv)


def quat_from_axis_angle(axis, angle_deg: float) -> np.ndarray:
    """Build a unit quaternion rotating ``angle_deg`` about ``axis``."""
    axis = np.asarray(axis, dtype=np.float64)
    norm = float(np.linalg.norm(axis))
    if norm < 1e-12:
        return IDENTITY.copy()
    half = math.radians(angle_deg) / 2.0
    xyz = axis / norm * math.sin(half)
    return np.array([math.cos(half), xyz[0], xyz[1], xyz[2]])


def normalize_angle(angle_deg: float) -> float:
    """Wrap an angle into (-180, 180]."""
    angle = math.fmod(angle_deg, 360.0)
    if angle > 180.0:
        angle -= 360.0
    elif angle <= -180.0:
        angle += 360.0
    return angle


def axis_angle(q: np.ndarray) -> tuple[float, np.ndarray]:
    """Decompose a rotation into (angle, unit axis).

    ``q`` and ``-q`` describe the same rotation, so ``q`` is first flipped
    onto the ``w >= 0`` hemisphere: the angle lands in [0, 180] and the axis
    follows the direction of rotation. When the rotation is too small for its
    axis to be meaningful, the returned axis is the zero vector; callers test
    ``is_degenerate(axis)`` before using it.
    """
    q = np.asarray(q, dtype=np.float64)
    if q[0] < 0:
        q = -q
    w = float(np.clip(q[0], -1.0, 1.0))
    angle = normalize_angle(math.degrees(2.0 * math.acos(w)))
    vec = np.asarray(q[1:], dtype=np.float64)
    length_sq = float(np.dot(vec, vec))
    if length_sq < AXIS_EPSILON:
        return angle, np.zeros(3)
    return angle, vec / math.sqrt(length_sq)


def is_degenerate(v: np.ndarray) -> bool:
    return float(np.dot(v, v)) < AXIS_EPSILON


def normalize(v: np.ndarray) -> np.ndarray:
    """Unit vector along ``v``, or the zero vector if ``v`` is degenerate."""
    v = np.asarray(v, dtype=np.float64)
    length_sq = float(np.dot(v, v))
    if length_sq < AXIS_EPSILON:
        return np.zeros(3)
    return v / math.sqrt(length_sq)


def lerp_axis(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    """Linearly interpolate two unit axes and renormalize.

    Falls back to ``a`` when the blend cancels out.
    """
    blended = a + (b - a) * t
    if is_degenerate(blended):
        return a
    return blended / float(np.linalg.norm(blended))


def dominant_axis(v: np.ndarray) -> np.ndarray:
    """Signed cardinal unit vector for the largest component of ``v``.

    Ties go to the later axis: x wins only when strictly largest, y only when
    strictly above z.
    """
    v = np.asarray(v, dtype=np.float64)
    a = np.abs(v)
    if a[0] > a[1] and a[0] > a[2]:
        idx = 0
    elif a[1] > a[2]:
        idx = 1
    else:
        idx = 2
    result = np.zeros(3)
    result[idx] = 1.0 if v[idx] >= 0 else -1.0
    return result


def axis_label(v: np.ndarray) -> str:
    """Human-readable dominant axis, e.g. ``"+y"`` or ``"-z"``."""
    d = dominant_axis(v)
    idx = int(np.argmax(np.abs(d)))
    sign = "+" if d[idx] > 0 else "-"
    return f"{sign}{_CARDINALS[idx]}"
