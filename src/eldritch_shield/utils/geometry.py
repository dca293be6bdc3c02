"""Vector and quaternion helpers. Quaternions are numpy arrays [w, x, y, z]."""

import math

import numpy as np

UP = np.array([0.0, 1.0, 0.0])

# Below this, two unit vectors are treated as antiparallel
_ANTIPARALLEL_EPS = np.finfo(float).eps


def identity_quaternion() -> np.ndarray:
    return np.array([1.0, 0.0, 0.0, 0.0])


def normalize(v: np.ndarray, eps: float = 1e-6):
    """Return v / |v|, or None when |v| < eps."""
    n = float(np.linalg.norm(v))
    if not math.isfinite(n) or n < eps:
        return None
    return v / n


def quaternion_from_unit_vectors(v_from: np.ndarray, v_to: np.ndarray) -> np.ndarray:
    """Shortest-arc rotation taking unit vector v_from onto unit vector v_to."""
    r = float(np.dot(v_from, v_to)) + 1.0

    if r < _ANTIPARALLEL_EPS:
        # Any axis perpendicular to v_from works for a half turn
        if abs(v_from[0]) > abs(v_from[2]):
            q = np.array([0.0, -v_from[1], v_from[0], 0.0])
        else:
            q = np.array([0.0, 0.0, -v_from[2], v_from[1]])
    else:
        axis = np.cross(v_from, v_to)
        q = np.array([r, axis[0], axis[1], axis[2]])

    return q / np.linalg.norm(q)


def quaternion_to_matrix(q: np.ndarray) -> np.ndarray:
    """3x3 rotation matrix for a unit quaternion."""
    w, x, y, z = q
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
        [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
        [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
    ])


def slerp(q_a: np.ndarray, q_b: np.ndarray, t: float) -> np.ndarray:
    """
    Spherical interpolation from q_a toward q_b along the shorter arc.

    t=0 returns q_a, t=1 returns q_b (or its antipode, the same rotation).
    The result is always renormalized.
    """
    if t <= 0.0:
        return q_a.copy()
    if t >= 1.0:
        return q_b.copy()

    cos_half = float(np.dot(q_a, q_b))
    if cos_half < 0.0:
        q_b = -q_b
        cos_half = -cos_half

    if cos_half >= 1.0:
        return q_a.copy()

    sin_sq = 1.0 - cos_half * cos_half
    if sin_sq <= np.finfo(float).eps:
        # Nearly identical: nlerp is exact enough and avoids dividing by ~0
        q = (1.0 - t) * q_a + t * q_b
        return q / np.linalg.norm(q)

    sin_half = math.sqrt(sin_sq)
    half = math.atan2(sin_half, cos_half)
    ratio_a = math.sin((1.0 - t) * half) / sin_half
    ratio_b = math.sin(t * half) / sin_half
    q = ratio_a * q_a + ratio_b * q_b
    return q / np.linalg.norm(q)


def lerp(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    return a + t * (b - a)
