"""
Tests for quaternion and vector helpers
========================================
"""

import math
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from eldritch_shield.utils.geometry import (
    UP,
    identity_quaternion,
    lerp,
    normalize,
    quaternion_from_unit_vectors,
    quaternion_to_matrix,
    slerp,
)

QUARTER_TURN_Z = np.array([math.sqrt(0.5), 0.0, 0.0, math.sqrt(0.5)])


class TestNormalize:

    def test_unit_result(self):
        np.testing.assert_allclose(normalize(np.array([3.0, 4.0, 0.0])), [0.6, 0.8, 0.0])

    @pytest.mark.parametrize("v", [
        np.zeros(3),
        np.array([1e-9, 0.0, 0.0]),
        np.array([float("nan"), 1.0, 0.0]),
    ])
    def test_degenerate_returns_none(self, v):
        assert normalize(v) is None


class TestUnitVectorRotation:

    def test_same_vector_is_identity(self):
        np.testing.assert_allclose(quaternion_from_unit_vectors(UP, UP), identity_quaternion())

    def test_up_to_right(self):
        """+Y onto +X is -90 degrees about z."""
        q = quaternion_from_unit_vectors(UP, np.array([1.0, 0.0, 0.0]))

        np.testing.assert_allclose(q, [math.sqrt(0.5), 0.0, 0.0, -math.sqrt(0.5)], atol=1e-12)

    def test_antiparallel(self):
        q = quaternion_from_unit_vectors(UP, -UP)

        assert np.linalg.norm(q) == pytest.approx(1.0)
        np.testing.assert_allclose(quaternion_to_matrix(q) @ UP, -UP, atol=1e-12)

    def test_antiparallel_along_x(self):
        x = np.array([1.0, 0.0, 0.0])

        q = quaternion_from_unit_vectors(x, -x)

        np.testing.assert_allclose(quaternion_to_matrix(q) @ x, -x, atol=1e-12)


class TestRotationMatrix:

    def test_identity(self):
        np.testing.assert_allclose(quaternion_to_matrix(identity_quaternion()), np.eye(3))

    def test_quarter_turn(self):
        m = quaternion_to_matrix(QUARTER_TURN_Z)

        np.testing.assert_allclose(m @ np.array([1.0, 0.0, 0.0]), [0.0, 1.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(m @ m.T, np.eye(3), atol=1e-12)


class TestSlerp:

    def test_endpoints(self):
        q_a, q_b = identity_quaternion(), QUARTER_TURN_Z

        np.testing.assert_allclose(slerp(q_a, q_b, 0.0), q_a)
        np.testing.assert_allclose(slerp(q_a, q_b, 1.0), q_b)

    def test_midpoint_is_half_angle(self):
        q = slerp(identity_quaternion(), QUARTER_TURN_Z, 0.5)

        angle = math.radians(22.5)
        np.testing.assert_allclose(q, [math.cos(angle), 0.0, 0.0, math.sin(angle)], atol=1e-12)

    def test_takes_shorter_arc(self):
        """-q is the same rotation; interpolation must not go the long way."""
        direct = slerp(identity_quaternion(), QUARTER_TURN_Z, 0.5)
        flipped = slerp(identity_quaternion(), -QUARTER_TURN_Z, 0.5)

        np.testing.assert_allclose(flipped, direct, atol=1e-12)

    def test_nearly_equal_inputs(self):
        q_b = np.array([1.0, 0.0, 0.0, 1e-10])
        q_b /= np.linalg.norm(q_b)

        q = slerp(identity_quaternion(), q_b, 0.1)

        assert np.all(np.isfinite(q))
        assert np.linalg.norm(q) == pytest.approx(1.0)

    def test_does_not_mutate_inputs(self):
        q_a, q_b = identity_quaternion(), -QUARTER_TURN_Z

        slerp(q_a, q_b, 0.3)

        np.testing.assert_array_equal(q_b, -QUARTER_TURN_Z)


def test_lerp():
    np.testing.assert_allclose(lerp(np.zeros(3), np.array([4.0, 1.5, 0.0]), 0.1), [0.4, 0.15, 0.0])
