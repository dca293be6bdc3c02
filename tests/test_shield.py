"""
Tests for the Shield Overlay
=============================
"""

import math
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from eldritch_shield.overlay.shield import OverlayConfig, ShieldGeometry, ShieldRenderer
from eldritch_shield.rig.stabilizer import RigPhase, StabilizedPose, ViewportExtent


def blank(height=480, width=640):
    return np.zeros((height, width, 3), dtype=np.uint8)


class TestShieldGeometry:
    """Test suite for particle layers."""

    def test_layer_sizes(self):
        geometry = ShieldGeometry()

        assert geometry.inner.shape == (700, 3)
        assert geometry.middle.shape == (1800, 3)
        assert geometry.outer.shape == (400, 3)

    def test_flat_layers(self):
        geometry = ShieldGeometry()

        assert np.all(geometry.inner[:, 2] == 0.0)
        assert np.all(geometry.middle[:, 2] == 0.0)
        assert np.abs(geometry.outer[:, 2]).max() <= 0.05

    def test_sparks_seeded(self):
        np.testing.assert_array_equal(ShieldGeometry(3).outer, ShieldGeometry(3).outer)
        assert not np.array_equal(ShieldGeometry(3).outer, ShieldGeometry(4).outer)


class TestShieldRenderer:
    """Test suite for ShieldRenderer."""

    @pytest.fixture
    def renderer(self):
        return ShieldRenderer(OverlayConfig(show_hint=False))

    @pytest.fixture
    def visible_pose(self):
        return StabilizedPose(activation=1.0, visible=True, phase=RigPhase.ACTIVE)

    def test_hidden_pose_leaves_image(self, renderer):
        image = blank()

        renderer.draw(image, StabilizedPose())

        assert not image.any()

    def test_visible_pose_draws(self, renderer, visible_pose):
        image = blank()

        renderer.draw(image, visible_pose)

        assert image.any()

    def test_shield_centered_on_pose(self, renderer, visible_pose):
        image = blank()

        renderer.draw(image, visible_pose)

        ys, xs = np.nonzero(image.sum(axis=2))
        assert xs.mean() == pytest.approx(320, abs=20)
        assert ys.mean() == pytest.approx(240, abs=20)

    def test_zero_activation_collapses_to_position(self, renderer):
        pose = StabilizedPose(activation=1e-9, visible=True)

        points = renderer.world_points(pose)

        np.testing.assert_allclose(points, 0.0, atol=1e-8)

    def test_world_points_follow_position(self, renderer, visible_pose):
        visible_pose.position = np.array([1.0, -0.5, 0.0])

        points = renderer.world_points(visible_pose)

        assert points.shape == (2900, 3)
        np.testing.assert_allclose(points[:2500].mean(axis=0), [1.0, -0.5, 0.0], atol=0.05)

    def test_origin_projects_to_center(self, renderer):
        viewport = ViewportExtent(4.0, 3.0)

        pixels = renderer.project(np.zeros((1, 3)), viewport, 640, 480)

        assert tuple(pixels[0]) == (320, 240)

    def test_viewport_edge_projects_to_image_edge(self, renderer):
        viewport = ViewportExtent(4.0, 3.0)

        pixels = renderer.project(np.array([[-4.0, 3.0, 0.0]]), viewport, 640, 480)

        assert tuple(pixels[0]) == (0, 0)

    def test_viewport_for(self, renderer):
        viewport = renderer.viewport_for(blank(720, 1280))

        assert viewport.half_height == pytest.approx(5.0 * math.tan(math.radians(37.5)))
        assert viewport.half_width == pytest.approx(viewport.half_height * 1280 / 720)

    def test_offscreen_pose_draws_nothing(self, renderer, visible_pose):
        visible_pose.position = np.array([100.0, 0.0, 0.0])
        image = blank()

        renderer.draw(image, visible_pose)

        assert not image.any()

    def test_mirror(self):
        image = blank(2, 3)
        image[0, 0] = 255

        mirrored = ShieldRenderer.mirror(image)

        assert mirrored[0, 2].all()
        assert not mirrored[0, 0].any()

    def test_advance_spins_layers(self, renderer, visible_pose):
        before = renderer.world_points(visible_pose)

        renderer.advance(0.5)

        assert not np.allclose(renderer.world_points(visible_pose), before)

    def test_hint_toggle(self):
        image = blank()
        ShieldRenderer(OverlayConfig(show_hint=False)).draw_hint(image)
        assert not image.any()

        ShieldRenderer(OverlayConfig(show_hint=True)).draw_hint(image)
        assert image.any()

    def test_status_text(self, renderer, visible_pose):
        image = blank()

        renderer.draw_status(image, 59.9, visible_pose)

        assert image[:40].any()


class TestOverlayConfig:

    def test_from_dict(self):
        config = OverlayConfig.from_dict({"color": [255, 0, 0], "fov_deg": 60})

        assert config.color == (255, 0, 0)
        assert config.fov_deg == 60
        assert config.camera_distance == 5.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
