"""
Shield Overlay
===============

Particle shield drawn over the mirrored camera image at the stabilized
pose. Three layers spin independently; the whole group scales with the
rig's activation and glows through an additive blur.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from eldritch_shield.rig.stabilizer import StabilizedPose, ViewportExtent
from eldritch_shield.utils.geometry import quaternion_to_matrix

HINT_TEXT = "OPEN PALM to CAST | FIST to HIDE"


@dataclass
class OverlayConfig:
    """Shield rendering settings."""
    fov_deg: float = 75.0
    camera_distance: float = 5.0
    color: Tuple[int, int, int] = (0, 111, 255)  # Ember orange (BGR)
    intensity: float = 0.8
    bloom_sigma: float = 6.0
    bloom_strength: float = 2.0
    show_hint: bool = True
    seed: int = 7

    @classmethod
    def from_dict(cls, config: dict) -> "OverlayConfig":
        """Create config from dictionary."""
        return cls(
            fov_deg=config.get("fov_deg", 75.0),
            camera_distance=config.get("camera_distance", 5.0),
            color=tuple(config.get("color", [0, 111, 255])),
            intensity=config.get("intensity", 0.8),
            bloom_sigma=config.get("bloom_sigma", 6.0),
            bloom_strength=config.get("bloom_strength", 2.0),
            show_hint=config.get("show_hint", True),
            seed=config.get("seed", 7),
        )


def _rot_z(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def _rot_x(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


class ShieldGeometry:
    """Particle positions (N, 3) for the three shield layers, in local units."""

    def __init__(self, seed: int = 7):
        self.inner = self._inner_square()
        self.middle = self._mandala()
        self.outer = self._sparks(np.random.default_rng(seed))

    @staticmethod
    def _inner_square(size: float = 0.5, per_side: int = 100) -> np.ndarray:
        t = np.arange(per_side) / per_side * 2 - 1
        zeros = np.zeros_like(t)
        full = np.full_like(t, size)
        sides = [
            np.stack([t * size, full, zeros], axis=1),
            np.stack([t * size, -full, zeros], axis=1),
            np.stack([-full, t * size, zeros], axis=1),
            np.stack([full, t * size, zeros], axis=1),
        ]

        # Diagonal runes
        n_diag = int(per_side * 1.5)
        d = np.arange(n_diag) / n_diag * 2 - 1
        dz = np.zeros_like(d)
        diagonals = [
            np.stack([d * size, d * size, dz], axis=1),
            np.stack([d * size, -d * size, dz], axis=1),
        ]
        return np.concatenate(sides + diagonals)

    @staticmethod
    def _mandala(radius: float = 0.8, count: int = 600) -> np.ndarray:
        theta = np.arange(count) / count * 2 * np.pi
        zeros = np.zeros_like(theta)
        lobed = radius * (0.8 + 0.2 * np.cos(theta * 6))
        rings = [
            np.stack([np.cos(theta) * radius, np.sin(theta) * radius, zeros], axis=1),
            np.stack([np.cos(theta) * lobed, np.sin(theta) * lobed, zeros], axis=1),
            np.stack([np.cos(theta) * radius * 0.5, np.sin(theta) * radius * 0.5, zeros], axis=1),
        ]
        return np.concatenate(rings)

    @staticmethod
    def _sparks(rng: np.random.Generator, radius: float = 1.2, count: int = 400,
                spread: float = 0.1) -> np.ndarray:
        theta = rng.random(count) * 2 * np.pi
        r = radius + (rng.random(count) - 0.5) * spread
        z = (rng.random(count) - 0.5) * spread
        return np.stack([np.cos(theta) * r, np.sin(theta) * r, z], axis=1)


class ShieldRenderer:
    """
    Draws the shield for a StabilizedPose onto a mirrored BGR frame.

    Example:
        >>> renderer = ShieldRenderer(OverlayConfig())
        >>> display = renderer.mirror(frame.image)
        >>> viewport = renderer.viewport_for(display)
        >>> rig.update(observation, delta, viewport)
        >>> renderer.advance(delta)
        >>> renderer.draw(display, rig.pose)
    """

    # rad/s
    INNER_SPIN = -0.5
    MIDDLE_SPIN = 0.3
    OUTER_SPIN = -0.1

    def __init__(self, config: Optional[OverlayConfig] = None):
        self.config = config or OverlayConfig()
        self.geometry = ShieldGeometry(self.config.seed)
        self._inner_angle = 0.0
        self._middle_angle = 0.0
        self._outer_angle = 0.0
        self._time = 0.0

    @staticmethod
    def mirror(image: np.ndarray) -> np.ndarray:
        """Selfie view of a raw camera frame."""
        return cv2.flip(image, 1)

    def viewport_for(self, image: np.ndarray) -> ViewportExtent:
        height, width = image.shape[:2]
        aspect = width / height if height else 0.0
        return ViewportExtent.from_camera(self.config.fov_deg, self.config.camera_distance, aspect)

    def advance(self, delta: float) -> None:
        """Spin the layers forward by delta seconds."""
        self._inner_angle += delta * self.INNER_SPIN
        self._middle_angle += delta * self.MIDDLE_SPIN
        self._outer_angle += delta * self.OUTER_SPIN
        self._time += delta

    def world_points(self, pose: StabilizedPose) -> np.ndarray:
        """All particles in world units for the given pose, shape (N, 3)."""
        outer_tilt = math.sin(self._time) * 0.1
        layers = [
            self.geometry.inner @ _rot_z(self._inner_angle).T,
            self.geometry.middle @ _rot_z(self._middle_angle).T,
            self.geometry.outer @ (_rot_z(self._outer_angle) @ _rot_x(outer_tilt)).T,
        ]
        local = np.concatenate(layers) * pose.activation
        return local @ quaternion_to_matrix(pose.orientation).T + pose.position

    def project(self, points: np.ndarray, viewport: ViewportExtent,
                width: int, height: int) -> np.ndarray:
        """Perspective-project world points to integer pixel coordinates (N, 2)."""
        d = self.config.camera_distance
        depth = np.maximum(d - points[:, 2], 1e-3)
        scale = d / depth
        ndc_x = points[:, 0] * scale / viewport.half_width
        ndc_y = points[:, 1] * scale / viewport.half_height
        px = (ndc_x + 1.0) * 0.5 * width
        py = (1.0 - ndc_y) * 0.5 * height
        return np.stack([px, py], axis=1).astype(np.int32)

    def draw(self, image: np.ndarray, pose: StabilizedPose) -> np.ndarray:
        """Composite the shield into image in place and return it."""
        if not pose.visible or pose.activation <= 0.0:
            return image

        height, width = image.shape[:2]
        viewport = self.viewport_for(image)
        pixels = self.project(self.world_points(pose), viewport, width, height)

        inside = (
            (pixels[:, 0] >= 0) & (pixels[:, 0] < width)
            & (pixels[:, 1] >= 0) & (pixels[:, 1] < height)
        )
        pixels = pixels[inside]
        if len(pixels) == 0:
            return image

        color = np.array(self.config.color, dtype=np.float32) * self.config.intensity
        layer = np.zeros((height, width, 3), dtype=np.float32)
        np.add.at(layer, (pixels[:, 1], pixels[:, 0]), color)

        core = cv2.dilate(layer, np.ones((3, 3), np.uint8))
        glow = cv2.GaussianBlur(core, (0, 0), self.config.bloom_sigma)
        composite = image.astype(np.float32) + core + glow * self.config.bloom_strength
        np.clip(composite, 0, 255, out=composite)
        image[:] = composite.astype(np.uint8)
        return image

    def draw_hint(self, image: np.ndarray) -> np.ndarray:
        if not self.config.show_hint:
            return image
        height, width = image.shape[:2]
        (text_w, _), _ = cv2.getTextSize(HINT_TEXT, cv2.FONT_HERSHEY_SIMPLEX, 0.6, 1)
        cv2.putText(image, HINT_TEXT, ((width - text_w) // 2, height - 30),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, self.config.color, 1, cv2.LINE_AA)
        return image

    def draw_status(self, image: np.ndarray, fps: float, pose: StabilizedPose) -> np.ndarray:
        """FPS and rig phase in the top-left corner."""
        text = f"FPS: {fps:.1f}  {pose.phase.value.upper()}  {pose.activation:.2f}"
        cv2.putText(image, text, (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 255, 255), 1, cv2.LINE_AA)
        return image
