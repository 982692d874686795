"""
Viewport Transform
==================
Translate + uniform scale applied to the whole scene at draw time.

Screen coordinates relate to simulation coordinates by::

    screen = scene * scale + offset

Body positions always stay in untransformed simulation space; this transform
never touches them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from bubblechart.config import ViewportConfig
from bubblechart.model.body import Point

logger = logging.getLogger(__name__)


@dataclass
class ViewportTransform:
    offset_x: float = 0.0
    offset_y: float = 0.0
    scale: float = 1.0
    min_zoom: float = ViewportConfig.min_zoom
    max_zoom: float = ViewportConfig.max_zoom

    def __post_init__(self) -> None:
        if not 0 < self.min_zoom <= self.max_zoom:
            raise ValueError(f"Invalid zoom range [{self.min_zoom}, {self.max_zoom}].")
        self.scale = self.clamp_scale(self.scale)

    @classmethod
    def from_config(cls, config: ViewportConfig) -> ViewportTransform:
        return cls(min_zoom=config.min_zoom, max_zoom=config.max_zoom)

    # ------------------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------------------

    def clamp_scale(self, scale: float) -> float:
        return min(self.max_zoom, max(self.min_zoom, scale))

    def to_screen(self, point: Point) -> Point:
        return Point(point[0] * self.scale + self.offset_x, point[1] * self.scale + self.offset_y)

    def to_scene(self, point: Point) -> Point:
        return Point((point[0] - self.offset_x) / self.scale, (point[1] - self.offset_y) / self.scale)

    # ------------------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------------------

    def zoom_by(self, factor: float, anchor: Point) -> bool:
        """
        Multiply the scale by `factor`, keeping `anchor` (screen coords) fixed.

        Returns:
            True if the transform changed (False when already saturated).
        """
        if factor <= 0:
            raise ValueError(f"Zoom factor must be positive, got {factor}.")
        return self.zoom_to(self.scale * factor, anchor)

    def zoom_to(self, scale: float, anchor: Optional[Point] = None, center: Optional[Point] = None) -> bool:
        """
        Set the scale (clamped), keeping `anchor` fixed on screen.

        Args:
            scale: Requested scale.
            anchor: Screen point to keep fixed. Defaults to `center`.
            center: Viewport centre in screen coords, used when no anchor is
                given. Falls back to the origin.
        """
        new_scale = self.clamp_scale(scale)
        if new_scale != scale:
            logger.debug(f"Zoom {scale:g} clamped to {new_scale:g}.")
        if new_scale == self.scale:
            return False

        if anchor is None:
            anchor = center if center is not None else Point(0.0, 0.0)
        ax, ay = anchor
        ratio = new_scale / self.scale
        self.offset_x = ax - (ax - self.offset_x) * ratio
        self.offset_y = ay - (ay - self.offset_y) * ratio
        self.scale = new_scale
        return True

    def pan_by(self, dx: float, dy: float) -> None:
        self.offset_x += dx
        self.offset_y += dy

    def reset(self) -> None:
        """Restore the identity transform (scale 1, no offset) immediately."""
        self.offset_x = 0.0
        self.offset_y = 0.0
        self.scale = self.clamp_scale(1.0)

    @property
    def is_identity(self) -> bool:
        return self.offset_x == 0.0 and self.offset_y == 0.0 and self.scale == 1.0

    def snapshot(self) -> ViewportTransform:
        return replace(self)

    def interpolated(self, target: ViewportTransform, t: float) -> ViewportTransform:
        """Linear blend toward `target` for animated transitions, t in [0, 1]."""
        t = min(1.0, max(0.0, t))
        return replace(
            self,
            offset_x=self.offset_x + (target.offset_x - self.offset_x) * t,
            offset_y=self.offset_y + (target.offset_y - self.offset_y) * t,
            scale=self.scale + (target.scale - self.scale) * t,
        )

    def assign(self, other: ViewportTransform) -> None:
        """Copy offset and scale from `other` in place."""
        self.offset_x = other.offset_x
        self.offset_y = other.offset_y
        self.scale = self.clamp_scale(other.scale)
