"""
Scale Mappers
Pure mappings from a bubble's value to a pixel radius and from its id to a colour.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from matplotlib import colormaps
from matplotlib.colors import to_hex

from bubblechart.config import FOCAL_FILL, ScaleConfig
from bubblechart.model.body import Size

# ColorBrewer Set2, the categorical palette used for satellite bubbles
PALETTE: tuple[str, ...] = tuple(to_hex(c) for c in colormaps["Set2"].colors)


def radius_range(viewport: Size, config: ScaleConfig = ScaleConfig()) -> tuple[float, float]:
    """
    Compute the (minR, maxR) radius range for a viewport.

    maxR shrinks with the viewport, so radii rescale automatically on resize.
    Both ends are floored at `config.radius_floor` to keep every radius positive.
    """
    width, height = viewport
    max_r = max(config.radius_floor, min(width, height) / config.radius_divisor)
    min_r = max(config.radius_floor, min(config.min_radius, max_r))
    return min_r, max_r


def size_scale(
    value: float,
    domain: tuple[float, float] = (0.0, 100.0),
    range_: tuple[float, float] = (10.0, 150.0),
) -> float:
    """
    Linear interpolation of `value` from `domain` onto `range_`.

    Values outside the domain are clamped to the range ends, so the mapping is
    monotonic non-decreasing for any increasing range.

    Args:
        value: The bubble magnitude.
        domain: (d0, d1) input interval, d0 < d1.
        range_: (r0, r1) output radius interval.

    Returns:
        The radius in pixels.
    """
    d0, d1 = domain
    r0, r1 = range_
    if d1 == d0:
        raise ValueError("Scale domain must not be empty.")
    t = (value - d0) / (d1 - d0)
    t = min(1.0, max(0.0, t))
    return r0 + t * (r1 - r0)


@dataclass(frozen=True)
class SizeScale:
    """Callable value -> radius mapping bound to one domain/range."""
    domain: tuple[float, float]
    range: tuple[float, float]

    @classmethod
    def for_viewport(cls, viewport: Size, config: ScaleConfig = ScaleConfig()) -> SizeScale:
        return cls(domain=config.domain, range=radius_range(viewport, config))

    def __call__(self, value: float) -> float:
        return size_scale(value, self.domain, self.range)


@dataclass
class ColorScale:
    """
    Ordinal id -> colour mapping.

    Ids are assigned palette entries in order of first appearance and keep
    them for the lifetime of the scale. The focal body always gets
    `focal_color` regardless of this mapping.
    """
    palette: tuple[str, ...] = PALETTE
    focal_color: str = FOCAL_FILL
    _assigned: dict[str, str] = field(default_factory=dict, repr=False)

    def __call__(self, body_id: str) -> str:
        color = self._assigned.get(body_id)
        if color is None:
            color = self.palette[len(self._assigned) % len(self.palette)]
            self._assigned[body_id] = color
        return color

    def color_for(self, body_id: str, is_focal: bool = False) -> str:
        if is_focal:
            return self.focal_color
        return self(body_id)
