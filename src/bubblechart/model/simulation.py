"""
Simulation State
================
Holds the body collection and the cooling parameter ("alpha") of one
simulation run.

A state is created when a dataset and a viewport size are supplied and is
replaced, never migrated, when either of them changes: radii depend on the
viewport, so a resize is a full re-seed.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Iterable

from bubblechart.config import ScaleConfig, SimulationConfig
from bubblechart.model.body import Body, BubbleRecord, Point, Size, validate_records
from bubblechart.model.scales import SizeScale

logger = logging.getLogger(__name__)

# Golden-angle increment of the phyllotaxis seed spiral
_SEED_ANGLE = math.pi * (3.0 - math.sqrt(5.0))


class SolverPhase(StrEnum):
    """Lifecycle of the tick loop."""
    IDLE = "idle"
    RUNNING = "running"
    SETTLING = "settling"


@dataclass
class SimulationState:
    """Body collection + alpha + running flag for one simulation run."""
    bodies: tuple[Body, ...]
    viewport: Size
    alpha: float = 1.0
    alpha_target: float = 0.0
    running: bool = False
    _index: dict[str, Body] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.bodies = tuple(self.bodies)
        self._index = {b.id: b for b in self.bodies}

    @property
    def center(self) -> Point:
        return Point(self.viewport.width / 2.0, self.viewport.height / 2.0)

    @property
    def is_degenerate(self) -> bool:
        """No bodies or a zero-size viewport: nothing to lay out."""
        return not self.bodies or self.viewport.width <= 0 or self.viewport.height <= 0

    def has_body(self, body_id: str) -> bool:
        return body_id in self._index

    def body(self, body_id: str) -> Body:
        """Look up a body by id. Raises KeyError for unknown ids."""
        return self._index[body_id]

    @property
    def focal_body(self) -> Body | None:
        return next((b for b in self.bodies if b.is_focal), None)

    @property
    def pinned_bodies(self) -> list[Body]:
        return [b for b in self.bodies if b.is_pinned]


def phyllotaxis(index: int, center: Point, initial_radius: float) -> Point:
    """Deterministic seed position of the `index`-th body on a sunflower spiral."""
    r = initial_radius * math.sqrt(0.5 + index)
    angle = index * _SEED_ANGLE
    return Point(center.x + r * math.cos(angle), center.y + r * math.sin(angle))


def seed_simulation(
    records: Iterable[BubbleRecord],
    viewport: Size,
    scale_config: ScaleConfig = ScaleConfig(),
    sim_config: SimulationConfig = SimulationConfig(),
) -> SimulationState:
    """
    Validate `records`, map radii for `viewport` and seed body positions.

    Args:
        records: The dataset.
        viewport: Viewport size in pixels.
        scale_config: Radius mapping parameters.
        sim_config: Solver parameters (initial alpha, seed spiral radius).

    Returns:
        A new SimulationState. It is not running if the geometry is degenerate.

    Raises:
        DatasetError: If the dataset is malformed.
    """
    records = validate_records(records)
    viewport = Size(max(0.0, float(viewport[0])), max(0.0, float(viewport[1])))
    scale = SizeScale.for_viewport(viewport, scale_config)
    center = Point(viewport.width / 2.0, viewport.height / 2.0)

    bodies = []
    for i, record in enumerate(records):
        x, y = phyllotaxis(i, center, sim_config.initial_radius)
        bodies.append(Body(
            id=record.id,
            label=record.name,
            value=record.value,
            radius=scale(record.value),
            is_focal=record.is_center,
            x=x,
            y=y,
        ))

    state = SimulationState(
        bodies=tuple(bodies),
        viewport=viewport,
        alpha=sim_config.alpha_start,
        alpha_target=sim_config.alpha_target,
    )
    state.running = not state.is_degenerate
    logger.info(
        f"Seeded simulation with {len(bodies)} bodies in a "
        f"{viewport.width:g}x{viewport.height:g} viewport (radius range {scale.range[0]:g}-{scale.range[1]:g})."
    )
    return state
