from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional, Sequence

import numpy as np

from bubblechart.config import SimulationConfig
from bubblechart.model.simulation import SimulationState, SolverPhase

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

# Distances below this are treated as coincident bodies
_EPS = 1e-9


def _pair_deltas(positions: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """(N, N, 2) array with delta[i, j] = p_j - p_i."""
    return positions[np.newaxis, :, :] - positions[:, np.newaxis, :]


class Force(ABC):
    """A contribution to body velocities, applied once per tick."""

    @abstractmethod
    def apply(
        self,
        state: SimulationState,
        positions: npt.NDArray[np.float64],
        velocities: npt.NDArray[np.float64],
        alpha: float,
    ) -> None:
        """Add this force's contribution to `velocities` in place."""


class PositionConstraint(ABC):
    """A correction of body positions, applied after integration."""

    @abstractmethod
    def apply(
        self,
        positions: npt.NDArray[np.float64],
        radii: npt.NDArray[np.float64],
        pinned: npt.NDArray[np.bool_],
    ) -> None:
        """Correct `positions` in place."""


class ManyBodyForce(Force):
    """
    Pairwise charge between every two bodies.

    A negative strength repels. The contribution of a pair is
    ``strength * alpha * delta / max(d, distance_min)**2``, so coincident pairs
    contribute nothing and no division by zero can occur.
    """

    def __init__(self, strength: float = -30.0, distance_min: float = 1.0) -> None:
        self.strength = strength
        self.distance_min = max(distance_min, _EPS)

    def apply(self, state, positions, velocities, alpha) -> None:
        if len(positions) < 2:
            return
        delta = _pair_deltas(positions)
        dist2 = np.maximum(np.einsum("ijk,ijk->ij", delta, delta), self.distance_min ** 2)
        weight = self.strength * alpha / dist2
        velocities += np.einsum("ijk,ij->ik", delta, weight)


class CenteringForce(Force):
    """Nudges every body by the vector from the centroid to the viewport centre."""

    def __init__(self, strength: float = 0.1) -> None:
        self.strength = strength

    def apply(self, state, positions, velocities, alpha) -> None:
        if len(positions) == 0:
            return
        center = np.asarray(state.center, dtype=np.float64)
        centroid = positions.mean(axis=0)
        velocities += (center - centroid) * self.strength


class CollisionForce(PositionConstraint):
    """
    Separates overlapping bodies.

    Every pair closer than r_i + r_j + padding is pushed apart along the line
    between the centres. The overlap is shared by r**2 (larger bodies move
    less); pinned bodies never move, so their partner takes the full
    displacement. Coincident bodies are split along the x axis. Several
    simultaneous passes are run per tick instead of an exact solution.
    """

    def __init__(self, padding: float = 1.0, iterations: int = 4) -> None:
        self.padding = padding
        self.iterations = max(1, int(iterations))

    def apply(self, positions, radii, pinned) -> None:
        n = len(positions)
        if n < 2:
            return

        r2 = radii ** 2
        base_share = r2[np.newaxis, :] / (r2[:, np.newaxis] + r2[np.newaxis, :])  # share of i in pair (i, j)
        pin_i = pinned[:, np.newaxis]
        pin_j = pinned[np.newaxis, :]
        share_i = np.where(pin_i, 0.0, np.where(pin_j, 1.0, base_share))
        share_j = np.where(pin_j, 0.0, np.where(pin_i, 1.0, 1.0 - base_share))

        min_dist = radii[:, np.newaxis] + radii[np.newaxis, :] + self.padding
        upper = np.triu(np.ones((n, n), dtype=bool), k=1)

        for _ in range(self.iterations):
            delta = _pair_deltas(positions)
            dist = np.sqrt(np.einsum("ijk,ijk->ij", delta, delta))
            overlap = np.where(upper, min_dist - dist, 0.0)
            if not (overlap > 0).any():
                break
            overlap = np.maximum(overlap, 0.0)

            coincident = dist < _EPS
            unit = np.empty_like(delta)
            safe = np.where(coincident, 1.0, dist)
            unit[...] = delta / safe[..., np.newaxis]
            unit[coincident] = (1.0, 0.0)

            push_i = -np.einsum("ijk,ij->ik", unit, overlap * share_i)
            push_j = np.einsum("ijk,ij->jk", unit, overlap * share_j)
            positions += push_i + push_j


class ForceSolver:
    """
    Iterative layout solver.

    Drives the bodies of a SimulationState toward a configuration where they
    cluster around the viewport centre, repel each other and never overlap.
    """

    def __init__(
        self,
        state: SimulationState,
        config: SimulationConfig = SimulationConfig(),
        forces: Optional[Sequence[Force]] = None,
        constraints: Optional[Sequence[PositionConstraint]] = None,
    ) -> None:
        """
        Initialize the solver with a state.

        Args:
            state: The simulation state to advance. Bodies are mutated in place.
            config: Cooling and force parameters.
            forces: Velocity forces, applied in order. Defaults to repulsion
                followed by centering.
            constraints: Position constraints applied after integration.
                Defaults to collision.
        """
        self.state = state
        self.config = config
        self.forces: list[Force] = list(forces) if forces is not None else [
            ManyBodyForce(config.charge_strength, config.charge_distance_min),
            CenteringForce(config.centering_strength),
        ]
        self.constraints: list[PositionConstraint] = list(constraints) if constraints is not None else [
            CollisionForce(config.collision_padding, config.collision_iterations),
        ]
        self.tick_count = 0

        if state.is_degenerate:
            state.running = False
            logger.debug("Degenerate geometry, solver stays idle.")

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    @property
    def phase(self) -> SolverPhase:
        if not self.state.running:
            return SolverPhase.IDLE
        if self.state.alpha < self.config.settle_alpha:
            return SolverPhase.SETTLING
        return SolverPhase.RUNNING

    @property
    def is_running(self) -> bool:
        return self.state.running

    def reheat(self, alpha: Optional[float] = None) -> None:
        """Re-energize the simulation and resume ticking."""
        if self.state.is_degenerate:
            return
        self.state.alpha = self.config.reheat_alpha if alpha is None else float(alpha)
        self.state.running = True
        logger.debug(f"Solver reheated to alpha={self.state.alpha:g}.")

    def set_alpha_target(self, target: float) -> None:
        """Set the value alpha converges to; 0 lets the layout settle."""
        self.state.alpha_target = float(target)

    def tick(self) -> bool:
        """
        Advance the simulation by one step.

        Order: forces on velocities, integration with velocity decay, position
        constraints, pin override, alpha update.

        Returns:
            True while the simulation keeps running.
        """
        state = self.state
        if not state.running or state.is_degenerate:
            state.running = False
            return False

        bodies = state.bodies
        positions = np.array([(b.x, b.y) for b in bodies], dtype=np.float64)
        velocities = np.array([(b.vx, b.vy) for b in bodies], dtype=np.float64)
        radii = np.array([b.radius for b in bodies], dtype=np.float64)
        pinned = np.array([b.is_pinned for b in bodies], dtype=bool)

        for force in self.forces:
            force.apply(state, positions, velocities, state.alpha)

        velocities *= 1.0 - self.config.velocity_decay
        positions += velocities

        for constraint in self.constraints:
            constraint.apply(positions, radii, pinned)

        # pin wins unconditionally
        if pinned.any():
            positions[pinned] = [b.pinned_position for b in bodies if b.is_pinned]
            velocities[pinned] = 0.0

        for body, (x, y), (vx, vy) in zip(bodies, positions, velocities):
            body.x, body.y = float(x), float(y)
            body.vx, body.vy = float(vx), float(vy)

        state.alpha += (state.alpha_target - state.alpha) * self.config.alpha_decay
        self.tick_count += 1

        if state.alpha < self.config.alpha_min and not pinned.any():
            state.running = False
            logger.debug(f"Simulation settled after {self.tick_count} ticks.")

        return state.running

    def run(self, max_ticks: int = 1000) -> int:
        """
        Tick synchronously until the simulation settles (headless layout).

        Returns:
            Number of ticks performed.
        """
        ticks = 0
        while ticks < max_ticks and self.state.running:
            self.tick()
            ticks += 1
        return ticks
