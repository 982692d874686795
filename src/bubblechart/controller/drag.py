"""
Drag Controller
Pins a body to the pointer during a drag gesture and keeps the solver energized
so the other bodies redistribute around it.
"""
from __future__ import annotations

import logging
from typing import Optional

from bubblechart.controller.solver import ForceSolver
from bubblechart.model.body import Body, Point

logger = logging.getLogger(__name__)


class DragController:
    """At most one gesture is active at a time."""

    def __init__(self, solver: ForceSolver) -> None:
        self.solver = solver
        self._body: Optional[Body] = None

    @property
    def active_body_id(self) -> Optional[str]:
        return self._body.id if self._body is not None else None

    @property
    def is_active(self) -> bool:
        return self._body is not None

    def gesture_start(self, body_id: str, pointer: Point) -> bool:
        """
        Start dragging `body_id` at `pointer` (simulation coordinates).

        A gesture that is still active is ended first. Unknown ids (e.g. a
        stale event after a dataset swap) are logged and ignored.

        Returns:
            True if the gesture started.
        """
        if self._body is not None:
            self.gesture_end()

        state = self.solver.state
        if not state.has_body(body_id):
            logger.warning(f"Drag start on unknown body '{body_id}' ignored.")
            return False

        reheat_alpha = self.solver.config.reheat_alpha
        self.solver.reheat(reheat_alpha)
        # hold the energy level for the whole gesture
        self.solver.set_alpha_target(reheat_alpha)

        self._body = state.body(body_id)
        self._body.pin(pointer)
        logger.debug(f"Drag started on body '{body_id}' at ({pointer[0]:g}, {pointer[1]:g}).")
        return True

    def gesture_move(self, pointer: Point) -> None:
        if self._body is None:
            return
        self._body.pin(pointer)

    def gesture_end(self) -> None:
        """Release the body and let alpha decay naturally toward zero."""
        if self._body is None:
            return
        self._body.unpin()
        self.solver.set_alpha_target(0.0)
        logger.debug(f"Drag ended on body '{self._body.id}'.")
        self._body = None
