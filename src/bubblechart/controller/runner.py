"""
Simulation Tick Loop
====================
Schedules ForceSolver.tick on the Qt event loop.

Why is this file needed?
------------------------
1. Responsiveness: every tick is a short synchronous computation, run from a
   precise QTimer at display refresh cadence on the GUI thread, so pointer
   events interleave with ticks without any locking.
2. Lifetime: the loop is acquired when a simulation starts and released when
   it is stopped or replaced, so no loop keeps running against stale bodies.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Qt, QTimer, Signal

from bubblechart.config import TICK_INTERVAL_MS
from bubblechart.controller.solver import ForceSolver

logger = logging.getLogger(__name__)


class SimulationRunner(QObject):
    ticked = Signal(object)  # SimulationState
    settled = Signal(object)  # SimulationState

    def __init__(self, parent: Optional[QObject] = None, interval_ms: int = TICK_INTERVAL_MS) -> None:
        super().__init__(parent)
        self.solver: Optional[ForceSolver] = None

        self._timer = QTimer(self)
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.step)

    def __enter__(self) -> SimulationRunner:
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
        self.solver = None

    @property
    def is_active(self) -> bool:
        return self._timer.isActive()

    def start(self, solver: ForceSolver) -> None:
        """Stop any current loop and start ticking `solver`."""
        self.stop()
        self.solver = solver
        if solver.is_running:
            self._timer.start()
            logger.debug("Tick loop started.")

    def wake(self) -> None:
        """Resume ticking after the solver has been re-energized."""
        if self.solver is not None and self.solver.is_running and not self._timer.isActive():
            self._timer.start()

    def stop(self) -> None:
        if self._timer.isActive():
            self._timer.stop()
            logger.debug("Tick loop stopped.")

    def step(self) -> None:
        """One timer callback: tick once and stop when the solver settles."""
        if self.solver is None:
            self.stop()
            return
        running = self.solver.tick()
        self.ticked.emit(self.solver.state)
        if not running:
            self.stop()
            logger.info(f"Layout settled after {self.solver.tick_count} ticks.")
            self.settled.emit(self.solver.state)
