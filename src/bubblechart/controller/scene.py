"""
Scene Controller
================
Wires the layout engine together and routes user input to it.

Why is this file needed?
------------------------
1. State Management: It is the single owner of the shared mutable state (the
   SimulationState, the ViewportTransform and the truncation/tooltip state).
2. Routing: Pointer, wheel and hover events from the render surface arrive
   here and are dispatched with a fixed priority (body drag preempts pan).
3. Decoupling: Views only listen to its signals and report measurements back;
   they never touch the solver directly.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from PySide6.QtCore import QEasingCurve, QObject, QVariantAnimation, Signal

from bubblechart.config import ScaleConfig, SimulationConfig, ViewportConfig
from bubblechart.controller.drag import DragController
from bubblechart.controller.runner import SimulationRunner
from bubblechart.controller.solver import ForceSolver
from bubblechart.model.body import BubbleRecord, Point, Size, validate_records
from bubblechart.model.scales import ColorScale
from bubblechart.model.simulation import SimulationState, seed_simulation
from bubblechart.model.truncation import LabelBox, TooltipModel, detect
from bubblechart.model.viewport import ViewportTransform

logger = logging.getLogger(__name__)


class SceneController(QObject):
    """Central scene store with signals for view sync."""
    simulation_reset = Signal(object)  # SimulationState
    ticked = Signal(object)  # SimulationState
    settled = Signal(object)  # SimulationState
    transform_changed = Signal(object)  # ViewportTransform
    truncation_requested = Signal()
    truncation_changed = Signal(object)  # frozenset[str]
    tooltip_changed = Signal(object)  # Tooltip | None

    def __init__(
        self,
        parent: Optional[QObject] = None,
        scale_config: ScaleConfig = ScaleConfig(),
        sim_config: SimulationConfig = SimulationConfig(),
        viewport_config: ViewportConfig = ViewportConfig(),
    ) -> None:
        super().__init__(parent)
        self.scale_config = scale_config
        self.sim_config = sim_config
        self.viewport_config = viewport_config

        self.records: tuple[BubbleRecord, ...] = ()
        self.viewport: Size = Size(0.0, 0.0)
        self.state: Optional[SimulationState] = None
        self.solver: Optional[ForceSolver] = None
        self.drag: Optional[DragController] = None

        self.transform = ViewportTransform.from_config(viewport_config)
        self.tooltips = TooltipModel()
        self.colors = ColorScale()

        self._pan_last: Optional[Point] = None
        self._reset_animation: Optional[QVariantAnimation] = None

        self.runner = SimulationRunner(self)
        self.runner.ticked.connect(self.ticked)
        self.runner.settled.connect(self.settled)

    # ------------------------------------------------------------------------------
    # Dataset / viewport
    # ------------------------------------------------------------------------------

    def set_dataset(self, records: Iterable[BubbleRecord]) -> None:
        """Validate and load a dataset; replaces the running simulation."""
        self.records = validate_records(records)
        self._reseed()

    def set_viewport_size(self, width: float, height: float) -> None:
        """Accept a resize notification; a new size re-seeds the simulation."""
        size = Size(float(width), float(height))
        if size == self.viewport and self.state is not None:
            return
        self.viewport = size
        self._reseed()

    def _reseed(self) -> None:
        # release the old loop before any new body exists
        self.runner.stop()
        if self.drag is not None:
            self.drag.gesture_end()
        self._pan_last = None

        self.state = seed_simulation(self.records, self.viewport, self.scale_config, self.sim_config)
        self.solver = ForceSolver(self.state, self.sim_config)
        self.drag = DragController(self.solver)

        self.tooltips.hover_exit()
        self.tooltips.update(frozenset())
        self.tooltip_changed.emit(None)

        self.runner.start(self.solver)
        self.simulation_reset.emit(self.state)
        self.request_truncation()

    def color_for(self, body_id: str) -> str:
        is_focal = self.state is not None and self.state.has_body(body_id) and self.state.body(body_id).is_focal
        return self.colors.color_for(body_id, is_focal)

    # ------------------------------------------------------------------------------
    # Pointer routing
    # ------------------------------------------------------------------------------

    def pointer_pressed(self, body_id: Optional[str], screen_pos: Point) -> bool:
        """
        Pointer-down on a body (drag) or on the background (`body_id=None`, pan).

        Returns:
            True if a gesture started.
        """
        self._stop_reset_animation()
        self._pan_last = None

        if body_id is not None:
            # a press on a body never starts a pan, even if the body is unknown
            if self.drag is None or not self.drag.gesture_start(body_id, self.transform.to_scene(screen_pos)):
                return False
            self.runner.wake()
            return True

        self._pan_last = Point(*screen_pos)
        return True

    def pointer_moved(self, screen_pos: Point) -> None:
        if self.drag is not None and self.drag.is_active:
            self.drag.gesture_move(self.transform.to_scene(screen_pos))
            self.runner.wake()
        elif self._pan_last is not None:
            dx = screen_pos[0] - self._pan_last.x
            dy = screen_pos[1] - self._pan_last.y
            self._pan_last = Point(*screen_pos)
            self.transform.pan_by(dx, dy)
            self.transform_changed.emit(self.transform)

    def pointer_released(self) -> None:
        if self.drag is not None and self.drag.is_active:
            self.drag.gesture_end()
        self._pan_last = None

    @property
    def is_panning(self) -> bool:
        return self._pan_last is not None

    # ------------------------------------------------------------------------------
    # Zoom
    # ------------------------------------------------------------------------------

    def wheel(self, angle_delta: float, screen_pos: Point) -> None:
        """Zoom around the pointer; 120 angle-delta units per wheel notch."""
        cfg = self.viewport_config
        factor = cfg.wheel_base ** (angle_delta * cfg.wheel_sensitivity)
        self._zoom_by(factor, Point(*screen_pos))

    def zoom_in(self) -> None:
        self._zoom_by(self.viewport_config.zoom_step, self._viewport_center())

    def zoom_out(self) -> None:
        self._zoom_by(1.0 / self.viewport_config.zoom_step, self._viewport_center())

    def reset_view(self, animated: bool = True) -> None:
        """Restore scale 1 / zero offset, by default with a short eased animation."""
        self._stop_reset_animation()
        if not animated or self.transform.is_identity:
            self.transform.reset()
            self._on_transform_zoomed()
            return

        start = self.transform.snapshot()
        target = self.transform.snapshot()
        target.reset()

        animation = QVariantAnimation(self)
        animation.setStartValue(0.0)
        animation.setEndValue(1.0)
        animation.setDuration(self.viewport_config.reset_duration_ms)
        animation.setEasingCurve(QEasingCurve.Type.InOutCubic)

        def on_value(t: float) -> None:
            self.transform.assign(start.interpolated(target, float(t)))
            self.transform_changed.emit(self.transform)

        animation.valueChanged.connect(on_value)
        animation.finished.connect(self._on_reset_finished)
        self._reset_animation = animation
        animation.start()

    @property
    def is_resetting(self) -> bool:
        return self._reset_animation is not None

    def _on_reset_finished(self) -> None:
        self._release_reset_animation()
        # eased interpolation can stop a rounding error short of scale 1
        self.transform.reset()
        self._on_transform_zoomed()

    def _zoom_by(self, factor: float, anchor: Point) -> None:
        self._stop_reset_animation()
        if self.transform.zoom_by(factor, anchor):
            self._on_transform_zoomed()

    def _on_transform_zoomed(self) -> None:
        self.transform_changed.emit(self.transform)
        # zoom alters rendered container sizes; pan never does
        self.request_truncation()

    def _stop_reset_animation(self, notify: bool = True) -> None:
        """
        Interrupt a running reset animation.

        The transform stays at the intermediate scale reached so far. A stopped
        animation never emits `finished`, so the scale change is announced
        here unless `notify` is False.
        """
        if self._reset_animation is None:
            return
        self._reset_animation.stop()
        self._release_reset_animation()
        if notify:
            self._on_transform_zoomed()

    def _release_reset_animation(self) -> None:
        if self._reset_animation is not None:
            self._reset_animation.deleteLater()
            self._reset_animation = None

    def _viewport_center(self) -> Point:
        return Point(self.viewport.width / 2.0, self.viewport.height / 2.0)

    # ------------------------------------------------------------------------------
    # Truncation / tooltips
    # ------------------------------------------------------------------------------

    def request_truncation(self) -> None:
        self.truncation_requested.emit()

    def update_truncation(self, boxes: Iterable[LabelBox]) -> frozenset[str]:
        """Recompute the truncation set from fresh label measurements."""
        truncated = detect(boxes)
        tooltip = self.tooltips.update(truncated)
        self.truncation_changed.emit(truncated)
        self.tooltip_changed.emit(tooltip)
        return truncated

    def hover_entered(self, body_id: str, screen_pos: Point) -> None:
        if self.state is None or not self.state.has_body(body_id):
            logger.warning(f"Hover on unknown body '{body_id}' ignored.")
            return
        tooltip = self.tooltips.hover_enter(body_id, self.state.body(body_id).label, screen_pos)
        self.tooltip_changed.emit(tooltip)

    def hover_moved(self, screen_pos: Point) -> None:
        if self.tooltips.hovered_id is None:
            return
        self.tooltip_changed.emit(self.tooltips.hover_move(screen_pos))

    def hover_left(self) -> None:
        self.tooltips.hover_exit()
        self.tooltip_changed.emit(None)

    # ------------------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------------------

    def shutdown(self) -> None:
        """Stop the tick loop and any running animation."""
        self._stop_reset_animation(notify=False)
        self.runner.stop()
