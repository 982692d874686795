"""
Truncation Detector
Decides which labels overflow their container, and whether hovering a body
should show its full label as a tooltip.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from bubblechart.model.body import Point, Size


@dataclass(frozen=True)
class LabelBox:
    """Measured label geometry reported by the render surface."""
    id: str
    content_size: Size  # extent needed to render all text unclipped
    container_size: Size  # extent allotted to the label


def is_truncated(box: LabelBox) -> bool:
    """A label is truncated iff its content exceeds the container along either axis."""
    return (
        box.content_size.width > box.container_size.width
        or box.content_size.height > box.container_size.height
    )


def detect(boxes: Iterable[LabelBox]) -> frozenset[str]:
    """Return the ids of all truncated labels (pure function of the measurements)."""
    return frozenset(box.id for box in boxes if is_truncated(box))


@dataclass(frozen=True)
class Tooltip:
    body_id: str
    text: str
    position: Point


@dataclass
class TooltipModel:
    """
    Hover state + the current truncation set.

    A tooltip is shown iff the hovered body's label is truncated; it hides
    immediately when the hover ends.
    """
    truncated: frozenset[str] = field(default_factory=frozenset)
    hovered_id: Optional[str] = None
    current: Optional[Tooltip] = None
    _label: str = ""
    _pointer: Point = Point(0.0, 0.0)

    def update(self, truncated: Iterable[str]) -> Optional[Tooltip]:
        """Replace the truncation set (recomputed, never patched)."""
        self.truncated = frozenset(truncated)
        self._refresh()
        return self.current

    def hover_enter(self, body_id: str, label: str, pointer: Point) -> Optional[Tooltip]:
        self.hovered_id = body_id
        self._label = label
        self._pointer = Point(*pointer)
        self._refresh()
        return self.current

    def hover_move(self, pointer: Point) -> Optional[Tooltip]:
        self._pointer = Point(*pointer)
        self._refresh()
        return self.current

    def hover_exit(self) -> None:
        self.hovered_id = None
        self._label = ""
        self.current = None

    def _refresh(self) -> None:
        if self.hovered_id is not None and self.hovered_id in self.truncated:
            self.current = Tooltip(self.hovered_id, self._label, self._pointer)
        else:
            self.current = None
