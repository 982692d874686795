"""
Bodies and Dataset Records
==========================
This module defines the entities laid out by the force solver.

Why is this file needed?
------------------------
1. Input: `BubbleRecord` is the validated, immutable form of one entry of the
   dataset supplied by the data-loading layer.
2. Simulation: `Body` is the mutable per-bubble state (position, velocity and
   the optional pinned position) owned by the force solver.
3. Validation: malformed datasets are rejected here, before a simulation is
   ever seeded.

Classes:
    Point, Size: Lightweight 2D value types.
    BubbleRecord: One dataset entry.
    Body: One simulated bubble.
    DatasetError: Raised for malformed datasets.
"""
from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, NamedTuple, Optional

logger = logging.getLogger(__name__)


class DatasetError(ValueError):
    """Raised when a dataset violates the record invariants."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("Invalid dataset: " + "; ".join(self.problems))


class Point(NamedTuple):
    """A point in 2D (simulation or screen) space."""
    x: float
    y: float


class Size(NamedTuple):
    """A width/height pair in pixels."""
    width: float
    height: float


@dataclass(frozen=True)
class BubbleRecord:
    """One entry of the input dataset."""
    id: str
    name: str
    value: float
    is_center: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BubbleRecord:
        """
        Build a record from the external mapping form.

        Args:
            data: Mapping with keys ``id``, ``name``, ``value`` and an optional
                ``isCenter`` flag.

        Raises:
            DatasetError: If a required key is missing or has the wrong type.
        """
        missing = [key for key in ("id", "name", "value") if key not in data]
        if missing:
            raise DatasetError([f"record {dict(data)!r} is missing {', '.join(missing)}"])

        value = data["value"]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise DatasetError([f"record '{data['id']}' has non-numeric value {value!r}"])

        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            value=float(value),
            is_center=bool(data.get("isCenter", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "name": self.name, "value": self.value}
        if self.is_center:
            out["isCenter"] = True
        return out


def validate_records(records: Iterable[BubbleRecord]) -> tuple[BubbleRecord, ...]:
    """
    Check the dataset invariants and return the records as an immutable tuple.

    Every problem is collected so the error lists all of them at once; no
    entry is ever dropped or renamed.

    Raises:
        DatasetError: On duplicate or empty ids, negative or non-finite values,
            or more than one focal record.
    """
    records = tuple(records)
    problems: list[str] = []

    counts = Counter(r.id for r in records)
    duplicates = sorted(rid for rid, n in counts.items() if n > 1)
    if duplicates:
        problems.append(f"duplicate ids: {', '.join(duplicates)}")

    for r in records:
        if not r.id:
            problems.append(f"record '{r.name}' has an empty id")
        if not math.isfinite(r.value):
            problems.append(f"record '{r.id}' has non-finite value {r.value}")
        elif r.value < 0:
            problems.append(f"record '{r.id}' has negative value {r.value}")

    focal = [r.id for r in records if r.is_center]
    if len(focal) > 1:
        problems.append(f"more than one focal record: {', '.join(focal)}")

    if problems:
        error = DatasetError(problems)
        logger.error(str(error))
        raise error

    return records


@dataclass(eq=False)
class Body:
    """
    One visual bubble as seen by the force solver.

    The position is owned by the solver. While `pinned_position` is set the
    solver holds the body at exactly that point every tick.
    """
    id: str
    label: str
    value: float
    radius: float
    is_focal: bool = False

    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    pinned_position: Optional[Point] = None

    def __post_init__(self) -> None:
        if not self.radius > 0:
            raise ValueError(f"Body '{self.id}' must have a positive radius, got {self.radius}.")

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    @property
    def is_pinned(self) -> bool:
        return self.pinned_position is not None

    def pin(self, point: Point) -> None:
        """Hold the body at `point` (kinematic constraint, not a force)."""
        self.pinned_position = Point(float(point[0]), float(point[1]))
        self.x, self.y = self.pinned_position
        self.vx = self.vy = 0.0

    def unpin(self) -> None:
        self.pinned_position = None
