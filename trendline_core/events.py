from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping, Optional


EventType = Literal[
    "pointer_enter",
    "pointer_move",
    "pointer_leave",
]
EVENT_TYPES: tuple[str, ...] = ("pointer_enter", "pointer_move", "pointer_leave")


@dataclass(frozen=True)
class InputEvent:
    event_type: EventType
    timestamp: float = 0.0
    x: Optional[float] = None
    y: Optional[float] = None


def parse_pointer_event(event_type: str, payload: object, *, timestamp: float = 0.0) -> InputEvent | None:
    """Parse a raw pointer notification; anything unrecognised yields None."""
    if event_type not in EVENT_TYPES:
        return None
    x: float | None = None
    y: float | None = None
    if isinstance(payload, Mapping):
        try:
            if payload.get("x") is not None:
                x = float(payload["x"])
            if payload.get("y") is not None:
                y = float(payload["y"])
        except (TypeError, ValueError):
            return None
    if event_type == "pointer_move" and (x is None or y is None):
        return None
    return InputEvent(event_type=event_type, timestamp=float(timestamp), x=x, y=y)  # type: ignore[arg-type]
