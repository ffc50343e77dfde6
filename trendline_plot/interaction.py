from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


PointerPhase = Literal["idle", "tracking"]


@dataclass
class PointerTracker:
    """Hover state for the chart surface.

    ``last_index`` is the most recently reported nearest sample and doubles as
    the locality hint for the next query.
    """

    phase: PointerPhase = "idle"
    last_index: int | None = None

    @property
    def tracking(self) -> bool:
        return self.phase == "tracking"

    def enter(self) -> None:
        self.phase = "tracking"
        self.last_index = None

    def leave(self) -> None:
        self.phase = "idle"
        self.last_index = None

    def accept(self, index: int | None) -> bool:
        """Record a query result; True when it differs from the previous one."""
        if index == self.last_index:
            return False
        self.last_index = index
        return True

    def reset_hits(self) -> None:
        self.last_index = None
