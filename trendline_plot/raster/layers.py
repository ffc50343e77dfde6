from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from trendline_core.window_matrix import Rect, union_rect


@dataclass
class LayerCache:
    """Rendered static and series layers with the keys they were drawn for."""

    static_key: tuple[Any, ...] | None = None
    static_template: np.ndarray | None = None
    series_key: tuple[Any, ...] | None = None
    series_template: np.ndarray | None = None


@dataclass
class DirtyState:
    """Pending surface damage; ``rect is None`` while dirty means the whole surface."""

    dirty: bool = True
    rect: Rect | None = None
    reasons: set[str] = field(default_factory=lambda: {"initial"})

    def mark(self, rect: Rect | None, *, reason: str) -> None:
        self.reasons.add(reason)
        if self.dirty and self.rect is None:
            return
        if rect is None or not self.dirty:
            self.rect = rect
        else:
            self.rect = union_rect(self.rect, rect)
        self.dirty = True

    def clear(self) -> None:
        self.dirty = False
        self.rect = None
        self.reasons = set()
