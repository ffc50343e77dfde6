from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TypeAlias

import numpy as np
import torch


LOGGER = logging.getLogger(__name__)

# Substituted for pixels whose channels are not finite or fall outside 0..255.
INVALID_PIXEL = torch.tensor([255, 0, 255, 255], dtype=torch.uint8)

Rect: TypeAlias = tuple[int, int, int, int]


@dataclass(frozen=True)
class FullRewrite:
    tensor_h_w_4: torch.Tensor


@dataclass(frozen=True)
class ReplaceRect:
    x: int
    y: int
    width: int
    height: int
    rect_h_w_4: torch.Tensor

    @property
    def rect(self) -> Rect:
        return (self.x, self.y, self.width, self.height)


WriteOp: TypeAlias = FullRewrite | ReplaceRect


@dataclass(frozen=True)
class WriteBatch:
    operations: list[WriteOp]


class WindowMatrix:
    """Fixed-size RGBA surface the chart presents into.

    A batch is staged on a copy and only becomes visible once every operation
    in it validated, so a rejected batch leaves pixels and ``revision`` as they
    were. ``last_damage`` is the bounding rect of the most recent batch.
    """

    def __init__(self, height: int, width: int, background: tuple[int, int, int, int] = (0, 0, 0, 255)) -> None:
        if height <= 0 or width <= 0:
            raise ValueError("height and width must be > 0")
        self.height = height
        self.width = width
        self._pixels = torch.tensor(background, dtype=torch.uint8).expand(height, width, 4).clone()
        self._revision = 0
        self._last_damage: Rect | None = None

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def last_damage(self) -> Rect | None:
        return self._last_damage

    def read_snapshot(self) -> torch.Tensor:
        return self._pixels.clone()

    def to_numpy(self) -> np.ndarray:
        return self._pixels.numpy().copy()

    def submit_write_batch(self, batch: WriteBatch) -> int:
        """Apply ``batch`` atomically and return the new revision."""
        if not batch.operations:
            raise ValueError("write batch must include at least one operation")
        staged = self._pixels.clone()
        damage: Rect | None = None
        replaced = 0
        for op in batch.operations:
            if isinstance(op, FullRewrite):
                staged, bad = _coerce_rgba(op.tensor_h_w_4, (self.height, self.width))
                rect = (0, 0, self.width, self.height)
            elif isinstance(op, ReplaceRect):
                rect = op.rect
                self._check_rect(rect)
                patch, bad = _coerce_rgba(op.rect_h_w_4, (op.height, op.width))
                staged[op.y : op.y + op.height, op.x : op.x + op.width] = patch
            else:
                raise TypeError(f"Unsupported write op: {type(op)!r}")
            replaced += bad
            damage = rect if damage is None else union_rect(damage, rect)

        if replaced:
            LOGGER.warning("write batch sanitized invalid RGBA channels; offending_pixels=%d", replaced)
        self._pixels = staged
        self._last_damage = damage
        self._revision += 1
        return self._revision

    def _check_rect(self, rect: Rect) -> None:
        x, y, w, h = rect
        if w <= 0 or h <= 0:
            raise ValueError("rect width/height must be > 0")
        if x < 0 or y < 0 or x + w > self.width or y + h > self.height:
            raise ValueError(f"rect {rect} exceeds {self.width}x{self.height} surface")


def _coerce_rgba(value: torch.Tensor, size_h_w: tuple[int, int]) -> tuple[torch.Tensor, int]:
    """uint8 copy of ``value``; returns the tensor and the count of replaced pixels."""
    if not torch.is_tensor(value):
        raise ValueError("rgba payload must be a torch.Tensor")
    expected = (*size_h_w, 4)
    if tuple(value.shape) != expected:
        raise ValueError(f"rgba payload has shape {tuple(value.shape)}, expected {expected}")
    if value.dtype == torch.uint8:
        return value.clone(), 0
    if value.dtype == torch.bool or value.is_complex():
        raise ValueError(f"rgba payload must be real numeric, got {value.dtype}")
    raw = value.to(torch.float32)
    bad_pixels = torch.any(~torch.isfinite(raw) | (raw < 0) | (raw > 255), dim=-1)
    out = raw.nan_to_num(nan=0.0).clamp(0, 255).to(torch.uint8)
    out[bad_pixels] = INVALID_PIXEL
    return out, int(bad_pixels.sum().item())


def union_rect(a: Rect, b: Rect) -> Rect:
    """Bounding rect of two ``(x, y, w, h)`` rects."""
    x0, y0 = min(a[0], b[0]), min(a[1], b[1])
    x1 = max(a[0] + a[2], b[0] + b[2])
    y1 = max(a[1] + a[3], b[1] + b[3])
    return (x0, y0, x1 - x0, y1 - y0)
