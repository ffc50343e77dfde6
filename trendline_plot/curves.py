from __future__ import annotations

import numpy as np


def contiguous_true_runs(mask: np.ndarray) -> list[tuple[int, int]]:
    """Half-open ``(start, stop)`` index ranges where ``mask`` is True."""
    idx = np.flatnonzero(mask)
    if idx.size == 0:
        return []
    runs: list[tuple[int, int]] = []
    start = int(idx[0])
    prev = int(idx[0])
    for v in idx[1:]:
        iv = int(v)
        if iv == prev + 1:
            prev = iv
            continue
        runs.append((start, prev + 1))
        start = iv
        prev = iv
    runs.append((start, prev + 1))
    return runs


def monotone_tangents(xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Fritsch-Carlson tangents for a cubic that never overshoots in y.

    ``xs`` must be strictly increasing. End tangents use the one-sided
    three-point estimate so the curve leaves each end smoothly.
    """
    n = xs.size
    if n < 2:
        return np.zeros(n, dtype=np.float64)
    h = np.diff(xs)
    s = np.diff(ys) / h
    t = np.zeros(n, dtype=np.float64)
    if n == 2:
        t[:] = s[0]
        return t
    h0 = h[:-1]
    h1 = h[1:]
    s0 = s[:-1]
    s1 = s[1:]
    p = (s0 * h1 + s1 * h0) / (h0 + h1)
    inner = (np.sign(s0) + np.sign(s1)) * np.minimum(np.minimum(np.abs(s0), np.abs(s1)), 0.5 * np.abs(p))
    t[1:-1] = np.nan_to_num(inner, nan=0.0)
    t[0] = (3.0 * s[0] - t[1]) / 2.0
    t[-1] = (3.0 * s[-1] - t[-2]) / 2.0
    return t


def monotone_x_points(xs: np.ndarray, ys: np.ndarray, *, steps: int = 12) -> tuple[np.ndarray, np.ndarray]:
    """Flatten a monotone-in-x cubic through ``(xs, ys)`` into polyline vertices."""
    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)
    if xs.size < 3:
        return xs.copy(), ys.copy()
    t = monotone_tangents(xs, ys)
    u = np.linspace(0.0, 1.0, steps + 1, dtype=np.float64)[1:]
    b0 = (1.0 - u) ** 3
    b1 = 3.0 * u * (1.0 - u) ** 2
    b2 = 3.0 * u**2 * (1.0 - u)
    b3 = u**3

    out_x = [xs[:1]]
    out_y = [ys[:1]]
    for i in range(xs.size - 1):
        dx = (xs[i + 1] - xs[i]) / 3.0
        c1x, c1y = xs[i] + dx, ys[i] + dx * t[i]
        c2x, c2y = xs[i + 1] - dx, ys[i + 1] - dx * t[i + 1]
        out_x.append(b0 * xs[i] + b1 * c1x + b2 * c2x + b3 * xs[i + 1])
        out_y.append(b0 * ys[i] + b1 * c1y + b2 * c2y + b3 * ys[i + 1])
    return np.concatenate(out_x), np.concatenate(out_y)


def build_path(
    px: np.ndarray,
    py: np.ndarray,
    *,
    steps: int = 12,
) -> list[tuple[np.ndarray, np.ndarray]]:
    """Split a projected series at non-finite samples and smooth each run.

    Single-sample runs are returned as one-vertex pieces so they can still be
    drawn as a dot.
    """
    finite = np.isfinite(px) & np.isfinite(py)
    pieces: list[tuple[np.ndarray, np.ndarray]] = []
    for start, stop in contiguous_true_runs(finite):
        pieces.append(monotone_x_points(px[start:stop], py[start:stop], steps=steps))
    return pieces
