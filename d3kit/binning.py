from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, TypeVar

import numpy as np

from d3kit.errors import MissingAccessorError


R = TypeVar("R")

DEFAULT_BIN_COUNT = 10


@dataclass(frozen=True)
class Bin:
    center: float
    width: float
    count: int = 0


@dataclass(frozen=True)
class Bin2D:
    center_x: float
    center_y: float
    width_x: float
    width_y: float
    count: int = 0


class Binner(Generic[R]):
    """Uniform 1-D histogram over `[min, max)`.

    The domain is split into `threshold` intervals. A record lands in bin
    `floor((v - min) / interval)` when `min <= v < max`; anything else,
    including `v == max`, is dropped.
    """

    def __init__(self) -> None:
        self._data: Iterable[R] = ()
        self._domain_min = 0.0
        self._domain_max = 1.0
        self._threshold = DEFAULT_BIN_COUNT
        self._accessor: Callable[[R], float] | None = None

    def set_data(self, data: Iterable[R]) -> "Binner[R]":
        self._data = data
        return self

    def set_domain(self, vmin: float, vmax: float) -> "Binner[R]":
        self._domain_min = float(vmin)
        self._domain_max = float(vmax)
        return self

    def set_threshold(self, threshold: int) -> "Binner[R]":
        if threshold <= 0:
            raise ValueError("threshold must be > 0")
        self._threshold = int(threshold)
        return self

    def set_value(self, accessor: Callable[[R], float]) -> "Binner[R]":
        self._accessor = accessor
        return self

    @property
    def domain(self) -> tuple[float, float]:
        return (self._domain_min, self._domain_max)

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def interval(self) -> float:
        return (self._domain_max - self._domain_min) / self._threshold

    def generate(self) -> list[Bin]:
        if self._accessor is None:
            raise MissingAccessorError("binning requires a value accessor")
        interval = self.interval
        values = np.fromiter((self._accessor(d) for d in self._data), dtype=np.float64)
        counts = _bin_counts(values, self._domain_min, self._domain_max, interval, self._threshold)
        centers = _bin_centers(self._domain_min, interval, self._threshold)
        return [
            Bin(center=float(c), width=interval, count=int(n))
            for c, n in zip(centers.tolist(), counts.tolist(), strict=True)
        ]


class Binner2D(Generic[R]):
    """Uniform 2-D histogram; bins are laid out row-major (`row * bins_x + col`, row follows y)."""

    def __init__(self) -> None:
        self._data: Iterable[R] = ()
        self._domain_x = (0.0, 1.0)
        self._domain_y = (0.0, 1.0)
        self._bins_x = DEFAULT_BIN_COUNT
        self._bins_y = DEFAULT_BIN_COUNT
        self._x_accessor: Callable[[R], float] | None = None
        self._y_accessor: Callable[[R], float] | None = None

    def set_data(self, data: Iterable[R]) -> "Binner2D[R]":
        self._data = data
        return self

    def set_domain_x(self, vmin: float, vmax: float) -> "Binner2D[R]":
        self._domain_x = (float(vmin), float(vmax))
        return self

    def set_domain_y(self, vmin: float, vmax: float) -> "Binner2D[R]":
        self._domain_y = (float(vmin), float(vmax))
        return self

    def set_bin_count_x(self, count: int) -> "Binner2D[R]":
        if count <= 0:
            raise ValueError("bin count must be > 0")
        self._bins_x = int(count)
        return self

    def set_bin_count_y(self, count: int) -> "Binner2D[R]":
        if count <= 0:
            raise ValueError("bin count must be > 0")
        self._bins_y = int(count)
        return self

    def set_x(self, accessor: Callable[[R], float]) -> "Binner2D[R]":
        self._x_accessor = accessor
        return self

    def set_y(self, accessor: Callable[[R], float]) -> "Binner2D[R]":
        self._y_accessor = accessor
        return self

    @property
    def bin_counts(self) -> tuple[int, int]:
        return (self._bins_x, self._bins_y)

    @property
    def interval_x(self) -> float:
        return (self._domain_x[1] - self._domain_x[0]) / self._bins_x

    @property
    def interval_y(self) -> float:
        return (self._domain_y[1] - self._domain_y[0]) / self._bins_y

    def generate(self) -> list[Bin2D]:
        if self._x_accessor is None or self._y_accessor is None:
            raise MissingAccessorError("2-D binning requires both x and y accessors")
        records = list(self._data)
        xs = np.fromiter((self._x_accessor(d) for d in records), dtype=np.float64, count=len(records))
        ys = np.fromiter((self._y_accessor(d) for d in records), dtype=np.float64, count=len(records))
        ix = self.interval_x
        iy = self.interval_y
        xmin, xmax = self._domain_x
        ymin, ymax = self._domain_y

        mask = (xs >= xmin) & (xs < xmax) & (ys >= ymin) & (ys < ymax)
        col = _bin_index(xs[mask], xmin, ix, self._bins_x)
        row = _bin_index(ys[mask], ymin, iy, self._bins_y)
        total = self._bins_x * self._bins_y
        counts = np.bincount(row * self._bins_x + col, minlength=total)

        cx = _bin_centers(xmin, ix, self._bins_x).tolist()
        cy = _bin_centers(ymin, iy, self._bins_y).tolist()
        bins: list[Bin2D] = []
        for j in range(self._bins_y):
            for i in range(self._bins_x):
                bins.append(
                    Bin2D(
                        center_x=cx[i],
                        center_y=cy[j],
                        width_x=ix,
                        width_y=iy,
                        count=int(counts[j * self._bins_x + i]),
                    )
                )
        return bins


def _bin_centers(vmin: float, interval: float, n: int) -> np.ndarray:
    return vmin + interval / 2.0 + np.arange(n, dtype=np.float64) * interval


def _bin_index(values: np.ndarray, vmin: float, interval: float, n: int) -> np.ndarray:
    idx = np.floor((values - vmin) / interval).astype(np.int64)
    # v < max guarantees idx < n in exact arithmetic; clip float round-up at the top edge.
    return np.clip(idx, 0, n - 1)


def _bin_counts(values: np.ndarray, vmin: float, vmax: float, interval: float, n: int) -> np.ndarray:
    inside = values[(values >= vmin) & (values < vmax)]
    if inside.size == 0:
        return np.zeros(n, dtype=np.int64)
    return np.bincount(_bin_index(inside, vmin, interval, n), minlength=n)
