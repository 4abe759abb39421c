from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Callable, Generic, TypeVar

import numpy as np

from d3kit.errors import UnsupportedError
from d3kit.events import Event, Subscription


D = TypeVar("D", float, int, datetime)


class ContinuousScale(ABC, Generic[D]):
    """Continuous mapping from a typed domain interval to a float range interval.

    Setters fire `domain_changed` / `range_changed` synchronously, with the new
    endpoints, before returning the scale so calls can be chained.
    """

    default_tick_format: str | None = None

    def __init__(self, x0: D, x1: D, y0: float, y1: float) -> None:
        self.domain_changed: Event[[D, D]] = Event()
        self.range_changed: Event[[float, float]] = Event()
        self._x0 = x0
        self._x1 = x1
        self._y0 = float(y0)
        self._y1 = float(y1)
        self._tick_format = self.default_tick_format

    def domain(self, *endpoints: D):
        """`domain()` returns `(x0, x1)`; `domain(x0, x1)` sets it and returns the scale."""
        if not endpoints:
            return (self._x0, self._x1)
        if len(endpoints) != 2:
            raise TypeError("domain() takes either no arguments or (x0, x1)")
        self._x0, self._x1 = endpoints
        self.domain_changed.emit(self._x0, self._x1)
        return self

    def range(self, *endpoints: float):
        """`range()` returns `(y0, y1)`; `range(y0, y1)` sets it and returns the scale."""
        if not endpoints:
            return (self._y0, self._y1)
        if len(endpoints) != 2:
            raise TypeError("range() takes either no arguments or (y0, y1)")
        self._y0, self._y1 = float(endpoints[0]), float(endpoints[1])
        self.range_changed.emit(self._y0, self._y1)
        return self

    def on_domain_changed(self, handler: Callable[[D, D], None]) -> Subscription:
        return self.domain_changed.subscribe(handler)

    def on_range_changed(self, handler: Callable[[float, float], None]) -> Subscription:
        return self.range_changed.subscribe(handler)

    @property
    def tick_format(self) -> str | None:
        return self._tick_format

    def set_tick_format(self, fmt: str | None) -> "ContinuousScale[D]":
        self._tick_format = fmt
        return self

    def map(self, x: D) -> float:
        return _lerp(self._y0, self._y1, self._normalize(x))

    def invert(self, y: float) -> D:
        raise UnsupportedError(f"{type(self).__name__} cannot be inverted")

    # d3-style short names.
    def F(self, x: D) -> float:
        return self.map(x)

    def I(self, y: float) -> D:  # noqa: E743
        return self.invert(y)

    @abstractmethod
    def ticks(self, count: int) -> list[D]:
        """Representative domain values; may return fewer than `count` for integer domains."""

    def tick_text(self, x: D) -> str:
        if self._tick_format is None:
            return str(x)
        return format(x, self._tick_format)

    @abstractmethod
    def _normalize(self, x: D) -> float:
        ...

    def _range_position(self, y: float) -> float:
        span = self._y1 - self._y0
        if span == 0:
            return 0.0
        return _clamp01((float(y) - self._y0) / span)


class LinearScale(ContinuousScale[float]):
    default_tick_format = ",.2f"

    def __init__(self, x0: float = 0.0, x1: float = 1.0, y0: float = 0.0, y1: float = 1.0) -> None:
        super().__init__(float(x0), float(x1), y0, y1)

    def domain(self, *endpoints: float):
        if endpoints and len(endpoints) == 2:
            endpoints = (float(endpoints[0]), float(endpoints[1]))
        return super().domain(*endpoints)

    def invert(self, y: float) -> float:
        return _lerp(self._x0, self._x1, self._range_position(y))

    def ticks(self, count: int) -> list[float]:
        if count <= 1:
            return []
        return np.linspace(self._x0, self._x1, int(count), dtype=np.float64).tolist()

    def _normalize(self, x: float) -> float:
        span = self._x1 - self._x0
        if span == 0:
            return 0.0
        return _clamp01((float(x) - self._x0) / span)


class IntLinearScale(ContinuousScale[int]):
    default_tick_format = ",d"

    def __init__(self, x0: int = 0, x1: int = 1, y0: float = 0.0, y1: float = 1.0) -> None:
        super().__init__(int(x0), int(x1), y0, y1)

    def domain(self, *endpoints: int):
        if endpoints and len(endpoints) == 2:
            endpoints = (int(endpoints[0]), int(endpoints[1]))
        return super().domain(*endpoints)

    def invert(self, y: float) -> int:
        return int(round(_lerp(float(self._x0), float(self._x1), self._range_position(y))))

    def ticks(self, count: int) -> list[int]:
        if count <= 1:
            return []
        span = abs(self._x1 - self._x0)
        if span == 0:
            return []
        count = resolve_integer_tick_count(span, count)
        step = span // (count - 1)
        if self._x1 < self._x0:
            step = -step
        return [self._x0 + i * step for i in range(count)]

    def _normalize(self, x: int) -> float:
        span = self._x1 - self._x0
        if span == 0:
            return 0.0
        return _clamp01((x - self._x0) / float(span))


class TimeScale(ContinuousScale[datetime]):
    """Linear scale over a datetime domain. Ticks are evenly spaced in elapsed time."""

    def __init__(self, x0: datetime, x1: datetime, y0: float = 0.0, y1: float = 1.0) -> None:
        super().__init__(x0, x1, y0, y1)

    def ticks(self, count: int) -> list[datetime]:
        if count <= 1:
            return []
        span: timedelta = self._x1 - self._x0
        last = count - 1
        return [self._x0 + span * (i / last) for i in range(last)] + [self._x1]

    def _normalize(self, x: datetime) -> float:
        span = (self._x1 - self._x0).total_seconds()
        if span == 0:
            return 0.0
        return _clamp01((x - self._x0).total_seconds() / span)


def resolve_integer_tick_count(span: int, requested: int) -> int:
    """Largest count <= `requested` (and >= 2) whose step divides `span` evenly."""
    count = max(2, int(requested))
    while count > 2 and span % (count - 1) != 0:
        count -= 1
    return count


def _clamp01(t: float) -> float:
    if t < 0.0:
        return 0.0
    if t > 1.0:
        return 1.0
    return t


def _lerp(a: float, b: float, t: float) -> float:
    # Exact at both ends: t=0 -> a, t=1 -> b.
    return a * (1.0 - t) + b * t
