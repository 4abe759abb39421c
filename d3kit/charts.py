from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
import logging
from typing import Any, Callable, Generic, Sequence, TypeVar

from d3kit.axis import Axis, AxisBottom, AxisLeft
from d3kit.binning import Bin, Bin2D, Binner, Binner2D
from d3kit.config import ChartStyle
from d3kit.data import extent
from d3kit.scales import ContinuousScale, IntLinearScale, LinearScale, TimeScale
from d3kit.scene import Node
from d3kit.shapes import Generator, Line2D, Line3D, Primitive2D, Primitive3D, PrimitiveShape2D, keep_all


LOGGER = logging.getLogger(__name__)

R = TypeVar("R")


class Chart(ABC, Generic[R]):
    """Controller that owns the scales, axes and generators of one chart.

    `build()` creates everything once; `reconcile()` is the per-frame call
    that lets each axis and generator rebuild if it went dirty. An empty
    dataset aborts `build()` with a warning and nothing is created.
    """

    def __init__(self, data: Sequence[R], *, style: ChartStyle | None = None) -> None:
        self._data = list(data)
        self.style = style or ChartStyle()
        self._node = Node(type(self).__name__)
        self._axes: list[Axis[Any]] = []
        self._generators: list[Generator[Any]] = []
        self._x_scale: ContinuousScale[Any] | None = None
        self._y_scale: ContinuousScale[Any] | None = None
        self._z_scale: ContinuousScale[Any] | None = None
        self._built = False

    @property
    def node(self) -> Node:
        return self._node

    @property
    def is_built(self) -> bool:
        return self._built

    @property
    def axes(self) -> tuple[Axis[Any], ...]:
        return tuple(self._axes)

    @property
    def generators(self) -> tuple[Generator[Any], ...]:
        return tuple(self._generators)

    @property
    def x_scale(self) -> ContinuousScale[Any] | None:
        return self._x_scale

    @property
    def y_scale(self) -> ContinuousScale[Any] | None:
        return self._y_scale

    @property
    def z_scale(self) -> ContinuousScale[Any] | None:
        return self._z_scale

    def build(self, parent: Node | None = None) -> "Chart[R]":
        if self._built:
            return self
        if not self._data:
            LOGGER.warning("empty dataset - aborting %s", type(self).__name__)
            return self
        self._build()
        for component in (*self._axes, *self._generators):
            component.attach(self._node)
        if parent is not None:
            self._node.set_parent(parent)
            self._node.local_position = (0.0, 0.0, 0.0)
        self._built = True
        return self

    def reconcile(self) -> "Chart[R]":
        for axis in self._axes:
            axis.reconcile()
        for generator in self._generators:
            generator.reconcile()
        return self

    def resize(self, width: float, height: float, depth: float | None = None) -> "Chart[R]":
        """Change the chart extent; axes follow their scales, generators are forced."""
        if not self._built:
            return self
        assert self._x_scale is not None and self._y_scale is not None
        if self._x_scale.range() != (0.0, float(width)):
            self._x_scale.range(0.0, width)
        if self._y_scale.range() != (0.0, float(height)):
            self._y_scale.range(0.0, height)
        if depth is not None and self._z_scale is not None and self._z_scale.range() != (0.0, float(depth)):
            self._z_scale.range(0.0, depth)
        for generator in self._generators:
            generator.force_update()
        return self

    def destroy(self) -> None:
        for axis in self._axes:
            axis.destroy()
        for generator in self._generators:
            generator.destroy()
        self._axes.clear()
        self._generators.clear()
        self._node.destroy()
        self._built = False

    @abstractmethod
    def _build(self) -> None:
        ...


class ScatterPlot2D(Chart[R]):
    def __init__(
        self,
        data: Sequence[R],
        x: Callable[[R], float],
        y: Callable[[R], float],
        *,
        tick_count: int = 5,
        style: ChartStyle | None = None,
    ) -> None:
        super().__init__(data, style=style)
        self._x_of = x
        self._y_of = y
        self._tick_count = tick_count

    def _build(self) -> None:
        s = self.style
        x_scale = self._x_scale = LinearScale(*extent(self._data, self._x_of), 0.0, s.width)
        y_scale = self._y_scale = LinearScale(*extent(self._data, self._y_of), 0.0, s.height)
        self._axes = [
            AxisBottom(x_scale, self._tick_count, style=s.axis),
            AxisLeft(y_scale, self._tick_count, style=s.axis),
        ]
        size = s.marks.dot_size
        self._generators = [
            Primitive2D(
                self._data,
                x=lambda d: x_scale.map(self._x_of(d)),
                y=lambda d: y_scale.map(self._y_of(d)),
                width=lambda d: size,
                height=lambda d: size,
                shape=PrimitiveShape2D.CIRCLE,
                style=s.marks,
            )
        ]


class BarChart2D(Chart[R]):
    """Histogram of one value, drawn as one rect per bin."""

    def __init__(
        self,
        data: Sequence[R],
        value: Callable[[R], float],
        *,
        domain: tuple[float, float] | None = None,
        style: ChartStyle | None = None,
    ) -> None:
        super().__init__(data, style=style)
        self._value_of = value
        self._domain = domain
        self.bins: list[Bin] = []

    def _build(self) -> None:
        s = self.style
        vmin, vmax = self._domain if self._domain is not None else extent(self._data, self._value_of)
        self.bins = (
            Binner[R]()
            .set_data(self._data)
            .set_domain(vmin, vmax)
            .set_threshold(s.bin_count)
            .set_value(self._value_of)
            .generate()
        )
        _, max_count = extent(self.bins, lambda b: b.count)
        x_scale = self._x_scale = LinearScale(vmin, vmax, 0.0, s.width)
        y_scale = self._y_scale = IntLinearScale(0, max_count, 0.0, s.height)
        self._axes = [
            AxisBottom(x_scale, style=s.axis),
            AxisLeft(y_scale, style=s.axis),
        ]
        pad = s.bin_padding
        self._generators = [
            Primitive2D(
                self.bins,
                x=lambda b: x_scale.map(b.center),
                y=lambda b: y_scale.map(b.count) / 2.0,
                width=lambda b: _mapped_width(x_scale, b.center, b.width) - pad,
                height=lambda b: y_scale.map(b.count),
                shape=PrimitiveShape2D.RECT,
                style=s.marks,
            )
        ]


class Histogram3D(Chart[R]):
    """2-D histogram of two values, drawn as one cuboid per bin with the count as height."""

    def __init__(
        self,
        data: Sequence[R],
        x: Callable[[R], float],
        y: Callable[[R], float],
        *,
        bins_x: int = 10,
        bins_y: int = 10,
        style: ChartStyle | None = None,
    ) -> None:
        super().__init__(data, style=style)
        self._x_of = x
        self._y_of = y
        self._bins_x = bins_x
        self._bins_y = bins_y
        self.bins: list[Bin2D] = []

    def _build(self) -> None:
        s = self.style
        x_min, x_max = extent(self._data, self._x_of)
        y_min, y_max = extent(self._data, self._y_of)
        self.bins = (
            Binner2D[R]()
            .set_data(self._data)
            .set_domain_x(x_min, x_max)
            .set_domain_y(y_min, y_max)
            .set_bin_count_x(self._bins_x)
            .set_bin_count_y(self._bins_y)
            .set_x(self._x_of)
            .set_y(self._y_of)
            .generate()
        )
        _, max_count = extent(self.bins, lambda b: b.count)
        x_scale = self._x_scale = LinearScale(x_min, x_max, 0.0, s.width)
        y_scale = self._y_scale = IntLinearScale(0, max_count, 0.0, s.height)
        z_scale = self._z_scale = LinearScale(y_min, y_max, 0.0, s.depth)
        self._axes = [
            AxisBottom(x_scale, 4, style=s.axis).set_tick_face_viewer(True),
            AxisLeft(y_scale, 4, style=s.axis).set_tick_face_viewer(True),
            AxisBottom(z_scale, 4, style=s.axis).set_tick_face_viewer(True).rotate_around_y(-90.0),
        ]
        pad = s.bin_padding
        min_height = s.min_bar_height
        self._generators = [
            Primitive3D(
                self.bins,
                x=lambda b: x_scale.map(b.center_x),
                y=lambda b: y_scale.map(b.count) / 2.0,
                z=lambda b: z_scale.map(b.center_y),
                width=lambda b: _mapped_width(x_scale, b.center_x, b.width_x) - pad,
                # Zero-count bins still get a sliver so they stay visible.
                height=lambda b: max(y_scale.map(b.count), min_height),
                depth=lambda b: _mapped_width(z_scale, b.center_y, b.width_y) - pad,
                style=s.marks,
            )
        ]


class LineChart2D(Chart[R]):
    """Time series: datetime x, float y. Records outside the x domain are not drawn."""

    def __init__(
        self,
        data: Sequence[R],
        x: Callable[[R], datetime],
        y: Callable[[R], float],
        *,
        x_tick_count: int = 4,
        y_tick_count: int = 6,
        style: ChartStyle | None = None,
    ) -> None:
        super().__init__(data, style=style)
        self._x_of = x
        self._y_of = y
        self._x_tick_count = x_tick_count
        self._y_tick_count = y_tick_count

    def set_y_domain(self, y0: float, y1: float) -> "LineChart2D[R]":
        if self._y_scale is None:
            return self
        if self._y_scale.domain() != (float(y0), float(y1)):
            self._y_scale.domain(y0, y1)
            for generator in self._generators:
                generator.force_update()
        return self

    def _build(self) -> None:
        s = self.style
        x0, x1 = extent(self._data, self._x_of)
        x_scale = self._x_scale = TimeScale(x0, x1, 0.0, s.width)
        y_scale = self._y_scale = LinearScale(*extent(self._data, self._y_of), 0.0, s.height)
        self._axes = [
            AxisBottom(x_scale, self._x_tick_count, style=s.axis),
            AxisLeft(y_scale, self._y_tick_count, style=s.axis),
        ]

        def in_domain(d: R) -> bool:
            lo, hi = x_scale.domain()
            return lo <= self._x_of(d) <= hi

        self._generators = [
            Line2D(
                self._data,
                x=lambda d: x_scale.map(self._x_of(d)),
                y=lambda d: y_scale.map(self._y_of(d)),
                filter=in_domain,
                style=s.marks,
            )
        ]


class LineChart3D(Chart[R]):
    def __init__(
        self,
        data: Sequence[R],
        x: Callable[[R], float],
        y: Callable[[R], float],
        z: Callable[[R], float],
        *,
        tick_count: int = 4,
        style: ChartStyle | None = None,
    ) -> None:
        super().__init__(data, style=style)
        self._x_of = x
        self._y_of = y
        self._z_of = z
        self._tick_count = tick_count

    def _build(self) -> None:
        s = self.style
        x_scale = self._x_scale = LinearScale(*extent(self._data, self._x_of), 0.0, s.width)
        # The record's z drives height and its y drives depth.
        y_scale = self._y_scale = LinearScale(*extent(self._data, self._z_of), 0.0, s.height)
        z_scale = self._z_scale = LinearScale(*extent(self._data, self._y_of), 0.0, s.depth)
        self._axes = [
            AxisBottom(x_scale, self._tick_count, style=s.axis).set_tick_face_viewer(True),
            AxisLeft(y_scale, self._tick_count, style=s.axis).set_tick_face_viewer(True),
            AxisBottom(z_scale, self._tick_count, style=s.axis).set_tick_face_viewer(True).rotate_around_y(-90.0),
        ]
        self._generators = [
            Line3D(
                self._data,
                x=lambda d: x_scale.map(self._x_of(d)),
                y=lambda d: y_scale.map(self._z_of(d)),
                z=lambda d: z_scale.map(self._y_of(d)),
                filter=keep_all,
                style=s.marks,
            )
        ]


def _mapped_width(scale: ContinuousScale[Any], center: float, width: float) -> float:
    half = width / 2.0
    return abs(scale.map(center + half) - scale.map(center - half))
