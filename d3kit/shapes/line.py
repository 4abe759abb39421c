from __future__ import annotations

from typing import Iterable

import numpy as np

from d3kit.config import GeneratorStyle
from d3kit.scene import LineRenderer
from d3kit.shapes.base import Accessor, Generator, R, RecordFilter, keep_none


class Line2D(Generator[R]):
    """A single polyline through every kept record, in data order.

    The default filter keeps no record, so a line built without a filter draws
    nothing. Pass `filter=keep_all` (or any inclusion predicate) to choose which
    records the line samples.
    """

    node_name = "line"
    default_filter = staticmethod(keep_none)

    def __init__(
        self,
        data: Iterable[R] = (),
        x: Accessor | None = None,
        y: Accessor | None = None,
        filter: RecordFilter | None = None,
        *,
        style: GeneratorStyle | None = None,
    ) -> None:
        super().__init__(data, x=x, y=y, filter=filter, style=style)
        self._line = self._node.add_component(LineRenderer(width=self._style.stroke_width, material=self._material))

    @property
    def line(self) -> LineRenderer:
        return self._line

    @property
    def positions(self) -> np.ndarray:
        return self._line.positions

    @property
    def primitive_count(self) -> int:
        return self._line.position_count

    @property
    def stroke_width(self) -> float:
        return self._line.end_width

    def set_stroke_width(self, stroke_width: float) -> "Line2D[R]":
        if stroke_width < 0:
            raise ValueError("stroke_width must be >= 0")
        self._line.set_width(float(stroke_width))
        return self

    def _points(self) -> list[tuple[float, float, float]]:
        x_of, y_of = self._require("x", "y")
        return [(x_of(d), y_of(d), 0.0) for d in self._kept_records()]

    def _rebuild(self) -> None:
        self._line.set_positions(self._points())

    def _clear(self) -> None:
        self._line.set_positions([])

    def _apply_material(self) -> None:
        self._line.material = self._material


class Line3D(Line2D[R]):
    node_name = "line3d"

    def __init__(
        self,
        data: Iterable[R] = (),
        x: Accessor | None = None,
        y: Accessor | None = None,
        z: Accessor | None = None,
        filter: RecordFilter | None = None,
        *,
        style: GeneratorStyle | None = None,
    ) -> None:
        super().__init__(data, x=x, y=y, filter=filter, style=style)
        self._accessors["z"] = z

    def set_z(self, accessor: Accessor) -> "Line3D[R]":
        return self._set_accessor("z", accessor)

    def _points(self) -> list[tuple[float, float, float]]:
        x_of, y_of, z_of = self._require("x", "y", "z")
        return [(x_of(d), y_of(d), z_of(d)) for d in self._kept_records()]
