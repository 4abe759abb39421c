from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import Callable, Generic, Iterable, TypeVar

from d3kit.config import RGBA, GeneratorStyle
from d3kit.errors import MissingAccessorError
from d3kit.scene import Material, Node


LOGGER = logging.getLogger(__name__)

R = TypeVar("R")

Accessor = Callable[[R], float]
RecordFilter = Callable[[R], bool]


def keep_all(_: object) -> bool:
    return True


def keep_none(_: object) -> bool:
    return False


class Generator(ABC, Generic[R]):
    """Binds a record sequence to scene primitives through accessor functions.

    Every data/accessor/shape/filter setter only marks the generator dirty;
    `reconcile()` destroys the previous primitives and builds new ones from
    the records the filter keeps. Accessors may read state the generator
    cannot observe (a scale, a closure variable), so `force_update()` marks it
    dirty unconditionally.
    """

    node_name = "generator"
    default_filter: RecordFilter = staticmethod(keep_all)

    def __init__(
        self,
        data: Iterable[R] = (),
        *,
        x: Accessor | None = None,
        y: Accessor | None = None,
        filter: RecordFilter | None = None,
        style: GeneratorStyle | None = None,
    ) -> None:
        self._style = style or GeneratorStyle()
        self._node = Node(self.node_name)
        self._data: Iterable[R] = data
        self._accessors: dict[str, Accessor | None] = {"x": x, "y": y}
        self._filter: RecordFilter = filter if filter is not None else self.default_filter
        self._material: Material | None = None
        if self._style.color is not None:
            self._material = Material(name=f"{self.node_name}_material", color=self._style.color)
        self._dirty = True

    @property
    def node(self) -> Node:
        return self._node

    @property
    def data(self) -> Iterable[R]:
        return self._data

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def material(self) -> Material | None:
        return self._material

    @property
    @abstractmethod
    def primitive_count(self) -> int:
        ...

    def set_data(self, data: Iterable[R]) -> "Generator[R]":
        self._data = data
        self._dirty = True
        return self

    def set_x(self, accessor: Accessor) -> "Generator[R]":
        return self._set_accessor("x", accessor)

    def set_y(self, accessor: Accessor) -> "Generator[R]":
        return self._set_accessor("y", accessor)

    def set_filter(self, record_filter: RecordFilter | None) -> "Generator[R]":
        """Inclusion predicate: records for which it returns True are drawn."""
        self._filter = record_filter if record_filter is not None else self.default_filter
        self._dirty = True
        return self

    def force_update(self) -> "Generator[R]":
        self._dirty = True
        return self

    def attach(self, parent: Node) -> "Generator[R]":
        self._node.set_parent(parent)
        self._node.local_position = (0.0, 0.0, 0.0)
        return self

    def set_material(self, material: Material) -> "Generator[R]":
        self._material = material.clone()
        self._apply_material()
        return self

    def set_color(self, color: RGBA) -> "Generator[R]":
        if self._material is None:
            self._material = Material(name=f"{self.node_name}_material")
            self._apply_material()
        self._material.color = color
        return self

    def set_stroke_width(self, stroke_width: float) -> "Generator[R]":
        return self

    def reconcile(self) -> "Generator[R]":
        if not self._dirty:
            return self
        self._rebuild()
        self._dirty = False
        LOGGER.debug("%s rebuilt with %d primitives", self.node_name, self.primitive_count)
        return self

    def update(self) -> "Generator[R]":
        return self.reconcile()

    def destroy(self) -> None:
        self._clear()
        self._node.destroy()

    def _set_accessor(self, name: str, accessor: Accessor) -> "Generator[R]":
        self._accessors[name] = accessor
        self._dirty = True
        return self

    def _require(self, *names: str) -> tuple[Accessor, ...]:
        missing = [name for name in names if self._accessors.get(name) is None]
        if missing:
            raise MissingAccessorError(f"{self.node_name} requires accessor(s): {', '.join(missing)}")
        return tuple(self._accessors[name] for name in names)  # type: ignore[misc]

    def _kept_records(self) -> list[R]:
        return [d for d in self._data if self._filter(d)]

    @abstractmethod
    def _rebuild(self) -> None:
        ...

    @abstractmethod
    def _clear(self) -> None:
        ...

    @abstractmethod
    def _apply_material(self) -> None:
        ...
