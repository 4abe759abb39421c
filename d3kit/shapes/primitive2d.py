from __future__ import annotations

from typing import Iterable

from d3kit.config import GeneratorStyle
from d3kit.errors import UnsupportedError
from d3kit.scene import MeshRenderer, Node, PrimitiveShape2D, generate_mesh
from d3kit.shapes.base import Accessor, Generator, R, RecordFilter


class Primitive2D(Generator[R]):
    """One mesh instance per kept record, positioned at (x, y) and scaled by (width, height).

    `DOT` ignores width/height and draws every point at the style's dot size.
    """

    node_name = "primitive"

    def __init__(
        self,
        data: Iterable[R] = (),
        x: Accessor | None = None,
        y: Accessor | None = None,
        width: Accessor | None = None,
        height: Accessor | None = None,
        shape: PrimitiveShape2D | str = PrimitiveShape2D.CIRCLE,
        filter: RecordFilter | None = None,
        *,
        style: GeneratorStyle | None = None,
    ) -> None:
        super().__init__(data, x=x, y=y, filter=filter, style=style)
        self._accessors["width"] = width
        self._accessors["height"] = height
        self._shape = _coerce_shape(shape)
        self._primitives: list[Node] = []

    @property
    def shape(self) -> PrimitiveShape2D:
        return self._shape

    @property
    def primitives(self) -> tuple[Node, ...]:
        return tuple(self._primitives)

    @property
    def primitive_count(self) -> int:
        return len(self._primitives)

    def set_width(self, accessor: Accessor) -> "Primitive2D[R]":
        return self._set_accessor("width", accessor)

    def set_height(self, accessor: Accessor) -> "Primitive2D[R]":
        return self._set_accessor("height", accessor)

    def set_shape(self, shape: PrimitiveShape2D | str) -> "Primitive2D[R]":
        self._shape = _coerce_shape(shape)
        self._dirty = True
        return self

    def _rebuild(self) -> None:
        self._clear()
        if self._shape is PrimitiveShape2D.DOT:
            x_of, y_of = self._require("x", "y")
            size = self._style.dot_size
            width_of = height_of = lambda _: size  # noqa: E731
        else:
            x_of, y_of, width_of, height_of = self._require("x", "y", "width", "height")
        mesh = generate_mesh(self._shape)
        for counter, d in enumerate(self._kept_records()):
            go = Node(f"{self._shape.value}_{counter}", parent=self._node)
            go.add_component(MeshRenderer(mesh, material=self._material))
            go.local_position = (x_of(d), y_of(d), 0.0)
            go.local_scale = (width_of(d), height_of(d), 1.0)
            self._primitives.append(go)

    def _clear(self) -> None:
        for go in self._primitives:
            go.destroy()
        self._primitives = []

    def _apply_material(self) -> None:
        for go in self._primitives:
            renderer = go.get_component(MeshRenderer)
            if renderer is not None:
                renderer.material = self._material


def _coerce_shape(shape: PrimitiveShape2D | str) -> PrimitiveShape2D:
    if isinstance(shape, PrimitiveShape2D):
        return shape
    try:
        return PrimitiveShape2D(str(shape).lower())
    except ValueError:
        raise UnsupportedError(f"unsupported 2-D shape: {shape!r}") from None
