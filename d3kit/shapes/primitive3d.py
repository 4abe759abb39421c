from __future__ import annotations

from typing import Iterable

from d3kit.config import GeneratorStyle
from d3kit.errors import UnsupportedError
from d3kit.scene import MeshRenderer, Node, PrimitiveShape3D, generate_mesh
from d3kit.shapes.base import Accessor, Generator, R, RecordFilter


class Primitive3D(Generator[R]):
    """Cuboids positioned by x/y/z accessors and scaled by width/height/depth accessors.

    Shadows and light/reflection probes are off unless `set_lighting(True)`.
    """

    node_name = "primitive3d"

    def __init__(
        self,
        data: Iterable[R] = (),
        x: Accessor | None = None,
        y: Accessor | None = None,
        z: Accessor | None = None,
        width: Accessor | None = None,
        height: Accessor | None = None,
        depth: Accessor | None = None,
        shape: PrimitiveShape3D | str = PrimitiveShape3D.CUBE,
        filter: RecordFilter | None = None,
        *,
        style: GeneratorStyle | None = None,
    ) -> None:
        super().__init__(data, x=x, y=y, filter=filter, style=style)
        self._accessors.update(z=z, width=width, height=height, depth=depth)
        self._shape = _coerce_shape(shape)
        self._lighting = False
        self._primitives: list[Node] = []

    @property
    def shape(self) -> PrimitiveShape3D:
        return self._shape

    @property
    def primitives(self) -> tuple[Node, ...]:
        return tuple(self._primitives)

    @property
    def primitive_count(self) -> int:
        return len(self._primitives)

    @property
    def lighting(self) -> bool:
        return self._lighting

    def set_z(self, accessor: Accessor) -> "Primitive3D[R]":
        return self._set_accessor("z", accessor)

    def set_width(self, accessor: Accessor) -> "Primitive3D[R]":
        return self._set_accessor("width", accessor)

    def set_height(self, accessor: Accessor) -> "Primitive3D[R]":
        return self._set_accessor("height", accessor)

    def set_depth(self, accessor: Accessor) -> "Primitive3D[R]":
        return self._set_accessor("depth", accessor)

    def set_shape(self, shape: PrimitiveShape3D | str) -> "Primitive3D[R]":
        self._shape = _coerce_shape(shape)
        self._dirty = True
        return self

    def set_lighting(self, enabled: bool) -> "Primitive3D[R]":
        self._lighting = enabled
        for go in self._primitives:
            renderer = go.get_component(MeshRenderer)
            if renderer is not None:
                renderer.set_lighting(enabled)
        return self

    def _rebuild(self) -> None:
        self._clear()
        x_of, y_of, z_of, w_of, h_of, d_of = self._require("x", "y", "z", "width", "height", "depth")
        mesh = generate_mesh(self._shape)
        for counter, d in enumerate(self._kept_records()):
            go = Node(f"{self._shape.value}_{counter}", parent=self._node)
            renderer = go.add_component(MeshRenderer(mesh, material=self._material))
            renderer.set_lighting(self._lighting)
            go.local_position = (x_of(d), y_of(d), z_of(d))
            go.local_scale = (w_of(d), h_of(d), d_of(d))
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


def _coerce_shape(shape: PrimitiveShape3D | str) -> PrimitiveShape3D:
    if isinstance(shape, PrimitiveShape3D):
        resolved = shape
    else:
        try:
            resolved = PrimitiveShape3D(str(shape).lower())
        except ValueError:
            raise UnsupportedError(f"unsupported 3-D shape: {shape!r}") from None
    if resolved is not PrimitiveShape3D.CUBE:
        raise UnsupportedError(f"unsupported 3-D shape: {resolved.value}")
    return resolved
