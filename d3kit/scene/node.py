from __future__ import annotations

import math
from typing import Iterator, Sequence, TypeVar

import numpy as np

from d3kit.scene.components import Component


C = TypeVar("C", bound=Component)


class Node:
    """Scene node with a local TRS transform, children and attached components.

    Rotation is stored as Euler angles in degrees and applied Z, then X, then Y.
    """

    def __init__(self, name: str = "node", parent: "Node | None" = None) -> None:
        self.name = name
        self._parent: Node | None = None
        self._children: list[Node] = []
        self._components: list[Component] = []
        self._position = np.zeros(3, dtype=np.float64)
        self._rotation = np.zeros(3, dtype=np.float64)
        self._scale = np.ones(3, dtype=np.float64)
        self.destroyed = False
        if parent is not None:
            self.set_parent(parent)

    def __repr__(self) -> str:
        return f"Node({self.name!r}, children={len(self._children)})"

    @property
    def parent(self) -> "Node | None":
        return self._parent

    @property
    def children(self) -> tuple["Node", ...]:
        return tuple(self._children)

    @property
    def local_position(self) -> np.ndarray:
        return self._position

    @local_position.setter
    def local_position(self, value: Sequence[float]) -> None:
        self._position = _vec3(value)

    @property
    def local_rotation(self) -> np.ndarray:
        return self._rotation

    @local_rotation.setter
    def local_rotation(self, value: Sequence[float]) -> None:
        self._rotation = _vec3(value)

    @property
    def local_scale(self) -> np.ndarray:
        return self._scale

    @local_scale.setter
    def local_scale(self, value: Sequence[float]) -> None:
        self._scale = _vec3(value)

    def set_parent(self, parent: "Node | None") -> "Node":
        if parent is self:
            raise ValueError("a node cannot be its own parent")
        if self._parent is not None:
            self._parent._children.remove(self)
        self._parent = parent
        if parent is not None:
            parent._children.append(self)
        return self

    def add_component(self, component: C) -> C:
        self._components.append(component)
        component._bind(self)
        return component

    def get_component(self, component_type: type[C]) -> C | None:
        for component in self._components:
            if isinstance(component, component_type):
                return component
        return None

    def remove_component(self, component_type: type[Component]) -> bool:
        component = self.get_component(component_type)
        if component is None:
            return False
        self._components.remove(component)
        component._unbind()
        return True

    @property
    def components(self) -> tuple[Component, ...]:
        return tuple(self._components)

    def walk(self) -> Iterator["Node"]:
        yield self
        for child in list(self._children):
            yield from child.walk()

    def destroy(self) -> None:
        for child in list(self._children):
            child.destroy()
        for component in list(self._components):
            component._unbind()
        self._components.clear()
        self.set_parent(None)
        self.destroyed = True

    def local_matrix(self) -> np.ndarray:
        m = np.eye(4, dtype=np.float64)
        m[:3, :3] = euler_matrix(self._rotation) @ np.diag(self._scale)
        m[:3, 3] = self._position
        return m

    def world_matrix(self) -> np.ndarray:
        if self._parent is None:
            return self.local_matrix()
        return self._parent.world_matrix() @ self.local_matrix()

    def world_position(self) -> np.ndarray:
        return self.world_matrix()[:3, 3].copy()


class Camera(Node):
    def __init__(self, name: str = "camera", parent: Node | None = None) -> None:
        super().__init__(name, parent)


class Scene:
    """Root of a node tree plus the camera billboards turn toward."""

    def __init__(self) -> None:
        self.root = Node("scene")
        self.camera = Camera(parent=self.root)

    def update(self) -> None:
        for node in self.root.walk():
            for component in node.components:
                component.update(self)


def euler_matrix(rotation_deg: Sequence[float]) -> np.ndarray:
    rx, ry, rz = (math.radians(float(a)) for a in rotation_deg)
    cx, sx = math.cos(rx), math.sin(rx)
    cy, sy = math.cos(ry), math.sin(ry)
    cz, sz = math.cos(rz), math.sin(rz)
    mx = np.asarray([[1.0, 0.0, 0.0], [0.0, cx, -sx], [0.0, sx, cx]])
    my = np.asarray([[cy, 0.0, sy], [0.0, 1.0, 0.0], [-sy, 0.0, cy]])
    mz = np.asarray([[cz, -sz, 0.0], [sz, cz, 0.0], [0.0, 0.0, 1.0]])
    return my @ mx @ mz


def _vec3(value: Sequence[float]) -> np.ndarray:
    arr = np.asarray(value, dtype=np.float64).reshape(-1)
    if arr.shape != (3,):
        raise ValueError("expected a 3-component vector")
    return arr.copy()
