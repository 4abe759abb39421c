from __future__ import annotations

import math
from typing import TYPE_CHECKING, Sequence

import numpy as np

from d3kit.config import RGBA
from d3kit.scene.material import Material
from d3kit.scene.mesh import Mesh
from d3kit.text import DEFAULT_FONT_FAMILY, measure_text

if TYPE_CHECKING:
    from d3kit.scene.node import Node, Scene


class Component:
    """Behaviour or renderable data attached to exactly one `Node`."""

    def __init__(self) -> None:
        self.node: Node | None = None

    def _bind(self, node: "Node") -> None:
        self.node = node
        self.on_enable()

    def _unbind(self) -> None:
        self.on_disable()
        self.node = None

    def on_enable(self) -> None:
        pass

    def on_disable(self) -> None:
        pass

    def update(self, scene: "Scene") -> None:
        pass


class LineRenderer(Component):
    def __init__(self, width: float = 0.0175, material: Material | None = None) -> None:
        super().__init__()
        self.positions = np.zeros((0, 3), dtype=np.float64)
        self.start_width = width
        self.end_width = width
        self.material = material
        self.use_world_space = False

    @property
    def position_count(self) -> int:
        return int(self.positions.shape[0])

    def set_positions(self, positions: Sequence[Sequence[float]]) -> None:
        arr = np.asarray(positions, dtype=np.float64)
        if arr.size == 0:
            self.positions = np.zeros((0, 3), dtype=np.float64)
            return
        if arr.ndim != 2 or arr.shape[1] != 3:
            raise ValueError("line positions must have shape (N, 3)")
        self.positions = arr.copy()

    def set_width(self, width: float) -> None:
        self.start_width = width
        self.end_width = width


class MeshRenderer(Component):
    def __init__(self, mesh: Mesh, material: Material | None = None) -> None:
        super().__init__()
        self.mesh = mesh
        self.material = material
        self.cast_shadows = True
        self.receive_shadows = True
        self.light_probes = True
        self.reflection_probes = True

    def set_lighting(self, enabled: bool) -> None:
        self.cast_shadows = enabled
        self.receive_shadows = enabled
        self.light_probes = enabled
        self.reflection_probes = enabled


class TextLabel(Component):
    """Text whose rendered size is measured from font metrics on `force_mesh_update()`."""

    def __init__(
        self,
        text: str = "",
        font_size: float = 2.0,
        color: RGBA = (0, 0, 0, 255),
        font_family: str = DEFAULT_FONT_FAMILY,
    ) -> None:
        super().__init__()
        self.text = text
        self.font_size = font_size
        self.color = color
        self.font_family = font_family
        self._rendered: tuple[float, float] | None = None

    @property
    def rendered_width(self) -> float:
        return self._rendered_size()[0]

    @property
    def rendered_height(self) -> float:
        return self._rendered_size()[1]

    def force_mesh_update(self) -> None:
        self._rendered = measure_text(self.text, self.font_size, font_family=self.font_family)

    def _rendered_size(self) -> tuple[float, float]:
        if self._rendered is None:
            self.force_mesh_update()
        assert self._rendered is not None
        return self._rendered


class Billboard(Component):
    """Keeps its node turned toward the scene camera.

    Facing the camera flips text handedness, so the node's x scale is mirrored
    once when the behaviour is enabled and restored when it is removed.
    """

    def __init__(self) -> None:
        super().__init__()
        self._cached_x_scale: float | None = None

    def on_enable(self) -> None:
        assert self.node is not None
        scale = self.node.local_scale
        self._cached_x_scale = float(scale[0])
        self.node.local_scale = (-scale[0], scale[1], scale[2])

    def on_disable(self) -> None:
        if self.node is None or self._cached_x_scale is None:
            return
        scale = self.node.local_scale
        self.node.local_scale = (self._cached_x_scale, scale[1], scale[2])
        self._cached_x_scale = None

    def update(self, scene: "Scene") -> None:
        if self.node is None:
            return
        self.node.local_rotation = look_at_rotation(self.node.world_position(), scene.camera.world_position())


def look_at_rotation(origin: Sequence[float], target: Sequence[float]) -> tuple[float, float, float]:
    """Euler angles (degrees) that point local +z from `origin` toward `target`."""
    dx, dy, dz = (float(t) - float(o) for o, t in zip(origin, target, strict=True))
    yaw = math.degrees(math.atan2(dx, dz))
    pitch = -math.degrees(math.atan2(dy, math.hypot(dx, dz)))
    return (pitch, yaw, 0.0)
