from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import ClassVar, Generic

import numpy as np

from d3kit.config import RGBA, AxisStyle
from d3kit.scales import ContinuousScale, D
from d3kit.scene import Billboard, LineRenderer, Material, Node, TextLabel


LOGGER = logging.getLogger(__name__)

_UNIT = np.eye(3, dtype=np.float64)


class Axis(ABC, Generic[D]):
    """Tick marks and labels for one scale.

    Geometry is rebuilt lazily: scale changes and layout setters only mark the
    axis dirty, and the next `reconcile()` destroys every tick visual and
    rebuilds them from the scale. Calling `reconcile()` on a clean axis does
    nothing, so many setters in one frame cost a single rebuild.
    """

    node_name: ClassVar[str] = "axis"
    # Index of the spatial axis carrying the main line, the perpendicular axis
    # carrying the ticks, and the direction ticks extend along it.
    main_axis: ClassVar[int] = 0
    tick_axis: ClassVar[int] = 1
    tick_sign: ClassVar[float] = -1.0

    def __init__(
        self,
        scale: ContinuousScale[D],
        tick_count: int | None = None,
        *,
        style: AxisStyle | None = None,
    ) -> None:
        style = style or AxisStyle()
        self._scale = scale
        self._node = Node(self.node_name)
        self._axis_line = self._node.add_component(LineRenderer(width=style.axis_stroke_width))

        self._requested_tick_count = style.tick_count if tick_count is None else int(tick_count)
        self._tick_count = 0
        self._tick_values: list[D] = []
        self._tick_size = style.tick_size
        self._tick_font_size = style.tick_font_size
        self._axis_stroke_width = style.axis_stroke_width
        self._tick_stroke_width = style.tick_stroke_width
        self._tick_text_color: RGBA = style.tick_text_color
        self._face_viewer = style.face_viewer
        self._axis_material: Material | None = None
        self._tick_material: Material | None = None

        self._tick_containers: list[Node] = []
        self._tick_lines: list[LineRenderer] = []
        self._tick_labels: list[TextLabel] = []

        self._dirty = True
        self._subscriptions = [
            scale.on_domain_changed(self._on_scale_domain_changed),
            scale.on_range_changed(self._on_scale_range_changed),
        ]

    @property
    def scale(self) -> ContinuousScale[D]:
        return self._scale

    @property
    def node(self) -> Node:
        return self._node

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def tick_count(self) -> int:
        """Tick count resolved by the scale at the last rebuild."""
        return self._tick_count

    @property
    def requested_tick_count(self) -> int:
        return self._requested_tick_count

    @property
    def tick_values(self) -> tuple[D, ...]:
        return tuple(self._tick_values)

    @property
    def tick_size(self) -> float:
        return self._tick_size

    @property
    def tick_font_size(self) -> float:
        return self._tick_font_size

    @property
    def axis_stroke_width(self) -> float:
        return self._axis_stroke_width

    @property
    def tick_stroke_width(self) -> float:
        return self._tick_stroke_width

    @property
    def axis_line(self) -> LineRenderer:
        return self._axis_line

    @property
    def tick_containers(self) -> tuple[Node, ...]:
        return tuple(self._tick_containers)

    @property
    def tick_lines(self) -> tuple[LineRenderer, ...]:
        return tuple(self._tick_lines)

    @property
    def tick_labels(self) -> tuple[TextLabel, ...]:
        return tuple(self._tick_labels)

    @property
    def axis_material(self) -> Material | None:
        return self._axis_line.material

    @property
    def tick_material(self) -> Material | None:
        return self._tick_material

    def set_tick_count(self, count: int) -> "Axis[D]":
        """Requested tick count; values below 2 disable ticks."""
        count = int(count)
        if count != self._requested_tick_count:
            self._requested_tick_count = count
            self._mark_dirty()
        return self

    def set_tick_size(self, tick_size: float) -> "Axis[D]":
        if tick_size < 0:
            raise ValueError("tick_size must be >= 0")
        if tick_size != self._tick_size:
            self._tick_size = float(tick_size)
            self._mark_dirty()
        return self

    def set_tick_font_size(self, font_size: float) -> "Axis[D]":
        if font_size <= 0:
            raise ValueError("font_size must be > 0")
        if font_size != self._tick_font_size:
            self._tick_font_size = float(font_size)
            self._mark_dirty()
        return self

    def set_axis_stroke_width(self, stroke_width: float) -> "Axis[D]":
        if stroke_width < 0:
            raise ValueError("stroke_width must be >= 0")
        if stroke_width != self._axis_stroke_width:
            self._axis_stroke_width = float(stroke_width)
            self._mark_dirty()
        return self

    def set_tick_stroke_width(self, stroke_width: float) -> "Axis[D]":
        if stroke_width < 0:
            raise ValueError("stroke_width must be >= 0")
        if stroke_width != self._tick_stroke_width:
            self._tick_stroke_width = float(stroke_width)
            self._mark_dirty()
        return self

    def set_tick_text_color(self, color: RGBA) -> "Axis[D]":
        self._tick_text_color = color
        for label in self._tick_labels:
            label.color = color
        return self

    def set_tick_face_viewer(self, enabled: bool) -> "Axis[D]":
        """Turn tick labels toward the scene camera on every `Scene.update()`."""
        if enabled == self._face_viewer:
            return self
        self._face_viewer = enabled
        for label in self._tick_labels:
            assert label.node is not None
            if enabled:
                label.node.add_component(Billboard())
            else:
                label.node.remove_component(Billboard)
        return self

    @property
    def face_viewer(self) -> bool:
        return self._face_viewer

    def set_axis_material(self, material: Material) -> "Axis[D]":
        self._axis_line.material = material.clone()
        return self

    def set_tick_material(self, material: Material) -> "Axis[D]":
        copied = material.clone()
        for line in self._tick_lines:
            line.material = copied
        self._tick_material = copied
        return self

    def rotate_around_x(self, degrees: float) -> "Axis[D]":
        return self._set_rotation(0, degrees)

    def rotate_around_y(self, degrees: float) -> "Axis[D]":
        return self._set_rotation(1, degrees)

    def rotate_around_z(self, degrees: float) -> "Axis[D]":
        return self._set_rotation(2, degrees)

    def attach(self, parent: Node) -> "Axis[D]":
        self._node.set_parent(parent)
        self._node.local_position = (0.0, 0.0, 0.0)
        return self

    def reconcile(self) -> "Axis[D]":
        if not self._dirty:
            return self
        self._destroy_ticks()
        self._construct_main_line()
        self._construct_ticks()
        self._dirty = False
        LOGGER.debug("%s rebuilt with %d ticks", self.node_name, self._tick_count)
        return self

    def update(self) -> "Axis[D]":
        return self.reconcile()

    def destroy(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions.clear()
        self._destroy_ticks()
        self._node.destroy()

    def _mark_dirty(self) -> None:
        self._dirty = True

    def _on_scale_domain_changed(self, x0: D, x1: D) -> None:
        self._mark_dirty()

    def _on_scale_range_changed(self, y0: float, y1: float) -> None:
        self._mark_dirty()

    def _set_rotation(self, component: int, degrees: float) -> "Axis[D]":
        rotation = self._node.local_rotation.copy()
        rotation[component] = float(degrees)
        self._node.local_rotation = rotation
        return self

    def _destroy_ticks(self) -> None:
        for container in self._tick_containers:
            container.destroy()
        self._tick_containers = []
        self._tick_lines = []
        self._tick_labels = []

    def _construct_main_line(self) -> None:
        x0, x1 = self._scale.domain()
        main = _UNIT[self.main_axis]
        self._axis_line.set_positions([main * self._scale.map(x0), main * self._scale.map(x1)])
        self._axis_line.set_width(self._axis_stroke_width)

    def _construct_ticks(self) -> None:
        ticks = self._scale.ticks(self._requested_tick_count)
        # The scale may resolve fewer ticks than requested (integer domains).
        self._tick_values = list(ticks)
        self._tick_count = len(ticks)

        main = _UNIT[self.main_axis]
        tick_dir = _UNIT[self.tick_axis] * self.tick_sign
        for i, value in enumerate(ticks):
            container = Node(f"tick_{i}", parent=self._node)
            container.local_position = main * self._scale.map(value)

            line_node = Node("tick_line", parent=container)
            line_node.local_position = tick_dir * (self._axis_stroke_width / 2.0)
            line = line_node.add_component(LineRenderer(width=self._tick_stroke_width, material=self._tick_material))
            line.set_positions([np.zeros(3), tick_dir * self._tick_size])

            text_node = Node("tick_text", parent=container)
            label = text_node.add_component(
                TextLabel(
                    text=self._scale.tick_text(value),
                    font_size=self._tick_font_size,
                    color=self._tick_text_color,
                )
            )
            # The offset depends on the measured label, so measure before placing.
            label.force_mesh_update()
            text_node.local_position = self._label_position(label)
            if self._face_viewer:
                text_node.add_component(Billboard())

            self._tick_containers.append(container)
            self._tick_lines.append(line)
            self._tick_labels.append(label)

    @abstractmethod
    def _label_position(self, label: TextLabel) -> tuple[float, float, float]:
        ...


class AxisBottom(Axis[D]):
    """Main line along x; ticks point down with labels centered below them."""

    node_name = "axis_bottom"
    main_axis = 0
    tick_axis = 1
    tick_sign = -1.0

    def _label_position(self, label: TextLabel) -> tuple[float, float, float]:
        return (0.0, -(self._tick_size + label.rendered_height / 2.0), 0.0)


class AxisLeft(Axis[D]):
    """Main line along y; ticks point left with labels to their left."""

    node_name = "axis_left"
    main_axis = 1
    tick_axis = 0
    tick_sign = -1.0

    def _label_position(self, label: TextLabel) -> tuple[float, float, float]:
        return (-(self._tick_size + label.rendered_width / 2.0), 0.0, 0.0)


class AxisRight(Axis[D]):
    """Main line along y; ticks point right with labels to their right."""

    node_name = "axis_right"
    main_axis = 1
    tick_axis = 0
    tick_sign = 1.0

    def _label_position(self, label: TextLabel) -> tuple[float, float, float]:
        return (self._tick_size + label.rendered_width / 2.0, 0.0, 0.0)
