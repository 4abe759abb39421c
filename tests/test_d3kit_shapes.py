from __future__ import annotations

import unittest
from unittest import mock

import numpy as np

from d3kit.config import GeneratorStyle
from d3kit.errors import MissingAccessorError, UnsupportedError
from d3kit.scales import LinearScale
from d3kit.scene import Material, MeshRenderer, Node
from d3kit.shapes import Line2D, Line3D, Primitive2D, Primitive3D, PrimitiveShape2D, keep_all


RECORDS = [{"x": 1.0, "y": 2.0}, {"x": 5.0, "y": 9.0}]


def _circles(**kwargs) -> Primitive2D[dict]:
    return Primitive2D(
        RECORDS,
        x=lambda d: d["x"],
        y=lambda d: d["y"],
        width=lambda d: 0.5,
        height=lambda d: 0.25,
        **kwargs,
    )


class Primitive2DTests(unittest.TestCase):
    def test_one_primitive_per_record(self) -> None:
        gen = _circles().reconcile()
        self.assertEqual(gen.primitive_count, 2)
        self.assertFalse(gen.is_dirty)
        first = gen.primitives[0]
        np.testing.assert_allclose(first.local_position, [1.0, 2.0, 0.0])
        np.testing.assert_allclose(first.local_scale, [0.5, 0.25, 1.0])
        self.assertEqual(first.name, "circle_0")
        self.assertIs(first.parent, gen.node)

    def test_filter_keeps_only_matching_records(self) -> None:
        gen = _circles(filter=lambda d: not d["x"] > 3).reconcile()
        self.assertEqual(gen.primitive_count, 1)
        np.testing.assert_allclose(gen.primitives[0].local_position, [1.0, 2.0, 0.0])

    def test_setters_only_mark_dirty(self) -> None:
        gen = _circles().reconcile()
        gen.set_filter(lambda d: False)
        self.assertTrue(gen.is_dirty)
        self.assertEqual(gen.primitive_count, 2)
        gen.reconcile()
        self.assertEqual(gen.primitive_count, 0)
        gen.set_filter(None).reconcile()
        self.assertEqual(gen.primitive_count, 2)

    def test_rebuild_destroys_previous_primitives(self) -> None:
        gen = _circles().reconcile()
        old = gen.primitives
        gen.set_data(RECORDS[:1]).reconcile()
        self.assertTrue(all(node.destroyed for node in old))
        self.assertEqual(len(gen.node.children), 1)

    def test_clean_reconcile_does_nothing(self) -> None:
        gen = _circles().reconcile()
        with mock.patch.object(Node, "destroy", autospec=True) as destroy:
            gen.reconcile()
            gen.update()
        destroy.assert_not_called()

    def test_force_update_rereads_external_state(self) -> None:
        scale = LinearScale(0, 10, 0, 100)
        gen = Primitive2D(
            RECORDS,
            x=lambda d: scale.map(d["x"]),
            y=lambda d: d["y"],
            width=lambda d: 1.0,
            height=lambda d: 1.0,
        ).reconcile()
        scale.domain(0, 20)
        self.assertFalse(gen.is_dirty)
        gen.force_update().reconcile()
        self.assertAlmostEqual(float(gen.primitives[1].local_position[0]), 25.0)

    def test_missing_accessor_raises(self) -> None:
        gen = Primitive2D(RECORDS, x=lambda d: d["x"], y=lambda d: d["y"])
        with self.assertRaises(MissingAccessorError):
            gen.reconcile()

    def test_dot_uses_style_size_without_width_or_height(self) -> None:
        gen = Primitive2D(
            RECORDS,
            x=lambda d: d["x"],
            y=lambda d: d["y"],
            shape="dot",
            style=GeneratorStyle(dot_size=0.2),
        ).reconcile()
        np.testing.assert_allclose(gen.primitives[0].local_scale, [0.2, 0.2, 1.0])

    def test_shape_change_and_unknown_shape(self) -> None:
        gen = _circles().reconcile()
        gen.set_shape(PrimitiveShape2D.RECT).reconcile()
        self.assertEqual(gen.primitives[0].name, "rect_0")
        with self.assertRaises(UnsupportedError):
            gen.set_shape("hexagon")

    def test_material_is_cloned_and_shared(self) -> None:
        gen = _circles().reconcile()
        material = Material(name="marks", color=(0, 128, 255, 255))
        gen.set_material(material)
        self.assertIsNot(gen.material, material)
        renderers = [node.get_component(MeshRenderer) for node in gen.primitives]
        self.assertTrue(all(r.material is gen.material for r in renderers))
        gen.set_color((1, 2, 3, 255))
        self.assertEqual(material.color, (0, 128, 255, 255))
        self.assertEqual(renderers[0].material.color, (1, 2, 3, 255))

    def test_style_color_creates_material(self) -> None:
        gen = _circles(style=GeneratorStyle(color=(9, 9, 9, 255))).reconcile()
        self.assertEqual(gen.material.color, (9, 9, 9, 255))

    def test_attach_resets_local_position(self) -> None:
        parent = Node("chart")
        gen = _circles()
        gen.node.local_position = (3.0, 3.0, 3.0)
        gen.attach(parent)
        self.assertIs(gen.node.parent, parent)
        np.testing.assert_allclose(gen.node.local_position, [0.0, 0.0, 0.0])

    def test_destroy_removes_everything(self) -> None:
        gen = _circles().reconcile()
        primitives = gen.primitives
        gen.destroy()
        self.assertTrue(gen.node.destroyed)
        self.assertTrue(all(node.destroyed for node in primitives))
        self.assertEqual(gen.primitive_count, 0)


class LineTests(unittest.TestCase):
    def test_polyline_draws_nothing_without_filter(self) -> None:
        line = Line2D(RECORDS, x=lambda d: d["x"], y=lambda d: d["y"]).reconcile()
        self.assertEqual(line.primitive_count, 0)

    def test_polyline_samples_kept_records_in_order(self) -> None:
        line = Line2D(RECORDS, x=lambda d: d["x"], y=lambda d: d["y"], filter=keep_all).reconcile()
        np.testing.assert_allclose(line.positions, [[1.0, 2.0, 0.0], [5.0, 9.0, 0.0]])
        line.set_filter(lambda d: d["x"] > 3).reconcile()
        np.testing.assert_allclose(line.positions, [[5.0, 9.0, 0.0]])

    def test_stroke_width_applies_immediately(self) -> None:
        line = Line2D(RECORDS, x=lambda d: d["x"], y=lambda d: d["y"], style=GeneratorStyle(stroke_width=0.1))
        self.assertEqual(line.stroke_width, 0.1)
        line.set_stroke_width(0.3)
        self.assertEqual(line.stroke_width, 0.3)
        self.assertEqual(line.line.start_width, 0.3)
        with self.assertRaises(ValueError):
            line.set_stroke_width(-1)

    def test_line3d_uses_z_accessor(self) -> None:
        line = Line3D(
            RECORDS,
            x=lambda d: d["x"],
            y=lambda d: d["y"],
            z=lambda d: -d["x"],
            filter=keep_all,
        ).reconcile()
        np.testing.assert_allclose(line.positions[:, 2], [-1.0, -5.0])

    def test_line3d_requires_z(self) -> None:
        line = Line3D(RECORDS, x=lambda d: d["x"], y=lambda d: d["y"], filter=keep_all)
        with self.assertRaises(MissingAccessorError):
            line.reconcile()


class Primitive3DTests(unittest.TestCase):
    def _cuboids(self, **kwargs) -> Primitive3D[dict]:
        return Primitive3D(
            RECORDS,
            x=lambda d: d["x"],
            y=lambda d: d["y"] / 2.0,
            z=lambda d: 1.0,
            width=lambda d: 0.5,
            height=lambda d: d["y"],
            depth=lambda d: 0.75,
            **kwargs,
        )

    def test_cuboid_per_record(self) -> None:
        gen = self._cuboids().reconcile()
        self.assertEqual(gen.primitive_count, 2)
        np.testing.assert_allclose(gen.primitives[1].local_position, [5.0, 4.5, 1.0])
        np.testing.assert_allclose(gen.primitives[1].local_scale, [0.5, 9.0, 0.75])
        self.assertEqual(gen.primitives[0].name, "cube_0")

    def test_lighting_is_off_by_default_and_toggles(self) -> None:
        gen = self._cuboids().reconcile()
        renderer = gen.primitives[0].get_component(MeshRenderer)
        self.assertFalse(renderer.cast_shadows)
        self.assertFalse(renderer.reflection_probes)
        gen.set_lighting(True)
        self.assertTrue(renderer.cast_shadows)
        self.assertTrue(renderer.light_probes)

    def test_sphere_is_unsupported(self) -> None:
        with self.assertRaises(UnsupportedError):
            self._cuboids(shape="sphere")

    def test_missing_depth_raises(self) -> None:
        gen = Primitive3D(
            RECORDS,
            x=lambda d: 0.0,
            y=lambda d: 0.0,
            z=lambda d: 0.0,
            width=lambda d: 1.0,
            height=lambda d: 1.0,
        )
        with self.assertRaises(MissingAccessorError):
            gen.reconcile()


if __name__ == "__main__":
    unittest.main()
