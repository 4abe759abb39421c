from __future__ import annotations

import unittest
from unittest import mock

import numpy as np

from d3kit.axis import AxisBottom, AxisLeft, AxisRight
from d3kit.config import AxisStyle
from d3kit.scales import IntLinearScale, LinearScale
from d3kit.scene import Billboard, Material, Node


class AxisReconcileTests(unittest.TestCase):
    def setUp(self) -> None:
        self.scale = LinearScale(0, 10, 0, 100)
        self.axis = AxisBottom(self.scale, 6)

    def test_new_axis_is_dirty_until_reconciled(self) -> None:
        self.assertTrue(self.axis.is_dirty)
        self.axis.reconcile()
        self.assertFalse(self.axis.is_dirty)
        self.assertEqual(self.axis.tick_count, 6)
        self.assertEqual(len(self.axis.tick_containers), 6)
        self.assertEqual(len(self.axis.tick_labels), 6)

    def test_ticks_are_placed_along_main_axis(self) -> None:
        self.axis.reconcile()
        xs = [float(c.local_position[0]) for c in self.axis.tick_containers]
        np.testing.assert_allclose(xs, [0.0, 20.0, 40.0, 60.0, 80.0, 100.0])
        self.assertTrue(all(float(c.local_position[1]) == 0.0 for c in self.axis.tick_containers))
        np.testing.assert_allclose(self.axis.axis_line.positions, [[0, 0, 0], [100, 0, 0]])

    def test_label_text_comes_from_scale(self) -> None:
        self.axis.reconcile()
        self.assertEqual(self.axis.tick_labels[0].text, "0.00")
        self.assertEqual(self.axis.tick_labels[-1].text, "10.00")

    def test_scale_domain_change_marks_dirty(self) -> None:
        self.axis.reconcile()
        self.assertAlmostEqual(self.scale.F(5), 50.0)
        with mock.patch.object(self.axis, "_mark_dirty", wraps=self.axis._mark_dirty) as mark_dirty:
            self.scale.domain(0, 20)
        mark_dirty.assert_called_once_with()
        self.assertAlmostEqual(self.scale.F(5), 25.0)
        self.assertTrue(self.axis.is_dirty)
        self.axis.reconcile()
        self.assertEqual(self.axis.tick_labels[-1].text, "20.00")

    def test_scale_range_change_marks_dirty(self) -> None:
        self.axis.reconcile()
        self.scale.range(0, 50)
        self.assertTrue(self.axis.is_dirty)
        self.axis.reconcile()
        self.assertEqual(float(self.axis.tick_containers[-1].local_position[0]), 50.0)

    def test_reconcile_on_clean_axis_destroys_nothing(self) -> None:
        self.axis.reconcile()
        before = self.axis.tick_containers
        with mock.patch.object(Node, "destroy", autospec=True) as destroy:
            self.axis.reconcile()
            self.axis.update()
        destroy.assert_not_called()
        self.assertEqual(self.axis.tick_containers, before)

    def test_rebuild_replaces_previous_ticks(self) -> None:
        self.axis.reconcile()
        old = self.axis.tick_containers
        self.axis.set_tick_count(3)
        self.axis.reconcile()
        self.assertTrue(all(c.destroyed for c in old))
        self.assertEqual(len(self.axis.node.children), 3)

    def test_setting_same_value_keeps_axis_clean(self) -> None:
        self.axis.reconcile()
        self.axis.set_tick_count(6)
        self.axis.set_tick_size(self.axis.tick_size)
        self.assertFalse(self.axis.is_dirty)
        self.axis.set_tick_size(0.5)
        self.assertTrue(self.axis.is_dirty)

    def test_layout_setters_mark_dirty(self) -> None:
        for setter, value in (
            (self.axis.set_tick_font_size, 3.0),
            (self.axis.set_axis_stroke_width, 0.05),
            (self.axis.set_tick_stroke_width, 0.05),
        ):
            self.axis.reconcile()
            setter(value)
            self.assertTrue(self.axis.is_dirty)

    def test_negative_tick_size_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.axis.set_tick_size(-1)

    def test_tick_count_below_two_draws_no_ticks(self) -> None:
        self.axis.set_tick_count(1).reconcile()
        self.assertEqual(self.axis.tick_count, 0)
        self.assertEqual(self.axis.tick_containers, ())
        self.assertEqual(self.axis.axis_line.position_count, 2)

    def test_integer_scale_resolves_fewer_ticks(self) -> None:
        axis = AxisLeft(IntLinearScale(0, 7, 0, 7), 6)
        axis.reconcile()
        self.assertEqual(axis.requested_tick_count, 6)
        self.assertEqual(axis.tick_count, 2)
        self.assertEqual(axis.tick_values, (0, 7))


class AxisLayoutTests(unittest.TestCase):
    def test_bottom_labels_sit_below_ticks(self) -> None:
        axis = AxisBottom(LinearScale(0, 1, 0, 4), 2).reconcile()
        for container in axis.tick_containers:
            line_node, text_node = container.children
            self.assertLess(float(text_node.local_position[1]), -axis.tick_size)
            self.assertEqual(float(text_node.local_position[0]), 0.0)
            np.testing.assert_allclose(line_node.local_position, [0.0, -axis.axis_stroke_width / 2.0, 0.0])

    def test_left_labels_sit_left_of_ticks(self) -> None:
        axis = AxisLeft(LinearScale(0, 1, 0, 4), 2).reconcile()
        for container in axis.tick_containers:
            text_node = container.children[1]
            self.assertLess(float(text_node.local_position[0]), -axis.tick_size)
        np.testing.assert_allclose(axis.axis_line.positions, [[0, 0, 0], [0, 4, 0]])

    def test_right_labels_sit_right_of_ticks(self) -> None:
        axis = AxisRight(LinearScale(0, 1, 0, 4), 2).reconcile()
        for container in axis.tick_containers:
            text_node = container.children[1]
            self.assertGreater(float(text_node.local_position[0]), axis.tick_size)
        for line in axis.tick_lines:
            self.assertGreater(float(line.positions[1][0]), 0.0)

    def test_style_supplies_defaults(self) -> None:
        axis = AxisBottom(LinearScale(), style=AxisStyle(tick_count=3, tick_size=0.5))
        self.assertEqual(axis.requested_tick_count, 3)
        self.assertEqual(axis.tick_size, 0.5)

    def test_rotation_and_attach(self) -> None:
        parent = Node("chart")
        axis = AxisBottom(LinearScale())
        axis.node.local_position = (4.0, 4.0, 4.0)
        axis.rotate_around_y(-90).attach(parent)
        self.assertIs(axis.node.parent, parent)
        np.testing.assert_allclose(axis.node.local_position, [0.0, 0.0, 0.0])
        self.assertEqual(float(axis.node.local_rotation[1]), -90.0)


class AxisAppearanceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.axis = AxisBottom(LinearScale(0, 1, 0, 1), 3).reconcile()

    def test_text_color_applies_immediately(self) -> None:
        self.axis.set_tick_text_color((255, 0, 0, 255))
        self.assertFalse(self.axis.is_dirty)
        self.assertTrue(all(label.color == (255, 0, 0, 255) for label in self.axis.tick_labels))

    def test_face_viewer_toggles_billboards(self) -> None:
        self.axis.set_tick_face_viewer(True)
        self.assertFalse(self.axis.is_dirty)
        for label in self.axis.tick_labels:
            self.assertIsNotNone(label.node.get_component(Billboard))
            self.assertEqual(float(label.node.local_scale[0]), -1.0)
        self.axis.set_tick_face_viewer(False)
        for label in self.axis.tick_labels:
            self.assertIsNone(label.node.get_component(Billboard))
            self.assertEqual(float(label.node.local_scale[0]), 1.0)

    def test_face_viewer_survives_rebuild(self) -> None:
        self.axis.set_tick_face_viewer(True)
        self.axis.set_tick_count(4).reconcile()
        self.assertTrue(all(label.node.get_component(Billboard) is not None for label in self.axis.tick_labels))

    def test_materials_are_cloned(self) -> None:
        material = Material(name="ink", color=(0, 0, 0, 255))
        self.axis.set_tick_material(material).set_axis_material(material)
        material.color = (1, 1, 1, 255)
        self.assertIsNot(self.axis.tick_material, material)
        self.assertEqual(self.axis.tick_material.color, (0, 0, 0, 255))
        self.assertEqual(self.axis.axis_material.color, (0, 0, 0, 255))
        self.assertTrue(all(line.material is self.axis.tick_material for line in self.axis.tick_lines))

    def test_destroy_cancels_scale_subscriptions(self) -> None:
        scale = self.axis.scale
        self.assertEqual(len(scale.domain_changed), 1)
        self.axis.destroy()
        self.assertEqual(len(scale.domain_changed), 0)
        self.assertEqual(len(scale.range_changed), 0)
        self.assertTrue(self.axis.node.destroyed)


if __name__ == "__main__":
    unittest.main()
