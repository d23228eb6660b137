"""Tests for the pixel <-> data calibration."""

import unittest

from curve_digitizer.calibration import ANCHOR_SEQUENCE, AnchorRole, AxisValues, Calibration


def _standard_calibration():
    return Calibration.from_anchors(
        [(100, 400), (500, 400), (100, 400), (100, 50)],
        AxisValues(x_min=0, x_max=60, y_min=0, y_max=1),
    )


class TestCalibrationState(unittest.TestCase):

    def test_new_calibration_is_empty(self):
        cal = Calibration()
        self.assertFalse(cal.is_complete)
        self.assertEqual(cal.step, 0)
        self.assertEqual(cal.current_role, AnchorRole.X_MIN)
        self.assertEqual(cal.anchors, {})

    def test_default_axis_values(self):
        v = Calibration().values
        self.assertEqual((v.x_min, v.x_max, v.y_min, v.y_max), (0, 60, 0, 1))

    def test_steps_advance_in_fixed_order(self):
        cal = Calibration()
        seen = []
        for i, (x, y) in enumerate([(100, 400), (500, 400), (100, 400), (100, 50)]):
            self.assertFalse(cal.is_complete)
            seen.append(cal.add_anchor(x, y))
            self.assertEqual(cal.step, i + 1)
        self.assertEqual(tuple(seen), ANCHOR_SEQUENCE)
        self.assertTrue(cal.is_complete)
        self.assertIsNone(cal.current_role)

    def test_add_anchor_after_complete_is_noop(self):
        cal = _standard_calibration()
        self.assertIsNone(cal.add_anchor(1, 1))
        self.assertEqual(cal.anchors[AnchorRole.X_MIN].x, 100)

    def test_clear_returns_to_empty(self):
        cal = _standard_calibration()
        cal.clear()
        self.assertFalse(cal.is_complete)
        self.assertEqual(cal.step, 0)
        self.assertEqual(cal.anchors, {})
        self.assertIsNone(cal.pixel_to_data(300, 225))

    def test_from_anchors_requires_four(self):
        with self.assertRaises(ValueError):
            Calibration.from_anchors([(0, 0), (1, 1), (2, 2)])

    def test_role_labels(self):
        self.assertIn("X-axis MINIMUM", AnchorRole.X_MIN.label)
        self.assertEqual(AnchorRole.Y_MAX.key, "y_max")


class TestCalibrationConversion(unittest.TestCase):

    def test_midpoint_maps_to_midpoint(self):
        d = _standard_calibration().pixel_to_data(300, 225)
        self.assertAlmostEqual(d.x, 30.0)
        self.assertAlmostEqual(d.y, 0.5)
        self.assertEqual((d.px, d.py), (300, 225))

    def test_anchor_corners(self):
        cal = _standard_calibration()
        origin = cal.pixel_to_data(100, 400)
        self.assertEqual((origin.x, origin.y), (0.0, 0.0))
        far = cal.pixel_to_data(500, 50)
        self.assertEqual((far.x, far.y), (60.0, 1.0))

    def test_results_rounded_to_four_decimals(self):
        d = _standard_calibration().pixel_to_data(101.3, 399)
        # 1.3 / 400 * 60 = 0.195 ; 1 / 350 = 0.002857...
        self.assertEqual(d.x, 0.195)
        self.assertEqual(d.y, 0.0029)

    def test_exact_ties_round_away_from_zero(self):
        cal = Calibration.from_anchors(
            [(0, 330), (320, 330), (0, 330), (0, 10)],
            AxisValues(x_min=0, x_max=1, y_min=0, y_max=1),
        )
        # 10 / 320 == 0.03125 exactly
        d = cal.pixel_to_data(10, 320)
        self.assertEqual(d.x, 0.0313)
        self.assertEqual(d.y, 0.0313)
        neg = Calibration.from_anchors(
            [(0, 330), (320, 330), (0, 330), (0, 10)],
            AxisValues(x_min=0, x_max=-1, y_min=0, y_max=1),
        )
        self.assertEqual(neg.pixel_to_data(10, 320).x, -0.0313)

    def test_incomplete_conversions_fail(self):
        cal = Calibration()
        cal.add_anchor(100, 400)
        cal.add_anchor(500, 400)
        cal.add_anchor(100, 400)
        self.assertIsNone(cal.pixel_to_data(300, 225))
        self.assertIsNone(cal.data_to_pixel(30, 0.5))
        self.assertIsNone(cal.bounds())

    def test_degenerate_x_axis_fails_cleanly(self):
        cal = Calibration.from_anchors([(100, 400), (100, 400), (100, 400), (100, 50)])
        self.assertTrue(cal.is_degenerate)
        self.assertIsNone(cal.pixel_to_data(300, 225))
        self.assertIsNone(cal.data_to_pixel(30, 0.5))

    def test_degenerate_y_axis_fails_cleanly(self):
        cal = Calibration.from_anchors([(100, 400), (500, 400), (100, 200), (300, 200)])
        self.assertTrue(cal.is_degenerate)
        self.assertIsNone(cal.pixel_to_data(300, 225))
        self.assertIsNone(cal.data_to_pixel(30, 0.5))

    def test_zero_data_range_has_no_inverse(self):
        cal = Calibration.from_anchors(
            [(100, 400), (500, 400), (100, 400), (100, 50)],
            AxisValues(x_min=5, x_max=5, y_min=0, y_max=1),
        )
        self.assertFalse(cal.is_degenerate)
        self.assertIsNone(cal.data_to_pixel(5, 0.5))
        d = cal.pixel_to_data(300, 225)
        self.assertEqual((d.x, d.y), (5.0, 0.5))

    def test_repeated_role_leaves_calibration_unusable(self):
        cal = Calibration()
        cal.set_anchor(AnchorRole.X_MIN, 100, 400)
        cal.set_anchor(AnchorRole.X_MIN, 110, 400)
        cal.set_anchor(AnchorRole.Y_MIN, 100, 400)
        cal.set_anchor(AnchorRole.Y_MAX, 100, 50)
        self.assertTrue(cal.is_complete)
        self.assertIsNone(cal.pixel_to_data(300, 225))
        self.assertIsNone(cal.data_to_pixel(30, 0.5))
        self.assertIsNone(cal.bounds())

    def test_round_trip(self):
        cal = _standard_calibration()
        for px, py in [(100, 400), (123.5, 77.25), (300, 225), (499, 51), (250.75, 333.0)]:
            d = cal.pixel_to_data(px, py)
            p = cal.data_to_pixel(d.x, d.y)
            self.assertAlmostEqual(p.x, px, delta=0.02)
            self.assertAlmostEqual(p.y, py, delta=0.02)

    def test_data_to_pixel_is_exact_inverse(self):
        cal = _standard_calibration()
        p = cal.data_to_pixel(30, 0.5)
        self.assertAlmostEqual(p.x, 300.0)
        self.assertAlmostEqual(p.y, 225.0)

    def test_non_zero_axis_minimum(self):
        cal = Calibration.from_anchors(
            [(50, 300), (450, 300), (50, 300), (50, 100)],
            AxisValues(x_min=10, x_max=20, y_min=50, y_max=100),
        )
        d = cal.pixel_to_data(250, 200)
        self.assertAlmostEqual(d.x, 15.0)
        self.assertAlmostEqual(d.y, 75.0)

    def test_contains(self):
        cal = _standard_calibration()
        self.assertTrue(cal.contains(0, 0))
        self.assertTrue(cal.contains(60, 1))
        self.assertFalse(cal.contains(60.0001, 0.5))
        self.assertFalse(cal.contains(30, -0.01))

    def test_bounds(self):
        cal = Calibration.from_anchors([(100.4, 400), (499.6, 400), (100, 399.5), (100, 50.2)])
        b = cal.bounds()
        self.assertEqual((b.x0, b.y0, b.x1, b.y1), (100, 50, 500, 400))


if __name__ == "__main__":
    unittest.main()
