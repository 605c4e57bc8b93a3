import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import (
    ProgressionCalculator,
    compute_target_sets,
    InvalidWeek,
    InvalidBaseline,
    InvalidOverride,
    VolumeRegulationError,
)


class ProgressionCalculatorTest(unittest.TestCase):
    def test_curve_offsets(self) -> None:
        targets = [compute_target_sets(10, w) for w in range(1, 6)]
        self.assertEqual(targets, [10, 11, 12, 9, 12])

    def test_deload_week_without_override(self) -> None:
        self.assertEqual(compute_target_sets(10, 4), 9)

    def test_override_wins(self) -> None:
        self.assertEqual(compute_target_sets(10, 5, 3), 3)
        self.assertEqual(ProgressionCalculator.compute_target_sets(2, 1, 7), 7)

    def test_override_must_be_integer(self) -> None:
        for bad in (2.7, "3", "many", True, 4.0):
            with self.assertRaises(InvalidOverride):
                compute_target_sets(10, 2, bad)
        self.assertTrue(issubclass(InvalidOverride, VolumeRegulationError))

    def test_floor_of_one_set(self) -> None:
        self.assertEqual(compute_target_sets(1, 4), 1)
        self.assertEqual(compute_target_sets(5, 2, 0), 1)
        self.assertEqual(compute_target_sets(5, 2, -3), 1)

    def test_pure_function(self) -> None:
        for week in range(1, 6):
            self.assertEqual(compute_target_sets(6, week), compute_target_sets(6, week))

    def test_invalid_week(self) -> None:
        for week in (0, 6, -1, True, 2.0, "3"):
            with self.assertRaises(InvalidWeek):
                compute_target_sets(4, week)
        # override does not bypass week validation
        with self.assertRaises(InvalidWeek):
            compute_target_sets(4, 6, 3)

    def test_invalid_baseline(self) -> None:
        with self.assertRaises(InvalidBaseline):
            compute_target_sets(0, 1)
        with self.assertRaises(InvalidBaseline):
            compute_target_sets("4", 1)

    def test_errors_are_value_errors(self) -> None:
        self.assertTrue(issubclass(InvalidWeek, VolumeRegulationError))
        self.assertTrue(issubclass(VolumeRegulationError, ValueError))

    def test_weekly_plan(self) -> None:
        plan = ProgressionCalculator.weekly_plan(3, {5: 2})
        self.assertEqual(plan, [(1, 3), (2, 4), (3, 5), (4, 2), (5, 2)])
        with self.assertRaises(InvalidWeek):
            ProgressionCalculator.weekly_plan(3, {7: 2})

    def test_restart_baseline(self) -> None:
        self.assertEqual(ProgressionCalculator.restart_baseline(3), 5)
        self.assertEqual(ProgressionCalculator.restart_baseline(3, 4), 4)
        self.assertEqual(
            ProgressionCalculator.next_cycle_baselines({"A": 3, "B": 1}, {"B": 6}),
            {"A": 5, "B": 6},
        )

    def test_deload_helpers(self) -> None:
        self.assertTrue(ProgressionCalculator.is_deload_week(4, 4))
        self.assertFalse(ProgressionCalculator.is_deload_week(3, 4))
        with self.assertRaises(InvalidWeek):
            ProgressionCalculator.is_deload_week(5, 4)
        self.assertEqual(ProgressionCalculator.deload_sets(5), 3)
        self.assertEqual(ProgressionCalculator.deload_sets(1), 1)
        with self.assertRaises(InvalidBaseline):
            ProgressionCalculator.deload_sets(0)

    def test_apply_adjustment_and_volume(self) -> None:
        self.assertEqual(ProgressionCalculator.apply_adjustment(2, -3), 1)
        self.assertEqual(ProgressionCalculator.apply_adjustment(2, 1), 3)
        self.assertEqual(ProgressionCalculator.weekly_volume([3, 4, 2]), 9)


if __name__ == "__main__":
    unittest.main()
