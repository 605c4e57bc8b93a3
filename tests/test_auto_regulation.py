import itertools
import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import (
    AutoRegulation,
    AUTO_REGULATION_RULES,
    calculate_set_adjustment,
    MuscleGroupPriority,
    JointPain,
    Pump,
    Workload,
    InvalidFeedbackValue,
)


def all_inputs():
    return itertools.product(MuscleGroupPriority, JointPain, Pump, Workload)


class AutoRegulationTest(unittest.TestCase):
    def test_high_priority_hard_amazing(self) -> None:
        result = calculate_set_adjustment("high", "none", "amazing", "hard")
        self.assertEqual(result.set_adjustment, 1)
        self.assertIn("great pump", result.reasoning)
        self.assertEqual(result.rule, "high_hard_amazing")

    def test_low_priority_never_increases_on_no_pump(self) -> None:
        result = calculate_set_adjustment("low", "none", "none", "easy")
        self.assertEqual(result.set_adjustment, 0)

    def test_low_priority_never_positive(self) -> None:
        for prio, pain, pump, work in all_inputs():
            if prio is not MuscleGroupPriority.LOW:
                continue
            result = calculate_set_adjustment(prio, pain, pump, work)
            self.assertLessEqual(result.set_adjustment, 0)

    def test_high_joint_pain_always_minus_two(self) -> None:
        for prio, _pain, pump, work in all_inputs():
            result = calculate_set_adjustment(prio, JointPain.HIGH, pump, work)
            self.assertEqual(result.set_adjustment, -2)

    def test_too_much_workload_without_pain(self) -> None:
        for prio, pump in itertools.product(MuscleGroupPriority, Pump):
            result = calculate_set_adjustment(prio, "none", pump, "too_much")
            self.assertEqual(result.set_adjustment, -1)
            self.assertEqual(result.rule, "workload_too_much")

    def test_output_range(self) -> None:
        for args in all_inputs():
            result = calculate_set_adjustment(*args)
            self.assertIn(result.set_adjustment, (-2, -1, 0, 1))
            self.assertTrue(result.reasoning)

    def test_pain_checked_before_workload(self) -> None:
        result = calculate_set_adjustment("high", "medium", "amazing", "too_much")
        self.assertEqual(result.set_adjustment, -1)
        self.assertEqual(result.rule, "joint_pain_medium")

    def test_low_joint_pain_does_not_reduce(self) -> None:
        result = calculate_set_adjustment("high", "low", "none", "medium")
        self.assertEqual(result.set_adjustment, 1)
        self.assertEqual(result.rule, "high_no_pump")

    def test_high_priority_branches(self) -> None:
        cases = {
            ("amazing", "medium"): (1, "high_medium_amazing"),
            ("ok", "easy"): (1, "high_easy_good_pump"),
            ("none", "hard"): (1, "high_no_pump"),
            ("ok", "hard"): (0, "high_maintain"),
            ("ok", "medium"): (0, "high_maintain"),
        }
        for (pump, work), (adj, rule) in cases.items():
            result = calculate_set_adjustment("high", "none", pump, work)
            self.assertEqual((result.set_adjustment, result.rule), (adj, rule))

    def test_medium_priority_branches(self) -> None:
        self.assertEqual(
            calculate_set_adjustment("medium", "none", "none", "easy").set_adjustment, 1
        )
        self.assertEqual(
            calculate_set_adjustment("medium", "none", "none", "medium").set_adjustment, 1
        )
        result = calculate_set_adjustment("medium", "none", "none", "hard")
        self.assertEqual(result.set_adjustment, 0)
        self.assertEqual(result.rule, "medium_maintain")
        result = calculate_set_adjustment("medium", "none", "amazing", "easy")
        self.assertEqual(result.set_adjustment, 0)

    def test_rule_table_order(self) -> None:
        names = [rule.name for rule in AUTO_REGULATION_RULES]
        self.assertEqual(
            names[:3], ["joint_pain_high", "joint_pain_medium", "workload_too_much"]
        )
        self.assertEqual(names[-1], "low_maintain")
        self.assertEqual(len(names), len(set(names)))

    def test_case_insensitive_strings(self) -> None:
        a = calculate_set_adjustment("High", " NONE ", "Amazing", "HARD")
        b = AutoRegulation.calculate_set_adjustment(
            MuscleGroupPriority.HIGH, JointPain.NONE, Pump.AMAZING, Workload.HARD
        )
        self.assertEqual(a, b)

    def test_invalid_values(self) -> None:
        with self.assertRaises(InvalidFeedbackValue) as ctx:
            calculate_set_adjustment("urgent", "none", "ok", "easy")
        self.assertEqual(ctx.exception.field, "priority")
        with self.assertRaises(InvalidFeedbackValue) as ctx:
            calculate_set_adjustment("high", "none", "great", "easy")
        self.assertEqual(ctx.exception.field, "pump")
        with self.assertRaises(InvalidFeedbackValue):
            calculate_set_adjustment("high", None, "ok", "easy")
        with self.assertRaises(ValueError):
            calculate_set_adjustment("high", "none", "ok", "too much")


if __name__ == "__main__":
    unittest.main()
