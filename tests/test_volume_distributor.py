import itertools
import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import (
    VolumeDistributor,
    ExerciseVolume,
    ExerciseSets,
    distribute_set_adjustment,
    InvalidAdjustmentRequest,
)


class VolumeDistributorTest(unittest.TestCase):
    def test_largest_gets_first_added_set(self) -> None:
        result = distribute_set_adjustment(
            [{"id": "A", "current_sets": 4}, {"id": "B", "current_sets": 2}], 1
        )
        self.assertEqual(result, [ExerciseSets("A", 5), ExerciseSets("B", 2)])

    def test_floor_is_a_no_op(self) -> None:
        result = distribute_set_adjustment([("A", 1), ("B", 1)], -2)
        self.assertEqual(result, [ExerciseSets("A", 1), ExerciseSets("B", 1)])

    def test_smallest_loses_first(self) -> None:
        result = distribute_set_adjustment([("A", 4), ("B", 2)], -1)
        self.assertEqual([r.new_sets for r in result], [4, 1])

    def test_round_robin(self) -> None:
        result = distribute_set_adjustment([("A", 3), ("B", 5), ("C", 2)], 4)
        self.assertEqual([r.new_sets for r in result], [4, 7, 3])

    def test_ties_keep_input_order(self) -> None:
        result = distribute_set_adjustment([("A", 3), ("B", 3), ("C", 3)], 1)
        self.assertEqual([r.new_sets for r in result], [4, 3, 3])
        result = distribute_set_adjustment([("A", 3), ("B", 3), ("C", 3)], -2)
        self.assertEqual([r.new_sets for r in result], [2, 2, 3])

    def test_floor_skip_still_spends_unit(self) -> None:
        result = distribute_set_adjustment([("A", 1), ("B", 3)], -2)
        self.assertEqual([r.new_sets for r in result], [1, 2])

    def test_conservation_and_floor(self) -> None:
        for sets in itertools.product(range(1, 5), repeat=3):
            exercises = [(f"E{i}", s) for i, s in enumerate(sets)]
            for total in range(-4, 5):
                result = distribute_set_adjustment(exercises, total)
                self.assertEqual([r.exercise_id for r in result], ["E0", "E1", "E2"])
                self.assertTrue(all(r.new_sets >= 1 for r in result))
                delta = sum(r.new_sets for r in result) - sum(sets)
                passes = -(-abs(total) // len(sets))
                if total >= 0 or min(sets) - passes >= 1:
                    self.assertEqual(delta, total)
                else:
                    self.assertGreaterEqual(delta, total)
                    self.assertLessEqual(delta, 0)

    def test_zero_and_empty(self) -> None:
        self.assertEqual(distribute_set_adjustment([], 3), [])
        result = distribute_set_adjustment([ExerciseVolume("A", 2)], 0)
        self.assertEqual(result, [ExerciseSets("A", 2)])

    def test_invalid_input(self) -> None:
        bad = [
            [("A", 0)],
            [("A", -1)],
            [("A", 2.5)],
            [("A", True)],
            [("A", 2), ("A", 3)],
            [{"id": "A"}],
            ["A"],
        ]
        for exercises in bad:
            with self.assertRaises(InvalidAdjustmentRequest):
                VolumeDistributor.distribute_set_adjustment(exercises, 1)
        with self.assertRaises(InvalidAdjustmentRequest):
            distribute_set_adjustment([("A", 2)], 1.5)


if __name__ == "__main__":
    unittest.main()
