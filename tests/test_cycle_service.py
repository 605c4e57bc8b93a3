import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import (
    MuscleGroupRepository,
    MuscleFeedbackRepository,
    ExerciseRepository,
    TrainingCycleRepository,
    CyclePriorityRepository,
    WeekSetOverrideRepository,
    VolumeAdjustmentRepository,
)
from cycle_service import TrainingCycleService
from autoregulation_service import AutoRegulationService
from algorithms import InvalidWeek, InvalidOverride


class TrainingCycleServiceTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_cycle.db"
        if os.path.exists(self.db_path):
            os.remove(self.db_path)
        self.groups = MuscleGroupRepository(self.db_path)
        self.exercises = ExerciseRepository(self.db_path)
        self.cycles = TrainingCycleRepository(self.db_path)
        self.overrides = WeekSetOverrideRepository(self.db_path)
        self.adjustments = VolumeAdjustmentRepository(self.db_path)
        self.service = TrainingCycleService(
            self.cycles,
            self.exercises,
            self.groups,
            CyclePriorityRepository(self.db_path),
            self.overrides,
            self.adjustments,
        )
        self.chest = self.groups.add("Chest", "high")
        self.back = self.groups.add("Back", "medium")
        self.bench = self.exercises.add("Bench Press", self.chest, default_sets=3)
        self.fly = self.exercises.add("Cable Fly", self.chest, default_sets=2)
        self.row = self.exercises.add("Barbell Row", self.back, default_sets=4)

    def tearDown(self) -> None:
        if os.path.exists(self.db_path):
            os.remove(self.db_path)

    def test_create_cycle_fills_defaults(self) -> None:
        cycle = self.service.create_cycle({self.bench: 4}, start_date="2024-01-01")
        self.assertEqual(cycle["status"], "active")
        self.assertEqual(cycle["current_week"], 1)
        self.assertEqual(cycle["start_date"], "2024-01-01")
        self.assertEqual(
            cycle["baseline_sets"], {self.bench: 4, self.fly: 2, self.row: 4}
        )
        self.assertEqual(self.service.current_cycle()["id"], cycle["id"])

    def test_only_one_active_cycle(self) -> None:
        self.service.create_cycle()
        with self.assertRaises(ValueError):
            self.service.create_cycle()

    def test_create_requires_exercises(self) -> None:
        for ex_id in (self.bench, self.fly, self.row):
            self.exercises.delete(ex_id)
        with self.assertRaises(ValueError):
            self.service.create_cycle()

    def test_unknown_exercise_in_baseline(self) -> None:
        with self.assertRaises(ValueError):
            self.service.create_cycle({99: 3})

    def test_priority_snapshot(self) -> None:
        cycle = self.service.create_cycle()
        self.groups.set_priority(self.chest, "low")
        self.assertEqual(self.service.priority_for(cycle["id"], self.chest), "high")
        legs = self.groups.add("Legs", "low")
        self.assertEqual(self.service.priority_for(cycle["id"], legs), "low")

    def test_target_precedence(self) -> None:
        cid = self.service.create_cycle({self.bench: 4})["id"]
        self.assertEqual(self.service.target_sets(cid, 2, self.bench), 5)
        self.adjustments.upsert(cid, 2, self.bench, 7)
        self.assertEqual(self.service.target_sets(cid, 2, self.bench), 7)
        self.assertEqual(self.service.planned_sets(cid, 2, self.bench), 5)
        self.service.set_override(cid, 2, self.bench, 3)
        self.assertEqual(self.service.target_sets(cid, 2, self.bench), 3)
        self.assertEqual(self.service.planned_sets(cid, 2, self.bench), 3)
        self.service.remove_override(cid, 2, self.bench)
        self.assertEqual(self.service.target_sets(cid, 2, self.bench), 7)

    def test_override_clamped(self) -> None:
        cid = self.service.create_cycle()["id"]
        stored = self.service.set_override(cid, 5, self.fly, 0)
        self.assertEqual(stored["sets"], 1)
        self.assertEqual(self.service.week_overrides(cid, 5), {self.fly: 1})
        self.assertEqual(self.service.target_sets(cid, 5, self.fly), 1)

    def test_override_validation(self) -> None:
        cid = self.service.create_cycle()["id"]
        with self.assertRaises(InvalidWeek):
            self.service.set_override(cid, 6, self.bench, 3)
        with self.assertRaises(ValueError):
            self.service.set_override(cid, 2, 99, 3)
        with self.assertRaises(ValueError):
            self.service.set_override(99, 2, self.bench, 3)

    def test_week_targets_sources(self) -> None:
        cid = self.service.create_cycle()["id"]
        self.service.set_override(cid, 3, self.bench, 8)
        self.adjustments.upsert(cid, 3, self.fly, 6)
        targets = {t["exercise_id"]: t for t in self.service.week_targets(cid, 3)}
        self.assertEqual(targets[self.bench]["source"], "override")
        self.assertEqual(targets[self.bench]["target_sets"], 8)
        self.assertEqual(targets[self.fly]["source"], "adjustment")
        self.assertEqual(targets[self.fly]["target_sets"], 6)
        self.assertEqual(targets[self.row]["source"], "progression")
        self.assertEqual(targets[self.row]["target_sets"], 6)

    def test_increment_week(self) -> None:
        cid = self.service.create_cycle()["id"]
        for expected in range(2, 6):
            self.assertEqual(self.service.increment_week(cid)["current_week"], expected)
        with self.assertRaises(ValueError):
            self.service.increment_week(cid)

    def test_increment_inactive_cycle(self) -> None:
        cid = self.service.create_cycle()["id"]
        self.service.abandon_cycle(cid)
        with self.assertRaises(ValueError):
            self.service.increment_week(cid)

    def test_restart_uses_final_week(self) -> None:
        cid = self.service.create_cycle({self.bench: 4})["id"]
        self.service.set_override(cid, 5, self.fly, 6)
        self.service.set_override(cid, 3, self.row, 9)
        self.assertEqual(
            self.service.next_baseline(cid),
            {self.bench: 6, self.fly: 6, self.row: 6},
        )
        new_cycle = self.service.restart_cycle(cid)
        self.assertEqual(new_cycle["previous_cycle_id"], cid)
        self.assertEqual(new_cycle["baseline_sets"][self.bench], 6)
        self.assertEqual(self.service.get_cycle(cid)["status"], "completed")
        self.assertEqual(self.service.current_cycle()["id"], new_cycle["id"])

    def test_restart_carries_final_week_adjustments(self) -> None:
        cid = self.service.create_cycle()["id"]
        autoregulation = AutoRegulationService(
            self.service,
            self.exercises,
            self.groups,
            MuscleFeedbackRepository(self.db_path),
            self.adjustments,
        )
        result = autoregulation.submit_feedback(cid, 4, self.chest, "none", "amazing", "hard")
        self.assertEqual(result["applied_week"], 5)
        baseline = self.service.next_baseline(cid)
        for ex_id in (self.bench, self.fly, self.row):
            self.assertEqual(baseline[ex_id], self.service.target_sets(cid, 5, ex_id))
        self.assertEqual(baseline, {self.bench: 6, self.fly: 4, self.row: 6})

    def test_final_week_override_beats_adjustment(self) -> None:
        cid = self.service.create_cycle()["id"]
        self.adjustments.upsert(cid, 5, self.bench, 8)
        self.service.set_override(cid, 5, self.bench, 2)
        self.assertEqual(self.service.next_baseline(cid)[self.bench], 2)

    def test_override_must_be_integer(self) -> None:
        cid = self.service.create_cycle()["id"]
        for bad in (2.7, "3", True):
            with self.assertRaises(InvalidOverride):
                self.service.set_override(cid, 2, self.bench, bad)
        self.assertEqual(self.service.week_overrides(cid, 2), {})

    def test_set_baseline_moves_curve(self) -> None:
        cid = self.service.create_cycle()["id"]
        cycle = self.service.set_baseline(cid, self.fly, 5)
        self.assertEqual(cycle["baseline_sets"][self.fly], 5)
        self.assertEqual(self.service.target_sets(cid, 3, self.fly), 7)
        with self.assertRaises(ValueError):
            self.service.set_baseline(cid, self.fly, 0)

    def test_missing_cycle(self) -> None:
        with self.assertRaises(ValueError):
            self.service.get_cycle(42)


if __name__ == "__main__":
    unittest.main()
