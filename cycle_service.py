from __future__ import annotations
import logging
from db import (
    ExerciseRepository,
    MuscleGroupRepository,
    TrainingCycleRepository,
    CyclePriorityRepository,
    WeekSetOverrideRepository,
    VolumeAdjustmentRepository,
)
from algorithms import ProgressionCalculator, InvalidOverride

logger = logging.getLogger(__name__)


class TrainingCycleService:
    """Manage mesocycles and resolve weekly set targets."""

    def __init__(
        self,
        cycle_repo: TrainingCycleRepository,
        exercise_repo: ExerciseRepository,
        muscle_group_repo: MuscleGroupRepository,
        priority_repo: CyclePriorityRepository,
        override_repo: WeekSetOverrideRepository,
        adjustment_repo: VolumeAdjustmentRepository | None = None,
        calculator: type[ProgressionCalculator] = ProgressionCalculator,
    ) -> None:
        self.cycles = cycle_repo
        self.exercises = exercise_repo
        self.muscle_groups = muscle_group_repo
        self.priorities = priority_repo
        self.overrides = override_repo
        self.adjustments = adjustment_repo
        self.calculator = calculator

    def create_cycle(
        self,
        baseline_sets: dict[int, int] | None = None,
        start_date: str | None = None,
        previous_cycle_id: int | None = None,
    ) -> dict:
        """Start a new active cycle.

        Exercises missing from ``baseline_sets`` start at their default set
        count. Muscle group priorities are copied into the cycle so later
        priority edits only affect future cycles.
        """
        if self.cycles.fetch_active() is not None:
            raise ValueError("an active cycle already exists")
        baseline = {ex["id"]: ex["default_sets"] for ex in self.exercises.fetch_all_exercises()}
        for ex_id, sets in (baseline_sets or {}).items():
            self.exercises.fetch_detail(ex_id)
            baseline[ex_id] = sets
        if not baseline:
            raise ValueError("no exercises to build a cycle from")
        cycle_id = self.cycles.create(baseline, start_date, previous_cycle_id)
        self.priorities.snapshot(
            cycle_id,
            {g["id"]: g["priority"] for g in self.muscle_groups.fetch_all_groups()},
        )
        logger.info("created cycle %s with %d exercises", cycle_id, len(baseline))
        return self.cycles.fetch_detail(cycle_id)

    def current_cycle(self) -> dict | None:
        return self.cycles.fetch_active()

    def get_cycle(self, cycle_id: int) -> dict:
        return self.cycles.fetch_detail(cycle_id)

    def priority_for(self, cycle_id: int, muscle_group_id: int) -> str:
        """Cycle snapshot priority, falling back to the live muscle group record."""
        prio = self.priorities.priority(cycle_id, muscle_group_id)
        if prio is None:
            prio = self.muscle_groups.fetch_detail(muscle_group_id)["priority"]
        return prio

    def _baseline_for(self, cycle: dict, exercise_id: int) -> int:
        if exercise_id in cycle["baseline_sets"]:
            return cycle["baseline_sets"][exercise_id]
        return self.exercises.fetch_detail(exercise_id)["default_sets"]

    def planned_sets(self, cycle_id: int, week: int, exercise_id: int) -> int:
        """Week target from the override or the curve, ignoring feedback adjustments."""
        cycle = self.cycles.fetch_detail(cycle_id)
        baseline = self._baseline_for(cycle, exercise_id)
        override = self.overrides.fetch(cycle_id, week, exercise_id)
        return self.calculator.compute_target_sets(baseline, week, override)

    def target_sets(self, cycle_id: int, week: int, exercise_id: int) -> int:
        """Resolve a week target: override, then recorded adjustment, then curve."""
        cycle = self.cycles.fetch_detail(cycle_id)
        baseline = self._baseline_for(cycle, exercise_id)
        override = self.overrides.fetch(cycle_id, week, exercise_id)
        if override is None and self.adjustments is not None:
            override = self.adjustments.fetch(cycle_id, week, exercise_id)
        return self.calculator.compute_target_sets(baseline, week, override)

    def week_targets(self, cycle_id: int, week: int) -> list[dict]:
        cycle = self.cycles.fetch_detail(cycle_id)
        overrides = self.overrides.fetch_for_week(cycle_id, week)
        adjusted = (
            self.adjustments.fetch_for_week(cycle_id, week)
            if self.adjustments is not None
            else {}
        )
        result = []
        for ex_id in sorted(cycle["baseline_sets"]):
            baseline = cycle["baseline_sets"][ex_id]
            if ex_id in overrides:
                source, value = "override", overrides[ex_id]
            elif ex_id in adjusted:
                source, value = "adjustment", adjusted[ex_id]
            else:
                source, value = "progression", None
            result.append(
                {
                    "exercise_id": ex_id,
                    "baseline_sets": baseline,
                    "target_sets": self.calculator.compute_target_sets(baseline, week, value),
                    "source": source,
                }
            )
        return result

    def set_baseline(self, cycle_id: int, exercise_id: int, sets: int) -> dict:
        """Change one exercise's baseline; its curve moves with it."""
        self.exercises.fetch_detail(exercise_id)
        self.cycles.set_baseline(cycle_id, exercise_id, sets)
        return self.cycles.fetch_detail(cycle_id)

    def increment_week(self, cycle_id: int) -> dict:
        cycle = self.cycles.fetch_detail(cycle_id)
        if cycle["status"] != "active":
            raise ValueError("cycle is not active")
        if cycle["current_week"] >= self.calculator.FINAL_WEEK:
            raise ValueError(f"cannot increment week beyond {self.calculator.FINAL_WEEK}")
        self.cycles.set_week(cycle_id, cycle["current_week"] + 1)
        return self.cycles.fetch_detail(cycle_id)

    def complete_cycle(self, cycle_id: int) -> dict:
        self.cycles.fetch_detail(cycle_id)
        self.cycles.set_status(cycle_id, "completed")
        return self.cycles.fetch_detail(cycle_id)

    def abandon_cycle(self, cycle_id: int) -> dict:
        self.cycles.fetch_detail(cycle_id)
        self.cycles.set_status(cycle_id, "abandoned")
        return self.cycles.fetch_detail(cycle_id)

    def next_baseline(self, cycle_id: int) -> dict[int, int]:
        """Baselines for the follow-up cycle, taken from the final week targets.

        The final week resolves like any other week, so an override or a
        feedback adjustment recorded for it carries into the next cycle.
        """
        final = self.calculator.FINAL_WEEK
        cycle = self.cycles.fetch_detail(cycle_id)
        baselines = {
            ex["id"]: cycle["baseline_sets"].get(ex["id"], ex["default_sets"])
            for ex in self.exercises.fetch_all_exercises()
        }
        carried = (
            dict(self.adjustments.fetch_for_week(cycle_id, final))
            if self.adjustments is not None
            else {}
        )
        carried.update(self.overrides.fetch_for_week(cycle_id, final))
        return self.calculator.next_cycle_baselines(baselines, carried)

    def restart_cycle(self, previous_cycle_id: int, start_date: str | None = None) -> dict:
        previous = self.cycles.fetch_detail(previous_cycle_id)
        baseline = self.next_baseline(previous_cycle_id)
        if previous["status"] == "active":
            self.cycles.set_status(previous_cycle_id, "completed")
        cycle = self.create_cycle(baseline, start_date, previous_cycle_id=previous_cycle_id)
        logger.info("restarted cycle %s as %s", previous_cycle_id, cycle["id"])
        return cycle

    def set_override(self, cycle_id: int, week: int, exercise_id: int, sets: int) -> dict:
        self.calculator.validate_week(week)
        if isinstance(sets, bool) or not isinstance(sets, int):
            raise InvalidOverride(f"override must be an integer, got {sets!r}")
        self.cycles.fetch_detail(cycle_id)
        self.exercises.fetch_detail(exercise_id)
        return self.overrides.upsert(cycle_id, week, exercise_id, sets)

    def remove_override(self, cycle_id: int, week: int, exercise_id: int) -> None:
        self.calculator.validate_week(week)
        self.overrides.remove(cycle_id, week, exercise_id)

    def week_overrides(self, cycle_id: int, week: int) -> dict[int, int]:
        return self.overrides.fetch_for_week(cycle_id, week)
