from __future__ import annotations
import logging
from typing import Iterable
from db import (
    ExerciseRepository,
    MuscleGroupRepository,
    MuscleFeedbackRepository,
    VolumeAdjustmentRepository,
    SettingsRepository,
    AutoRegulationLogRepository,
)
from cycle_service import TrainingCycleService
from algorithms import (
    AutoRegulation,
    VolumeDistributor,
    ExerciseVolume,
    JointPain,
    InvalidFeedbackValue,
)
from algorithms.feedback import parse_enum

logger = logging.getLogger(__name__)


class AutoRegulationService:
    """Turn weekly muscle group feedback into next week's set counts."""

    def __init__(
        self,
        cycle_service: TrainingCycleService,
        exercise_repo: ExerciseRepository,
        muscle_group_repo: MuscleGroupRepository,
        feedback_repo: MuscleFeedbackRepository,
        adjustment_repo: VolumeAdjustmentRepository,
        settings_repo: SettingsRepository | None = None,
        log_repo: AutoRegulationLogRepository | None = None,
    ) -> None:
        self.cycles = cycle_service
        self.exercises = exercise_repo
        self.muscle_groups = muscle_group_repo
        self.feedback = feedback_repo
        self.adjustments = adjustment_repo
        self.settings = settings_repo
        self.log_repo = log_repo

    def _check_joint_pain(self, joint_pain) -> None:
        scale = self.settings.get_int("joint_pain_scale", 4) if self.settings else 4
        if scale == 3 and parse_enum(JointPain, joint_pain, "joint_pain") is JointPain.LOW:
            raise InvalidFeedbackValue("joint_pain", joint_pain)

    def _auto_apply(self) -> bool:
        if self.settings is None:
            return True
        return self.settings.get_bool("auto_apply_adjustments", True)

    @staticmethod
    def preview(
        priority,
        joint_pain,
        pump,
        workload,
        exercises: Iterable | None = None,
    ) -> dict:
        """Compute an adjustment and its distribution without persisting anything."""
        result = AutoRegulation.calculate_set_adjustment(priority, joint_pain, pump, workload)
        distribution = VolumeDistributor.distribute_set_adjustment(
            exercises or [], result.set_adjustment
        )
        return {
            "set_adjustment": result.set_adjustment,
            "reasoning": result.reasoning,
            "rule": result.rule,
            "distribution": [
                {"exercise_id": d.exercise_id, "new_sets": d.new_sets}
                for d in distribution
            ],
        }

    def submit_feedback(
        self,
        cycle_id: int,
        week: int,
        muscle_group_id: int,
        joint_pain,
        pump,
        workload,
    ) -> dict:
        """Record feedback for a finished week and adjust the following week.

        The muscle group's exercises are redistributed starting from next
        week's planned sets (override or progression curve), and the results
        are stored as that week's volume adjustments. Feedback for the final
        week is recorded but has no following week to adjust.
        """
        try:
            cycle = self.cycles.get_cycle(cycle_id)
            if cycle["status"] != "active":
                raise ValueError("cycle is not active")
            self.cycles.calculator.validate_week(week)
            self.muscle_groups.fetch_detail(muscle_group_id)
            self._check_joint_pain(joint_pain)
            priority = self.cycles.priority_for(cycle_id, muscle_group_id)
            result = AutoRegulation.calculate_set_adjustment(
                priority, joint_pain, pump, workload
            )
            next_week = week + 1 if week < self.cycles.calculator.FINAL_WEEK else None
            plan_week = next_week or week
            volumes = [
                ExerciseVolume(ex["id"], self.cycles.planned_sets(cycle_id, plan_week, ex["id"]))
                for ex in self.exercises.fetch_for_muscle_group(muscle_group_id)
            ]
            distribution = VolumeDistributor.distribute_set_adjustment(
                volumes, result.set_adjustment
            )
            applied = next_week is not None and self._auto_apply()

            # feedback row and adjustments commit together
            with self.feedback.transaction() as conn:
                feedback_id = self.feedback.add(
                    cycle_id,
                    week,
                    muscle_group_id,
                    joint_pain,
                    pump,
                    workload,
                    result.set_adjustment,
                    result.reasoning,
                    conn=conn,
                )
                if applied:
                    for item in distribution:
                        self.adjustments.upsert(
                            cycle_id, next_week, item.exercise_id, item.new_sets, conn=conn
                        )
        except Exception as e:
            if self.log_repo is not None:
                self.log_repo.log_error(str(e))
            logger.warning(
                "auto-regulation failed for cycle %s week %s group %s: %s",
                cycle_id,
                week,
                muscle_group_id,
                e,
            )
            raise

        message = (
            f"cycle {cycle_id} week {week} group {muscle_group_id}: "
            f"{result.set_adjustment:+d} ({result.rule})"
        )
        if self.log_repo is not None:
            self.log_repo.log_success(message)
        logger.info("auto-regulation %s", message)
        return {
            "feedback_id": feedback_id,
            "priority": priority,
            "set_adjustment": result.set_adjustment,
            "reasoning": result.reasoning,
            "rule": result.rule,
            "applied_week": next_week if applied else None,
            "distribution": [
                {
                    "exercise_id": v.exercise_id,
                    "current_sets": v.current_sets,
                    "new_sets": d.new_sets,
                }
                for v, d in zip(volumes, distribution)
            ],
        }

    def feedback_history(
        self, cycle_id: int, muscle_group_id: int | None = None
    ) -> list[dict]:
        return self.feedback.fetch_for_cycle(cycle_id, muscle_group_id)

    def clear_adjustments(self, cycle_id: int, week: int) -> None:
        self.cycles.calculator.validate_week(week)
        self.adjustments.clear_week(cycle_id, week)
