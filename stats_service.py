from __future__ import annotations
from db import (
    ExerciseRepository,
    WorkoutSetRepository,
    SettingsRepository,
)
from algorithms import MathTools, WeightConverter


class StatisticsService:
    """Summaries of logged performance within a cycle."""

    def __init__(
        self,
        set_repo: WorkoutSetRepository,
        exercise_repo: ExerciseRepository,
        settings_repo: SettingsRepository | None = None,
    ) -> None:
        self.sets = set_repo
        self.exercises = exercise_repo
        self.settings = settings_repo

    def _unit(self) -> str:
        if self.settings is None:
            return "kg"
        return self.settings.get_text("weight_unit", "kg")

    def _convert(self, kg: float, unit: str) -> float:
        return WeightConverter.convert(kg, "kg", unit)

    def exercise_weekly_summary(self, cycle_id: int, exercise_id: int) -> list[dict]:
        """Per-week totals of completed sets for one exercise.

        Weights are stored in kg and reported in the configured unit.
        """
        unit = self._unit()
        weeks: dict[int, list[dict]] = {}
        for row in self.sets.fetch_for_cycle(
            cycle_id, exercise_id=exercise_id, completed_only=True
        ):
            weeks.setdefault(row["week"], []).append(row)
        summary: list[dict] = []
        for week in sorted(weeks):
            rows = weeks[week]
            pairs = [(r["actual_reps"] or 0, r["weight"] or 0.0) for r in rows]
            best = max((MathTools.epley_1rm(w, reps) for reps, w in pairs), default=0.0)
            summary.append(
                {
                    "week": week,
                    "sets": len(rows),
                    "reps": sum(reps for reps, _w in pairs),
                    "volume": self._convert(MathTools.volume(pairs), unit),
                    "est_1rm": self._convert(best, unit),
                    "unit": unit,
                }
            )
        return summary

    def exercise_trend(self, cycle_id: int, exercise_id: int) -> dict:
        """Week over week change in estimated 1RM."""
        summary = self.exercise_weekly_summary(cycle_id, exercise_id)
        slope = MathTools.trend_slope(s["est_1rm"] for s in summary)
        return {
            "exercise_id": exercise_id,
            "weeks": [s["week"] for s in summary],
            "est_1rm_slope": round(slope, 2),
            "unit": self._unit(),
        }

    def muscle_group_weekly_sets(self, cycle_id: int, muscle_group_id: int) -> dict[int, int]:
        """Completed working sets per week for a muscle group."""
        totals: dict[int, int] = {}
        for ex in self.exercises.fetch_for_muscle_group(muscle_group_id):
            for row in self.sets.fetch_for_cycle(
                cycle_id, exercise_id=ex["id"], completed_only=True
            ):
                totals[row["week"]] = totals.get(row["week"], 0) + 1
        return dict(sorted(totals.items()))
