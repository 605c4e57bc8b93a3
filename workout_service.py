from __future__ import annotations
from db import (
    ExerciseRepository,
    WorkoutSessionRepository,
    WorkoutSetRepository,
)
from cycle_service import TrainingCycleService


class WorkoutService:
    """Create sessions from week targets and log performed sets."""

    def __init__(
        self,
        cycle_service: TrainingCycleService,
        session_repo: WorkoutSessionRepository,
        set_repo: WorkoutSetRepository,
        exercise_repo: ExerciseRepository,
    ) -> None:
        self.cycles = cycle_service
        self.sessions = session_repo
        self.sets = set_repo
        self.exercises = exercise_repo

    def start_session(
        self, cycle_id: int, week: int, day_number: int, date: str | None = None
    ) -> dict:
        self.cycles.calculator.validate_week(week)
        if day_number < 1:
            raise ValueError("day number must be at least 1")
        self.cycles.get_cycle(cycle_id)
        return self.sessions.create_or_get(cycle_id, week, day_number, date)

    def prescribe(
        self, session_id: int, exercise_id: int, target_reps: int | None = None
    ) -> list[dict]:
        """Create the session's sets for an exercise from the week target."""
        session = self.sessions.fetch_detail(session_id)
        exercise = self.exercises.fetch_detail(exercise_id)
        target_sets = self.cycles.target_sets(
            session["cycle_id"], session["week"], exercise_id
        )
        reps = target_reps or exercise["default_reps"]
        ids = self.sets.bulk_add(session_id, exercise_id, reps, target_sets)
        return [self.sets.fetch_detail(sid) for sid in ids]

    def log_set(self, set_id: int, actual_reps: int, weight: float | None = None) -> dict:
        detail = self.sets.log(set_id, actual_reps, weight)
        session = self.sessions.fetch_detail(detail["session_id"])
        if session["status"] == "planned":
            self.sessions.set_status(session["id"], "in_progress")
        return detail

    def update_set_notes(self, set_id: int, notes: str | None) -> dict:
        return self.sets.update_note(set_id, notes)

    def complete_session(self, session_id: int) -> dict:
        return self.sessions.set_status(session_id, "completed")

    def session_sets(self, session_id: int) -> list[dict]:
        self.sessions.fetch_detail(session_id)
        return self.sets.fetch_for_session(session_id)

    def week_progress(self, cycle_id: int, week: int) -> dict[int, list[dict]]:
        """Sets of a cycle week grouped by exercise id."""
        grouped: dict[int, list[dict]] = {}
        for row in self.sets.fetch_for_cycle(cycle_id, week=week):
            grouped.setdefault(row["exercise_id"], []).append(row)
        return grouped

    def exercise_progress(self, cycle_id: int, exercise_id: int) -> list[dict]:
        return self.sets.fetch_for_cycle(
            cycle_id, exercise_id=exercise_id, completed_only=True
        )
