from typing import Dict, List, Optional, Union
from fastapi import FastAPI, HTTPException, Body, APIRouter
from pydantic import BaseModel

from config import APP_VERSION, DEFAULT_DB_PATH, DEFAULT_YAML_PATH
from db import (
    MuscleGroupRepository,
    ExerciseRepository,
    TrainingCycleRepository,
    CyclePriorityRepository,
    WeekSetOverrideRepository,
    VolumeAdjustmentRepository,
    WorkoutSessionRepository,
    WorkoutSetRepository,
    MuscleFeedbackRepository,
    SettingsRepository,
    AutoRegulationLogRepository,
)
from cycle_service import TrainingCycleService
from autoregulation_service import AutoRegulationService
from workout_service import WorkoutService
from stats_service import StatisticsService
from algorithms import ProgressionCalculator, AutoRegulation, VolumeDistributor


class ExerciseVolumeIn(BaseModel):
    exercise_id: Union[int, str]
    current_sets: int


class DistributeRequest(BaseModel):
    exercises: List[ExerciseVolumeIn]
    total_adjustment: int


def _http_error(e: ValueError) -> HTTPException:
    status = 404 if "not found" in str(e) else 400
    return HTTPException(status_code=status, detail=str(e))


class TrackerAPI:
    """Provides REST endpoints for cycles, feedback and volume targets."""

    def __init__(
        self,
        db_path: str = DEFAULT_DB_PATH,
        yaml_path: str = DEFAULT_YAML_PATH,
    ) -> None:
        self.db_path = db_path
        self.settings = SettingsRepository(db_path, yaml_path)
        self.muscle_groups = MuscleGroupRepository(db_path)
        self.exercises = ExerciseRepository(db_path)
        self.cycles = TrainingCycleRepository(db_path)
        self.cycle_priorities = CyclePriorityRepository(db_path)
        self.overrides = WeekSetOverrideRepository(db_path)
        self.adjustments = VolumeAdjustmentRepository(db_path)
        self.sessions = WorkoutSessionRepository(db_path)
        self.sets = WorkoutSetRepository(db_path)
        self.feedback = MuscleFeedbackRepository(db_path)
        self.autoreg_logs = AutoRegulationLogRepository(db_path)
        self.cycle_service = TrainingCycleService(
            self.cycles,
            self.exercises,
            self.muscle_groups,
            self.cycle_priorities,
            self.overrides,
            self.adjustments,
        )
        self.autoregulation = AutoRegulationService(
            self.cycle_service,
            self.exercises,
            self.muscle_groups,
            self.feedback,
            self.adjustments,
            self.settings,
            log_repo=self.autoreg_logs,
        )
        self.workouts = WorkoutService(
            self.cycle_service, self.sessions, self.sets, self.exercises
        )
        self.statistics = StatisticsService(self.sets, self.exercises, self.settings)
        self.app = FastAPI(
            title="Volume Tracker API",
            description="REST API for hypertrophy cycles and volume auto-regulation",
            version=APP_VERSION,
        )
        self._setup_routes()

    def _setup_routes(self) -> None:
        muscle_groups_router = APIRouter(prefix="/muscle_groups", tags=["Muscle Groups"])
        exercises_router = APIRouter(prefix="/exercises", tags=["Exercises"])
        cycles_router = APIRouter(prefix="/cycles", tags=["Cycles"])
        sessions_router = APIRouter(tags=["Sessions"])
        engine_router = APIRouter(tags=["Engine"])

        @self.app.get(
            "/health",
            summary="Health check",
            description="Verify API and database connectivity.",
        )
        def health():
            """Return API and database connection status."""
            try:
                self.muscle_groups.fetch_all_groups()
                return {"status": "ok"}
            except Exception as e:  # pragma: no cover - connectivity failure
                raise HTTPException(status_code=500, detail=str(e))

        @muscle_groups_router.get("")
        def list_muscle_groups():
            return self.muscle_groups.fetch_all_groups()

        @muscle_groups_router.post("")
        def add_muscle_group(name: str, priority: str = "medium"):
            try:
                gid = self.muscle_groups.add(name, priority)
                return {"id": gid}
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @muscle_groups_router.get("/by_priority")
        def muscle_groups_by_priority():
            return self.muscle_groups.fetch_by_priority()

        @muscle_groups_router.get("/{group_id}")
        def get_muscle_group(group_id: int):
            try:
                return self.muscle_groups.fetch_detail(group_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @muscle_groups_router.put("/{group_id}/priority")
        def set_muscle_group_priority(group_id: int, priority: str):
            try:
                self.muscle_groups.set_priority(group_id, priority)
                return {"status": "updated"}
            except ValueError as e:
                raise _http_error(e)

        @muscle_groups_router.delete("/{group_id}")
        def delete_muscle_group(group_id: int):
            try:
                self.muscle_groups.delete(group_id)
                return {"status": "deleted"}
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @muscle_groups_router.get("/{group_id}/exercises")
        def list_group_exercises(group_id: int):
            return self.exercises.fetch_for_muscle_group(group_id)

        @exercises_router.get("")
        def list_exercises(muscle_group_id: Optional[int] = None):
            return self.exercises.fetch_all_exercises(muscle_group_id)

        @exercises_router.post("")
        def add_exercise(
            name: str,
            muscle_group_id: int,
            equipment: Optional[str] = None,
            movement_pattern: Optional[str] = None,
            default_sets: int = 3,
            default_reps: int = 10,
            notes: Optional[str] = None,
        ):
            try:
                ex_id = self.exercises.add(
                    name,
                    muscle_group_id,
                    equipment,
                    movement_pattern,
                    default_sets,
                    default_reps,
                    notes,
                )
                return {"id": ex_id}
            except ValueError as e:
                raise _http_error(e)

        @exercises_router.get("/{exercise_id}")
        def get_exercise(exercise_id: int):
            try:
                return self.exercises.fetch_detail(exercise_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @exercises_router.put("/{exercise_id}/default_sets")
        def update_default_sets(exercise_id: int, default_sets: int):
            try:
                self.exercises.update_default_sets(exercise_id, default_sets)
                return {"status": "updated"}
            except ValueError as e:
                raise _http_error(e)

        @exercises_router.put("/{exercise_id}/notes")
        def update_exercise_notes(exercise_id: int, notes: str = Body("", embed=True)):
            try:
                self.exercises.update_notes(exercise_id, notes or None)
                return {"status": "updated"}
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @exercises_router.delete("/{exercise_id}")
        def delete_exercise(exercise_id: int):
            try:
                self.exercises.delete(exercise_id)
                return {"status": "deleted"}
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @cycles_router.post("")
        def create_cycle(
            start_date: Optional[str] = None,
            baseline_sets: Optional[Dict[int, int]] = Body(None),
        ):
            try:
                return self.cycle_service.create_cycle(baseline_sets, start_date)
            except ValueError as e:
                raise _http_error(e)

        @cycles_router.get("")
        def list_cycles():
            return self.cycles.fetch_all_cycles()

        @cycles_router.get("/current")
        def current_cycle():
            cycle = self.cycle_service.current_cycle()
            if cycle is None:
                raise HTTPException(status_code=404, detail="no active cycle")
            return cycle

        @cycles_router.get("/{cycle_id}")
        def get_cycle(cycle_id: int):
            try:
                return self.cycle_service.get_cycle(cycle_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @cycles_router.get("/{cycle_id}/priorities")
        def cycle_priorities(cycle_id: int):
            return self.cycle_priorities.fetch_for_cycle(cycle_id)

        @cycles_router.put("/{cycle_id}/baseline/{exercise_id}")
        def set_baseline(cycle_id: int, exercise_id: int, sets: int):
            try:
                return self.cycle_service.set_baseline(cycle_id, exercise_id, sets)
            except ValueError as e:
                raise _http_error(e)

        @cycles_router.get("/{cycle_id}/sessions")
        def list_sessions(cycle_id: int, week: Optional[int] = None):
            return self.sessions.fetch_for_cycle(cycle_id, week)

        @cycles_router.post("/{cycle_id}/increment_week")
        def increment_week(cycle_id: int):
            try:
                return self.cycle_service.increment_week(cycle_id)
            except ValueError as e:
                raise _http_error(e)

        @cycles_router.post("/{cycle_id}/complete")
        def complete_cycle(cycle_id: int):
            try:
                return self.cycle_service.complete_cycle(cycle_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @cycles_router.post("/{cycle_id}/abandon")
        def abandon_cycle(cycle_id: int):
            try:
                return self.cycle_service.abandon_cycle(cycle_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @cycles_router.get("/{cycle_id}/next_baseline")
        def next_baseline(cycle_id: int):
            try:
                return self.cycle_service.next_baseline(cycle_id)
            except ValueError as e:
                raise _http_error(e)

        @cycles_router.post("/{cycle_id}/restart")
        def restart_cycle(cycle_id: int, start_date: Optional[str] = None):
            try:
                return self.cycle_service.restart_cycle(cycle_id, start_date)
            except ValueError as e:
                raise _http_error(e)

        @cycles_router.get("/{cycle_id}/weeks/{week}/targets")
        def week_targets(cycle_id: int, week: int):
            try:
                return self.cycle_service.week_targets(cycle_id, week)
            except ValueError as e:
                raise _http_error(e)

        @cycles_router.get("/{cycle_id}/weeks/{week}/exercises/{exercise_id}/target")
        def exercise_target(cycle_id: int, week: int, exercise_id: int):
            try:
                sets = self.cycle_service.target_sets(cycle_id, week, exercise_id)
                return {"exercise_id": exercise_id, "week": week, "target_sets": sets}
            except ValueError as e:
                raise _http_error(e)

        @cycles_router.get("/{cycle_id}/weeks/{week}/overrides")
        def list_overrides(cycle_id: int, week: int):
            return self.cycle_service.week_overrides(cycle_id, week)

        @cycles_router.put("/{cycle_id}/weeks/{week}/overrides/{exercise_id}")
        def set_override(cycle_id: int, week: int, exercise_id: int, sets: int):
            try:
                return self.cycle_service.set_override(cycle_id, week, exercise_id, sets)
            except ValueError as e:
                raise _http_error(e)

        @cycles_router.delete("/{cycle_id}/weeks/{week}/overrides/{exercise_id}")
        def remove_override(cycle_id: int, week: int, exercise_id: int):
            try:
                self.cycle_service.remove_override(cycle_id, week, exercise_id)
                return {"status": "deleted"}
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @cycles_router.post("/{cycle_id}/weeks/{week}/feedback")
        def submit_feedback(
            cycle_id: int,
            week: int,
            muscle_group_id: int,
            joint_pain: str,
            pump: str,
            workload: str,
        ):
            try:
                return self.autoregulation.submit_feedback(
                    cycle_id, week, muscle_group_id, joint_pain, pump, workload
                )
            except ValueError as e:
                raise _http_error(e)

        @cycles_router.get("/{cycle_id}/feedback")
        def feedback_history(cycle_id: int, muscle_group_id: Optional[int] = None):
            return self.autoregulation.feedback_history(cycle_id, muscle_group_id)

        @cycles_router.post("/{cycle_id}/weeks/{week}/sessions")
        def start_session(
            cycle_id: int, week: int, day_number: int, date: Optional[str] = None
        ):
            try:
                return self.workouts.start_session(cycle_id, week, day_number, date)
            except ValueError as e:
                raise _http_error(e)

        @cycles_router.get("/{cycle_id}/weeks/{week}/progress")
        def week_progress(cycle_id: int, week: int):
            return self.workouts.week_progress(cycle_id, week)

        @cycles_router.get("/{cycle_id}/exercises/{exercise_id}/stats")
        def exercise_stats(cycle_id: int, exercise_id: int):
            return {
                "weeks": self.statistics.exercise_weekly_summary(cycle_id, exercise_id),
                "trend": self.statistics.exercise_trend(cycle_id, exercise_id),
            }

        @cycles_router.get("/{cycle_id}/muscle_groups/{group_id}/weekly_sets")
        def muscle_group_weekly_sets(cycle_id: int, group_id: int):
            return self.statistics.muscle_group_weekly_sets(cycle_id, group_id)

        @sessions_router.get("/sessions/{session_id}/sets")
        def session_sets(session_id: int):
            try:
                return self.workouts.session_sets(session_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @sessions_router.post("/sessions/{session_id}/exercises/{exercise_id}/sets")
        def prescribe_sets(
            session_id: int, exercise_id: int, target_reps: Optional[int] = None
        ):
            try:
                return self.workouts.prescribe(session_id, exercise_id, target_reps)
            except ValueError as e:
                raise _http_error(e)

        @sessions_router.put("/sessions/{session_id}/status")
        def set_session_status(session_id: int, status: str):
            try:
                if status == "completed":
                    return self.workouts.complete_session(session_id)
                return self.sessions.set_status(session_id, status)
            except ValueError as e:
                raise _http_error(e)

        @sessions_router.put("/sets/{set_id}")
        def log_set(set_id: int, actual_reps: int, weight: Optional[float] = None):
            try:
                return self.workouts.log_set(set_id, actual_reps, weight)
            except ValueError as e:
                raise _http_error(e)

        @sessions_router.put("/sets/{set_id}/notes")
        def update_set_notes(set_id: int, notes: str = Body("", embed=True)):
            try:
                return self.workouts.update_set_notes(set_id, notes)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @engine_router.get("/progression/target")
        def progression_target(
            baseline_sets: int, week: int, override: Optional[int] = None
        ):
            try:
                sets = ProgressionCalculator.compute_target_sets(
                    baseline_sets, week, override
                )
                return {"week": week, "target_sets": sets}
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @engine_router.get("/progression/plan")
        def progression_plan(baseline_sets: int):
            try:
                plan = ProgressionCalculator.weekly_plan(baseline_sets)
                return [{"week": w, "target_sets": s} for w, s in plan]
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @engine_router.post("/autoregulation/calculate")
        def calculate_adjustment(priority: str, joint_pain: str, pump: str, workload: str):
            try:
                result = AutoRegulation.calculate_set_adjustment(
                    priority, joint_pain, pump, workload
                )
                return result._asdict()
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @engine_router.post("/autoregulation/distribute")
        def distribute_adjustment(request: DistributeRequest):
            try:
                result = VolumeDistributor.distribute_set_adjustment(
                    [(e.exercise_id, e.current_sets) for e in request.exercises],
                    request.total_adjustment,
                )
                return [r._asdict() for r in result]
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @engine_router.get("/autoregulation/logs")
        def autoregulation_logs():
            return self.autoreg_logs.fetch_all_logs()

        @self.app.get("/settings")
        def get_settings():
            return self.settings.all_settings()

        @self.app.put("/settings/{key}")
        def update_setting(key: str, value: str):
            try:
                self.settings.set_text(key, value)
                return {"status": "updated"}
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        self.app.include_router(muscle_groups_router)
        self.app.include_router(exercises_router)
        self.app.include_router(cycles_router)
        self.app.include_router(sessions_router)
        self.app.include_router(engine_router)


def create_app(db_path: str = DEFAULT_DB_PATH, yaml_path: str = DEFAULT_YAML_PATH) -> FastAPI:
    return TrackerAPI(db_path=db_path, yaml_path=yaml_path).app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app())
