import sqlite3
import datetime
import json
from contextlib import contextmanager
from typing import List, Tuple, Optional

from algorithms.feedback import (
    MuscleGroupPriority,
    JointPain,
    Pump,
    Workload,
    parse_enum,
)
from config import YamlConfig, DEFAULT_DB_PATH, DEFAULT_YAML_PATH
from settings_schema import validate_settings


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "muscle_groups": (
            """CREATE TABLE muscle_groups (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    priority TEXT NOT NULL DEFAULT 'medium',
                    created_at TEXT NOT NULL
                );""",
            ["id", "name", "priority", "created_at"],
        ),
        "exercises": (
            """CREATE TABLE exercises (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    muscle_group_id INTEGER NOT NULL,
                    equipment TEXT,
                    movement_pattern TEXT,
                    default_sets INTEGER NOT NULL DEFAULT 3,
                    default_reps INTEGER NOT NULL DEFAULT 10,
                    notes TEXT,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY(muscle_group_id) REFERENCES muscle_groups(id) ON DELETE CASCADE
                );""",
            [
                "id",
                "name",
                "muscle_group_id",
                "equipment",
                "movement_pattern",
                "default_sets",
                "default_reps",
                "notes",
                "created_at",
            ],
        ),
        "training_cycles": (
            """CREATE TABLE training_cycles (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    start_date TEXT NOT NULL,
                    current_week INTEGER NOT NULL DEFAULT 1,
                    status TEXT NOT NULL DEFAULT 'active',
                    baseline_sets TEXT NOT NULL,
                    previous_cycle_id INTEGER,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY(previous_cycle_id) REFERENCES training_cycles(id) ON DELETE SET NULL
                );""",
            [
                "id",
                "start_date",
                "current_week",
                "status",
                "baseline_sets",
                "previous_cycle_id",
                "created_at",
            ],
        ),
        "cycle_priorities": (
            """CREATE TABLE cycle_priorities (
                    cycle_id INTEGER NOT NULL,
                    muscle_group_id INTEGER NOT NULL,
                    priority TEXT NOT NULL,
                    PRIMARY KEY (cycle_id, muscle_group_id),
                    FOREIGN KEY(cycle_id) REFERENCES training_cycles(id) ON DELETE CASCADE,
                    FOREIGN KEY(muscle_group_id) REFERENCES muscle_groups(id) ON DELETE CASCADE
                );""",
            ["cycle_id", "muscle_group_id", "priority"],
        ),
        "week_set_overrides": (
            """CREATE TABLE week_set_overrides (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    cycle_id INTEGER NOT NULL,
                    week INTEGER NOT NULL,
                    exercise_id INTEGER NOT NULL,
                    sets INTEGER NOT NULL,
                    created_at TEXT NOT NULL,
                    UNIQUE (cycle_id, week, exercise_id),
                    FOREIGN KEY(cycle_id) REFERENCES training_cycles(id) ON DELETE CASCADE,
                    FOREIGN KEY(exercise_id) REFERENCES exercises(id) ON DELETE CASCADE
                );""",
            ["id", "cycle_id", "week", "exercise_id", "sets", "created_at"],
        ),
        "volume_adjustments": (
            """CREATE TABLE volume_adjustments (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    cycle_id INTEGER NOT NULL,
                    week INTEGER NOT NULL,
                    exercise_id INTEGER NOT NULL,
                    sets INTEGER NOT NULL,
                    created_at TEXT NOT NULL,
                    UNIQUE (cycle_id, week, exercise_id),
                    FOREIGN KEY(cycle_id) REFERENCES training_cycles(id) ON DELETE CASCADE,
                    FOREIGN KEY(exercise_id) REFERENCES exercises(id) ON DELETE CASCADE
                );""",
            ["id", "cycle_id", "week", "exercise_id", "sets", "created_at"],
        ),
        "workout_sessions": (
            """CREATE TABLE workout_sessions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    cycle_id INTEGER NOT NULL,
                    week INTEGER NOT NULL,
                    day_number INTEGER NOT NULL,
                    date TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'planned',
                    completed_at TEXT,
                    UNIQUE (cycle_id, week, day_number),
                    FOREIGN KEY(cycle_id) REFERENCES training_cycles(id) ON DELETE CASCADE
                );""",
            [
                "id",
                "cycle_id",
                "week",
                "day_number",
                "date",
                "status",
                "completed_at",
            ],
        ),
        "workout_sets": (
            """CREATE TABLE workout_sets (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    session_id INTEGER NOT NULL,
                    exercise_id INTEGER NOT NULL,
                    set_number INTEGER NOT NULL,
                    target_reps INTEGER NOT NULL,
                    actual_reps INTEGER,
                    weight REAL,
                    notes TEXT,
                    completed_at TEXT,
                    FOREIGN KEY(session_id) REFERENCES workout_sessions(id) ON DELETE CASCADE,
                    FOREIGN KEY(exercise_id) REFERENCES exercises(id) ON DELETE CASCADE
                );""",
            [
                "id",
                "session_id",
                "exercise_id",
                "set_number",
                "target_reps",
                "actual_reps",
                "weight",
                "notes",
                "completed_at",
            ],
        ),
        "muscle_feedback": (
            """CREATE TABLE muscle_feedback (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    cycle_id INTEGER NOT NULL,
                    week INTEGER NOT NULL,
                    muscle_group_id INTEGER NOT NULL,
                    joint_pain TEXT NOT NULL,
                    pump TEXT NOT NULL,
                    workload TEXT NOT NULL,
                    set_adjustment INTEGER NOT NULL,
                    reasoning TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY(cycle_id) REFERENCES training_cycles(id) ON DELETE CASCADE,
                    FOREIGN KEY(muscle_group_id) REFERENCES muscle_groups(id) ON DELETE CASCADE
                );""",
            [
                "id",
                "cycle_id",
                "week",
                "muscle_group_id",
                "joint_pain",
                "pump",
                "workload",
                "set_adjustment",
                "reasoning",
                "created_at",
            ],
        ),
        "settings": (
            """CREATE TABLE settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );""",
            ["key", "value"],
        ),
        "autoregulation_logs": (
            """CREATE TABLE autoregulation_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL,
                    status TEXT NOT NULL,
                    message TEXT
                );""",
            ["id", "timestamp", "status", "message"],
        ),
    }

    def __init__(self, db_path: str = DEFAULT_DB_PATH) -> None:
        self._db_path = db_path
        self._ensure_schema()
        self._init_settings()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        connection.execute("PRAGMA foreign_keys=on;")
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            conn.execute("PRAGMA foreign_keys=off;")
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)
            conn.execute("PRAGMA foreign_keys=on;")

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)

        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            missing = [c for c in columns if c not in existing_cols]
            if missing:
                def default_val(col: str) -> str:
                    if col == "created_at":
                        return f"'{datetime.datetime.now().isoformat()}'"
                    if col in ("default_sets",):
                        return "3"
                    if col in ("default_reps",):
                        return "10"
                    if col == "priority":
                        return "'medium'"
                    if col == "status":
                        return "'planned'" if table == "workout_sessions" else "'active'"
                    if col == "reasoning":
                        return "''"
                    return "NULL"

                defaults = ", ".join(default_val(c) for c in missing)
                conn.execute(
                    f"INSERT INTO {table} ({cols}, {', '.join(missing)}) SELECT {cols}, {defaults} FROM {table}_old;"
                )
            else:
                conn.execute(
                    f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
                )
        conn.execute(f"DROP TABLE {table}_old;")

    def _init_settings(self) -> None:
        defaults = {
            "weight_unit": "kg",
            "default_sets": "3",
            "default_target_reps": "10",
            "cycle_weeks": "5",
            "auto_apply_adjustments": "1",
            "joint_pain_scale": "4",
            "app_version": "1.0.0",
        }
        with self._connection() as conn:
            for key, value in defaults.items():
                conn.execute(
                    "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?);",
                    (key, value),
                )


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def transaction(self):
        """Connection whose writes commit together or not at all."""
        return self._connection()

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    @staticmethod
    def _now() -> str:
        return datetime.datetime.now().isoformat()


class MuscleGroupRepository(BaseRepository):
    """Repository for muscle groups and their training priority."""

    _COLUMNS = "id, name, priority, created_at"

    @staticmethod
    def _to_dict(row: Tuple) -> dict:
        return {"id": row[0], "name": row[1], "priority": row[2], "created_at": row[3]}

    def add(self, name: str, priority: str = "medium") -> int:
        prio = parse_enum(MuscleGroupPriority, priority, "priority")
        if super().fetch_all("SELECT id FROM muscle_groups WHERE name = ?;", (name,)):
            raise ValueError("muscle group exists")
        return self.execute(
            "INSERT INTO muscle_groups (name, priority, created_at) VALUES (?, ?, ?);",
            (name, prio.value, self._now()),
        )

    def fetch_all_groups(self) -> list[dict]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM muscle_groups ORDER BY name;"
        )
        return [self._to_dict(r) for r in rows]

    def fetch_detail(self, group_id: int) -> dict:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM muscle_groups WHERE id = ?;", (group_id,)
        )
        if not rows:
            raise ValueError("muscle group not found")
        return self._to_dict(rows[0])

    def set_priority(self, group_id: int, priority: str) -> None:
        prio = parse_enum(MuscleGroupPriority, priority, "priority")
        self.fetch_detail(group_id)
        self.execute(
            "UPDATE muscle_groups SET priority = ? WHERE id = ?;",
            (prio.value, group_id),
        )

    def fetch_by_priority(self) -> dict[str, list[dict]]:
        grouped: dict[str, list[dict]] = {p.value: [] for p in MuscleGroupPriority}
        for group in self.fetch_all_groups():
            grouped.setdefault(group["priority"], []).append(group)
        return grouped

    def delete(self, group_id: int) -> None:
        self.fetch_detail(group_id)
        self.execute("DELETE FROM muscle_groups WHERE id = ?;", (group_id,))


class ExerciseRepository(BaseRepository):
    """Repository for exercise definitions."""

    _COLUMNS = (
        "id, name, muscle_group_id, equipment, movement_pattern, "
        "default_sets, default_reps, notes, created_at"
    )

    @staticmethod
    def _to_dict(row: Tuple) -> dict:
        return {
            "id": row[0],
            "name": row[1],
            "muscle_group_id": row[2],
            "equipment": row[3],
            "movement_pattern": row[4],
            "default_sets": row[5],
            "default_reps": row[6],
            "notes": row[7],
            "created_at": row[8],
        }

    def add(
        self,
        name: str,
        muscle_group_id: int,
        equipment: Optional[str] = None,
        movement_pattern: Optional[str] = None,
        default_sets: int = 3,
        default_reps: int = 10,
        notes: Optional[str] = None,
    ) -> int:
        if default_sets < 1 or default_reps < 1:
            raise ValueError("default sets and reps must be at least 1")
        if not super().fetch_all(
            "SELECT id FROM muscle_groups WHERE id = ?;", (muscle_group_id,)
        ):
            raise ValueError("muscle group not found")
        if super().fetch_all("SELECT id FROM exercises WHERE name = ?;", (name,)):
            raise ValueError("exercise exists")
        return self.execute(
            "INSERT INTO exercises (name, muscle_group_id, equipment, movement_pattern, default_sets, default_reps, notes, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?);",
            (
                name,
                muscle_group_id,
                equipment,
                movement_pattern,
                default_sets,
                default_reps,
                notes,
                self._now(),
            ),
        )

    def fetch_all_exercises(self, muscle_group_id: Optional[int] = None) -> list[dict]:
        query = f"SELECT {self._COLUMNS} FROM exercises"
        params: Tuple = ()
        if muscle_group_id is not None:
            query += " WHERE muscle_group_id = ?"
            params = (muscle_group_id,)
        query += " ORDER BY id;"
        return [self._to_dict(r) for r in self.fetch_all(query, params)]

    def fetch_for_muscle_group(self, muscle_group_id: int) -> list[dict]:
        return self.fetch_all_exercises(muscle_group_id)

    def fetch_detail(self, exercise_id: int) -> dict:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM exercises WHERE id = ?;", (exercise_id,)
        )
        if not rows:
            raise ValueError("exercise not found")
        return self._to_dict(rows[0])

    def update_default_sets(self, exercise_id: int, default_sets: int) -> None:
        if default_sets < 1:
            raise ValueError("default sets must be at least 1")
        self.fetch_detail(exercise_id)
        self.execute(
            "UPDATE exercises SET default_sets = ? WHERE id = ?;",
            (default_sets, exercise_id),
        )

    def update_notes(self, exercise_id: int, notes: Optional[str]) -> None:
        self.fetch_detail(exercise_id)
        self.execute(
            "UPDATE exercises SET notes = ? WHERE id = ?;", (notes, exercise_id)
        )

    def delete(self, exercise_id: int) -> None:
        self.fetch_detail(exercise_id)
        self.execute("DELETE FROM exercises WHERE id = ?;", (exercise_id,))


class TrainingCycleRepository(BaseRepository):
    """Repository for training cycles and their baseline set counts."""

    STATUSES = ("active", "completed", "abandoned")
    _COLUMNS = (
        "id, start_date, current_week, status, baseline_sets, previous_cycle_id, created_at"
    )

    @staticmethod
    def _to_dict(row: Tuple) -> dict:
        baseline = {int(k): int(v) for k, v in json.loads(row[4]).items()}
        return {
            "id": row[0],
            "start_date": row[1],
            "current_week": row[2],
            "status": row[3],
            "baseline_sets": baseline,
            "previous_cycle_id": row[5],
            "created_at": row[6],
        }

    def create(
        self,
        baseline_sets: dict[int, int],
        start_date: Optional[str] = None,
        previous_cycle_id: Optional[int] = None,
    ) -> int:
        for ex_id, sets in baseline_sets.items():
            if sets < 1:
                raise ValueError(f"baseline for exercise {ex_id} must be at least 1")
        start_date = start_date or datetime.date.today().isoformat()
        payload = json.dumps({str(k): int(v) for k, v in baseline_sets.items()})
        return self.execute(
            "INSERT INTO training_cycles (start_date, current_week, status, baseline_sets, previous_cycle_id, created_at) "
            "VALUES (?, 1, 'active', ?, ?, ?);",
            (start_date, payload, previous_cycle_id, self._now()),
        )

    def fetch_detail(self, cycle_id: int) -> dict:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM training_cycles WHERE id = ?;", (cycle_id,)
        )
        if not rows:
            raise ValueError("cycle not found")
        return self._to_dict(rows[0])

    def fetch_active(self) -> Optional[dict]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM training_cycles WHERE status = 'active' "
            "ORDER BY id DESC LIMIT 1;"
        )
        return self._to_dict(rows[0]) if rows else None

    def fetch_all_cycles(self) -> list[dict]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM training_cycles ORDER BY id;"
        )
        return [self._to_dict(r) for r in rows]

    def set_week(self, cycle_id: int, week: int) -> None:
        self.execute(
            "UPDATE training_cycles SET current_week = ? WHERE id = ?;",
            (week, cycle_id),
        )

    def set_status(self, cycle_id: int, status: str) -> None:
        if status not in self.STATUSES:
            raise ValueError(f"invalid cycle status: {status}")
        self.execute(
            "UPDATE training_cycles SET status = ? WHERE id = ?;", (status, cycle_id)
        )

    def set_baseline(self, cycle_id: int, exercise_id: int, sets: int) -> None:
        if sets < 1:
            raise ValueError("baseline must be at least 1")
        cycle = self.fetch_detail(cycle_id)
        baseline = dict(cycle["baseline_sets"])
        baseline[exercise_id] = sets
        payload = json.dumps({str(k): v for k, v in baseline.items()})
        self.execute(
            "UPDATE training_cycles SET baseline_sets = ? WHERE id = ?;",
            (payload, cycle_id),
        )


class CyclePriorityRepository(BaseRepository):
    """Muscle group priorities frozen at cycle creation."""

    def snapshot(self, cycle_id: int, priorities: dict[int, str]) -> None:
        with self._connection() as conn:
            for group_id, priority in priorities.items():
                prio = parse_enum(MuscleGroupPriority, priority, "priority")
                conn.execute(
                    "INSERT OR REPLACE INTO cycle_priorities (cycle_id, muscle_group_id, priority) VALUES (?, ?, ?);",
                    (cycle_id, group_id, prio.value),
                )

    def fetch_for_cycle(self, cycle_id: int) -> dict[int, str]:
        rows = self.fetch_all(
            "SELECT muscle_group_id, priority FROM cycle_priorities WHERE cycle_id = ? ORDER BY muscle_group_id;",
            (cycle_id,),
        )
        return {r[0]: r[1] for r in rows}

    def priority(self, cycle_id: int, muscle_group_id: int) -> Optional[str]:
        rows = self.fetch_all(
            "SELECT priority FROM cycle_priorities WHERE cycle_id = ? AND muscle_group_id = ?;",
            (cycle_id, muscle_group_id),
        )
        return rows[0][0] if rows else None


class WeekSetRepository(BaseRepository):
    """Per (cycle, week, exercise) set counts stored in ``table``."""

    table = ""

    def upsert(
        self, cycle_id: int, week: int, exercise_id: int, sets: int, conn=None
    ) -> dict:
        if conn is None:
            with self._connection() as conn:
                return self.upsert(cycle_id, week, exercise_id, sets, conn)
        sets = max(1, int(sets))
        conn.execute(
            f"INSERT INTO {self.table} (cycle_id, week, exercise_id, sets, created_at) VALUES (?, ?, ?, ?, ?) "
            "ON CONFLICT(cycle_id, week, exercise_id) DO UPDATE SET sets=excluded.sets;",
            (cycle_id, week, exercise_id, sets, self._now()),
        )
        row = conn.execute(
            f"SELECT id, cycle_id, week, exercise_id, sets, created_at FROM {self.table} "
            "WHERE cycle_id = ? AND week = ? AND exercise_id = ?;",
            (cycle_id, week, exercise_id),
        ).fetchone()
        return {
            "id": row[0],
            "cycle_id": row[1],
            "week": row[2],
            "exercise_id": row[3],
            "sets": row[4],
            "created_at": row[5],
        }

    def fetch(self, cycle_id: int, week: int, exercise_id: int) -> Optional[int]:
        rows = self.fetch_all(
            f"SELECT sets FROM {self.table} WHERE cycle_id = ? AND week = ? AND exercise_id = ?;",
            (cycle_id, week, exercise_id),
        )
        return rows[0][0] if rows else None

    def fetch_for_week(self, cycle_id: int, week: int) -> dict[int, int]:
        rows = self.fetch_all(
            f"SELECT exercise_id, sets FROM {self.table} WHERE cycle_id = ? AND week = ? ORDER BY exercise_id;",
            (cycle_id, week),
        )
        return {r[0]: r[1] for r in rows}

    def remove(self, cycle_id: int, week: int, exercise_id: int) -> None:
        self.execute(
            f"DELETE FROM {self.table} WHERE cycle_id = ? AND week = ? AND exercise_id = ?;",
            (cycle_id, week, exercise_id),
        )

    def clear_week(self, cycle_id: int, week: int) -> None:
        self.execute(
            f"DELETE FROM {self.table} WHERE cycle_id = ? AND week = ?;",
            (cycle_id, week),
        )


class WeekSetOverrideRepository(WeekSetRepository):
    """User-entered set overrides, which beat every computed target."""

    table = "week_set_overrides"


class VolumeAdjustmentRepository(WeekSetRepository):
    """Set counts produced by feedback-driven volume redistribution."""

    table = "volume_adjustments"


class WorkoutSessionRepository(BaseRepository):
    """Repository for training sessions within a cycle week."""

    STATUSES = ("planned", "in_progress", "completed")
    _COLUMNS = "id, cycle_id, week, day_number, date, status, completed_at"

    @staticmethod
    def _to_dict(row: Tuple) -> dict:
        return {
            "id": row[0],
            "cycle_id": row[1],
            "week": row[2],
            "day_number": row[3],
            "date": row[4],
            "status": row[5],
            "completed_at": row[6],
        }

    def create_or_get(
        self, cycle_id: int, week: int, day_number: int, date: Optional[str] = None
    ) -> dict:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workout_sessions WHERE cycle_id = ? AND week = ? AND day_number = ?;",
            (cycle_id, week, day_number),
        )
        if rows:
            return self._to_dict(rows[0])
        date = date or datetime.date.today().isoformat()
        sid = self.execute(
            "INSERT INTO workout_sessions (cycle_id, week, day_number, date, status) VALUES (?, ?, ?, ?, 'planned');",
            (cycle_id, week, day_number, date),
        )
        return self.fetch_detail(sid)

    def fetch_detail(self, session_id: int) -> dict:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workout_sessions WHERE id = ?;", (session_id,)
        )
        if not rows:
            raise ValueError("session not found")
        return self._to_dict(rows[0])

    def fetch_for_cycle(self, cycle_id: int, week: Optional[int] = None) -> list[dict]:
        query = f"SELECT {self._COLUMNS} FROM workout_sessions WHERE cycle_id = ?"
        params: Tuple = (cycle_id,)
        if week is not None:
            query += " AND week = ?"
            params += (week,)
        query += " ORDER BY week, day_number;"
        return [self._to_dict(r) for r in self.fetch_all(query, params)]

    def set_status(self, session_id: int, status: str) -> dict:
        if status not in self.STATUSES:
            raise ValueError(f"invalid session status: {status}")
        self.fetch_detail(session_id)
        completed_at = self._now() if status == "completed" else None
        self.execute(
            "UPDATE workout_sessions SET status = ?, completed_at = ? WHERE id = ?;",
            (status, completed_at, session_id),
        )
        return self.fetch_detail(session_id)


class WorkoutSetRepository(BaseRepository):
    """Repository for prescribed and logged sets."""

    _COLUMNS = (
        "s.id, s.session_id, s.exercise_id, s.set_number, s.target_reps, "
        "s.actual_reps, s.weight, s.notes, s.completed_at"
    )

    @staticmethod
    def _to_dict(row: Tuple) -> dict:
        data = {
            "id": row[0],
            "session_id": row[1],
            "exercise_id": row[2],
            "set_number": row[3],
            "target_reps": row[4],
            "actual_reps": row[5],
            "weight": row[6],
            "notes": row[7],
            "completed_at": row[8],
        }
        if len(row) > 9:
            data["week"] = row[9]
        return data

    def bulk_add(
        self, session_id: int, exercise_id: int, target_reps: int, target_sets: int
    ) -> list[int]:
        if target_sets < 1 or target_reps < 1:
            raise ValueError("target sets and reps must be at least 1")
        ids: list[int] = []
        with self._connection() as conn:
            row = conn.execute(
                "SELECT COALESCE(MAX(set_number), 0) FROM workout_sets WHERE session_id = ? AND exercise_id = ?;",
                (session_id, exercise_id),
            ).fetchone()
            start = row[0]
            for n in range(1, target_sets + 1):
                cur = conn.execute(
                    "INSERT INTO workout_sets (session_id, exercise_id, set_number, target_reps) VALUES (?, ?, ?, ?);",
                    (session_id, exercise_id, start + n, target_reps),
                )
                ids.append(cur.lastrowid)
        return ids

    def fetch_detail(self, set_id: int) -> dict:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workout_sets s WHERE s.id = ?;", (set_id,)
        )
        if not rows:
            raise ValueError("set not found")
        return self._to_dict(rows[0])

    def fetch_for_session(self, session_id: int) -> list[dict]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workout_sets s WHERE s.session_id = ? "
            "ORDER BY s.exercise_id, s.set_number;",
            (session_id,),
        )
        return [self._to_dict(r) for r in rows]

    def log(self, set_id: int, actual_reps: int, weight: Optional[float] = None) -> dict:
        if actual_reps < 0:
            raise ValueError("reps must be non-negative")
        if weight is not None and weight < 0:
            raise ValueError("weight must be non-negative")
        self.fetch_detail(set_id)
        self.execute(
            "UPDATE workout_sets SET actual_reps = ?, weight = ?, completed_at = ? WHERE id = ?;",
            (actual_reps, weight, self._now(), set_id),
        )
        return self.fetch_detail(set_id)

    def update_note(self, set_id: int, notes: Optional[str]) -> dict:
        self.fetch_detail(set_id)
        self.execute(
            "UPDATE workout_sets SET notes = ? WHERE id = ?;", (notes or None, set_id)
        )
        return self.fetch_detail(set_id)

    def fetch_for_cycle(
        self,
        cycle_id: int,
        week: Optional[int] = None,
        exercise_id: Optional[int] = None,
        completed_only: bool = False,
    ) -> list[dict]:
        query = (
            f"SELECT {self._COLUMNS}, ws.week FROM workout_sets s "
            "JOIN workout_sessions ws ON ws.id = s.session_id WHERE ws.cycle_id = ?"
        )
        params: list = [cycle_id]
        if week is not None:
            query += " AND ws.week = ?"
            params.append(week)
        if exercise_id is not None:
            query += " AND s.exercise_id = ?"
            params.append(exercise_id)
        if completed_only:
            query += " AND s.completed_at IS NOT NULL"
        query += " ORDER BY ws.week, ws.day_number, s.exercise_id, s.set_number;"
        return [self._to_dict(r) for r in self.fetch_all(query, tuple(params))]


class MuscleFeedbackRepository(BaseRepository):
    """Repository for weekly per-muscle-group feedback and its outcome."""

    _COLUMNS = (
        "id, cycle_id, week, muscle_group_id, joint_pain, pump, workload, "
        "set_adjustment, reasoning, created_at"
    )

    @staticmethod
    def _to_dict(row: Tuple) -> dict:
        return {
            "id": row[0],
            "cycle_id": row[1],
            "week": row[2],
            "muscle_group_id": row[3],
            "joint_pain": row[4],
            "pump": row[5],
            "workload": row[6],
            "set_adjustment": row[7],
            "reasoning": row[8],
            "created_at": row[9],
        }

    def add(
        self,
        cycle_id: int,
        week: int,
        muscle_group_id: int,
        joint_pain: str,
        pump: str,
        workload: str,
        set_adjustment: int,
        reasoning: str,
        conn=None,
    ) -> int:
        if conn is None:
            with self._connection() as conn:
                return self.add(
                    cycle_id,
                    week,
                    muscle_group_id,
                    joint_pain,
                    pump,
                    workload,
                    set_adjustment,
                    reasoning,
                    conn,
                )
        cursor = conn.execute(
            "INSERT INTO muscle_feedback (cycle_id, week, muscle_group_id, joint_pain, pump, workload, set_adjustment, reasoning, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);",
            (
                cycle_id,
                week,
                muscle_group_id,
                parse_enum(JointPain, joint_pain, "joint_pain").value,
                parse_enum(Pump, pump, "pump").value,
                parse_enum(Workload, workload, "workload").value,
                set_adjustment,
                reasoning,
                self._now(),
            ),
        )
        return cursor.lastrowid

    def fetch_for_cycle(
        self,
        cycle_id: int,
        muscle_group_id: Optional[int] = None,
        week: Optional[int] = None,
    ) -> list[dict]:
        query = f"SELECT {self._COLUMNS} FROM muscle_feedback WHERE cycle_id = ?"
        params: list = [cycle_id]
        if muscle_group_id is not None:
            query += " AND muscle_group_id = ?"
            params.append(muscle_group_id)
        if week is not None:
            query += " AND week = ?"
            params.append(week)
        query += " ORDER BY week, id;"
        return [self._to_dict(r) for r in self.fetch_all(query, tuple(params))]


class SettingsRepository(BaseRepository):
    """Repository for general application settings synchronized with YAML."""

    BOOL_KEYS = {"auto_apply_adjustments"}
    INT_KEYS = {"default_sets", "default_target_reps", "cycle_weeks", "joint_pain_scale"}

    def __init__(
        self, db_path: str = DEFAULT_DB_PATH, yaml_path: str = DEFAULT_YAML_PATH
    ) -> None:
        super().__init__(db_path)
        self._yaml = YamlConfig(yaml_path)
        self._sync_from_yaml()
        self._sync_to_yaml()

    def _raw_all_settings(self) -> dict:
        rows = self.fetch_all("SELECT key, value FROM settings ORDER BY key;")
        result: dict = {}
        for k, v in rows:
            if k in self.BOOL_KEYS:
                result[k] = v in {"1", "1.0", "true", "True"}
            elif k in self.INT_KEYS:
                result[k] = int(float(v))
            else:
                result[k] = v
        return result

    def _sync_from_yaml(self) -> None:
        data = self._yaml.load()
        if not data:
            return
        validate_settings(data)
        with self._connection() as conn:
            for key, value in data.items():
                val = str(value)
                if key in self.BOOL_KEYS:
                    val = "1" if val in {"1", "1.0", "true", "True"} else "0"
                conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
                    (key, val),
                )

    def _sync_to_yaml(self) -> None:
        self._yaml.save(self._raw_all_settings())

    def get_text(self, key: str, default: str) -> str:
        self._sync_from_yaml()
        rows = self.fetch_all("SELECT value FROM settings WHERE key = ?;", (key,))
        return rows[0][0] if rows else default

    def set_text(self, key: str, value: str) -> None:
        data = self._raw_all_settings()
        data[key] = value
        validate_settings(data)
        self.execute(
            "INSERT INTO settings (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
            (key, value),
        )
        self._sync_to_yaml()

    def get_int(self, key: str, default: int) -> int:
        try:
            return int(float(self.get_text(key, str(default))))
        except ValueError:
            return default

    def set_int(self, key: str, value: int) -> None:
        self.set_text(key, str(int(value)))

    def get_bool(self, key: str, default: bool) -> bool:
        return self.get_text(key, "1" if default else "0") in {
            "1",
            "true",
            "True",
            "1.0",
        }

    def set_bool(self, key: str, value: bool) -> None:
        self.set_text(key, "1" if value else "0")

    def all_settings(self) -> dict:
        self._sync_from_yaml()
        return self._raw_all_settings()


class AutoRegulationLogRepository(BaseRepository):
    """Repository for weekly auto-regulation run logs."""

    def log_success(self, message: Optional[str] = None) -> int:
        return self.execute(
            "INSERT INTO autoregulation_logs (timestamp, status, message) VALUES (?, 'success', ?);",
            (self._now(), message),
        )

    def log_error(self, message: str) -> int:
        return self.execute(
            "INSERT INTO autoregulation_logs (timestamp, status, message) VALUES (?, 'error', ?);",
            (self._now(), message),
        )

    def last_success(self) -> Optional[str]:
        rows = self.fetch_all(
            "SELECT timestamp FROM autoregulation_logs WHERE status='success' ORDER BY id DESC LIMIT 1;"
        )
        return rows[0][0] if rows else None

    def last_errors(self, limit: int = 5) -> list[tuple[str, str]]:
        rows = self.fetch_all(
            "SELECT timestamp, message FROM autoregulation_logs WHERE status='error' ORDER BY id DESC LIMIT ?;",
            (limit,),
        )
        return [(r[0], r[1]) for r in rows]

    def fetch_all_logs(self) -> list[dict]:
        rows = self.fetch_all(
            "SELECT id, timestamp, status, message FROM autoregulation_logs ORDER BY id;"
        )
        return [
            {"id": r[0], "timestamp": r[1], "status": r[2], "message": r[3]}
            for r in rows
        ]
