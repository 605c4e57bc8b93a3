import argparse
import datetime
import json
import shutil
from typing import Optional

from algorithms import (
    ProgressionCalculator,
    AutoRegulation,
    VolumeDistributor,
    WeightConverter,
)
from config import DEFAULT_DB_PATH, DEFAULT_YAML_PATH
from rest_api import TrackerAPI


def backup_db(db_path: str, backup_path: str) -> None:
    shutil.copy(db_path, backup_path)


def restore_db(backup_path: str, db_path: str) -> None:
    shutil.copy(backup_path, db_path)


def parse_exercise_pairs(values: list[str]) -> list[tuple[str, int]]:
    """Parse ``id:sets`` arguments into pairs."""
    pairs = []
    for value in values:
        ex_id, sep, sets = value.rpartition(":")
        if not sep or not ex_id:
            raise ValueError(f"expected id:sets, got {value!r}")
        try:
            pairs.append((ex_id, int(sets)))
        except ValueError:
            raise ValueError(f"set count must be an integer in {value!r}") from None
    return pairs


def target(baseline: int, week: int, override: Optional[int] = None) -> int:
    sets = ProgressionCalculator.compute_target_sets(baseline, week, override)
    print(f"week {week}: {sets} sets")
    return sets


def plan(baseline: int) -> list[tuple[int, int]]:
    weeks = ProgressionCalculator.weekly_plan(baseline)
    for week, sets in weeks:
        print(f"week {week}: {sets} sets")
    return weeks


def adjust(priority: str, joint_pain: str, pump: str, workload: str) -> dict:
    result = AutoRegulation.calculate_set_adjustment(priority, joint_pain, pump, workload)
    print(f"{result.set_adjustment:+d} sets: {result.reasoning}")
    return result._asdict()


def distribute(exercises: list[str], total: int) -> list[dict]:
    result = VolumeDistributor.distribute_set_adjustment(
        parse_exercise_pairs(exercises), total
    )
    rows = [r._asdict() for r in result]
    print(json.dumps(rows))
    return rows


def demo_data(db_path: str, yaml_path: str) -> None:
    """Populate the database with a demo cycle if empty."""
    api = TrackerAPI(db_path=db_path, yaml_path=yaml_path)
    if api.cycles.fetch_all_cycles():
        print("Database already contains cycles")
        return
    chest = api.muscle_groups.add("Chest", "high")
    back = api.muscle_groups.add("Back", "medium")
    calves = api.muscle_groups.add("Calves", "low")
    api.exercises.add("Bench Press", chest, "Olympic Barbell", "horizontal push", 3, 8)
    api.exercises.add("Cable Fly", chest, "Cable", "horizontal adduction", 2, 12)
    api.exercises.add("Barbell Row", back, "Olympic Barbell", "horizontal pull", 3, 10)
    api.exercises.add("Standing Calf Raise", calves, "Machine", "plantar flexion", 2, 15)
    cycle = api.cycle_service.create_cycle(start_date=datetime.date.today().isoformat())
    session = api.workouts.start_session(cycle["id"], 1, 1)
    for ex in api.exercises.fetch_for_muscle_group(chest):
        api.workouts.prescribe(session["id"], ex["id"])
    print("Demo data inserted")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Volume tracker utility commands")
    sub = parser.add_subparsers(dest="cmd", required=True)

    tgt = sub.add_parser("target")
    tgt.add_argument("--baseline", type=int, required=True)
    tgt.add_argument("--week", type=int, required=True)
    tgt.add_argument("--override", type=int)

    pln = sub.add_parser("plan")
    pln.add_argument("--baseline", type=int, required=True)

    adj = sub.add_parser("adjust")
    adj.add_argument("--priority", choices=["high", "medium", "low"], required=True)
    adj.add_argument("--joint-pain", dest="joint_pain", required=True)
    adj.add_argument("--pump", required=True)
    adj.add_argument("--workload", required=True)

    dist = sub.add_parser("distribute")
    dist.add_argument("--exercise", action="append", default=[], metavar="ID:SETS")
    dist.add_argument("--total", type=int, required=True)

    bkp = sub.add_parser("backup")
    bkp.add_argument("--db", default=DEFAULT_DB_PATH)
    bkp.add_argument("--out", default="backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.db")
    rst.add_argument("--db", default=DEFAULT_DB_PATH)

    demo = sub.add_parser("demo")
    demo.add_argument("--db", default=DEFAULT_DB_PATH)
    demo.add_argument("--yaml", default=DEFAULT_YAML_PATH)

    conv = sub.add_parser("convert")
    conv.add_argument("--weight", type=float, required=True)
    conv.add_argument("--unit", choices=["kg", "lb"], required=True)

    srv = sub.add_parser("serve")
    srv.add_argument("--db", default=DEFAULT_DB_PATH)
    srv.add_argument("--yaml", default=DEFAULT_YAML_PATH)
    srv.add_argument("--host", default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    try:
        if args.cmd == "target":
            target(args.baseline, args.week, args.override)
        elif args.cmd == "plan":
            plan(args.baseline)
        elif args.cmd == "adjust":
            adjust(args.priority, args.joint_pain, args.pump, args.workload)
        elif args.cmd == "distribute":
            distribute(args.exercise, args.total)
        elif args.cmd == "backup":
            backup_db(args.db, args.out)
        elif args.cmd == "restore":
            restore_db(args.src, args.db)
        elif args.cmd == "demo":
            demo_data(args.db, args.yaml)
        elif args.cmd == "convert":
            if args.unit == "kg":
                print(f"{args.weight} kg = {WeightConverter.kg_to_lb(args.weight)} lb")
            else:
                print(f"{args.weight} lb = {WeightConverter.lb_to_kg(args.weight)} kg")
        elif args.cmd == "serve":
            import uvicorn

            api = TrackerAPI(db_path=args.db, yaml_path=args.yaml)
            uvicorn.run(api.app, host=args.host, port=args.port)
    except ValueError as e:
        parser.exit(2, f"error: {e}\n")


if __name__ == "__main__":
    main()
