import io
import os
import sys
import unittest
from contextlib import redirect_stdout

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from cli import (
    main,
    backup_db,
    restore_db,
    demo_data,
    target,
    plan,
    adjust,
    distribute,
    parse_exercise_pairs,
)
from rest_api import TrackerAPI


class CLIToolsTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_cli.db"
        self.yaml_path = "test_cli.yaml"
        self.tearDown()

    def tearDown(self) -> None:
        for path in [self.db_path, self.yaml_path, "backup_cli.db"]:
            if os.path.exists(path):
                os.remove(path)

    def _run(self, func, *args):
        out = io.StringIO()
        with redirect_stdout(out):
            result = func(*args)
        return result, out.getvalue()

    def test_target_and_plan(self) -> None:
        sets, out = self._run(target, 10, 4)
        self.assertEqual(sets, 9)
        self.assertIn("week 4: 9 sets", out)
        sets, _ = self._run(target, 10, 5, 3)
        self.assertEqual(sets, 3)
        weeks, out = self._run(plan, 2)
        self.assertEqual(weeks, [(1, 2), (2, 3), (3, 4), (4, 1), (5, 4)])
        self.assertEqual(len(out.splitlines()), 5)

    def test_adjust(self) -> None:
        result, out = self._run(adjust, "high", "none", "amazing", "hard")
        self.assertEqual(result["set_adjustment"], 1)
        self.assertTrue(out.startswith("+1 sets"))

    def test_distribute(self) -> None:
        rows, _ = self._run(distribute, ["A:4", "B:2"], 1)
        self.assertEqual(
            rows, [{"exercise_id": "A", "new_sets": 5}, {"exercise_id": "B", "new_sets": 2}]
        )

    def test_parse_exercise_pairs(self) -> None:
        self.assertEqual(parse_exercise_pairs(["a:b:3"]), [("a:b", 3)])
        with self.assertRaises(ValueError):
            parse_exercise_pairs(["bench"])
        with self.assertRaises(ValueError):
            parse_exercise_pairs(["bench:x"])

    def test_main_reports_errors(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            main(["target", "--baseline", "3", "--week", "9"])
        self.assertEqual(ctx.exception.code, 2)

    def test_main_convert(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            main(["convert", "--weight", "100", "--unit", "kg"])
        self.assertIn("220.46 lb", out.getvalue())

    def test_demo_backup_restore(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            demo_data(self.db_path, self.yaml_path)
            demo_data(self.db_path, self.yaml_path)
        self.assertIn("already contains", out.getvalue())
        api = TrackerAPI(db_path=self.db_path, yaml_path=self.yaml_path)
        self.assertEqual(len(api.cycles.fetch_all_cycles()), 1)
        self.assertEqual(len(api.exercises.fetch_all_exercises()), 4)
        backup_db(self.db_path, "backup_cli.db")
        self.assertTrue(os.path.exists("backup_cli.db"))
        os.remove(self.db_path)
        restore_db("backup_cli.db", self.db_path)
        api = TrackerAPI(db_path=self.db_path, yaml_path=self.yaml_path)
        self.assertEqual(len(api.cycles.fetch_all_cycles()), 1)


if __name__ == "__main__":
    unittest.main()
