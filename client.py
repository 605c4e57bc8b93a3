import requests
from typing import Optional


class TrackerClient:
    """Simple REST client for the volume tracker API."""

    def __init__(self, base_url: str = "http://localhost:8000", session=None) -> None:
        self.base_url = base_url.rstrip("/")
        self.http = session or requests

    def _get(self, path: str, **params):
        resp = self.http.get(f"{self.base_url}{path}", params=params)
        resp.raise_for_status()
        return resp.json()

    def _post(self, path: str, json=None, **params):
        resp = self.http.post(f"{self.base_url}{path}", params=params, json=json)
        resp.raise_for_status()
        return resp.json()

    def health(self) -> dict:
        return self._get("/health")

    def add_muscle_group(self, name: str, priority: str = "medium") -> int:
        return self._post("/muscle_groups", name=name, priority=priority)["id"]

    def add_exercise(
        self,
        name: str,
        muscle_group_id: int,
        default_sets: int = 3,
        equipment: Optional[str] = None,
    ) -> int:
        params = {
            "name": name,
            "muscle_group_id": muscle_group_id,
            "default_sets": default_sets,
        }
        if equipment:
            params["equipment"] = equipment
        return self._post("/exercises", **params)["id"]

    def create_cycle(self, baseline_sets: Optional[dict] = None) -> dict:
        return self._post("/cycles", json=baseline_sets)

    def week_targets(self, cycle_id: int, week: int) -> list:
        return self._get(f"/cycles/{cycle_id}/weeks/{week}/targets")

    def submit_feedback(
        self,
        cycle_id: int,
        week: int,
        muscle_group_id: int,
        joint_pain: str,
        pump: str,
        workload: str,
    ) -> dict:
        return self._post(
            f"/cycles/{cycle_id}/weeks/{week}/feedback",
            muscle_group_id=muscle_group_id,
            joint_pain=joint_pain,
            pump=pump,
            workload=workload,
        )

    def target_sets(self, baseline_sets: int, week: int, override: Optional[int] = None) -> int:
        params = {"baseline_sets": baseline_sets, "week": week}
        if override is not None:
            params["override"] = override
        return self._get("/progression/target", **params)["target_sets"]

    def calculate_adjustment(
        self, priority: str, joint_pain: str, pump: str, workload: str
    ) -> dict:
        return self._post(
            "/autoregulation/calculate",
            priority=priority,
            joint_pain=joint_pain,
            pump=pump,
            workload=workload,
        )

    def distribute(self, exercises: list, total_adjustment: int) -> list:
        body = {
            "exercises": [
                {"exercise_id": ex_id, "current_sets": sets} for ex_id, sets in exercises
            ],
            "total_adjustment": total_adjustment,
        }
        return self._post("/autoregulation/distribute", json=body)
