import requests
from typing import Optional


class TrainingClient:
    """Simple REST client for the training API."""

    def __init__(self, user_id: str, base_url: str = "http://localhost:8000") -> None:
        self.base_url = base_url.rstrip("/")
        self.headers = {"X-User-Id": user_id}

    def _get(self, path: str, **params):
        resp = requests.get(f"{self.base_url}{path}", params=params, headers=self.headers)
        resp.raise_for_status()
        return resp.json()

    def split(self) -> dict:
        return self._get("/split")

    def preferences(self) -> dict:
        return self._get("/preferences")

    def save_preferences(self, prefs: dict) -> dict:
        resp = requests.put(
            f"{self.base_url}/preferences", json=prefs, headers=self.headers
        )
        resp.raise_for_status()
        return resp.json()

    def set_availability(self, days: int) -> dict:
        resp = requests.put(
            f"{self.base_url}/availability", params={"days": days}, headers=self.headers
        )
        resp.raise_for_status()
        return resp.json()

    def new_session(self, day_id: str, plan_id: Optional[str] = None) -> dict:
        params = {"day_id": day_id}
        if plan_id is not None:
            params["plan_id"] = plan_id
        return self._get("/sessions/new", **params)

    def session_from_history(self, date: str) -> dict:
        return self._get(f"/sessions/from_history/{date}")

    def submit(self, draft: dict) -> dict:
        resp = requests.post(f"{self.base_url}/progress", json=draft, headers=self.headers)
        resp.raise_for_status()
        return resp.json()

    def history(self) -> list:
        return self._get("/progress")

    def stats(self) -> dict:
        return self._get("/stats")
