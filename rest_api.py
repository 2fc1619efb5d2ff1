import datetime
import threading
from typing import Dict, Optional

from fastapi import Body, FastAPI, Header, HTTPException

from catalog import EXERCISES, PATTERNS
from config import APP_VERSION
from db import AsyncProgressRepository
from errors import (
    NotAuthenticatedError,
    PersistenceError,
    ReferenceNotFound,
    SubmissionValidationError,
)
from models import LoggedExercise, SessionDraft
from progress_service import ProgressService, StaticAuthProvider
from settings_schema import SettingsSchema
from stats_service import StatisticsService, best_set


class TrainingAPI:
    """Provides REST endpoints for plan resolution and session logging.

    The caller is identified by the ``X-User-Id`` header.
    """

    def __init__(self, settings: SettingsSchema | None = None) -> None:
        self.settings = settings or SettingsSchema()
        self.services: Dict[str, ProgressService] = {}
        self._services_lock = threading.Lock()
        self.app = FastAPI(
            title="Training API",
            description="REST API for training plans and the progress ledger",
            version=APP_VERSION,
        )
        self._setup_routes()

    def service(self, user_id: Optional[str]) -> ProgressService:
        """Return the loaded service for ``user_id``, creating it on first use."""
        if not user_id:
            raise NotAuthenticatedError()
        with self._services_lock:
            service = self.services.get(user_id)
            if service is None:
                service = ProgressService(
                    StaticAuthProvider(user_id), self.settings
                ).load()
                self.services[user_id] = service
        return service

    @staticmethod
    def _http_error(e: Exception) -> HTTPException:
        if isinstance(e, NotAuthenticatedError):
            return HTTPException(status_code=401, detail=str(e))
        if isinstance(e, ReferenceNotFound):
            return HTTPException(status_code=404, detail=str(e))
        if isinstance(e, SubmissionValidationError):
            return HTTPException(status_code=400, detail=e.reasons)
        if isinstance(e, PersistenceError):
            return HTTPException(status_code=503, detail=str(e))
        return HTTPException(status_code=400, detail=str(e))

    def _setup_routes(self) -> None:
        handled = (
            NotAuthenticatedError,
            ReferenceNotFound,
            SubmissionValidationError,
            PersistenceError,
            ValueError,
        )

        @self.app.get("/health", summary="Health check")
        def health():
            return {"status": "ok", "version": APP_VERSION}

        @self.app.get("/catalog/exercises")
        def list_exercises():
            return [e.to_document() for e in EXERCISES.values()]

        @self.app.get("/catalog/patterns")
        def list_patterns():
            return [p.to_document() for p in PATTERNS.values()]

        @self.app.get("/split")
        def get_split(x_user_id: Optional[str] = Header(None)):
            try:
                plan = self.service(x_user_id).generated_plan()
            except handled as e:
                raise self._http_error(e)
            return plan.model_dump(mode="json")

        @self.app.get("/split/days/{day_number}/session")
        def split_session(day_number: int, x_user_id: Optional[str] = Header(None)):
            try:
                draft = self.service(x_user_id).start_split_session(day_number)
            except handled as e:
                raise self._http_error(e)
            return draft.to_document()

        @self.app.get("/plans")
        def list_plans(x_user_id: Optional[str] = Header(None)):
            try:
                service = self.service(x_user_id)
            except handled as e:
                raise self._http_error(e)
            return {
                "selected": service.selected_plan.id if service.selected_plan else None,
                "plans": [p.to_document() for p in service.plans],
            }

        @self.app.get("/preferences")
        def get_preferences(x_user_id: Optional[str] = Header(None)):
            try:
                return self.service(x_user_id).preference_editor()
            except handled as e:
                raise self._http_error(e)

        @self.app.put("/preferences")
        def save_preferences(
            prefs: Dict[str, str] = Body(...),
            x_user_id: Optional[str] = Header(None),
        ):
            try:
                stats = self.service(x_user_id).save_preferences(prefs)
            except handled as e:
                raise self._http_error(e)
            return stats.exercise_preferences

        @self.app.put("/availability")
        def set_availability(days: int, x_user_id: Optional[str] = Header(None)):
            try:
                stats = self.service(x_user_id).set_weekly_availability(days)
            except handled as e:
                raise self._http_error(e)
            return {"weeklyAvailability": stats.weekly_availability}

        @self.app.get("/sessions/new")
        def new_session(
            day_id: str,
            plan_id: Optional[str] = None,
            date: Optional[datetime.date] = None,
            x_user_id: Optional[str] = Header(None),
        ):
            try:
                draft = self.service(x_user_id).start_session(day_id, plan_id, date)
            except handled as e:
                raise self._http_error(e)
            return draft.to_document()

        @self.app.get("/sessions/from_history/{date}")
        def session_from_history(date: str, x_user_id: Optional[str] = Header(None)):
            try:
                draft = self.service(x_user_id).start_from_history(date)
            except handled as e:
                raise self._http_error(e)
            return draft.to_document()

        @self.app.post("/progress")
        def submit_session(
            draft: SessionDraft = Body(...),
            x_user_id: Optional[str] = Header(None),
        ):
            try:
                result = self.service(x_user_id).submit(draft)
            except handled as e:
                raise self._http_error(e)
            return result.to_document()

        @self.app.get("/progress")
        async def list_progress(x_user_id: Optional[str] = Header(None)):
            if not x_user_id:
                raise self._http_error(NotAuthenticatedError())
            repo = AsyncProgressRepository(self.settings.db_path, x_user_id)
            try:
                entries = await repo.history()
            except PersistenceError as e:
                raise self._http_error(e)
            return [e.to_document() for e in entries]

        @self.app.get("/progress/{date}/best_set")
        def entry_best_set(
            date: str, exercise: str, x_user_id: Optional[str] = Header(None)
        ):
            try:
                entry = self.service(x_user_id).progress.fetch(date)
            except handled as e:
                raise self._http_error(e)
            if entry is None:
                raise HTTPException(status_code=404, detail="not found")
            best = best_set(entry.logged_exercises, exercise)
            return best.to_document() if best is not None else None

        @self.app.post("/progress/best_set")
        def draft_best_set(
            exercises: list[LoggedExercise] = Body(...), exercise: str = ""
        ):
            best = best_set(exercises, exercise)
            return best.to_document() if best is not None else None

        @self.app.get("/stats")
        def get_stats(x_user_id: Optional[str] = Header(None)):
            try:
                service = self.service(x_user_id)
            except handled as e:
                raise self._http_error(e)
            return {
                **service.stats.to_document(),
                "levelProgress": service.level_progress().model_dump(),
            }

        @self.app.get("/stats/overview")
        def stats_overview(x_user_id: Optional[str] = Header(None)):
            try:
                service = self.service(x_user_id)
                return StatisticsService(service.progress).overview(
                    datetime.date.today()
                )
            except handled as e:
                raise self._http_error(e)

        @self.app.get("/stats/achievements")
        def list_achievements(x_user_id: Optional[str] = Header(None)):
            try:
                return [a.model_dump() for a in self.service(x_user_id).achievements()]
            except handled as e:
                raise self._http_error(e)

        @self.app.get("/stats/exercises/{name}")
        def exercise_history(name: str, x_user_id: Optional[str] = Header(None)):
            try:
                service = self.service(x_user_id)
                return StatisticsService(service.progress).exercise_history(name)
            except handled as e:
                raise self._http_error(e)


api = TrainingAPI()
app = api.app

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app)
