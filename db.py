import sqlite3
import aiosqlite
import json
import logging
from contextlib import contextmanager, asynccontextmanager
from typing import Iterable, List, Optional, Tuple

from pydantic import ValidationError

from errors import PersistenceError
from models import ProgressEntry, TrainingPlan, UserStats

logger = logging.getLogger(__name__)

ASCENDING = "asc"
DESCENDING = "desc"

_GET_SQL = "SELECT data FROM documents WHERE collection = ? AND doc_id = ?;"
_SET_SQL = (
    "INSERT INTO documents (collection, doc_id, data) VALUES (?, ?, ?) "
    "ON CONFLICT(collection, doc_id) DO UPDATE SET data=excluded.data;"
)


def split_path(path: str) -> Tuple[str, str]:
    """Split a document path into ``(collection, doc_id)``."""
    parts = [p for p in path.strip("/").split("/") if p]
    if len(parts) < 2 or len(parts) % 2:
        raise ValueError(f"not a document path: {path}")
    return "/".join(parts[:-1]), parts[-1]


def _collection_path(path: str) -> str:
    parts = [p for p in path.strip("/").split("/") if p]
    if not parts or len(parts) % 2 == 0:
        raise ValueError(f"not a collection path: {path}")
    return "/".join(parts)


def _query_sql(order_by: Optional[str], direction: str) -> Tuple[str, Tuple]:
    if direction not in (ASCENDING, DESCENDING):
        raise ValueError("direction must be 'asc' or 'desc'")
    if order_by is None:
        return (
            f"SELECT doc_id, data FROM documents WHERE collection = ? "
            f"ORDER BY doc_id {direction.upper()};",
            (),
        )
    return (
        f"SELECT doc_id, data FROM documents WHERE collection = ? "
        f"ORDER BY json_extract(data, ?) {direction.upper()}, doc_id {direction.upper()};",
        (f"$.{order_by}",),
    )


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "documents": (
            """CREATE TABLE documents (
                    collection TEXT NOT NULL,
                    doc_id TEXT NOT NULL,
                    data TEXT NOT NULL,
                    PRIMARY KEY (collection, doc_id)
                );""",
            ["collection", "doc_id", "data"],
        ),
    }

    def __init__(self, db_path: str = "training.db") -> None:
        self._db_path = db_path
        self._ensure_schema()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        try:
            with self._connection() as conn:
                for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                    self._ensure_table(conn, table, sql, columns)
        except sqlite3.Error as e:
            logger.error("schema setup failed for %s: %s", self._db_path, e)
            raise PersistenceError("schema setup", self._db_path, e) from e

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

        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)
        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            conn.execute(
                f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
            )
        conn.execute(f"DROP TABLE {table}_old;")


class DocumentStore(Database):
    """Key/value document store addressed by slash separated paths.

    Document paths have an even number of segments
    (``users/u1/progress/2024-01-01``), collection paths an odd number
    (``users/u1/progress``). Values are JSON objects.
    """

    def get_document(self, path: str) -> Optional[dict]:
        collection, doc_id = split_path(path)
        try:
            with self._connection() as conn:
                row = conn.execute(_GET_SQL, (collection, doc_id)).fetchone()
            return json.loads(row[0]) if row else None
        except (sqlite3.Error, ValueError) as e:
            logger.error("get %s failed: %s", path, e)
            raise PersistenceError("get", path, e) from e

    def set_document(self, path: str, value: dict, merge: bool = False) -> None:
        """Store ``value`` at ``path``.

        A plain set replaces the whole document. With ``merge`` the top-level
        keys of ``value`` are written over the existing document.
        """
        collection, doc_id = split_path(path)
        try:
            with self._connection() as conn:
                data = dict(value)
                if merge:
                    row = conn.execute(_GET_SQL, (collection, doc_id)).fetchone()
                    if row:
                        data = {**json.loads(row[0]), **value}
                conn.execute(_SET_SQL, (collection, doc_id, json.dumps(data)))
        except (sqlite3.Error, ValueError, TypeError) as e:
            logger.error("set %s failed: %s", path, e)
            raise PersistenceError("set", path, e) from e

    def query_collection(
        self,
        path: str,
        order_by: Optional[str] = None,
        direction: str = ASCENDING,
    ) -> List[Tuple[str, dict]]:
        collection = _collection_path(path)
        sql, extra = _query_sql(order_by, direction)
        try:
            with self._connection() as conn:
                rows = conn.execute(sql, (collection, *extra)).fetchall()
            return [(doc_id, json.loads(data)) for doc_id, data in rows]
        except (sqlite3.Error, ValueError) as e:
            logger.error("query %s failed: %s", path, e)
            raise PersistenceError("query", path, e) from e

    def batch_write(self, writes: Iterable[Tuple[str, dict]]) -> None:
        """Write every ``(path, value)`` pair in one transaction."""
        rows = []
        for path, value in writes:
            collection, doc_id = split_path(path)
            rows.append((collection, doc_id, value))
        try:
            with self._connection() as conn:
                conn.executemany(
                    _SET_SQL,
                    [(c, d, json.dumps(v)) for c, d, v in rows],
                )
        except (sqlite3.Error, ValueError, TypeError) as e:
            logger.error("batch write of %d documents failed: %s", len(rows), e)
            raise PersistenceError("batch write", rows[0][0] if rows else "", e) from e


class AsyncDocumentStore(Database):
    """Asynchronous variant of DocumentStore using aiosqlite."""

    @asynccontextmanager
    async def _async_connection(self):
        conn = await aiosqlite.connect(self._db_path)
        try:
            yield conn
            await conn.commit()
        finally:
            await conn.close()

    async def get_document(self, path: str) -> Optional[dict]:
        collection, doc_id = split_path(path)
        try:
            async with self._async_connection() as conn:
                cursor = await conn.execute(_GET_SQL, (collection, doc_id))
                row = await cursor.fetchone()
            return json.loads(row[0]) if row else None
        except (sqlite3.Error, ValueError) as e:
            logger.error("get %s failed: %s", path, e)
            raise PersistenceError("get", path, e) from e

    async def set_document(self, path: str, value: dict) -> None:
        collection, doc_id = split_path(path)
        try:
            async with self._async_connection() as conn:
                await conn.execute(_SET_SQL, (collection, doc_id, json.dumps(value)))
        except (sqlite3.Error, ValueError, TypeError) as e:
            logger.error("set %s failed: %s", path, e)
            raise PersistenceError("set", path, e) from e

    async def query_collection(
        self,
        path: str,
        order_by: Optional[str] = None,
        direction: str = ASCENDING,
    ) -> List[Tuple[str, dict]]:
        collection = _collection_path(path)
        sql, extra = _query_sql(order_by, direction)
        try:
            async with self._async_connection() as conn:
                cursor = await conn.execute(sql, (collection, *extra))
                rows = await cursor.fetchall()
            return [(doc_id, json.loads(data)) for doc_id, data in rows]
        except (sqlite3.Error, ValueError) as e:
            logger.error("query %s failed: %s", path, e)
            raise PersistenceError("query", path, e) from e


def _decode_entry(doc_id: str, data: dict) -> ProgressEntry:
    try:
        return ProgressEntry.from_document({**data, "date": doc_id})
    except ValidationError as e:
        raise PersistenceError("decode", doc_id, e) from e


class ProgressRepository(DocumentStore):
    """Date keyed ledger of logged sessions for one user."""

    def __init__(self, db_path: str = "training.db", user_id: str = "") -> None:
        super().__init__(db_path)
        self.collection = f"users/{user_id}/progress"

    def record(self, entry: ProgressEntry) -> None:
        """Insert or fully replace the entry for ``entry.date``."""
        self.set_document(f"{self.collection}/{entry.key}", entry.to_document())

    def history(self) -> List[ProgressEntry]:
        """Return all entries, newest date first."""
        rows = self.query_collection(self.collection, "date", DESCENDING)
        return [_decode_entry(doc_id, data) for doc_id, data in rows]

    def fetch(self, date: str) -> Optional[ProgressEntry]:
        data = self.get_document(f"{self.collection}/{date}")
        return _decode_entry(date, data) if data is not None else None


class AsyncProgressRepository(AsyncDocumentStore):
    """Async repository for the session ledger."""

    def __init__(self, db_path: str = "training.db", user_id: str = "") -> None:
        super().__init__(db_path)
        self.collection = f"users/{user_id}/progress"

    async def record(self, entry: ProgressEntry) -> None:
        await self.set_document(f"{self.collection}/{entry.key}", entry.to_document())

    async def history(self) -> List[ProgressEntry]:
        rows = await self.query_collection(self.collection, "date", DESCENDING)
        return [_decode_entry(doc_id, data) for doc_id, data in rows]


class StatsRepository(DocumentStore):
    """Repository for the per-user stats record."""

    def __init__(self, db_path: str = "training.db", user_id: str = "") -> None:
        super().__init__(db_path)
        self.path = f"users/{user_id}/stats/overview"

    def fetch_raw(self) -> Optional[dict]:
        return self.get_document(self.path)

    def save(self, stats: UserStats) -> None:
        self.set_document(self.path, stats.to_document())


class ProfileRepository(DocumentStore):
    """Repository for the per-user profile record."""

    def __init__(self, db_path: str = "training.db", user_id: str = "") -> None:
        super().__init__(db_path)
        self.path = f"users/{user_id}"

    def fetch_raw(self) -> Optional[dict]:
        return self.get_document(self.path)

    def save_preferences(self, prefs: dict[str, str]) -> None:
        self.set_document(self.path, {"exercisePreferences": dict(prefs)}, merge=True)

    def set_weekly_availability(self, days: int) -> None:
        self.set_document(self.path, {"weeklyAvailability": days}, merge=True)

    def fetch_user_ids(self) -> List[str]:
        return [doc_id for doc_id, _data in self.query_collection("users")]


class TrainingPlanRepository(DocumentStore):
    """Repository for the shared predefined training plans."""

    COLLECTION = "predefinedTrainingPlans"

    def fetch_all(self) -> List[TrainingPlan]:
        rows = self.query_collection(self.COLLECTION)
        plans = []
        for doc_id, data in rows:
            try:
                plans.append(TrainingPlan.from_document({**data, "id": doc_id}))
            except ValidationError as e:
                raise PersistenceError("decode", f"{self.COLLECTION}/{doc_id}", e) from e
        return plans

    def ensure_defaults(self, defaults: Iterable[TrainingPlan]) -> List[TrainingPlan]:
        """Seed ``defaults`` when no plan is stored yet.

        Two callers may both see an empty collection; the seed writes the
        same ids with overwrite semantics so the race is harmless.
        Plans come back ordered by id either way.
        """
        plans = self.fetch_all()
        if plans:
            return plans
        defaults = sorted(defaults, key=lambda plan: plan.id)
        self.batch_write(
            (f"{self.COLLECTION}/{plan.id}", plan.to_document()) for plan in defaults
        )
        logger.info("seeded %d predefined training plans", len(defaults))
        return defaults
