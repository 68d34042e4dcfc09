# tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

from .ordering import order_tasks
from .streak import record_completion
from .task_models import StreakState, Task, TaskNotFoundError

logger = logging.getLogger(__name__)

_STREAK_KEY = "current"


def _to_ts(dt: datetime | None) -> float | None:
    return dt.timestamp() if dt is not None else None


def _from_ts(ts: float | None) -> datetime | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(float(ts)).astimezone()


class TaskStore:
    """
    SQLite task store.

    The schema is intentionally simple and migration-safe:
    - create tables if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "doit.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except sqlite3.Error:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    deadline REAL,
                    completed INTEGER NOT NULL DEFAULT 0,
                    completed_at REAL,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS streaks (
                    key TEXT PRIMARY KEY,
                    data TEXT NOT NULL
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("description", "TEXT NOT NULL DEFAULT ''")
            add_col("deadline", "REAL")
            add_col("completed", "INTEGER NOT NULL DEFAULT 0")
            add_col("completed_at", "REAL")
            add_col("updated_at", "REAL NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_open_deadline ON tasks(completed, deadline)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        completed = bool(row["completed"])
        return Task(
            id=str(row["id"]),
            title=str(row["title"] or ""),
            description=str(row["description"] or ""),
            deadline=_from_ts(row["deadline"]),
            completed=completed,
            # Keep the completion invariant even if an old row disagrees.
            completed_at=_from_ts(row["completed_at"]) if completed else None,
            created_at=_from_ts(row["created_at"] or 0.0),  # type: ignore[arg-type]
            updated_at=_from_ts(row["updated_at"] or 0.0),  # type: ignore[arg-type]
        )

    @staticmethod
    def _streak_to_str(streak: StreakState) -> str:
        return json.dumps(
            {
                "current_streak": streak.current_streak,
                "max_streak": streak.max_streak,
                "total_completed": streak.total_completed,
                "last_completed_at": _to_ts(streak.last_completed_at),
                "daily_completions": dict(streak.daily_completions),
            },
            ensure_ascii=False,
        )

    @staticmethod
    def _str_to_streak(s: str | None) -> StreakState:
        if not s:
            return StreakState.empty()
        try:
            val: Any = json.loads(s)
        except ValueError:
            logger.exception("Corrupt streak record; starting from zero.")
            return StreakState.empty()
        if not isinstance(val, dict):
            return StreakState.empty()
        daily = val.get("daily_completions") or {}
        return StreakState(
            current_streak=int(val.get("current_streak") or 0),
            max_streak=int(val.get("max_streak") or 0),
            total_completed=int(val.get("total_completed") or 0),
            last_completed_at=_from_ts(val.get("last_completed_at")),
            daily_completions={str(k): int(v) for k, v in daily.items()} if isinstance(daily, dict) else {},
        )

    def _read_streak(self, conn: sqlite3.Connection) -> StreakState:
        row = conn.execute("SELECT data FROM streaks WHERE key = ?", (_STREAK_KEY,)).fetchone()
        return self._str_to_streak(row["data"] if row else None)

    def _write_streak(self, conn: sqlite3.Connection, streak: StreakState) -> None:
        conn.execute(
            "INSERT INTO streaks(key, data) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET data = excluded.data",
            (_STREAK_KEY, self._streak_to_str(streak)),
        )

    # ---- public API ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM tasks")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def save_task(self, task: Task) -> None:
        """Insert a new task. Raises ValueError if the id is already taken."""
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO tasks(
                    id, title, description, deadline,
                    completed, completed_at, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task.id,
                    task.title,
                    task.description,
                    _to_ts(task.deadline),
                    1 if task.completed else 0,
                    _to_ts(task.completed_at),
                    _to_ts(task.created_at),
                    _to_ts(task.updated_at),
                ),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            raise ValueError(f"task already exists: {task.id}") from e
        finally:
            conn.close()
        logger.debug("Task saved id=%s deadline=%s", task.id, task.deadline)

    def get_task(self, task_id: str) -> Task:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        finally:
            conn.close()
        if row is None:
            raise TaskNotFoundError(task_id)
        return self._row_to_task(row)

    def get_all_tasks(self) -> list[Task]:
        """All tasks in primary listing order."""
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM tasks").fetchall()
        finally:
            conn.close()
        return order_tasks(self._row_to_task(r) for r in rows)

    def update_task(self, task: Task, *, now: datetime | None = None) -> None:
        """
        Persist every mutable field of `task` and refresh updated_at.

        created_at is never rewritten. If the stored task was incomplete and
        `task` is complete, the streak is advanced in the same transaction.
        """
        if now is None:
            now = datetime.now().astimezone()
        task.updated_at = now

        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute("SELECT completed FROM tasks WHERE id = ?", (task.id,)).fetchone()
            if row is None:
                conn.rollback()
                raise TaskNotFoundError(task.id)
            was_completed = bool(row["completed"])

            conn.execute(
                """
                UPDATE tasks
                SET title = ?,
                    description = ?,
                    deadline = ?,
                    completed = ?,
                    completed_at = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    task.title,
                    task.description,
                    _to_ts(task.deadline),
                    1 if task.completed else 0,
                    _to_ts(task.completed_at),
                    _to_ts(task.updated_at),
                    task.id,
                ),
            )

            if task.completed and not was_completed:
                streak = self._read_streak(conn)
                record_completion(streak, task.completed_at or now)
                self._write_streak(conn, streak)
                logger.info(
                    "Task completed id=%s streak=%s total=%s",
                    task.id,
                    streak.current_streak,
                    streak.total_completed,
                )

            conn.commit()
        except BaseException:
            if conn.in_transaction:
                conn.rollback()
            raise
        finally:
            conn.close()

    def delete_task(self, task_id: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            conn.commit()
        finally:
            conn.close()
        logger.debug("Task deleted id=%s", task_id)

    def get_streak(self) -> StreakState:
        """Current streak state (zero-valued if nothing was ever completed)."""
        conn = self._get_conn()
        try:
            return self._read_streak(conn)
        finally:
            conn.close()

    def update_streak(self, streak: StreakState) -> None:
        conn = self._get_conn()
        try:
            self._write_streak(conn, streak)
            conn.commit()
        finally:
            conn.close()

