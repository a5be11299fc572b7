"""
SQLite-backed document store for users and exercises.

The store is an explicitly constructed ``Database`` handle rather than
a module-level connection: ``create_app`` builds one, the lifespan
opens it with ``connect`` and releases it with ``close``, and request
handlers receive it through the ``get_db`` dependency.

Records are kept document-style.  A user row carries its ordered list
of exercise identifiers as a JSON array, and appending an exercise is
an explicit read-modify-write (``append_exercise``): the caller holds
a ``UserRecord``, appends to it and writes the whole list back.  Two
requests appending to the same user at the same time can therefore
lose one of the appends.  No locking is applied.

Schema bootstrap uses the same versioned ``migrations`` table approach
the rest of the project uses.  All ``sqlite3`` errors are re-raised as
``StoreError``; constraint violations and values the column types
cannot hold as ``StoreValidationError``.
"""

import json
import logging
import os
import secrets
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

from fastapi import Request

from .errors import StoreError, StoreValidationError

logger = logging.getLogger(__name__)

UserId = str
ExerciseId = str
Duration = Union[int, float]

MEMORY_DATABASE = ":memory:"

# SQLite limits the number of bound parameters per statement.
_IN_CLAUSE_CHUNK = 500

MIGRATIONS: List[tuple] = [
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT NOT NULL UNIQUE,
            username TEXT NOT NULL CHECK (length(username) > 0),
            exercises TEXT NOT NULL DEFAULT '[]'
        );

        CREATE TABLE IF NOT EXISTS exercises (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT NOT NULL UNIQUE,
            description TEXT NOT NULL CHECK (length(description) > 0),
            duration NUMERIC NOT NULL CHECK (duration > 0),
            date TEXT NOT NULL
        );
        """,
    ),
]


@dataclass
class UserRecord:
    """A stored user and the ordered identifiers of its exercises."""

    id: UserId
    username: str
    exercises: List[ExerciseId] = field(default_factory=list)


@dataclass
class ExerciseRecord:
    """A stored exercise entry.  ``date`` is the human-readable form."""

    id: ExerciseId
    description: str
    duration: Duration
    date: str


def new_record_id() -> str:
    """Return a fresh opaque identifier (24 hex characters)."""
    return secrets.token_hex(12)


def resolve_database_path(database_url: str) -> str:
    """Compute the path to the SQLite database file.

    Absolute paths and ``:memory:`` are returned unchanged; relative
    paths are resolved against the project root.
    """
    if database_url == MEMORY_DATABASE or os.path.isabs(database_url):
        return database_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / database_url).resolve())


class Database:
    """Handle on the user and exercise collections."""

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    def connect(self) -> None:
        """Open the connection and apply pending migrations.

        Raises ``StoreError`` if the database cannot be opened.
        """
        if self._conn is not None:
            return
        path = resolve_database_path(self.database_url)
        try:
            # FastAPI may run handlers on a different thread than the one
            # that opened the connection.
            conn = sqlite3.connect(path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open database {path!r}: {exc}") from exc
        self._conn = conn
        try:
            self._migrate()
        except StoreError:
            self.close()
            raise
        logger.info("Database connected at %s", path)

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.info("Database connection closed")

    def _migrate(self) -> None:
        with self._cursor() as cursor:
            cursor.execute("CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)")
            row = cursor.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0
            for version, sql in MIGRATIONS:
                if version > current_version:
                    cursor.executescript(sql)
                    cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                    current_version = version

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor, committing on success and translating errors."""
        if self._conn is None:
            raise StoreError("Database is not connected")
        conn = self._conn
        cursor = conn.cursor()
        try:
            yield cursor
            conn.commit()
        except (sqlite3.IntegrityError, OverflowError) as exc:
            conn.rollback()
            raise StoreValidationError(str(exc)) from exc
        except sqlite3.Error as exc:
            conn.rollback()
            raise StoreError(str(exc)) from exc
        finally:
            cursor.close()

    # -- users ---------------------------------------------------------

    def insert_user(self, username: str) -> UserRecord:
        user = UserRecord(id=new_record_id(), username=username)
        with self._cursor() as cursor:
            cursor.execute(
                "INSERT INTO users (id, username, exercises) VALUES (?, ?, ?)",
                (user.id, user.username, json.dumps(user.exercises)),
            )
        return user

    def find_user(self, user_id: UserId) -> Optional[UserRecord]:
        with self._cursor() as cursor:
            row = cursor.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return self._row_to_user(row) if row else None

    def find_users(self) -> List[UserRecord]:
        with self._cursor() as cursor:
            rows = cursor.execute("SELECT * FROM users ORDER BY seq").fetchall()
        return [self._row_to_user(row) for row in rows]

    def save_user(self, user: UserRecord) -> None:
        """Write ``user.exercises`` back to the store, replacing the stored list."""
        with self._cursor() as cursor:
            cursor.execute(
                "UPDATE users SET exercises = ? WHERE id = ?",
                (json.dumps(user.exercises), user.id),
            )
            if cursor.rowcount == 0:
                raise StoreError(f"User {user.id} no longer exists")

    def append_exercise(self, user: UserRecord, exercise_id: ExerciseId) -> UserRecord:
        """Append ``exercise_id`` to ``user`` and persist the whole list.

        ``user`` is the copy the caller read earlier; whatever another
        writer saved in between is overwritten.
        """
        user.exercises.append(exercise_id)
        self.save_user(user)
        return user

    # -- exercises -----------------------------------------------------

    def insert_exercise(self, description: str, duration: Duration, date: str) -> ExerciseRecord:
        exercise = ExerciseRecord(
            id=new_record_id(),
            description=description,
            duration=duration,
            date=date,
        )
        with self._cursor() as cursor:
            cursor.execute(
                "INSERT INTO exercises (id, description, duration, date) VALUES (?, ?, ?, ?)",
                (exercise.id, exercise.description, exercise.duration, exercise.date),
            )
        return exercise

    def find_exercises(self, exercise_ids: Iterable[ExerciseId]) -> List[ExerciseRecord]:
        """Return the exercises for ``exercise_ids`` in the same order.

        Identifiers without a stored exercise are skipped.
        """
        ids = list(exercise_ids)
        found = {}
        with self._cursor() as cursor:
            for start in range(0, len(ids), _IN_CLAUSE_CHUNK):
                chunk = ids[start:start + _IN_CLAUSE_CHUNK]
                placeholders = ", ".join("?" for _ in chunk)
                rows = cursor.execute(
                    f"SELECT * FROM exercises WHERE id IN ({placeholders})",
                    chunk,
                ).fetchall()
                for row in rows:
                    found[row["id"]] = self._row_to_exercise(row)
        return [found[exercise_id] for exercise_id in ids if exercise_id in found]

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> UserRecord:
        exercises = json.loads(row["exercises"]) if row["exercises"] else []
        return UserRecord(id=row["id"], username=row["username"], exercises=exercises)

    @staticmethod
    def _row_to_exercise(row: sqlite3.Row) -> ExerciseRecord:
        return ExerciseRecord(
            id=row["id"],
            description=row["description"],
            duration=row["duration"],
            date=row["date"],
        )


def get_db(request: Request) -> Database:
    """FastAPI dependency returning the store handle of the running app."""
    return request.app.state.db
