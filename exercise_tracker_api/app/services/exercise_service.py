"""
Business logic for exercises and exercise logs.

``add_exercise`` stores an exercise and appends its identifier to the
owning user; ``get_log`` returns a user's exercises in the order they
were appended, optionally bounded by date and truncated to a count.
"""

import logging
from datetime import date
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from ..core.db import Database, ExerciseRecord, UserRecord
from ..core.errors import (
    InternalError,
    NotFoundError,
    StoreError,
    StoreValidationError,
    ValidationError,
    format_validation_errors,
)
from ..schemas.exercise import (
    ExerciseAdded,
    ExerciseCreate,
    ExerciseLog,
    LogEntry,
    LogQuery,
    format_date,
    parse_date,
)
from . import is_blank

logger = logging.getLogger(__name__)


class ExerciseService:
    """Service for logging exercises against users and reading them back."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def _get_user(self, user_id: str) -> UserRecord:
        user = self.db.find_user(user_id)
        if user is None:
            logger.warning("User %s not found", user_id)
            raise NotFoundError("User not found")
        return user

    async def add_exercise(self, user_id: str, payload: Mapping[str, Any]) -> ExerciseAdded:
        """Log an exercise for ``user_id``.

        ``payload`` carries ``description``, ``duration`` and an optional
        ``date``; a missing date means today.  The user is resolved
        before anything is written, so a 404 leaves no exercise behind.

        The user's exercise list is read, extended and written back as
        separate store calls.  Concurrent calls for the same user can
        overwrite each other's append.
        """
        description = payload.get("description")
        duration = payload.get("duration")
        if is_blank(description) or is_blank(duration):
            raise ValidationError("Description and duration are required")
        try:
            data = ExerciseCreate(description=description, duration=duration, date=payload.get("date"))
        except PydanticValidationError as exc:
            raise ValidationError("Validation Error", details=format_validation_errors(exc.errors())) from None

        try:
            user = self._get_user(user_id)
            exercise = self.db.insert_exercise(
                description=data.description,
                duration=data.duration,
                date=data.date or format_date(date.today()),
            )
            self.db.append_exercise(user, exercise.id)
        except StoreValidationError as exc:
            logger.error("Store rejected exercise for user %s: %s", user_id, exc)
            raise ValidationError("Validation Error", details=str(exc)) from None
        except StoreError:
            logger.exception("Failed to add exercise for user %s", user_id)
            raise InternalError("Server error while adding exercise") from None

        logger.info("Added exercise %s to user %s", exercise.id, user.id)
        return ExerciseAdded(
            id=user.id,
            username=user.username,
            description=exercise.description,
            duration=exercise.duration,
            date=exercise.date,
        )

    async def get_log(self, user_id: str, query: LogQuery) -> ExerciseLog:
        """Return the exercise log of ``user_id`` filtered by ``query``.

        Bounds are inclusive and the limit applies after filtering.
        Entries keep the order in which they were added to the user.
        """
        try:
            user = self._get_user(user_id)
            exercises = self.db.find_exercises(user.exercises)
        except StoreError:
            logger.exception("Failed to read exercise log for user %s", user_id)
            raise InternalError("Server error while fetching exercise log") from None

        selected = [exercise for exercise in exercises if self._in_range(exercise, query)]
        if query.limit is not None:
            selected = selected[:query.limit]

        log = [LogEntry.model_validate(exercise) for exercise in selected]
        return ExerciseLog(id=user.id, username=user.username, count=len(log), log=log)

    @staticmethod
    def _in_range(exercise: ExerciseRecord, query: LogQuery) -> bool:
        if query.date_from is None and query.date_to is None:
            return True
        performed_on = parse_date(exercise.date)
        if query.date_from is not None and performed_on < query.date_from:
            return False
        if query.date_to is not None and performed_on > query.date_to:
            return False
        return True
