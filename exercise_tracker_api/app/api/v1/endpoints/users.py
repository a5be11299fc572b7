"""
User and exercise endpoints for API v1.

Create and list users, log exercises against a user and read back a
user's exercise log.  Request bodies may be JSON or URL-encoded forms
(the front page posts plain HTML forms), so they are read through
``read_payload`` rather than bound to a Pydantic body parameter.
"""

import json
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError as PydanticValidationError

from exercise_tracker_api.app.core.db import Database, get_db
from exercise_tracker_api.app.core.errors import ValidationError, format_validation_errors
from exercise_tracker_api.app.schemas.exercise import ExerciseAdded, ExerciseLog, LogQuery
from exercise_tracker_api.app.schemas.user import UserCreated, UserRead
from exercise_tracker_api.app.services.exercise_service import ExerciseService
from exercise_tracker_api.app.services.user_service import UserService

router = APIRouter()

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_payload(request: Request) -> Dict[str, Any]:
    """Return the request body as a dict, whether it was sent as JSON or a form."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}
    body = await request.body()
    if not body.strip():
        return {}
    try:
        payload = json.loads(body)
    except ValueError:
        raise ValidationError("Validation Error", details="Request body is not valid JSON") from None
    if not isinstance(payload, dict):
        raise ValidationError("Validation Error", details="Request body must be a JSON object")
    return payload


def log_query(
    date_from: Optional[str] = Query(None, alias="from", description="Inclusive lower date bound"),
    date_to: Optional[str] = Query(None, alias="to", description="Inclusive upper date bound"),
    limit: Optional[str] = Query(None, description="Maximum number of entries to return"),
) -> LogQuery:
    try:
        return LogQuery(date_from=date_from, date_to=date_to, limit=limit)
    except PydanticValidationError as exc:
        raise ValidationError("Validation Error", details=format_validation_errors(exc.errors())) from None


@router.post("", response_model=UserCreated)
async def create_user(
    payload: Dict[str, Any] = Depends(read_payload),
    db: Database = Depends(get_db),
) -> UserCreated:
    """Register a new user from ``{"username": ...}``."""
    return await UserService(db).create_user(payload.get("username"))


@router.get("", response_model=List[UserRead])
async def list_users(db: Database = Depends(get_db)) -> List[UserRead]:
    """Return all users with their exercise identifiers."""
    return await UserService(db).list_users()


@router.post("/{user_id}/exercises", response_model=ExerciseAdded)
async def add_exercise(
    user_id: str,
    payload: Dict[str, Any] = Depends(read_payload),
    db: Database = Depends(get_db),
) -> ExerciseAdded:
    """Log an exercise for a user.

    Expects ``description`` and ``duration`` (minutes); ``date`` is
    optional and defaults to today.  Returns 404 for an unknown user.
    """
    return await ExerciseService(db).add_exercise(user_id, payload)


@router.get("/{user_id}/logs", response_model=ExerciseLog)
async def get_exercise_log(
    user_id: str,
    query: LogQuery = Depends(log_query),
    db: Database = Depends(get_db),
) -> ExerciseLog:
    """Return a user's exercise log, filtered by ``from``/``to`` and cut to ``limit``."""
    return await ExerciseService(db).get_log(user_id, query)
