"""
Business logic for users.

Users are created with an empty exercise list and are never edited or
deleted through the API.  Usernames are not required to be unique.
"""

import logging
from typing import Any, List

from pydantic import ValidationError as PydanticValidationError

from ..core.db import Database
from ..core.errors import InternalError, StoreError, ValidationError, format_validation_errors
from ..schemas.user import UserCreate, UserCreated, UserRead
from . import is_blank

logger = logging.getLogger(__name__)


class UserService:
    """Service for creating and listing users."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def create_user(self, username: Any) -> UserCreated:
        """Persist a new user and return its name and identifier.

        Raises ``ValidationError`` when ``username`` is absent or blank
        and ``InternalError`` when the store fails.
        """
        if is_blank(username):
            raise ValidationError("Username is required")
        try:
            data = UserCreate(username=username)
        except PydanticValidationError as exc:
            raise ValidationError("Validation Error", details=format_validation_errors(exc.errors())) from None
        try:
            user = self.db.insert_user(data.username)
        except StoreError:
            logger.exception("Failed to create user %r", data.username)
            raise InternalError("Server error while creating user") from None
        logger.info("Created user %s (%s)", user.id, user.username)
        return UserCreated(username=user.username, id=user.id)

    async def list_users(self) -> List[UserRead]:
        """Return every user in insertion order."""
        try:
            users = self.db.find_users()
        except StoreError:
            logger.exception("Failed to list users")
            raise InternalError("Server error while fetching users") from None
        return [UserRead.model_validate(user) for user in users]
