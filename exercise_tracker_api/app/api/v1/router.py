"""
Top-level router for version 1 of the API.

Aggregates the domain routers.  Exercises and logs hang off a user
(``/users/{id}/exercises``, ``/users/{id}/logs``), so a single
``users`` router covers every route.
"""

from fastapi import APIRouter

from .endpoints import users

router = APIRouter()

router.include_router(users.router, prefix="/users", tags=["users"])
