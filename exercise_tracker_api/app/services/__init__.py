"""
Service layer abstraction.

Each service receives an explicit ``Database`` handle and holds the
business logic for one domain, keeping API handlers thin.
"""

from typing import Any


def is_blank(value: Any) -> bool:
    """Return True for values treated as "not supplied" in request bodies."""
    return value is None or (isinstance(value, str) and not value.strip())
