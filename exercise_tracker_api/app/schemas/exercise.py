"""
Pydantic schemas for exercises and exercise logs.

Dates travel over the wire in the human-readable form
``"Mon Jan 01 2024"``.  Inputs may also use an ISO date
(``2024-01-01``) or an ISO timestamp; ``parse_date`` accepts all three
and ``format_date`` renders the stored form.
"""

from datetime import date, datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

DATE_FORMAT = "%a %b %d %Y"

# Largest whole number the store keeps as an integer (SQLite INTEGER is 64-bit).
MAX_INTEGER_DURATION = 2 ** 63


def format_date(value: date) -> str:
    """Render ``value`` as e.g. ``"Mon Jan 01 2024"``.

    The year is always four digits so the result parses back with
    ``DATE_FORMAT``; ``strftime("%Y")`` does not pad years below 1000
    on every platform.
    """
    return f"{value:%a %b %d} {value.year:04d}"


def parse_date(value: str) -> date:
    """Parse an ISO date, ISO timestamp or ``"Mon Jan 01 2024"`` string.

    Raises ``ValueError`` when none of the formats match.
    """
    text = value.strip()
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        pass
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValueError(f"Invalid date: {value!r}") from None


def _blank_to_none(value: Any) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return value


class ExerciseCreate(BaseModel):
    """Schema for logging an exercise.

    ``duration`` is a number of minutes.  Integral values are kept as
    ``int`` so ``"30"`` comes back as ``30`` rather than ``30.0``;
    whole numbers too large for a 64-bit integer stay floats.
    ``date`` is normalised to the stored form; ``None`` means today.
    """

    description: str = Field(..., min_length=1, examples=["Morning run"])
    duration: float = Field(..., gt=0, allow_inf_nan=False, examples=[30])
    date: Optional[str] = Field(None, examples=["2024-01-01"])

    @field_validator("duration")
    @classmethod
    def integral_duration(cls, v: float) -> Union[int, float]:
        if v.is_integer() and abs(v) < MAX_INTEGER_DURATION:
            return int(v)
        return v

    @field_validator("date", mode="before")
    @classmethod
    def normalise_date(cls, v: Any) -> Optional[str]:
        v = _blank_to_none(v)
        if v is None:
            return None
        if isinstance(v, datetime):
            return format_date(v.date())
        if isinstance(v, date):
            return format_date(v)
        if not isinstance(v, str):
            raise ValueError("date must be a string")
        return format_date(parse_date(v))


class ExerciseAdded(BaseModel):
    """Merged view of the user and the exercise just logged."""

    id: str
    username: str
    description: str
    duration: Union[int, float]
    date: str


class LogEntry(BaseModel):
    description: str
    duration: Union[int, float]
    date: str

    model_config = {
        "from_attributes": True,
    }


class ExerciseLog(BaseModel):
    """A user's filtered exercise log.  ``count`` always equals ``len(log)``."""

    id: str
    username: str
    count: int
    log: List[LogEntry]


class LogQuery(BaseModel):
    """Query parameters of the log endpoint.

    ``date_from`` and ``date_to`` are inclusive bounds; ``limit`` keeps
    the first ``limit`` matching entries.
    """

    date_from: Optional[date] = None
    date_to: Optional[date] = None
    limit: Optional[int] = Field(None, ge=0)

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def parse_bound(cls, v: Any) -> Any:
        v = _blank_to_none(v)
        if isinstance(v, str):
            return parse_date(v)
        return v

    @field_validator("limit", mode="before")
    @classmethod
    def blank_limit(cls, v: Any) -> Any:
        return _blank_to_none(v)
