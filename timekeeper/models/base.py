"""Base model for the value objects of the timekeeper engine.

Persisted records are SQLModel tables (see ``timekeeper.models.entities``);
everything that only travels between components, such as candidate entries,
validation results and imported attendance records, derives from this
Pydantic base instead.
"""

from pydantic import BaseModel, ConfigDict


class BaseDataModel(BaseModel):
    """Base class for non-persisted data models.

    Example:
        >>> class Interval(BaseDataModel):
        ...     start: int
        ...     end: int
        >>> Interval(start=1, end=2).model_dump()
        {'start': 1, 'end': 2}
    """

    model_config = ConfigDict(
        # Allow arbitrary types like date and time
        arbitrary_types_allowed=True,
        # Validate on assignment to catch errors early
        validate_assignment=True,
        strict=False,
        # Unknown fields are a caller bug
        extra="forbid",
        frozen=False,
    )
