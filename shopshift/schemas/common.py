"""Common Pydantic request/response schema definitions.

Building blocks shared across the scheduling API domains: clock-time
ranges, break periods, display references for enriched responses, and
the mutation result.
"""

from pydantic import BaseModel, field_validator

from shopshift.utils.exceptions import BadRequestError
from shopshift.utils.shift_time import format_clock, parse_clock


def normalize_clock(value: str) -> str:
    """Validate an "HH:MM" string and return it zero-padded.

    Raises:
        ValueError: When the value is not a valid clock time (rendered as 422)
    """
    try:
        return format_clock(parse_clock(value))
    except BadRequestError:
        raise ValueError("time must be formatted as HH:MM")


class HourRange(BaseModel):
    """Clock-time range within one day.

    Only the "HH:MM" format is checked here; ordering (start < end) and
    template bounds are business rules enforced by the services so that
    permission errors are reported before validity errors.

    Attributes:
        start_time: Range start, "HH:MM"
        end_time: Range end, "HH:MM"
    """

    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalize_clock(cls, value: str) -> str:
        return normalize_clock(value)


class BreakPeriod(HourRange):
    """Break inside an assignment. Informational only, no capacity effect.

    Attributes:
        is_paid: Whether the break is paid
    """

    is_paid: bool = False


class PersonRef(BaseModel):
    """Display reference to a user (None in responses when the user is gone)."""

    id: str
    name: str


class ShiftRef(BaseModel):
    """Display reference to a shift template."""

    id: str
    name: str
    type: str | None = None


class MutationResponse(BaseModel):
    """Result of a state-changing operation: the affected record's id.

    Attributes:
        id: Affected (or newly created) record UUID
        status: Status of that record after the operation
    """

    id: str
    status: str
