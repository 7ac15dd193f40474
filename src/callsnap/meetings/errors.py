"""Error taxonomy for meeting operations.

Every operation raises one of these before writing anything, so a failed
call leaves the stored meeting untouched.
"""

from __future__ import annotations


class MeetingError(Exception):
    """Base class for errors scoped to a single meeting operation."""


class MeetingValidationError(MeetingError, ValueError):
    """Raised when required input is missing or malformed."""


class MeetingNotFoundError(MeetingError, LookupError):
    """Raised when a meeting id does not exist in the store."""

    def __init__(self, meeting_id: str) -> None:
        self.meeting_id = meeting_id
        super().__init__(f"Meeting not found: {meeting_id}")


class MeetingPreconditionError(MeetingError):
    """Raised when an operation requires state the meeting does not have yet."""
