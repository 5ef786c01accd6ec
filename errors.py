"""Error types for Event Reminder Service.

Core modules raise these; the API, MCP server and worker translate them
into status codes, tool messages or log lines.
"""


class EventServiceError(Exception):
    """Base class for all service errors."""


class ValidationError(EventServiceError, ValueError):
    """Input could not be accepted (bad month-day, date string, enum value...)."""


class InvalidMonthDay(ValidationError):
    """A month-day string is not a valid "MM-DD" calendar day."""


class InvalidDateFormat(ValidationError):
    """A user-entered date is neither "YYYY-MM-DD" nor "MM-DD"."""


class GenerationError(EventServiceError):
    """The external greeting-message generation call failed."""
