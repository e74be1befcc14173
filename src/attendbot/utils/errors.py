"""Custom exception classes for attendbot."""


class AttendBotError(Exception):
    """Base exception for all attendbot errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(AttendBotError):
    """Invalid or missing configuration."""

    pass


class LLMProviderError(AttendBotError):
    """The completion provider failed to return text."""

    pass


class WorkflowRequestError(LLMProviderError):
    """Workflow webhook call failed or returned a non-success status."""

    pass


class AttendanceDBError(AttendBotError):
    """Database operation failed."""

    pass


class QueryExecutionError(AttendBotError):
    """A natural-language query could not be planned or executed."""

    pass
