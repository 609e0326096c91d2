"""Custom exceptions for jobboard.

Compilers raise synchronously on structurally invalid input; the jobs
repository raises after executing a statement that matched nothing.
"""


class JobBoardError(Exception):
    """Base exception for all jobboard errors."""

    def __init__(self, message: str, details: dict | None = None):
        """Initialize exception with message and optional details.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details


class NotFound(JobBoardError):
    """Raised when a job or company targeted by an operation does not exist."""

    pass


class InvalidChangeSet(JobBoardError):
    """Raised when a partial update is empty or touches a field outside the allow-list."""

    pass


class ValidationError(JobBoardError):
    """Raised when caller input is malformed or has the wrong type.

    The individual messages are kept in ``details["errors"]``.
    """

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message, details={"errors": list(errors or [])})
        self.errors = list(errors or [])
