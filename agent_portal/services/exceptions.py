from typing import List, Sequence


class ServiceError(Exception):
    """Base exception for service layer failures."""

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class DownstreamServiceError(ServiceError):
    """Raised when the booking backend returns an error response or is unreachable."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        *,
        backend_message: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause=cause)
        self.status_code = status_code
        self.backend_message = backend_message


class AuthenticationError(ServiceError):
    """Raised when credentials or a bearer token are rejected."""


class NotFoundError(ServiceError):
    """Raised when a referenced record does not exist."""


class InvalidRequestError(ServiceError):
    """Raised when caller input is rejected before any backend call."""


class CsvIngestionError(ServiceError):
    """Raised when an uploaded CSV cannot be turned into booking rows.

    The working batch is never modified when this is raised.
    """

    def __init__(
        self,
        message: str,
        *,
        missing_columns: Sequence[str] = (),
        rejected_lines: Sequence[str] = (),
        cause: Exception | None = None,
    ):
        super().__init__(message, cause=cause)
        self.missing_columns: List[str] = list(missing_columns)
        self.rejected_lines: List[str] = list(rejected_lines)


class NoValidRowsError(ServiceError):
    """Raised when a bulk submit is attempted without any validated rows."""


class SubmissionInProgressError(ServiceError):
    """Raised when a bulk submit is already running for the same batch."""


class BulkSubmissionError(ServiceError):
    """Raised when the backend refuses or fails a whole bulk submission."""
