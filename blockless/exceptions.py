"""Exception classes for the BlessCrawl SDK."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable codes carried by :class:`BlessCrawlError`."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    HTTP_ERROR = "HTTP_ERROR"
    RESPONSE_FORMAT_ERROR = "RESPONSE_FORMAT_ERROR"
    FUNCTION_EXECUTION_ERROR = "FUNCTION_EXECUTION_ERROR"
    NO_RESULTS_ERROR = "NO_RESULTS_ERROR"
    RESULT_FORMAT_ERROR = "RESULT_FORMAT_ERROR"
    FUNCTION_EXIT_ERROR = "FUNCTION_EXIT_ERROR"
    STDOUT_FORMAT_ERROR = "STDOUT_FORMAT_ERROR"
    STDOUT_PARSE_ERROR = "STDOUT_PARSE_ERROR"
    STDIN_OUTPUT_FORMAT_ERROR = "STDIN_OUTPUT_FORMAT_ERROR"
    OPERATION_ERROR = "OPERATION_ERROR"
    NO_DATA_ERROR = "NO_DATA_ERROR"
    NO_INPUT = "NO_INPUT"

    def __str__(self) -> str:
        return self.value


class BlessCrawlError(Exception):
    """Base exception for all BlessCrawl SDK errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code, if any. Usually an
            :class:`ErrorCode`, but an operation failure reported by the
            remote function keeps whatever code the function sent.
        cause: Original error or raw payload kept for diagnostics.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode | str | None = None,
        cause: Any = None,
    ) -> None:
        self.message = message
        self.code = code
        self.cause = cause
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, code={self.code!r})"


class BlessCrawlValidationError(BlessCrawlError):
    """Raised when a config or options object violates its schema.

    Attributes:
        violations: One :class:`~blockless.validation.Violation` per
            violated constraint, in the order they were found.
    """

    def __init__(self, message: str, violations: list) -> None:
        super().__init__(message, code=ErrorCode.VALIDATION_ERROR, cause=violations)
        self.violations = violations


class TransportError(BlessCrawlError):
    """Raised when the execution endpoint cannot be reached or answers non-2xx.

    Attributes:
        status_code: HTTP status code of the reply, if one was received.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: Any = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.HTTP_ERROR, cause=cause)
        self.status_code = status_code


class ProtocolError(BlessCrawlError):
    """Raised when the reply envelope is malformed or reports a failed execution."""


class ExecutionError(BlessCrawlError):
    """Raised when the remote function ran but exited with a non-zero code.

    Attributes:
        exit_code: The exit code reported by the function runtime.
        stderr: Captured standard error, if the runtime returned any.
    """

    def __init__(
        self,
        message: str,
        exit_code: Any = None,
        stderr: str | None = None,
        cause: Any = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.FUNCTION_EXIT_ERROR, cause=cause)
        self.exit_code = exit_code
        self.stderr = stderr


class OperationError(BlessCrawlError):
    """Raised when the function succeeded but the scrape, map or crawl failed."""


class BindingError(BlessCrawlError):
    """Raised when the in-process host binding raises.

    Only the message of the original exception is kept; ``code`` and
    ``cause`` are always ``None``.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
