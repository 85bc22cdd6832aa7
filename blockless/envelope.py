"""Request and reply envelopes of the remote function-execution protocol.

A remote call wraps ``{operation, url, config}`` as a JSON string in the
``stdin`` field of the request body. The reply nests the function's captured
stdout several levels deep::

    {"code": "200",
     "results": [{"result": {"stdout": "...", "stderr": "", "exit_code": 0}}]}

``stdout`` is itself a JSON document (see :class:`~blockless.models.StdinOutput`).

:func:`decode_response` walks the reply through an ordered chain of guard
steps. Each step returns the value the next step works on, or a typed
error; the first error ends the chain.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable

from blockless.exceptions import (
    BlessCrawlError,
    ErrorCode,
    ExecutionError,
    OperationError,
    ProtocolError,
)
from blockless.models import StdinInput

logger = logging.getLogger(__name__)

EXECUTION_METHOD = "blessnet.wasm"
SUCCESS_CODE = "200"


# ---------------------------------------------------------------------------
# Request side
# ---------------------------------------------------------------------------


def encode_stdin(operation: str, url: str, config: dict[str, Any] | None) -> str:
    """Serialize the request document carried in the ``stdin`` field."""
    return json.dumps({"operation": operation, "url": url, "config": config})


def decode_stdin(raw: str | bytes) -> StdinInput:
    """Parse a ``stdin`` request document back into a :class:`StdinInput`."""
    return StdinInput.model_validate_json(raw)


def build_request_body(
    function_id: str,
    operation: str,
    url: str,
    config: dict[str, Any] | None,
) -> dict[str, Any]:
    """Build the JSON body POSTed to the function-execution endpoint."""
    return {
        "function_id": function_id,
        "method": EXECUTION_METHOD,
        "config": {
            "permissions": [url],
            "stdin": encode_stdin(operation, url, config),
        },
    }


# ---------------------------------------------------------------------------
# Reply side
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of :func:`decode_response`: either ``data`` or ``error``."""

    data: Any = None
    error: BlessCrawlError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return ``data`` or raise ``error``."""
        if self.error is not None:
            raise self.error
        return self.data


Step = Callable[[Any], Any]


def _check_reply_object(reply: Any) -> Any:
    if not isinstance(reply, dict):
        return ProtocolError(
            "Invalid response format: expected JSON object",
            ErrorCode.RESPONSE_FORMAT_ERROR,
        )
    return reply


def _check_execution_code(reply: dict) -> Any:
    code = reply.get("code")
    if code != SUCCESS_CODE:
        return ProtocolError(
            f"Function execution failed with code {code}",
            ErrorCode.FUNCTION_EXECUTION_ERROR,
            reply,
        )
    return reply


def _first_result(reply: dict) -> Any:
    results = reply.get("results")
    if not isinstance(results, list) or not results:
        return ProtocolError(
            "No results returned from function execution",
            ErrorCode.NO_RESULTS_ERROR,
            reply,
        )
    return results[0]


def _check_result_object(entry: Any) -> Any:
    result = entry.get("result") if isinstance(entry, dict) else None
    if not isinstance(result, dict):
        return ProtocolError(
            "Invalid result structure: missing result field",
            ErrorCode.RESULT_FORMAT_ERROR,
            entry,
        )
    return result


def _check_exit_code(result: dict) -> Any:
    exit_code = result.get("exit_code")
    # bool is an int subclass; False must not pass as exit code 0.
    if isinstance(exit_code, bool) or exit_code != 0:
        stderr = result.get("stderr") or "No error details available"
        return ExecutionError(
            f"Function execution failed with exit code {exit_code}: {stderr}",
            exit_code=exit_code,
            stderr=result.get("stderr"),
            cause=result,
        )
    return result


def _stdout_text(result: dict) -> Any:
    stdout = result.get("stdout")
    if not isinstance(stdout, str) or not stdout:
        return ProtocolError(
            "Invalid stdout: expected non-empty string",
            ErrorCode.STDOUT_FORMAT_ERROR,
            result,
        )
    return stdout


def _parse_stdout(stdout: str) -> Any:
    try:
        return json.loads(stdout)
    except ValueError as exc:
        return ProtocolError(
            f"Failed to parse stdout as JSON: {exc}",
            ErrorCode.STDOUT_PARSE_ERROR,
            {"stdout": stdout, "parse_error": exc},
        )


def _check_output_object(output: Any) -> Any:
    if not isinstance(output, dict):
        return ProtocolError(
            "Invalid StdinOutput format: expected JSON object",
            ErrorCode.STDIN_OUTPUT_FORMAT_ERROR,
            output,
        )
    return output


def _check_success(output: dict) -> Any:
    if not output.get("success"):
        error = output.get("error")
        if not isinstance(error, dict):
            error = {}
        return OperationError(
            str(error.get("message") or "Operation failed"),
            error.get("code") or ErrorCode.OPERATION_ERROR,
            error.get("details"),
        )
    return output


def _extract_data(output: dict) -> Any:
    if output.get("data") is None:
        return ProtocolError(
            "No data returned from successful operation",
            ErrorCode.NO_DATA_ERROR,
            output,
        )
    return output["data"]


DECODE_STEPS: tuple[Step, ...] = (
    _check_reply_object,
    _check_execution_code,
    _first_result,
    _check_result_object,
    _check_exit_code,
    _stdout_text,
    _parse_stdout,
    _check_output_object,
    _check_success,
    _extract_data,
)


def decode_response(reply: Any) -> DecodeResult:
    """Decode a parsed reply body into the operation's ``data`` or a typed error.

    The caller owns the operation/type correspondence: ``data`` is returned
    exactly as the function produced it.
    """
    value = reply
    for step in DECODE_STEPS:
        value = step(value)
        if isinstance(value, BlessCrawlError):
            logger.debug(f"Reply rejected at {step.__name__}: {value.code} {value.message}")
            return DecodeResult(error=value)
    return DecodeResult(data=value)
