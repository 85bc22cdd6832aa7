"""Function-side entry point of the remote protocol.

When a BlessCrawl function runs on an execution node, its request document
arrives on stdin and the :class:`~blockless.models.StdinOutput` document it
prints to stdout is what :func:`blockless.envelope.decode_response` unpacks
on the caller's side.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Awaitable, Callable, TextIO

from pydantic import ValidationError

from blockless.client import BlessCrawl
from blockless.config import get_settings
from blockless.exceptions import BlessCrawlError, ErrorCode
from blockless.models import StdinErrorInfo, StdinInput, StdinOutput
from blockless.validation import format_violations, violations_from

logger = logging.getLogger(__name__)


def read_input(stream: TextIO | None = None) -> dict[str, Any]:
    """Read the whole of *stream* as JSON and return ``{"args": ...}``.

    Unparseable input is logged and yields empty ``args``.
    """
    stream = stream if stream is not None else sys.stdin
    raw = stream.read()
    args: Any = None
    try:
        args = json.loads(raw) if raw.strip() else None
    except ValueError as e:
        logger.error(f"Error parsing input: {e}")
    return {"args": args if args is not None else {}}


def write_output(output: Any, stream: TextIO | None = None) -> None:
    """Write *output* to *stream* as a single JSON document."""
    stream = stream if stream is not None else sys.stdout
    if hasattr(output, "model_dump"):
        output = output.model_dump(mode="json")
    stream.write(json.dumps(output, default=str))
    stream.flush()


async def entry_main(
    callback: Callable[[dict[str, Any]], Awaitable[Any]],
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> None:
    """Read the input document, await *callback* with it, write its result."""
    input_props = read_input(stdin)
    result = await callback(input_props)
    write_output(result, stdout)


def _jsonable(value: Any) -> Any:
    """Reduce error details to plain JSON values."""
    if value is None:
        return None
    return json.loads(
        json.dumps(
            value,
            default=lambda o: o.model_dump() if hasattr(o, "model_dump") else str(o),
        )
    )


def _error_output(
    operation: Any,
    url: Any,
    message: str,
    code: str | None = None,
    details: Any = None,
) -> dict[str, Any]:
    return StdinOutput(
        success=False,
        operation=operation if isinstance(operation, str) and operation else "unknown",
        url=url if isinstance(url, str) and url else "unknown",
        error=StdinErrorInfo(
            message=message,
            code=str(code) if code is not None else None,
            details=details,
        ),
    ).model_dump(mode="json")


async def execute_request(
    args: Any,
    client_factory: Callable[[], BlessCrawl] = BlessCrawl,
) -> dict[str, Any]:
    """Run the operation described by a stdin request document.

    Always returns a ``StdinOutput`` document; failures are reported in its
    ``error`` field rather than raised.
    """
    if not args:
        return _error_output(
            None,
            None,
            "No input received from stdin. Expected JSON with operation, url, and optional config.",
            ErrorCode.NO_INPUT,
        )

    raw = args if isinstance(args, dict) else {}
    try:
        request = StdinInput.model_validate(args)
    except ValidationError as exc:
        message = f"Invalid input: {format_violations(violations_from(exc))}"
        logger.error(message)
        return _error_output(raw.get("operation"), raw.get("url"), message)

    logger.info(f"Received {request.operation} operation for URL: {request.url}")
    config = request.config or {}

    try:
        client = client_factory()
        if request.operation == "scrape":
            data = await client.scrape(request.url, config)
        elif request.operation == "map":
            data = await client.map(request.url, config)
        else:
            data = await client.crawl(request.url, config)
    except BlessCrawlError as exc:
        logger.error(f"Operation failed: [{exc.code}] {exc.message}")
        return _error_output(
            request.operation, request.url, exc.message, exc.code, _jsonable(exc.cause)
        )
    except Exception as exc:
        logger.exception("Operation failed")
        return _error_output(request.operation, request.url, str(exc) or "Unknown error occurred")

    return StdinOutput(
        success=True,
        operation=request.operation,
        url=request.url,
        data=data,
    ).model_dump(mode="json", exclude={"error"})


def main() -> None:
    """Console entry point: ``bls-crawl-stdin``."""
    settings = get_settings()
    # stdout carries the output document, so logs go to stderr.
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    asyncio.run(entry_main(lambda props: execute_request(props["args"])))


if __name__ == "__main__":
    main()
