"""Execution backends behind :class:`~blockless.client.BlessCrawl`.

Both backends expose ``scrape``, ``map`` and ``crawl`` coroutines taking a
URL and an already validated options dict:

* :class:`LocalBinding` forwards to a handle built from a host-provided
  binding (an embedding runtime that implements the operations in-process).
* :class:`RemoteClient` POSTs the request to a function-execution endpoint
  and decodes the reply envelope.
"""

from __future__ import annotations

import builtins
import inspect
import logging
from typing import Any, Callable, Protocol

import httpx

from blockless.envelope import build_request_body, decode_response
from blockless.exceptions import BindingError, BlessCrawlError, TransportError

logger = logging.getLogger(__name__)

# Names under which an embedding runtime may inject its bindings into builtins.
HOST_BINDING_NAME = "BlessCrawl"
LLM_BINDING_NAME = "BlessLLM"


class OperationBackend(Protocol):
    async def scrape(self, url: str, options: dict[str, Any]) -> Any: ...

    async def map(self, url: str, options: dict[str, Any]) -> Any: ...

    async def crawl(self, url: str, options: dict[str, Any]) -> Any: ...


HostBindingFactory = Callable[[dict[str, Any]], Any]


# ---------------------------------------------------------------------------
# Host binding discovery
# ---------------------------------------------------------------------------

_registered_bindings: dict[str, Callable[..., Any]] = {}


def register_host_binding(
    factory: Callable[..., Any], name: str = HOST_BINDING_NAME
) -> None:
    """Make *factory* available under *name* to clients constructed from now on."""
    _registered_bindings[name] = factory


def clear_host_binding(name: str | None = None) -> None:
    """Forget the binding registered under *name*, or every binding."""
    if name is None:
        _registered_bindings.clear()
    else:
        _registered_bindings.pop(name, None)


def detect_host_binding(name: str = HOST_BINDING_NAME) -> Callable[..., Any] | None:
    """Return the host binding factory, or ``None`` outside a host runtime.

    An explicitly registered factory wins over one injected into builtins.
    """
    registered = _registered_bindings.get(name)
    if registered is not None:
        return registered
    candidate = getattr(builtins, name, None)
    return candidate if callable(candidate) else None


# ---------------------------------------------------------------------------
# Local mode
# ---------------------------------------------------------------------------


class LocalBinding:
    """Forwards operations to an in-process host binding handle.

    Any exception from the handle is re-raised as :class:`BindingError`
    carrying only the original message.
    """

    def __init__(self, factory: HostBindingFactory, config: dict[str, Any]) -> None:
        try:
            self._handle = factory(config)
        except Exception as exc:
            raise BindingError(str(exc) or "Unknown error creating host binding") from exc

    async def _call(self, operation: str, url: str, options: dict[str, Any]) -> Any:
        try:
            result = getattr(self._handle, operation)(url, options)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            logger.debug(f"Host binding {operation} failed for {url}: {exc!r}")
            raise BindingError(str(exc) or f"Unknown error during {operation} operation") from exc
        return result

    async def scrape(self, url: str, options: dict[str, Any]) -> Any:
        return await self._call("scrape", url, options)

    async def map(self, url: str, options: dict[str, Any]) -> Any:
        return await self._call("map", url, options)

    async def crawl(self, url: str, options: dict[str, Any]) -> Any:
        return await self._call("crawl", url, options)


# ---------------------------------------------------------------------------
# Remote mode
# ---------------------------------------------------------------------------


class RemoteClient:
    """Runs operations through the remote function-execution endpoint.

    Every call opens and closes its own ``httpx.AsyncClient``; nothing is
    shared between calls.

    Args:
        endpoint_url: Function-execution endpoint to POST to.
        function_id: ID of the deployed scraping function.
        defaults: Client-level scrape options; call options override them.
        transport: Optional httpx transport, e.g. ``httpx.MockTransport``.
        timeout: HTTP timeout in seconds. ``None`` waits indefinitely, the
            operation's own ``timeout`` is enforced downstream.
    """

    def __init__(
        self,
        endpoint_url: str,
        function_id: str,
        defaults: dict[str, Any] | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ) -> None:
        self.endpoint_url = endpoint_url
        self.function_id = function_id
        self._defaults = dict(defaults or {})
        self._transport = transport
        self._timeout = timeout

    async def _execute(self, operation: str, url: str, options: dict[str, Any]) -> Any:
        config = {**self._defaults, **options}
        body = build_request_body(self.function_id, operation, url, config)
        logger.debug(f"POST {self.endpoint_url} {operation} {url}")

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(
                    self.endpoint_url,
                    json=body,
                    headers={"Content-Type": "application/json"},
                )
            if not response.is_success:
                raise TransportError(
                    f"HTTP request failed with status {response.status_code}: "
                    f"{response.reason_phrase}",
                    status_code=response.status_code,
                )
            return decode_response(response.json()).unwrap()
        except BlessCrawlError as exc:
            logger.warning(f"{operation} {url} failed: [{exc.code}] {exc.message}")
            raise
        except Exception as exc:
            logger.warning(f"{operation} {url} failed: {exc}")
            raise TransportError(f"Failed to make HTTP request: {exc}", cause=exc) from exc

    async def scrape(self, url: str, options: dict[str, Any]) -> Any:
        return await self._execute("scrape", url, options)

    async def map(self, url: str, options: dict[str, Any]) -> Any:
        return await self._execute("map", url, options)

    async def crawl(self, url: str, options: dict[str, Any]) -> Any:
        return await self._execute("crawl", url, options)
