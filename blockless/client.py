"""Asynchronous client for BlessCrawl distributed web scraping."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable

import httpx

from blockless.backends import (
    HostBindingFactory,
    LocalBinding,
    OperationBackend,
    RemoteClient,
    detect_host_binding,
)
from blockless.config import DEFAULT_ENDPOINT_URL, DEFAULT_FUNCTION_ID, get_settings
from blockless.exceptions import BlessCrawlError
from blockless.models import BlessCrawlConfig, CrawlData, MapData, ScrapeData
from blockless.validation import (
    merge_overrides,
    validate_client_config,
    validate_crawl_request,
    validate_map_request,
    validate_scrape_options,
)

logger = logging.getLogger(__name__)


class RuntimeMode(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _check_url(url: Any) -> None:
    if not isinstance(url, str) or not url.strip():
        raise BlessCrawlError("URL must be a non-empty string")


# ===================================================================
# Client
# ===================================================================


class BlessCrawl:
    """Client for the BlessCrawl scrape, map and crawl operations.

    The execution mode is chosen once, at construction: if a host binding is
    available the client runs operations in-process (``RuntimeMode.LOCAL``),
    otherwise it calls the remote function-execution endpoint
    (``RuntimeMode.REMOTE``). The API is the same in both modes.

    Example usage::

        import asyncio
        from blockless import BlessCrawl

        async def main():
            crawler = BlessCrawl({"format": "markdown", "timeout": 30000})
            page = await crawler.scrape("https://example.com")
            print(page["content"])

        asyncio.run(main())

    Args:
        config: Client configuration: default scrape options plus optional
            ``endpoint_url`` and ``function_id`` for remote mode. Validated
            immediately.
        binding_detector: Callable returning a host binding factory or
            ``None``. Defaults to :func:`~blockless.backends.detect_host_binding`.
        transport: Optional httpx transport used for remote calls.
        http_timeout: HTTP timeout in seconds for remote calls. Falls back to
            the ``BLESS_HTTP_TIMEOUT`` setting.

    Raises:
        BlessCrawlValidationError: If *config* or a ``BLESS_*`` environment
            variable is invalid.
    """

    def __init__(
        self,
        config: Mapping[str, Any] | BlessCrawlConfig | None = None,
        *,
        binding_detector: Callable[[], HostBindingFactory | None] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        http_timeout: float | None = None,
    ) -> None:
        self._config = validate_client_config(config)

        # Priority: explicit config > environment > built-in default
        settings = get_settings()
        self._endpoint_url = (
            self._config.endpoint_url or settings.BLESS_ENDPOINT_URL or DEFAULT_ENDPOINT_URL
        )
        self._function_id = (
            self._config.function_id or settings.BLESS_FUNCTION_ID or DEFAULT_FUNCTION_ID
        )

        factory = (binding_detector or detect_host_binding)()
        self._backend: OperationBackend
        if factory is not None:
            self._mode = RuntimeMode.LOCAL
            self._backend = LocalBinding(factory, self._config.scrape_defaults())
        else:
            self._mode = RuntimeMode.REMOTE
            self._backend = RemoteClient(
                self._endpoint_url,
                self._function_id,
                self._config.scrape_defaults(),
                transport=transport,
                timeout=http_timeout if http_timeout is not None else settings.BLESS_HTTP_TIMEOUT,
            )
        logger.debug(f"BlessCrawl client created in {self._mode.value} mode")

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def runtime_mode(self) -> RuntimeMode:
        return self._mode

    @property
    def config(self) -> BlessCrawlConfig:
        return self._config

    @property
    def endpoint_url(self) -> str:
        return self._endpoint_url

    @property
    def function_id(self) -> str:
        return self._function_id

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def scrape(
        self,
        url: str,
        options: Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> ScrapeData:
        """Scrape a single page.

        Args:
            url: The page to scrape.
            options: Scrape options (``timeout``, ``format``, ``viewport``, ...).
            **overrides: Individual options, applied over *options*.

        Returns:
            The scraped content and page metadata.

        Raises:
            BlessCrawlValidationError: If the options are invalid.
            BlessCrawlError: On an empty URL or any execution failure.
        """
        _check_url(url)
        validated = validate_scrape_options(merge_overrides(options, overrides))
        return await self._backend.scrape(url, validated.to_payload())

    async def map(
        self,
        url: str,
        options: Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> MapData:
        """Extract the links of a page, categorized by type.

        Accepts map options (``link_types``, ``base_url``,
        ``filter_extensions``) together with any scrape option.
        """
        _check_url(url)
        validated = validate_map_request(merge_overrides(options, overrides))
        return await self._backend.map(url, validated)

    async def crawl(
        self,
        url: str,
        options: Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> CrawlData:
        """Crawl a site starting at *url*.

        Accepts crawl options (``limit``, ``max_depth``, path filters,
        pacing) together with any scrape option.
        """
        _check_url(url)
        validated = validate_crawl_request(merge_overrides(options, overrides))
        return await self._backend.crawl(url, validated)
