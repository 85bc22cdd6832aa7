"""Pydantic models for BlessCrawl options and the stdin/stdout protocol documents.

Option models are validated strictly (no string-to-number or int-to-bool
coercion) and frozen once built. Result payloads are ``TypedDict`` shapes:
they describe what the scraping runtime returns but are never re-validated
by the client.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, TypedDict

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    StringConstraints,
    field_validator,
)

Format = Literal["markdown", "html", "json"]
LinkType = Literal["internal", "external", "anchor", "mailto", "tel", "file"]
Operation = Literal["scrape", "map", "crawl"]

TagName = Annotated[
    StrictStr,
    StringConstraints(min_length=1, max_length=50, pattern=r"^[A-Za-z][A-Za-z0-9-]*$"),
]
HeaderName = Annotated[
    StrictStr,
    StringConstraints(min_length=1, max_length=100, pattern=r"^[A-Za-z][A-Za-z0-9_-]*$"),
]
HeaderValue = Annotated[StrictStr, StringConstraints(max_length=1000)]
FileExtension = Annotated[StrictStr, StringConstraints(pattern=r"^\.[A-Za-z0-9]{1,10}$")]
PathPattern = Annotated[StrictStr, StringConstraints(min_length=1, max_length=200)]

TagList = Annotated[list[TagName], Field(max_length=50)]
Headers = Annotated[dict[HeaderName, HeaderValue], Field(max_length=20)]
LinkTypeList = Annotated[list[LinkType], Field(max_length=10)]
ExtensionList = Annotated[list[FileExtension], Field(max_length=20)]
PathList = Annotated[list[PathPattern], Field(max_length=100)]
UserAgent = Annotated[StrictStr, StringConstraints(min_length=1, max_length=500)]


class _Options(BaseModel):
    # Unknown keys are dropped, declared keys are always checked.
    model_config = ConfigDict(extra="ignore", frozen=True)

    def to_payload(self) -> dict[str, Any]:
        """Return the set fields as a fresh plain dict."""
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Option models
# ---------------------------------------------------------------------------


class Viewport(_Options):
    """Browser viewport, from small phones up to 8K screens."""

    width: Annotated[StrictInt, Field(ge=320, le=7680)] | None = None
    height: Annotated[StrictInt, Field(ge=240, le=4320)] | None = None


class ScrapeOptions(_Options):
    """Per-page scrape settings, shared by every operation."""

    timeout: Annotated[StrictInt, Field(ge=5000, le=120000)] | None = None  # ms
    wait_time: Annotated[StrictInt, Field(ge=0, le=20000)] | None = None  # ms
    include_tags: TagList | None = None
    exclude_tags: TagList | None = None
    only_main_content: StrictBool | None = None
    format: Format | None = None
    viewport: Viewport | None = None
    user_agent: UserAgent | None = None
    headers: Headers | None = None


class MapOptions(_Options):
    """Link-extraction settings for ``map``."""

    link_types: LinkTypeList | None = None
    base_url: StrictStr | None = None
    filter_extensions: ExtensionList | None = None


class CrawlOptions(_Options):
    """Traversal settings for ``crawl``."""

    limit: Annotated[StrictInt, Field(ge=1, le=1000)] | None = None
    max_depth: Annotated[StrictInt, Field(ge=1, le=5)] | None = None
    exclude_paths: PathList | None = None
    include_paths: PathList | None = None
    follow_external: StrictBool | None = None
    delay_between_requests: Annotated[StrictInt, Field(ge=0, le=30000)] | None = None  # ms
    parallel_requests: Annotated[StrictInt, Field(ge=1, le=5)] | None = None


class BlessCrawlConfig(ScrapeOptions):
    """Client configuration: scrape defaults plus the remote-mode endpoint."""

    endpoint_url: StrictStr | None = None
    function_id: StrictStr | None = None

    def scrape_defaults(self) -> dict[str, Any]:
        """Return only the scrape-level defaults as a plain dict."""
        return self.model_dump(exclude_none=True, exclude={"endpoint_url", "function_id"})


class LlmOptions(_Options):
    """Session settings for :class:`~blockless.llm.BlessLLM`."""

    system_message: StrictStr | None = None
    tools_sse_urls: list[StrictStr] | None = None
    temperature: Annotated[StrictFloat, Field(ge=0)] | None = None
    top_p: Annotated[StrictFloat, Field(ge=0, le=1)] | None = None


# ---------------------------------------------------------------------------
# Result payloads
# ---------------------------------------------------------------------------


class _PageMetadataRequired(TypedDict):
    url: str
    status_code: int


class PageMetadata(_PageMetadataRequired, total=False):
    """Metadata extracted from a scraped page."""

    title: str
    description: str
    language: str
    keywords: str
    robots: str
    author: str
    creator: str
    publisher: str
    og_title: str
    og_description: str
    og_image: str
    og_url: str
    og_site_name: str
    og_type: str
    twitter_title: str
    twitter_description: str
    twitter_image: str
    twitter_card: str
    twitter_site: str
    twitter_creator: str
    favicon: str
    viewport: str
    referrer: str
    content_type: str
    scrape_id: str
    source_url: str
    proxy_used: str


class ScrapeData(TypedDict):
    """Result of ``scrape``."""

    success: bool
    timestamp: int
    format: Format
    content: str
    metadata: PageMetadata


class LinkInfo(TypedDict):
    url: str
    link_type: str


class MapData(TypedDict):
    """Result of ``map``."""

    url: str
    links: list[LinkInfo]
    total_links: int
    timestamp: int


class CrawlError(TypedDict):
    url: str
    error: str
    depth: int


class _CrawlDataRequired(TypedDict):
    root_url: str
    pages: list[ScrapeData]
    depth_reached: int
    total_pages: int
    errors: list[CrawlError]


class CrawlData(_CrawlDataRequired, total=False):
    """Result of ``crawl``."""

    link_map: MapData


# ---------------------------------------------------------------------------
# stdin / stdout protocol documents
# ---------------------------------------------------------------------------


class StdinInput(BaseModel):
    """Request document carried in the ``stdin`` field of a remote call."""

    operation: Operation
    url: StrictStr
    config: dict[str, Any] | None = None

    @field_validator("url")
    @classmethod
    def _url_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must be a non-empty string")
        return value


class StdinErrorInfo(BaseModel):
    message: str
    code: str | None = None
    details: Any = None


class StdinOutput(BaseModel):
    """Response document the function writes to stdout."""

    success: bool
    operation: str
    url: str
    data: Any = None
    error: StdinErrorInfo | None = None
