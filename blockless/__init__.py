"""Blockless SDK -- BlessCrawl distributed web scraping client for Python."""

__version__ = "1.2.0"

from blockless.backends import (
    LocalBinding,
    RemoteClient,
    clear_host_binding,
    detect_host_binding,
    register_host_binding,
)
from blockless.client import BlessCrawl, RuntimeMode
from blockless.envelope import (
    DecodeResult,
    build_request_body,
    decode_response,
    decode_stdin,
    encode_stdin,
)
from blockless.exceptions import (
    BindingError,
    BlessCrawlError,
    BlessCrawlValidationError,
    ErrorCode,
    ExecutionError,
    OperationError,
    ProtocolError,
    TransportError,
)
from blockless.llm import DEFAULT_MODELS, BlessLLM, available_models
from blockless.models import (
    BlessCrawlConfig,
    CrawlData,
    CrawlError,
    CrawlOptions,
    LinkInfo,
    LlmOptions,
    MapData,
    MapOptions,
    PageMetadata,
    ScrapeData,
    ScrapeOptions,
    StdinInput,
    StdinOutput,
    Viewport,
)
from blockless.stdin import entry_main, execute_request, read_input, write_output
from blockless.validation import (
    Violation,
    validate_client_config,
    validate_crawl_options,
    validate_crawl_request,
    validate_llm_options,
    validate_map_options,
    validate_map_request,
    validate_scrape_options,
)

__all__ = [
    # Version
    "__version__",
    # Client
    "BlessCrawl",
    "RuntimeMode",
    "LocalBinding",
    "RemoteClient",
    "register_host_binding",
    "clear_host_binding",
    "detect_host_binding",
    # LLM
    "BlessLLM",
    "available_models",
    "DEFAULT_MODELS",
    # Protocol
    "DecodeResult",
    "build_request_body",
    "decode_response",
    "decode_stdin",
    "encode_stdin",
    "entry_main",
    "execute_request",
    "read_input",
    "write_output",
    # Exceptions
    "ErrorCode",
    "BlessCrawlError",
    "BlessCrawlValidationError",
    "TransportError",
    "ProtocolError",
    "ExecutionError",
    "OperationError",
    "BindingError",
    # Validation
    "Violation",
    "validate_client_config",
    "validate_scrape_options",
    "validate_map_options",
    "validate_crawl_options",
    "validate_map_request",
    "validate_crawl_request",
    "validate_llm_options",
    # Models
    "BlessCrawlConfig",
    "ScrapeOptions",
    "Viewport",
    "MapOptions",
    "CrawlOptions",
    "LlmOptions",
    "ScrapeData",
    "PageMetadata",
    "MapData",
    "LinkInfo",
    "CrawlData",
    "CrawlError",
    "StdinInput",
    "StdinOutput",
]
