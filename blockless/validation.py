"""Validation of untrusted config and options against the option models."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ValidationError

from blockless.exceptions import BlessCrawlValidationError
from blockless.models import (
    BlessCrawlConfig,
    CrawlOptions,
    LlmOptions,
    MapOptions,
    ScrapeOptions,
    _Options,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

MAP_FIELDS = frozenset(MapOptions.model_fields)
CRAWL_FIELDS = frozenset(CrawlOptions.model_fields)


class Violation(BaseModel):
    """A single violated constraint."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


def format_violations(violations: list[Violation]) -> str:
    """Join violations into ``"path: message; path2: message2"``."""
    return "; ".join(str(v) for v in violations)


def violations_from(exc: ValidationError) -> list[Violation]:
    return [
        Violation(path=".".join(str(part) for part in err["loc"]), message=err["msg"])
        for err in exc.errors()
    ]


def _validate(model: type[ModelT], data: Any, subject: str) -> ModelT:
    if data is None:
        data = {}
    elif isinstance(data, BaseModel):
        data = data.model_dump(exclude_none=True)
    elif isinstance(data, Mapping):
        # None means "not set"; drop it so optional fields stay unset.
        data = {k: v for k, v in data.items() if v is not None}
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        violations = violations_from(exc)
        raise BlessCrawlValidationError(
            f"{subject} validation failed: {format_violations(violations)}",
            violations,
        ) from exc


def validate_client_config(config: Any) -> BlessCrawlConfig:
    return _validate(BlessCrawlConfig, config, "Configuration")


def validate_scrape_options(options: Any) -> ScrapeOptions:
    return _validate(ScrapeOptions, options, "Scrape options")


def validate_map_options(options: Any) -> MapOptions:
    return _validate(MapOptions, options, "Map options")


def validate_crawl_options(options: Any) -> CrawlOptions:
    return _validate(CrawlOptions, options, "Crawl options")


def validate_llm_options(options: Any) -> LlmOptions:
    return _validate(LlmOptions, options, "LLM options")


def merge_overrides(options: Any, overrides: dict[str, Any]) -> Any:
    """Merge keyword overrides over *options*; non-mappings pass through for validation."""
    if not overrides:
        return options
    if options is None:
        return dict(overrides)
    if isinstance(options, BaseModel):
        options = options.model_dump(exclude_none=True)
    if isinstance(options, Mapping):
        return {**options, **overrides}
    return options


def split_options(
    options: Any, fields: frozenset[str]
) -> tuple[dict[str, Any], Any]:
    """Partition *options* into ``(operation_part, scrape_part)``.

    Keys named in *fields* go to the operation part, every other key to the
    scrape part. A non-mapping input is returned unchanged as the scrape part
    so that validation reports it.
    """
    if options is None:
        return {}, {}
    if isinstance(options, BaseModel):
        options = options.model_dump(exclude_none=True)
    if not isinstance(options, Mapping):
        return {}, options
    own = {k: v for k, v in options.items() if k in fields}
    rest = {k: v for k, v in options.items() if k not in fields}
    return own, rest


def _validate_combined(
    options: Any,
    fields: frozenset[str],
    validate_own: Callable[[Any], _Options],
) -> dict[str, Any]:
    own, rest = split_options(options, fields)
    failures: list[BlessCrawlValidationError] = []
    payload: dict[str, Any] = {}
    # Both halves are always checked; one error reports everything.
    for validate, part in ((validate_scrape_options, rest), (validate_own, own)):
        try:
            payload.update(validate(part).to_payload())
        except BlessCrawlValidationError as exc:
            failures.append(exc)
    if len(failures) == 1:
        raise failures[0]
    if failures:
        raise BlessCrawlValidationError(
            "; ".join(exc.message for exc in failures),
            [v for exc in failures for v in exc.violations],
        )
    return payload


def validate_map_request(options: Any) -> dict[str, Any]:
    """Validate combined map + scrape options and return them as one dict."""
    return _validate_combined(options, MAP_FIELDS, validate_map_options)


def validate_crawl_request(options: Any) -> dict[str, Any]:
    """Validate combined crawl + scrape options and return them as one dict."""
    return _validate_combined(options, CRAWL_FIELDS, validate_crawl_options)
