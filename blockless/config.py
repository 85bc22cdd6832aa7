from pydantic import ValidationError
from pydantic_settings import BaseSettings

from blockless.exceptions import BlessCrawlValidationError
from blockless.validation import format_violations, violations_from

DEFAULT_ENDPOINT_URL = "http://localhost:8081/api/v1/functions/execute"
DEFAULT_FUNCTION_ID = "bafybeibng4fppjveq7bsf3lcj7pahcn3353dkt4utmnzm63majnkq6dzkm"


class Settings(BaseSettings):
    # Remote execution
    BLESS_ENDPOINT_URL: str = DEFAULT_ENDPOINT_URL
    BLESS_FUNCTION_ID: str = DEFAULT_FUNCTION_ID
    BLESS_HTTP_TIMEOUT: float | None = None  # seconds, None waits indefinitely

    # Logging
    LOG_LEVEL: str = "INFO"

    # Empty variables count as unset
    model_config = {"env_file": ".env", "extra": "ignore", "env_ignore_empty": True}


def get_settings() -> Settings:
    """Load settings from the current environment.

    Raises:
        BlessCrawlValidationError: If a variable holds an unusable value.
    """
    try:
        return Settings()
    except ValidationError as exc:
        violations = violations_from(exc)
        raise BlessCrawlValidationError(
            f"Settings validation failed: {format_violations(violations)}",
            violations,
        ) from exc
