"""Access to the language model provided by a function runtime.

Inside a runtime that injects a ``BlessLLM`` binding, :class:`BlessLLM`
opens a chat session on one of its models. There is no remote fallback:
outside such a runtime construction fails with :class:`BindingError`.

Example usage::

    from blockless import BlessLLM, available_models

    llm = BlessLLM(available_models()["MISTRAL_7B"]["DEFAULT"])
    llm.set_options(system_message="You are a helpful assistant.")
    print(llm.chat("What is your name?"))
"""

from __future__ import annotations

import builtins
import logging
from collections.abc import Mapping
from typing import Any, Callable

from blockless.backends import LLM_BINDING_NAME, detect_host_binding
from blockless.exceptions import BindingError, BlessCrawlError
from blockless.models import LlmOptions
from blockless.validation import merge_overrides, validate_llm_options

logger = logging.getLogger(__name__)

MODELS_BINDING_NAME = "MODELS"

# Model table used when the runtime does not inject its own.
DEFAULT_MODELS: dict[str, dict[str, str]] = {
    "LLAMA_3_2_1B": {"DEFAULT": ""},
    "LLAMA_3_2_3B": {"DEFAULT": ""},
    "MISTRAL_7B": {"DEFAULT": ""},
    "MIXTRAL_8X7B": {"DEFAULT": ""},
    "GEMMA_2_2B": {"DEFAULT": ""},
    "GEMMA_2_7B": {"DEFAULT": ""},
    "GEMMA_2_9B": {"DEFAULT": ""},
}


def available_models() -> dict[str, dict[str, str]]:
    """Return the runtime's model table, keyed by family then quantization."""
    models = getattr(builtins, MODELS_BINDING_NAME, None)
    source = models if isinstance(models, Mapping) else DEFAULT_MODELS
    return {family: dict(variants) for family, variants in source.items()}


class BlessLLM:
    """Chat session on a runtime-provided language model.

    Args:
        model: Model identifier, usually taken from :func:`available_models`.
        binding_detector: Callable returning the host ``BlessLLM`` factory or
            ``None``. Defaults to looking up the ``BlessLLM`` binding.

    Raises:
        BindingError: If no binding is available or the host rejects *model*.
    """

    def __init__(
        self,
        model: str,
        *,
        binding_detector: Callable[[], Callable[[str], Any] | None] | None = None,
    ) -> None:
        detector = binding_detector or (lambda: detect_host_binding(LLM_BINDING_NAME))
        factory = detector()
        if factory is None:
            raise BindingError(
                "BlessLLM runtime function not available. "
                "Make sure you are running in the Blockless environment."
            )
        self._model = model
        try:
            self._handle = factory(model)
        except Exception as exc:
            raise BindingError(str(exc) or f"Unknown error loading model {model!r}") from exc

    @property
    def model(self) -> str:
        return self._model

    def _call(self, method: str, *args: Any) -> Any:
        try:
            return getattr(self._handle, method)(*args)
        except Exception as exc:
            logger.debug(f"LLM binding {method} failed: {exc!r}")
            raise BindingError(str(exc) or f"Unknown error during {method}") from exc

    def set_options(
        self,
        options: Mapping[str, Any] | LlmOptions | None = None,
        **overrides: Any,
    ) -> None:
        """Validate and apply session options.

        Raises:
            BlessCrawlValidationError: If the options are invalid.
        """
        validated = validate_llm_options(merge_overrides(options, overrides))
        self._call("set_options", validated.to_payload())

    def get_options(self) -> LlmOptions:
        return validate_llm_options(self._call("get_options"))

    def chat(self, prompt: str) -> str:
        """Send *prompt* and return the model's reply."""
        if not isinstance(prompt, str) or not prompt.strip():
            raise BlessCrawlError("Prompt must be a non-empty string")
        return self._call("chat", prompt)
