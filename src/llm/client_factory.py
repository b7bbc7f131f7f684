# src/llm/client_factory.py — v3
"""Factory: instantiate LLM clients from provider name.

``create_llm_client`` builds one adapter; ``LLMClientCache`` resolves a
step's assignment through the cascade in llm/config.py and reuses one
client per provider:model pair.
"""

from __future__ import annotations

import importlib
import logging

from sermonflow.config.settings import Settings
from sermonflow.core.models import StepDefinition
from sermonflow.llm.base_client import BaseLLMClient
from sermonflow.llm.config import LLMAssignment, resolve_llm

logger = logging.getLogger(__name__)

# Registry of provider name → adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "google": "sermonflow.llm.adapters.google_adapter.GoogleAdapter",
    "openai": "sermonflow.llm.adapters.openai_adapter.OpenAIAdapter",
    "anthropic": "sermonflow.llm.adapters.anthropic_adapter.AnthropicAdapter",
}

_API_KEY_FIELDS: dict[str, str] = {
    "google": "google_api_key",
    "openai": "openai_api_key",
    "anthropic": "anthropic_api_key",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_llm_client(
    provider: str,
    model: str,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseLLMClient:
    """Instantiate the correct adapter from provider name.

    Args:
        provider: Provider identifier (google, openai, anthropic).
        model: Model name (e.g. gemini-3-flash-preview).
        settings: Application settings (for API keys).
        **kwargs: Additional provider-specific arguments.

    Returns:
        Configured BaseLLMClient instance.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    provider = provider.lower()
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    adapter_cls = _import_class(_PROVIDER_REGISTRY[provider])

    init_kwargs = dict(kwargs)
    init_kwargs["model"] = model
    if settings is not None and provider in _API_KEY_FIELDS:
        init_kwargs.setdefault("api_key", getattr(settings, _API_KEY_FIELDS[provider]))

    logger.debug("Creating LLM client: provider=%s, model=%s", provider, model)
    return adapter_cls(**init_kwargs)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)


class LLMClientCache:
    """Create and cache LLM clients per step.

    Clients are cached by provider:model key so steps sharing the same
    assignment reuse a single client instance.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._clients: dict[str, BaseLLMClient] = {}

    def assignment_for(self, step: StepDefinition) -> LLMAssignment:
        return resolve_llm(step, self._settings)

    def get_client(self, step: StepDefinition) -> BaseLLMClient:
        """Get or create the LLM client routed to ``step``."""
        assignment = self.assignment_for(step)
        cache_key = assignment.key

        if cache_key not in self._clients:
            self._clients[cache_key] = create_llm_client(
                assignment.provider, assignment.model, self._settings
            )
            logger.info(
                "Created LLM client for '%s': %s (source: %s)",
                step.id,
                cache_key,
                assignment.source,
            )
        else:
            logger.debug("Reusing cached LLM client for '%s': %s", step.id, cache_key)

        return self._clients[cache_key]

    def __call__(self, step: StepDefinition) -> BaseLLMClient:
        return self.get_client(step)
