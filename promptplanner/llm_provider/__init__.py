"""LLM provider implementations."""

import logging
from typing import Dict, Any, List, Optional

from promptplanner import config as app_config
from promptplanner.llm_provider.base import (
    PlannerError,
    LLMError,
    LLMProviderError,
    UnsupportedProviderError,
    LLMProvider,
)

logger = logging.getLogger(__name__)


class ClaudeProvider(LLMProvider):
    """Anthropic Messages API provider implementation."""

    name = "claude"
    display_name = "Claude (Anthropic)"
    default_endpoint = "https://api.anthropic.com/v1/messages"
    models = [
        "claude-3-sonnet-20240229",
        "claude-3-opus-20240229",
        "claude-3-haiku-20240307",
    ]
    default_model = "claude-3-sonnet-20240229"

    def build_headers(self, api_key: str) -> Dict[str, str]:
        return {
            "x-api-key": api_key,
            "anthropic-version": app_config.ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }

    def build_payload(self, model: str, messages: List[Dict[str, Any]]) -> Dict[str, Any]:
        return {
            "model": model,
            "max_tokens": self.max_tokens,
            "messages": messages,
        }

    def extract_response(self, response_data: Dict[str, Any]) -> str:
        self.validate_response(response_data)
        content = response_data.get("content") or []
        try:
            text = content[0].get("text") or ""
        except (IndexError, AttributeError, TypeError):
            text = ""
        if not text.strip():
            raise LLMProviderError("No text content in response", self.name, response=response_data)
        return text.strip()


class OpenAICompatibleProvider(LLMProvider):
    """Chat Completions provider; OpenAI, xAI, DeepSeek and custom endpoints share this shape."""

    name = "openai"
    display_name = "OpenAI"
    default_endpoint = "https://api.openai.com/v1/chat/completions"
    models = [
        "gpt-4-turbo-preview",
        "gpt-4",
        "gpt-3.5-turbo",
        "gpt-4o",
    ]
    default_model = "gpt-4-turbo-preview"

    def build_payload(self, model: str, messages: List[Dict[str, Any]]) -> Dict[str, Any]:
        return {
            "model": model,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    def extract_response(self, response_data: Dict[str, Any]) -> str:
        self.validate_response(response_data)
        try:
            text = response_data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise LLMProviderError(
                f"Invalid response format: missing {e}",
                self.name,
                response=response_data
            )
        if not text.strip():
            raise LLMProviderError("Empty message content", self.name, response=response_data)
        return text.strip()


class XAIProvider(OpenAICompatibleProvider):
    name = "xai"
    display_name = "xAI (Grok)"
    default_endpoint = "https://api.x.ai/v1/chat/completions"
    models = [
        "grok-4-0709",
        "grok-3",
        "grok-3-latest",
    ]
    default_model = "grok-3"


class DeepSeekProvider(OpenAICompatibleProvider):
    name = "deepseek"
    display_name = "DeepSeek"
    default_endpoint = "https://api.deepseek.com/v1/chat/completions"
    models = [
        "deepseek-chat",
        "deepseek-coder",
    ]
    default_model = "deepseek-chat"


class CustomProvider(OpenAICompatibleProvider):
    """User-supplied OpenAI-compatible endpoint."""

    name = "custom"
    display_name = "Custom API"
    default_endpoint = ""
    models: List[str] = []
    default_model = ""


PROVIDERS = {
    "claude": ClaudeProvider,
    "openai": OpenAICompatibleProvider,
    "xai": XAIProvider,
    "deepseek": DeepSeekProvider,
}

# Selectable in the planner UI; "custom" has no relay dispatch entry of its own.
CATALOGUE = dict(PROVIDERS, custom=CustomProvider)


def list_providers() -> List[str]:
    """Names of the providers the relay can dispatch without a custom endpoint."""
    return list(PROVIDERS)


def provider_catalogue() -> Dict[str, Dict[str, Any]]:
    """Display name, endpoint and model list for every selectable provider."""
    return {name: provider_cls().describe() for name, provider_cls in CATALOGUE.items()}


def get_llm_provider(name: str, endpoint: Optional[str] = None, **kwargs) -> LLMProvider:
    """Get LLM provider instance by name.

    A custom endpoint overrides the provider's own endpoint. Names with no
    adapter fall back to the OpenAI-compatible shape when an endpoint is given.
    """
    kwargs.setdefault("max_tokens", app_config.MAX_TOKENS)
    kwargs.setdefault("temperature", app_config.TEMPERATURE)

    key = (name or "").strip().lower()
    provider_cls = CATALOGUE.get(key)
    if provider_cls is None or (provider_cls is CustomProvider and not endpoint):
        if not endpoint:
            raise UnsupportedProviderError(name)
        logger.debug(f"No adapter for '{name}', using OpenAI-compatible shape for {endpoint}")
        provider_cls = CustomProvider

    return provider_cls(endpoint, **kwargs)


__all__ = [
    "PlannerError",
    "LLMError",
    "LLMProviderError",
    "UnsupportedProviderError",
    "LLMProvider",
    "ClaudeProvider",
    "OpenAICompatibleProvider",
    "XAIProvider",
    "DeepSeekProvider",
    "CustomProvider",
    "PROVIDERS",
    "CATALOGUE",
    "list_providers",
    "provider_catalogue",
    "get_llm_provider",
]
