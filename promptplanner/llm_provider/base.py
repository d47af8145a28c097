"""Base adapter and error types for LLM providers."""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional


class PlannerError(Exception):
    """Base exception for planner errors."""
    pass


class LLMError(PlannerError):
    """Base exception for LLM-related errors."""
    pass


class LLMProviderError(LLMError):
    """Exception raised for provider-specific errors."""
    def __init__(self, message: str, provider: str, status_code: Optional[int] = None, response: Optional[Dict] = None):
        self.provider = provider
        self.status_code = status_code
        self.response = response
        super().__init__(f"{provider} error: {message} (status={status_code})")


class UnsupportedProviderError(LLMError):
    """Raised when a provider name has no adapter and no endpoint to fall back on."""
    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"Unsupported provider: {provider}")


class LLMProvider(ABC):
    """Request/response adapter for one vendor API."""

    name = "base"
    display_name = "Base"
    default_endpoint = ""
    models: List[str] = []
    default_model = ""

    def __init__(self, endpoint: Optional[str] = None, max_tokens: int = 4000, temperature: float = 0.1):
        self.endpoint = endpoint or self.default_endpoint
        self.max_tokens = max_tokens
        self.temperature = temperature

    @abstractmethod
    def build_payload(self, model: str, messages: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Build the API request payload."""
        pass

    @abstractmethod
    def extract_response(self, response_data: Dict[str, Any]) -> str:
        """Extract the response text from API response."""
        pass

    def build_headers(self, api_key: str) -> Dict[str, str]:
        """Build the auth headers for a request."""
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def validate_response(self, response_data: Dict[str, Any]) -> None:
        """Validate the API response and raise appropriate errors."""
        if not isinstance(response_data, dict):
            raise LLMProviderError("Response is not a JSON object", self.name, response=None)
        if response_data.get("error"):
            error = response_data["error"]
            message = error.get("message", "Unknown error") if isinstance(error, dict) else str(error)
            raise LLMProviderError(message, self.name, response=response_data)

    def describe(self) -> Dict[str, Any]:
        """Catalogue entry used by the UI and the relay's provider listing."""
        return {
            "name": self.display_name,
            "endpoint": self.endpoint,
            "models": list(self.models),
            "defaultModel": self.default_model,
        }
