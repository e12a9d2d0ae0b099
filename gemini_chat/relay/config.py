"""Relay configuration with environment variable loading.

Pydantic-based configuration for the Gemini relay. The API key is a
server-held secret and is resolved on every request, so a missing key
fails the request instead of falling back to a default.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.0-flash-exp"


class RelayConfigError(Exception):
    """Raised when the relay cannot be configured from the environment."""

    pass


class RelayConfig(BaseModel):
    """Configuration for the Gemini relay.

    Attributes:
        api_key: Gemini API key, sent as the ``key`` query parameter.
        base_url: Generative Language API base URL.
        model_name: Model identifier to use.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        max_output_tokens: Maximum tokens in generated response.
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY", ""),
        validate_default=True,
        description="API key for the Gemini API",
    )
    base_url: str = Field(
        default_factory=lambda: os.getenv("GEMINI_BASE_URL") or DEFAULT_BASE_URL,
        validate_default=True,
        description="Generative Language API base URL",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("GEMINI_MODEL") or DEFAULT_MODEL,
        description="Model to use",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    max_output_tokens: int = Field(
        default=1000,
        ge=1,
        description="Maximum tokens in generated response",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("GEMINI_API_KEY not configured")
        return v.strip()

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def generate_url(self) -> str:
        """Full ``generateContent`` endpoint for the configured model."""
        return f"{self.base_url}/models/{self.model_name}:generateContent"


def get_relay_config() -> RelayConfig:
    """Create relay configuration from environment.

    Returns:
        Configured RelayConfig instance.

    Raises:
        RelayConfigError: If GEMINI_API_KEY is not set or a value is invalid.
    """
    try:
        return RelayConfig()
    except ValidationError as e:
        messages = [err["msg"].removeprefix("Value error, ") for err in e.errors()]
        raise RelayConfigError("; ".join(messages)) from e
