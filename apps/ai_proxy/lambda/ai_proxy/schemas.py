"""Pydantic schemas for the AI proxy API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import DEFAULT_PROVIDER, MODEL_NAME_PATTERN
from .provider_registry import SUPPORTED_PROVIDERS


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    provider: str = DEFAULT_PROVIDER
    model: str | None = None
    system: str | None = None
    message: str = Field(default="", validate_default=True)
    api_key: str | None = Field(default=None, alias="apiKey")

    @field_validator("provider", mode="before")
    @classmethod
    def validate_provider(cls, provider: Any) -> Any:
        if provider is None:
            return DEFAULT_PROVIDER
        if not isinstance(provider, str):
            return provider
        normalized = provider.strip().lower()
        if not normalized:
            return DEFAULT_PROVIDER
        if normalized not in SUPPORTED_PROVIDERS:
            supported = ", ".join(sorted(SUPPORTED_PROVIDERS))
            raise ValueError(f"Unsupported provider: {provider}. Supported providers: {supported}")
        return normalized

    @field_validator("message", mode="before")
    @classmethod
    def validate_message(cls, message: Any) -> Any:
        if message is None or (isinstance(message, str) and not message.strip()):
            raise ValueError("message is required")
        return message

    @field_validator("model", "system", "api_key")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("model")
    @classmethod
    def validate_model(cls, model: str | None) -> str | None:
        if model is not None and not MODEL_NAME_PATTERN.fullmatch(model):
            raise ValueError(f"Unsupported model name: {model}")
        return model


class ProxyResponse(BaseModel):
    text: str
    provider: str
    model: str
    raw: Any


class ErrorResponse(BaseModel):
    error: str
    detail: str | None = None


class ProviderMetadata(BaseModel):
    id: str
    default_model: str = Field(serialization_alias="defaultModel")
    max_tokens: int | None = Field(default=None, serialization_alias="maxTokens")
    has_default_key: bool = Field(serialization_alias="hasDefaultKey")
