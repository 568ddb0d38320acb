"""Request normalization: parsing, defaults, and credential resolution."""

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from .errors import BadRequestError
from .provider_registry import PROVIDER_SETTINGS, ProviderSettings
from .schemas import ChatRequest


@dataclass(frozen=True)
class ResolvedRequest:
    provider: str
    model: str
    system: str | None
    message: str
    api_key: str
    api_key_overridden: bool = False

    @property
    def settings(self) -> ProviderSettings:
        return PROVIDER_SETTINGS[self.provider]  # type: ignore[index]

    def __repr__(self) -> str:
        return (
            f"ResolvedRequest(provider={self.provider!r}, model={self.model!r}, "
            f"system={self.system!r}, message_length={len(self.message)}, api_key=***)"
        )


def _describe_validation_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    ctx_error = error.get("ctx", {}).get("error")
    if isinstance(ctx_error, ValueError):
        return str(ctx_error)
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}" if location else error["msg"]


def parse_payload(body: bytes | str) -> dict[str, Any]:
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise BadRequestError("Request body must be UTF-8 encoded JSON") from e
    if not body.strip():
        raise BadRequestError("Request body is required")
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise BadRequestError("Request body is not valid JSON") from e
    if not isinstance(payload, dict):
        raise BadRequestError("Request body must be a JSON object")
    return payload


class RequestNormalizer:
    def __init__(
        self,
        default_api_keys: Mapping[str, str | None],
        default_system_prompt: str | None = None,
    ) -> None:
        self._default_api_keys = default_api_keys
        self._default_system_prompt = default_system_prompt

    def resolve_api_key(self, provider: str, override: str | None) -> tuple[str, bool]:
        """Pick the per-request key when given, else the configured default."""
        if override:
            return override, True
        default_key = self._default_api_keys.get(provider)
        if not default_key:
            raise BadRequestError(f"No API key configured for provider: {provider}")
        return default_key, False

    def normalize(self, body: bytes | str) -> ResolvedRequest:
        payload = parse_payload(body)
        try:
            request = ChatRequest.model_validate(payload)
        except ValidationError as e:
            raise BadRequestError(_describe_validation_error(e)) from e

        settings = PROVIDER_SETTINGS[request.provider]  # type: ignore[index]
        api_key, overridden = self.resolve_api_key(request.provider, request.api_key)
        return ResolvedRequest(
            provider=request.provider,
            model=request.model or settings.default_model,
            system=request.system or self._default_system_prompt,
            message=request.message,
            api_key=api_key,
            api_key_overridden=overridden,
        )
