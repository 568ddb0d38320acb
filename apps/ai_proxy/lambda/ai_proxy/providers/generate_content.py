"""Gemini generate-content adapter."""

from typing import Any

from ai_proxy.normalizer import ResolvedRequest

from .base import HttpClientFactory, OutboundRequest, ProviderResponse, invoke_adapter


class GenerateContentAdapter:
    def __init__(self, client_factory: HttpClientFactory) -> None:
        self._client_factory = client_factory

    def build_request(self, request: ResolvedRequest) -> OutboundRequest:
        settings = request.settings
        contents: list[dict[str, Any]] = []
        if request.system:
            contents.append({"role": "system", "parts": [{"text": request.system}]})
        contents.append({"role": "user", "parts": [{"text": request.message}]})

        payload: dict[str, Any] = {"contents": contents}
        if settings.max_tokens is not None:
            payload["generationConfig"] = {"maxOutputTokens": settings.max_tokens}

        # Gemini takes the key in the query string, never in a header.
        return OutboundRequest(
            url=settings.url_for(request.model),
            payload=payload,
            params={"key": request.api_key},
        )

    def extract_text(self, body: Any) -> str:
        if not isinstance(body, dict):
            return ""
        candidates = body.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return ""
        first = candidates[0]
        content = first.get("content") if isinstance(first, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return ""
        return "".join(
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )

    def call(self, request: ResolvedRequest) -> ProviderResponse:
        return invoke_adapter(self, request, self._client_factory)
