"""Chat-completions adapter shared by OpenAI and DeepSeek."""

from typing import Any

from ai_proxy.normalizer import ResolvedRequest

from .base import HttpClientFactory, OutboundRequest, ProviderResponse, invoke_adapter


class ChatCompletionsAdapter:
    def __init__(self, client_factory: HttpClientFactory) -> None:
        self._client_factory = client_factory

    def build_request(self, request: ResolvedRequest) -> OutboundRequest:
        settings = request.settings
        messages: list[dict[str, str]] = []
        if request.system:
            messages.append({"role": "system", "content": request.system})
        messages.append({"role": "user", "content": request.message})

        payload: dict[str, Any] = {"model": request.model, "messages": messages}
        if settings.max_tokens is not None:
            payload["max_tokens"] = settings.max_tokens

        return OutboundRequest(
            url=settings.url_for(request.model),
            payload=payload,
            headers={"Authorization": f"Bearer {request.api_key}"},
        )

    def extract_text(self, body: Any) -> str:
        if not isinstance(body, dict):
            return ""
        choices = body.get("choices")
        if not isinstance(choices, list) or not choices:
            return ""
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        return content if isinstance(content, str) else ""

    def call(self, request: ResolvedRequest) -> ProviderResponse:
        return invoke_adapter(self, request, self._client_factory)
