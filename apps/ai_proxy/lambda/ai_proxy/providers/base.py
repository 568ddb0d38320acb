"""Provider interfaces, shared response model, and the outbound call path."""

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx
from langsmith import traceable

from ai_proxy.constants import RAW_TEXT_KEY
from ai_proxy.errors import ProviderError
from ai_proxy.normalizer import ResolvedRequest

logger = logging.getLogger(__name__)

HttpClientFactory = Callable[[], httpx.Client]


@dataclass(frozen=True)
class ProviderResponse:
    text: str
    provider: str
    model: str
    raw: Any


@dataclass(frozen=True)
class OutboundRequest:
    url: str
    payload: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, str] = field(default_factory=dict)


class ProviderAdapter(Protocol):
    def build_request(self, request: ResolvedRequest) -> OutboundRequest:
        """Shape a resolved request into the provider's wire format."""
        ...

    def extract_text(self, body: Any) -> str:
        """Pull the plain-text answer out of a decoded provider body."""
        ...

    def call(self, request: ResolvedRequest) -> ProviderResponse:
        """Issue one outbound call and normalize the result."""
        ...


def decode_body(text: str) -> Any:
    """Parse a response body as JSON, wrapping undecodable text instead of raising."""
    try:
        return json.loads(text)
    except ValueError:
        return {RAW_TEXT_KEY: text}


def _redact_inputs(inputs: dict[str, Any]) -> dict[str, Any]:
    outbound = inputs.get("outbound")
    if not isinstance(outbound, OutboundRequest):
        return {}
    return {"url": outbound.url, "payload": outbound.payload}


def _summarize_outputs(outputs: Any) -> dict[str, Any]:
    if isinstance(outputs, dict):
        outputs = outputs.get("output")
    if not isinstance(outputs, httpx.Response):
        return {}
    return {"status_code": outputs.status_code, "response_length": len(outputs.text)}


@traceable(
    run_type="llm",
    name="ai_proxy.provider_call",
    process_inputs=_redact_inputs,
    process_outputs=_summarize_outputs,
)
def _post(client: httpx.Client, outbound: OutboundRequest) -> httpx.Response:
    return client.post(
        outbound.url,
        json=outbound.payload,
        headers={"Content-Type": "application/json", **outbound.headers},
        params=outbound.params or None,
    )


def invoke_adapter(
    adapter: ProviderAdapter,
    request: ResolvedRequest,
    client_factory: HttpClientFactory,
) -> ProviderResponse:
    """Run one request/response cycle against the adapter's provider."""
    outbound = adapter.build_request(request)

    start = time.time()
    try:
        with client_factory() as client:
            response = _post(client, outbound)
            body_text = response.text
    except httpx.HTTPError as e:
        logger.warning(
            "Provider request failed",
            extra={"provider": request.provider, "model": request.model, "error": str(e)},
        )
        raise ProviderError(request.provider, None, str(e)) from e
    duration_ms = int((time.time() - start) * 1000)

    body = decode_body(body_text)
    if not response.is_success:
        logger.warning(
            "Provider request failed",
            extra={
                "provider": request.provider,
                "model": request.model,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        raise ProviderError(request.provider, response.status_code, body)

    text = adapter.extract_text(body)
    logger.info(
        "Provider response received",
        extra={
            "provider": request.provider,
            "model": request.model,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
            "response_length": len(text),
        },
    )
    return ProviderResponse(text=text, provider=request.provider, model=request.model, raw=body)
