"""Direct adapter dispatch orchestration."""

from collections.abc import Mapping

from ai_proxy.normalizer import ResolvedRequest
from ai_proxy.orchestration.base import ProxyOrchestrator
from ai_proxy.providers.base import ProviderAdapter, ProviderResponse


class DirectProxyOrchestrator(ProxyOrchestrator):
    def __init__(self, adapters: Mapping[str, ProviderAdapter]) -> None:
        self._adapters = adapters

    def run(self, request: ResolvedRequest) -> ProviderResponse:
        adapter = self._adapters.get(request.provider)
        if adapter is None:
            raise RuntimeError(f"Unsupported provider: {request.provider}")
        return adapter.call(request)
