"""Orchestration interfaces for proxy execution."""

from typing import Protocol

from ai_proxy.normalizer import ResolvedRequest
from ai_proxy.providers.base import ProviderResponse


class ProxyOrchestrator(Protocol):
    def run(self, request: ResolvedRequest) -> ProviderResponse:
        """Dispatch the resolved request using the selected orchestration strategy."""
