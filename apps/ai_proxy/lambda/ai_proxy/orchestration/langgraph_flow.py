"""LangGraph-based orchestration strategy for proxy execution."""

from collections.abc import Mapping
from typing import NotRequired, TypedDict, cast

from langgraph.graph import END, START, StateGraph

from ai_proxy.normalizer import ResolvedRequest
from ai_proxy.providers.base import ProviderAdapter, ProviderResponse

from .base import ProxyOrchestrator


class ProxyGraphState(TypedDict):
    request: ResolvedRequest
    response: NotRequired[ProviderResponse]


class LangGraphProxyOrchestrator(ProxyOrchestrator):
    def __init__(self, adapters: Mapping[str, ProviderAdapter]) -> None:
        self._adapters = adapters
        graph = StateGraph(ProxyGraphState)
        graph.add_node("call_provider", self._call_provider)
        graph.add_edge(START, "call_provider")
        graph.add_edge("call_provider", END)
        self._graph = graph.compile()

    def _call_provider(self, state: ProxyGraphState) -> dict[str, ProviderResponse]:
        request = state["request"]
        adapter = self._adapters.get(request.provider)
        if adapter is None:
            raise RuntimeError(f"Unsupported provider: {request.provider}")
        return {"response": adapter.call(request)}

    def run(self, request: ResolvedRequest) -> ProviderResponse:
        initial_state: ProxyGraphState = {"request": request}
        result = cast("ProxyGraphState", self._graph.invoke(initial_state))
        response = result.get("response")
        if response is None:
            raise RuntimeError("LangGraph execution did not return a provider response")
        return response
