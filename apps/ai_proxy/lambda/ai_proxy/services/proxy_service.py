"""Application service for proxy requests."""

import logging

from ai_proxy.normalizer import RequestNormalizer
from ai_proxy.orchestration.base import ProxyOrchestrator
from ai_proxy.schemas import ProxyResponse

logger = logging.getLogger(__name__)


class ProxyService:
    def __init__(self, normalizer: RequestNormalizer, orchestrator: ProxyOrchestrator) -> None:
        self._normalizer = normalizer
        self._orchestrator = orchestrator

    def handle(self, body: bytes | str) -> ProxyResponse:
        request = self._normalizer.normalize(body)
        logger.info(
            "Proxy request received",
            extra={
                "provider": request.provider,
                "model": request.model,
                "message_length": len(request.message),
                "has_system_prompt": request.system is not None,
                "api_key_overridden": request.api_key_overridden,
            },
        )

        response = self._orchestrator.run(request)
        return ProxyResponse(
            text=response.text,
            provider=response.provider,
            model=response.model,
            raw=response.raw,
        )
