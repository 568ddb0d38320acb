"""AI proxy backend using FastAPI + Mangum for AWS Lambda."""

import logging
from collections.abc import Awaitable, Callable
from functools import lru_cache

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from mangum import Mangum
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from ai_proxy.constants import CORS_HEADERS
from ai_proxy.errors import BadRequestError, ProviderError
from ai_proxy.infra.runtime import (
    create_http_client,
    ensure_langsmith_configured,
    flush_langsmith_traces,
    get_api_credentials,
    get_default_system_prompt,
    get_orchestrator_name,
)
from ai_proxy.normalizer import RequestNormalizer
from ai_proxy.orchestration.base import ProxyOrchestrator
from ai_proxy.orchestration.direct import DirectProxyOrchestrator
from ai_proxy.orchestration.langgraph_flow import LangGraphProxyOrchestrator
from ai_proxy.provider_registry import PROVIDER_SETTINGS
from ai_proxy.providers.base import HttpClientFactory, ProviderAdapter
from ai_proxy.providers.chat_completions import ChatCompletionsAdapter
from ai_proxy.providers.generate_content import GenerateContentAdapter
from ai_proxy.schemas import ErrorResponse, ProviderMetadata, ProxyResponse
from ai_proxy.services.proxy_service import ProxyService

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

app = FastAPI()
router = APIRouter(prefix="/api")

ADAPTER_FAMILIES: dict[str, Callable[[HttpClientFactory], ProviderAdapter]] = {
    "chat_completions": ChatCompletionsAdapter,
    "generate_content": GenerateContentAdapter,
}


def build_provider_adapters(client_factory: HttpClientFactory) -> dict[str, ProviderAdapter]:
    return {
        provider: ADAPTER_FAMILIES[settings.family](client_factory)
        for provider, settings in PROVIDER_SETTINGS.items()
    }


@lru_cache(maxsize=1)
def get_proxy_service() -> ProxyService:
    credentials = get_api_credentials()
    adapters = build_provider_adapters(create_http_client)
    orchestrator: ProxyOrchestrator
    if get_orchestrator_name() == "langgraph":
        orchestrator = LangGraphProxyOrchestrator(adapters=adapters)
    else:
        orchestrator = DirectProxyOrchestrator(adapters=adapters)
    normalizer = RequestNormalizer(
        default_api_keys=credentials.provider_api_keys,
        default_system_prompt=get_default_system_prompt(),
    )
    return ProxyService(normalizer=normalizer, orchestrator=orchestrator)


def _error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    content = ErrorResponse(error=error, detail=detail).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=content)


@app.middleware("http")
async def add_cors_headers(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=exc.headers,
    )


@router.options("/ai-proxy")
def ai_proxy_preflight() -> Response:
    """Answer CORS pre-flight requests."""
    return Response(status_code=200)


@router.post("/ai-proxy", response_model=ProxyResponse)
async def ai_proxy(request: Request) -> ProxyResponse | JSONResponse:
    """Forward one chat message to the selected provider and return normalized text."""
    body = await request.body()
    try:
        ensure_langsmith_configured()
        return await run_in_threadpool(get_proxy_service().handle, body)
    except BadRequestError as e:
        logger.info("Proxy request rejected", extra={"reason": str(e)})
        return _error_response(400, str(e))
    except ProviderError as e:
        return _error_response(500, "Provider request failed", e.describe())
    except Exception as e:
        logger.exception("Proxy request failed")
        return _error_response(500, "Internal server error", str(e))
    finally:
        flush_langsmith_traces()


@router.get("/providers", response_model=list[ProviderMetadata])
def list_providers() -> list[ProviderMetadata] | JSONResponse:
    """Return supported providers and their defaults."""
    try:
        credentials = get_api_credentials()
    except Exception as e:
        logger.exception("Provider listing failed")
        return _error_response(500, "Internal server error", str(e))
    return [
        ProviderMetadata(
            id=provider,
            default_model=settings.default_model,
            max_tokens=settings.max_tokens,
            has_default_key=bool(credentials.default_key_for(provider)),
        )
        for provider, settings in PROVIDER_SETTINGS.items()
    ]


@router.get("/health")
def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


app.include_router(router)


handler = Mangum(app)
