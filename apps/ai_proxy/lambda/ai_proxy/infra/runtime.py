"""Runtime infrastructure helpers for credentials, tracing, and outbound HTTP."""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Any

import boto3
import httpx
from langsmith.run_trees import get_cached_client

from ai_proxy.constants import (
    AWS_REGION,
    LANGSMITH_API_KEY_PARAMETER_NAME,
    LANGSMITH_PROJECT,
    OrchestratorName,
)
from ai_proxy.provider_registry import PROVIDER_SETTINGS

logger = logging.getLogger(__name__)

SSM_ENABLED_ENV_VAR = "AI_PROXY_SSM_ENABLED"
DEFAULT_SYSTEM_PROMPT_ENV_VAR = "AI_PROXY_DEFAULT_SYSTEM_PROMPT"
ORCHESTRATOR_ENV_VAR = "AI_PROXY_ORCHESTRATOR"
HTTP_TIMEOUT_ENV_VAR = "AI_PROXY_HTTP_TIMEOUT_SECONDS"


@dataclass(frozen=True)
class ApiCredentials:
    provider_api_keys: Mapping[str, str | None] = field(
        default_factory=lambda: MappingProxyType({})
    )
    langsmith_api_key: str | None = None

    def default_key_for(self, provider: str) -> str | None:
        return self.provider_api_keys.get(provider)


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes"}


def _get_secure_parameter(ssm_client: Any, parameter_name: str) -> str:
    result = ssm_client.get_parameter(Name=parameter_name, WithDecryption=True)
    value = result["Parameter"].get("Value")
    if not value:
        raise RuntimeError(f"SSM parameter {parameter_name} has no value")
    return value


def _get_optional_secure_parameter(ssm_client: Any, parameter_name: str) -> str | None:
    try:
        return _get_secure_parameter(ssm_client, parameter_name)
    except Exception:
        logger.warning(
            "Optional SSM parameter is unavailable; disabling dependent feature",
            extra={"parameter_name": parameter_name},
            exc_info=True,
        )
        return None


def load_api_credentials(environ: Mapping[str, str], ssm_client: Any | None) -> ApiCredentials:
    """Resolve process-wide default keys, preferring the environment over SSM."""
    keys: dict[str, str | None] = {}
    for provider, settings in PROVIDER_SETTINGS.items():
        value = environ.get(settings.api_key_env_var, "").strip() or None
        if value is None and ssm_client is not None:
            value = _get_optional_secure_parameter(ssm_client, settings.api_key_parameter_name)
        keys[provider] = value

    langsmith_api_key = environ.get("LANGSMITH_API_KEY", "").strip() or None
    if langsmith_api_key is None and ssm_client is not None:
        langsmith_api_key = _get_optional_secure_parameter(
            ssm_client, LANGSMITH_API_KEY_PARAMETER_NAME
        )

    return ApiCredentials(
        provider_api_keys=MappingProxyType(keys),
        langsmith_api_key=langsmith_api_key,
    )


@lru_cache(maxsize=1)
def get_api_credentials() -> ApiCredentials:
    ssm_client = None
    if _env_flag(SSM_ENABLED_ENV_VAR):
        ssm_client = boto3.client("ssm", region_name=os.environ.get("AWS_REGION", AWS_REGION))
    credentials = load_api_credentials(os.environ, ssm_client)
    logger.info(
        "API credentials loaded",
        extra={
            "providers_with_default_key": sorted(
                provider for provider, key in credentials.provider_api_keys.items() if key
            ),
            "ssm_enabled": ssm_client is not None,
        },
    )
    return credentials


def get_default_system_prompt() -> str | None:
    return os.environ.get(DEFAULT_SYSTEM_PROMPT_ENV_VAR, "").strip() or None


def get_orchestrator_name() -> OrchestratorName:
    name = os.environ.get(ORCHESTRATOR_ENV_VAR, "direct").strip().lower()
    if name not in ("direct", "langgraph"):
        raise RuntimeError(f"Unsupported orchestrator: {name}")
    return name  # type: ignore[return-value]


def get_http_timeout() -> float | None:
    raw_value = os.environ.get(HTTP_TIMEOUT_ENV_VAR, "").strip()
    if not raw_value:
        return None
    return float(raw_value)


def create_http_client() -> httpx.Client:
    """Create a short-lived HTTP client for a single provider call."""
    return httpx.Client(timeout=get_http_timeout())


def _configure_langsmith(langsmith_api_key: str | None) -> None:
    if not langsmith_api_key:
        os.environ.pop("LANGSMITH_TRACING", None)
        logger.info("LangSmith tracing disabled because API key is unavailable")
        return

    os.environ["LANGSMITH_TRACING"] = "true"
    os.environ["LANGSMITH_API_KEY"] = langsmith_api_key
    os.environ.setdefault("LANGSMITH_PROJECT", LANGSMITH_PROJECT)


@lru_cache(maxsize=1)
def ensure_langsmith_configured() -> None:
    """Configure LangSmith environment variables (called once via lru_cache)."""
    credentials = get_api_credentials()
    _configure_langsmith(credentials.langsmith_api_key)


def flush_langsmith_traces() -> None:
    if os.environ.get("LANGSMITH_TRACING", "").lower() != "true":
        return
    if not os.environ.get("LANGSMITH_API_KEY"):
        return
    try:
        get_cached_client().flush()
    except Exception:
        logger.warning("Failed to flush LangSmith traces", exc_info=True)
