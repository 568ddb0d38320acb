"""Provider settings registry."""

from dataclasses import dataclass
from urllib.parse import quote

from .constants import DEEPSEEK_MAX_TOKENS, Provider, ProviderFamily


@dataclass(frozen=True)
class ProviderSettings:
    family: ProviderFamily
    endpoint: str
    default_model: str
    api_key_env_var: str
    api_key_parameter_name: str
    max_tokens: int | None = None

    def url_for(self, model: str) -> str:
        return self.endpoint.format(model=quote(model, safe=""))


PROVIDER_SETTINGS: dict[Provider, ProviderSettings] = {
    "openai": ProviderSettings(
        family="chat_completions",
        endpoint="https://api.openai.com/v1/chat/completions",
        default_model="gpt-4o-mini",
        api_key_env_var="OPENAI_API_KEY",
        api_key_parameter_name="/ai-proxy/openai-api-key",
    ),
    "gemini": ProviderSettings(
        family="generate_content",
        endpoint=(
            "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
        ),
        default_model="gemini-2.5-flash-lite",
        api_key_env_var="GEMINI_API_KEY",
        api_key_parameter_name="/ai-proxy/gemini-api-key",
    ),
    "deepseek": ProviderSettings(
        family="chat_completions",
        endpoint="https://api.deepseek.com/v1/chat/completions",
        default_model="deepseek-reasoner",
        api_key_env_var="DEEPSEEK_API_KEY",
        api_key_parameter_name="/ai-proxy/deepseek-api-key",
        max_tokens=DEEPSEEK_MAX_TOKENS,
    ),
}
SUPPORTED_PROVIDERS = set(PROVIDER_SETTINGS)
