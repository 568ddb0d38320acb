"""Shared constants and literal types for the AI proxy Lambda."""

import re
from typing import Literal

AWS_REGION = "ap-northeast-1"
LANGSMITH_API_KEY_PARAMETER_NAME = "/ai-proxy/langsmith-api-key"
LANGSMITH_PROJECT = "ai-proxy"
DEFAULT_PROVIDER = "openai"
DEEPSEEK_MAX_TOKENS = 1500
RAW_TEXT_KEY = "rawText"
MODEL_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._:-]*$")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

Provider = Literal["openai", "gemini", "deepseek"]
ProviderFamily = Literal["chat_completions", "generate_content"]
OrchestratorName = Literal["direct", "langgraph"]
