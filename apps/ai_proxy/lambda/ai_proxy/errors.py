"""Domain-level exceptions for the AI proxy."""

import json
from typing import Any


class BadRequestError(ValueError):
    """Raised for client-side invalid requests at the domain layer."""


class ProviderError(RuntimeError):
    """Raised when an upstream provider call fails or returns a non-success status."""

    def __init__(self, provider: str, status_code: int | None, body: Any) -> None:
        self.provider = provider
        self.status_code = status_code
        self.body = body
        super().__init__(self.describe())

    def describe(self) -> str:
        if self.status_code is None:
            return f"{self.provider} request failed: {self.body}"
        return (
            f"{self.provider} responded with HTTP {self.status_code}: "
            f"{json.dumps(self.body, ensure_ascii=False, default=str)}"
        )
