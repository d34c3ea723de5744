"""Bearer-token chat completions backend (OpenAI API)."""

from __future__ import annotations

import json
from typing import Dict, Optional

from ..config import API_KEY_PLACEHOLDER
from .base import AIBackend, BackendAuthMissing, BackendResponseError, Transport, decode_json, first_env_value


class OpenAIBackend(AIBackend):
    """Calls ``/chat/completions`` with a bearer token."""

    name = "OpenAI"

    DEFAULT_MODEL = "gpt-4"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    ENV_API_KEY_KEYS = ("TESTGEN_API_KEY", "OPENAI_API_KEY")

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        base_url: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 4000,
        request_timeout: float = 60.0,
        transport: Transport | None = None,
    ) -> None:
        super().__init__(transport=transport, request_timeout=request_timeout)
        self.api_key = self._resolve_api_key(api_key)
        self.model = model or self.DEFAULT_MODEL
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def build_payload(self, prompt: str) -> Dict[str, object]:
        return {
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

    def _invoke(self, prompt: str) -> str:
        if not self.api_key:
            raise BackendAuthMissing("OpenAI API key not properly configured; set aiProvider.apiKey")

        body = json.dumps(self.build_payload(prompt)).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        response = self._post(self.endpoint, body, headers)
        content = self._extract_content(decode_json(response.body, self.name))
        if content is None:
            raise BackendResponseError("OpenAI API response did not contain choices[0].message.content")
        return content

    @staticmethod
    def _extract_content(payload: Dict[str, object]) -> Optional[str]:
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            return None
        first = choices[0]
        if not isinstance(first, dict):
            return None
        message = first.get("message")
        if isinstance(message, dict):
            content = message.get("content")
            if isinstance(content, str):
                return content
        return None

    def _resolve_api_key(self, api_key: str | None) -> Optional[str]:
        if api_key and api_key.strip() and api_key.strip() != API_KEY_PLACEHOLDER:
            return api_key.strip()
        return first_env_value(self.ENV_API_KEY_KEYS)


__all__ = ["OpenAIBackend"]
