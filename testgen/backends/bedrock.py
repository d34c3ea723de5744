"""SigV4-signed model invocation backend (AWS Bedrock runtime)."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Callable, Dict, Optional

from .base import AIBackend, BackendAuthMissing, BackendResponseError, Transport, decode_json, first_env_value
from .sigv4 import sign


def _utcnow() -> datetime:
    return datetime.now(UTC)


class BedrockBackend(AIBackend):
    """Invokes an Anthropic model hosted on Bedrock, signing each request."""

    name = "Bedrock"

    DEFAULT_MODEL = "anthropic.claude-3-sonnet-20240229-v1:0"
    DEFAULT_REGION = "us-east-1"
    ANTHROPIC_VERSION = "bedrock-2023-05-31"
    CONTENT_TYPE = "application/json"
    ENV_ACCESS_KEY_KEYS = ("AWS_ACCESS_KEY_ID",)
    ENV_SECRET_KEY_KEYS = ("AWS_SECRET_ACCESS_KEY",)
    ENV_REGION_KEYS = ("AWS_REGION", "AWS_DEFAULT_REGION")

    def __init__(
        self,
        access_key_id: str | None = None,
        secret_key: str | None = None,
        *,
        region: str | None = None,
        model: str | None = None,
        runtime_service: str = "bedrock-runtime",
        signing_service: str = "bedrock",
        max_tokens: int = 4000,
        request_timeout: float = 60.0,
        transport: Transport | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__(transport=transport, request_timeout=request_timeout)
        self.access_key_id = _clean(access_key_id) or first_env_value(self.ENV_ACCESS_KEY_KEYS)
        self.secret_key = _clean(secret_key) or first_env_value(self.ENV_SECRET_KEY_KEYS)
        self.region = _clean(region) or first_env_value(self.ENV_REGION_KEYS) or self.DEFAULT_REGION
        self.model = model or self.DEFAULT_MODEL
        self.runtime_service = runtime_service
        self.signing_service = signing_service
        self.max_tokens = max_tokens
        self._clock = clock or _utcnow

    @property
    def host(self) -> str:
        return f"{self.runtime_service}.{self.region}.amazonaws.com"

    @property
    def uri(self) -> str:
        return f"/model/{self.model}/invoke"

    def build_payload(self, prompt: str) -> Dict[str, object]:
        return {
            "anthropic_version": self.ANTHROPIC_VERSION,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

    def _invoke(self, prompt: str) -> str:
        if not self.access_key_id or not self.secret_key:
            raise BackendAuthMissing(
                "AWS credentials not properly configured; set aiProvider.awsAccessKeyId and aiProvider.awsSecretKey"
            )

        body = json.dumps(self.build_payload(prompt))
        context = sign(
            uri=self.uri,
            host=self.host,
            region=self.region,
            service=self.signing_service,
            secret_key=self.secret_key,
            access_key_id=self.access_key_id,
            payload=body,
            timestamp=self._clock(),
            content_type=self.CONTENT_TYPE,
        )
        headers = {"Content-Type": self.CONTENT_TYPE, **context.headers()}
        response = self._post(f"https://{self.host}{self.uri}", body.encode("utf-8"), headers)
        content = self._extract_content(decode_json(response.body, self.name))
        if content is None:
            raise BackendResponseError("Bedrock API response had neither 'completion' nor 'content[0].text'")
        return content

    @staticmethod
    def _extract_content(payload: Dict[str, object]) -> Optional[str]:
        completion = payload.get("completion")
        if isinstance(completion, str):
            return completion
        content = payload.get("content")
        if isinstance(content, list) and content:
            first = content[0]
            if isinstance(first, dict) and isinstance(first.get("text"), str):
                return first["text"]
        return None


def _clean(value: str | None) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


__all__ = ["BedrockBackend"]
