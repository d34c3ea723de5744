"""AI backend variants and the factory that selects one from configuration."""

from __future__ import annotations

from typing import Callable, Dict

from ..config import BackendSettings, ConfigError
from .base import (
    AIBackend,
    BackendAuthMissing,
    BackendError,
    BackendHTTPError,
    BackendResponseError,
    HttpRequest,
    HttpResponse,
    Transport,
    extract_code,
)
from .bedrock import BedrockBackend
from .openai import OpenAIBackend


def _build_openai(settings: BackendSettings, transport: Transport | None) -> AIBackend:
    kwargs: Dict[str, object] = {"request_timeout": settings.request_timeout, "transport": transport}
    if settings.model:
        kwargs["model"] = settings.model
    if settings.base_url:
        kwargs["base_url"] = settings.base_url
    return OpenAIBackend(settings.api_key, **kwargs)  # type: ignore[arg-type]


def _build_bedrock(settings: BackendSettings, transport: Transport | None) -> AIBackend:
    kwargs: Dict[str, object] = {"request_timeout": settings.request_timeout, "transport": transport}
    if settings.model:
        kwargs["model"] = settings.model
    if settings.region:
        kwargs["region"] = settings.region
    return BedrockBackend(settings.aws_access_key_id, settings.aws_secret_key, **kwargs)  # type: ignore[arg-type]


_BACKEND_FACTORIES: Dict[str, Callable[[BackendSettings, Transport | None], AIBackend]] = {
    "openai": _build_openai,
    "bedrock": _build_bedrock,
}


def create_backend(settings: BackendSettings, *, transport: Transport | None = None) -> AIBackend:
    """Instantiate the backend variant named by ``settings.type``."""
    factory = _BACKEND_FACTORIES.get(settings.type.lower())
    if factory is None:
        raise ConfigError(f"Unknown AI provider: {settings.type}")
    return factory(settings, transport)


__all__ = [
    "AIBackend",
    "BackendAuthMissing",
    "BackendError",
    "BackendHTTPError",
    "BackendResponseError",
    "BedrockBackend",
    "HttpRequest",
    "HttpResponse",
    "OpenAIBackend",
    "Transport",
    "create_backend",
    "extract_code",
]
