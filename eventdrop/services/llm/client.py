from __future__ import annotations

import base64
import logging
from typing import Any, Protocol

from openai import APIConnectionError, APIError, APIStatusError, OpenAI

from eventdrop.config import settings
from eventdrop.core.env import is_model_configured
from eventdrop.core.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

MODEL_NAME = "gpt-4o-mini"
REQUEST_TIMEOUT_S = 60.0

ContentPart = dict[str, Any]


class ModelGateway(Protocol):
    def complete(self, content: str | list[ContentPart]) -> str:
        ...


class OpenAIModelGateway(ModelGateway):
    """Chat-completions gateway for any OpenAI-compatible endpoint."""

    def __init__(self, client: OpenAI | None = None, model: str | None = None) -> None:
        if client is None:
            if not is_model_configured(settings.OPENAI_API_KEY):
                raise EnvironmentError("OPENAI_API_KEY is not set")
            client = OpenAI(
                api_key=settings.OPENAI_API_KEY,
                base_url=settings.MODEL_BASE_URL or None,
                timeout=REQUEST_TIMEOUT_S,
                max_retries=1,
            )
        self._client = client
        self.model = model or settings.MODEL_NAME or MODEL_NAME

    def complete(self, content: str | list[ContentPart]) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": content}],
            )
        except APIStatusError as exc:
            logger.error("Model gateway error status=%s body=%s", exc.status_code, _truncate(exc.message))
            raise UpstreamUnavailable(_status_message(exc.status_code), upstream_status=exc.status_code) from exc
        except APIConnectionError as exc:
            logger.error("Model gateway unreachable: %s", exc)
            raise UpstreamUnavailable() from exc
        except APIError as exc:
            logger.error("Model gateway returned an unusable response: %s", _truncate(exc))
            raise UpstreamUnavailable() from exc

        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""
        return choices[0].message.content or ""


def build_gateway() -> ModelGateway | None:
    """Return the configured gateway, or None when no credential is set."""
    if not is_model_configured(settings.OPENAI_API_KEY):
        logger.warning("Model gateway credential missing; extraction will use placeholders")
        return None
    return OpenAIModelGateway()


def image_part(url: str) -> ContentPart:
    return {"type": "image_url", "image_url": {"url": url}}


def image_data_url(data: bytes, mime_type: str = "image/jpeg") -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def _status_message(status: int) -> str:
    if status == 429:
        return "Service is busy. Please try again in a moment."
    return "Service temporarily unavailable."


def _truncate(text: Any, limit: int = 200) -> str:
    value = str(text)
    if len(value) > limit:
        return f"{value[:limit]}..."
    return value
