# worker/app/services/vision_openai.py
"""
OpenAI vision provider for image description + tagging.

Usage:
    from worker.app.services.vision_openai import VisionAnalyzer

    analyzer = VisionAnalyzer.from_settings(settings)
    result = analyzer.analyze(image_bytes, "image/png")

The analyzer owns one ``openai.OpenAI`` client. Build it once at startup and
pass it to whoever needs it; it is safe to share across worker threads.
"""
from __future__ import annotations

import base64
import logging
from typing import Any, Optional

import openai
from openai import OpenAI

from worker.app.config import Settings
from worker.app.errors import AuthError, ParseError, RemoteAPIError
from worker.app.models import AnalysisRequest, AnalysisResult
from worker.app.services.extract_json import extract_json

log = logging.getLogger(__name__)

# Static placeholder; nothing in the API response is scored.
CONFIDENCE_PLACEHOLDER = 95

_AUTH_ERRORS = (
    openai.AuthenticationError,
    openai.PermissionDeniedError,
    openai.BadRequestError,
)


def to_data_uri(image_bytes: bytes, mime_type: str) -> str:
    b64 = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{b64}"


def _is_auth_error(exc: openai.APIError) -> bool:
    if isinstance(exc, _AUTH_ERRORS):
        return True
    return getattr(exc, "type", None) == "invalid_request_error"


def _normalize(parsed: Any) -> AnalysisResult:
    if not isinstance(parsed, dict):
        raise ParseError(f"expected a JSON object, got {type(parsed).__name__}")
    tags = parsed.get("tags") or []
    if not isinstance(tags, list):
        tags = [tags]
    return AnalysisResult(
        description=str(parsed.get("description") or ""),
        tags=[str(t) for t in tags],
        confidence=CONFIDENCE_PLACEHOLDER,
    )


class VisionAnalyzer:
    def __init__(
        self,
        client: OpenAI,
        model: str = "gpt-4o",
        max_tokens: int = 500,
    ) -> None:
        self.client = client
        self.model = model
        self.max_tokens = max_tokens

    @classmethod
    def from_settings(
        cls, cfg: Settings, client: Optional[OpenAI] = None
    ) -> "VisionAnalyzer":
        if client is None:
            client = OpenAI(
                api_key=cfg.OPENAI_API_KEY,
                base_url=cfg.OPENAI_BASE_URL,
                max_retries=cfg.OPENAI_MAX_RETRIES,
                timeout=cfg.OPENAI_TIMEOUT_S,
            )
        return cls(client, model=cfg.OPENAI_MODEL, max_tokens=cfg.ANALYZE_MAX_TOKENS)

    def build_request(self, image_bytes: bytes, mime_type: str) -> AnalysisRequest:
        return AnalysisRequest(
            data_uri=to_data_uri(image_bytes, mime_type),
            model=self.model,
            max_tokens=self.max_tokens,
        )

    def complete(self, request: AnalysisRequest) -> str:
        """
        Send one chat completion and return the raw text content.

        Raises AuthError for credential/invalid-request rejections,
        RemoteAPIError for everything else the SDK raises (network, timeout,
        rate limit, 5xx) and ParseError when the reply carries no text.
        """
        try:
            response = self.client.chat.completions.create(
                model=request.model,
                messages=request.messages(),
                max_tokens=request.max_tokens,
            )
        except openai.APIError as e:
            log.error(
                f"[vision] API error: {type(e).__name__} "
                f"status={getattr(e, 'status_code', None)} "
                f"type={getattr(e, 'type', None)} message={e}"
            )
            if _is_auth_error(e):
                raise AuthError(str(e)) from e
            raise RemoteAPIError(str(e)) from e

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise ParseError("empty response content")
        return content

    def analyze(self, image_bytes: bytes, mime_type: str) -> AnalysisResult:
        request = self.build_request(image_bytes, mime_type)
        log.info(f"[vision] sending {len(image_bytes)} bytes ({mime_type}) to {self.model}")
        content = self.complete(request)
        log.info("[vision] received response")
        return _normalize(extract_json(content))

    def probe(self) -> bool:
        """One tiny completion to confirm the credential works."""
        try:
            self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": "Test connection"}],
                max_tokens=5,
            )
        except openai.APIError as e:
            log.error(f"[vision] connection test failed: {type(e).__name__}: {e}")
            return False
        log.info("[vision] connection test succeeded")
        return True
