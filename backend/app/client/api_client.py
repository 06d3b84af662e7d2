"""
SVG Holder — API Client
=========================

What:  Async HTTP client for the /api/svgs endpoints.
How:   httpx.AsyncClient with a base URL and timeout; every response body is
       validated against the envelope schemas in app.schemas.svg, so callers
       only ever see typed SvgResponse objects or an ApiError.

Failure mapping:
    network/timeout error     → ApiError(status_code=0)
    non-JSON or wrong shape   → MalformedResponseError
    success == false / 4xx-5xx → ApiError(status_code, server message)
"""

import logging
from typing import Any, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError as PydanticValidationError

from app.schemas.svg import (
    HealthEnvelope,
    StatusEnvelope,
    SvgEnvelope,
    SvgListEnvelope,
    SvgResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3001/api"
DEFAULT_TIMEOUT = 10.0
MAX_UPLOAD_BYTES = 5 * 1024 * 1024

EnvelopeT = TypeVar("EnvelopeT", bound=StatusEnvelope)


class ApiError(Exception):
    """A request failed; `message` is suitable for display."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{status_code}] {message}")


class MalformedResponseError(ApiError):
    """The server answered with something that is not a valid envelope."""


def check_svg_file(
    filename: Optional[str],
    content: Optional[bytes],
    content_type: Optional[str] = None,
    max_size: int = MAX_UPLOAD_BYTES,
) -> Optional[str]:
    """
    Client-side pre-check before uploading; returns an error message or None.

    Mirrors the server rules so obviously bad files never leave the client.
    The server still validates everything.
    """
    if not filename or content is None:
        return "No file selected"
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if media_type != "image/svg+xml" and not filename.lower().endswith(".svg"):
        return "Please select a valid SVG file"
    if len(content) > max_size:
        return f"File size must be less than {max_size // (1024 * 1024)}MB"
    if "<svg" not in content.decode("utf-8", errors="replace"):
        return "Invalid SVG content"
    return None


class SvgApiClient:
    """
    Typed client for the SVG Holder API.

    Example:
        async with SvgApiClient("http://localhost:3001/api") as api:
            records = await api.list_svgs()
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "SvgApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── Transport helpers ─────────────────────────────────────────────────

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, path, str(e))
            raise ApiError(0, f"Could not reach the server: {e}") from e

    @staticmethod
    def _parse(
        response: httpx.Response,
        model: Type[EnvelopeT],
        fallback_message: str,
    ) -> EnvelopeT:
        """Validate the body against `model`; raise ApiError on failure envelopes."""
        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError(response.status_code, "Response is not JSON") from e

        if response.is_error or (isinstance(payload, dict) and payload.get("success") is False):
            try:
                failure = StatusEnvelope.model_validate(payload)
                message = failure.message or fallback_message
            except PydanticValidationError:
                message = fallback_message
            raise ApiError(response.status_code, message)

        try:
            envelope = model.model_validate(payload)
        except PydanticValidationError as e:
            logger.warning("Malformed %s payload: %s", model.__name__, e)
            raise MalformedResponseError(response.status_code, "Malformed response payload") from e

        if not envelope.success:
            raise ApiError(response.status_code, envelope.message or fallback_message)
        return envelope

    @staticmethod
    def _require_data(envelope: BaseModel, status_code: int) -> Any:
        data = getattr(envelope, "data", None)
        if data is None:
            raise MalformedResponseError(status_code, "Response is missing data")
        return data

    # ── Operations ────────────────────────────────────────────────────────

    async def list_svgs(self) -> List[SvgResponse]:
        response = await self._request("GET", "/svgs")
        envelope = self._parse(response, SvgListEnvelope, "Failed to fetch SVGs")
        return self._require_data(envelope, response.status_code)

    async def search_svgs(self, query: str) -> List[SvgResponse]:
        response = await self._request("GET", "/svgs/search", params={"q": query})
        envelope = self._parse(response, SvgListEnvelope, "Failed to search SVGs")
        return self._require_data(envelope, response.status_code)

    async def get_svg(self, svg_id: str) -> Optional[SvgResponse]:
        """One record, or None when the server answers 404."""
        response = await self._request("GET", f"/svgs/{svg_id}")
        if response.status_code == 404:
            return None
        envelope = self._parse(response, SvgEnvelope, "Failed to fetch SVG")
        return self._require_data(envelope, response.status_code)

    async def upload_svg(
        self,
        name: str,
        description: str,
        filename: str,
        content: bytes,
        content_type: str = "image/svg+xml",
    ) -> SvgResponse:
        response = await self._request(
            "POST",
            "/svgs",
            data={"name": name, "description": description},
            files={"svgFile": (filename, content, content_type)},
        )
        envelope = self._parse(response, SvgEnvelope, "Failed to save SVG")
        return self._require_data(envelope, response.status_code)

    async def update_svg(self, svg_id: str, name: str, description: str) -> SvgResponse:
        response = await self._request(
            "PUT",
            f"/svgs/{svg_id}",
            json={"name": name, "description": description},
        )
        envelope = self._parse(response, SvgEnvelope, "Failed to update SVG")
        return self._require_data(envelope, response.status_code)

    async def delete_svg(self, svg_id: str) -> None:
        response = await self._request("DELETE", f"/svgs/{svg_id}")
        self._parse(response, StatusEnvelope, "Failed to delete SVG")

    async def check_health(self) -> bool:
        """True when the API answers its health endpoint with success."""
        try:
            response = await self._request("GET", "/health")
            envelope = self._parse(response, HealthEnvelope, "Health check failed")
        except ApiError as e:
            logger.warning("API health check failed: %s", e.message)
            return False
        return envelope.success
