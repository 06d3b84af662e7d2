"""
SVG Holder Backend — Upload Size Limit Middleware
===================================================

What:  Rejects oversized upload bodies before the multipart form is parsed.
How:   Pure ASGI middleware on POST to the upload route only.
       - Content-Length present: compared against the limit, body never read
       - Content-Length absent (chunked): body is read into memory until it
         either completes within the limit (then replayed to the app) or
         crosses it (then rejected)
       The limit is MAX_FILE_SIZE plus UPLOAD_FORM_OVERHEAD, which leaves room
       for the name/description fields and multipart headers. A file that
       fits inside that allowance but is still over MAX_FILE_SIZE is rejected
       by the route after parsing, so the spool never exceeds the limit.

Response on rejection:
    HTTP 400 {"success": false, "message": "File size too large. Maximum size is 5MB."}
"""

import logging
from typing import Iterable, Optional

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.middleware.request_id import request_id_var
from app.services.validation import SvgValidator

logger = logging.getLogger(__name__)


def parse_content_length(value: Optional[str]) -> Optional[int]:
    """Declared body size, or None when the header is absent or unusable."""
    if value is None:
        return None
    try:
        length = int(value)
    except ValueError:
        return None
    return length if length >= 0 else None


class UploadLimitMiddleware:
    """
    Caps the request body of upload requests.

    Args:
        upload_paths:  exact paths that accept multipart uploads
        max_file_size: upload cap in bytes (MAX_FILE_SIZE)
        form_overhead: extra bytes allowed for form fields and part headers
    """

    def __init__(
        self,
        app: ASGIApp,
        upload_paths: Iterable[str],
        max_file_size: int,
        form_overhead: int,
    ):
        self.app = app
        self.upload_paths = set(upload_paths)
        self.validator = SvgValidator(max_file_size)
        self.limit = max_file_size + form_overhead

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if (
            scope["type"] != "http"
            or scope["method"] != "POST"
            or scope["path"] not in self.upload_paths
        ):
            await self.app(scope, receive, send)
            return

        declared = parse_content_length(Headers(scope=scope).get("content-length"))
        if declared is not None:
            if declared > self.limit:
                await self._reject(scope, receive, send, declared)
                return
            await self.app(scope, receive, send)
            return

        body = bytearray()
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            body.extend(message.get("body", b""))
            if len(body) > self.limit:
                await self._reject(scope, receive, send, len(body))
                return
            if not message.get("more_body", False):
                break

        await self.app(scope, self._replay(bytes(body), receive), send)

    @staticmethod
    def _replay(body: bytes, receive: Receive) -> Receive:
        """Hand the buffered body to the app as one message, then defer to the server."""
        sent = False

        async def replay() -> Message:
            nonlocal sent
            if not sent:
                sent = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        return replay

    async def _reject(self, scope: Scope, receive: Receive, send: Send, size: int) -> None:
        logger.warning(
            "[%s] Upload rejected before parsing: %d bytes exceeds limit of %d",
            request_id_var.get(""),
            size,
            self.limit,
        )
        response = JSONResponse(
            status_code=400,
            content={"success": False, "message": self.validator.too_large_message},
        )
        await response(scope, receive, send)
