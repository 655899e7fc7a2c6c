"""
Request body size limit for answer uploads.

Rejects uploads to the guarded paths with 413 *before* the body is read
when the declared ``Content-Length`` is already too large.  Bodies without
a usable length are counted while they stream in; once the limit is crossed
the 413 is sent immediately and the application sees a client disconnect,
so the rest of the body is never buffered.
"""

import logging

from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from interview_recorder.api.middleware.error_handler import error_envelope
from interview_recorder.core.exceptions import UploadTooLargeError

logger = logging.getLogger(__name__)


def _declared_length(scope: Scope) -> int | None:
    for name, value in scope.get("headers", []):
        if name == b"content-length":
            try:
                return int(value)
            except ValueError:
                return None
    return None


class UploadSizeLimitMiddleware:
    """Pure ASGI middleware enforcing a maximum request body on upload paths.

    Args:
        app: The wrapped ASGI application.
        max_body_bytes: Largest accepted request body (artifact plus multipart framing).
        limit_bytes: Artifact limit reported to the client in the error detail.
        paths: Request paths the limit applies to.
    """

    def __init__(
        self,
        app: ASGIApp,
        max_body_bytes: int,
        limit_bytes: int,
        paths: tuple[str, ...] = ("/api/upload-one",),
    ) -> None:
        self.app = app
        self._max_body_bytes = max_body_bytes
        self._limit_bytes = limit_bytes
        self._paths = paths

    def _response(self) -> JSONResponse:
        exc = UploadTooLargeError(self._limit_bytes)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(exc.detail, exc.code, exc.timestamp),
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] not in self._paths:
            await self.app(scope, receive, send)
            return

        declared = _declared_length(scope)
        if declared is not None and declared > self._max_body_bytes:
            logger.warning("Rejected upload declaring %d bytes", declared)
            await self._response()(scope, receive, send)
            return

        received = 0
        rejected = False

        async def limited_receive() -> Message:
            nonlocal received, rejected
            if rejected:
                return {"type": "http.disconnect"}
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self._max_body_bytes:
                    rejected = True
                    logger.warning("Cut off streaming upload after %d bytes", received)
                    await self._response()(scope, receive, send)
                    return {"type": "http.disconnect"}
            return message

        async def guarded_send(message: Message) -> None:
            # The 413 has already been sent; drop whatever the app answers.
            if not rejected:
                await send(message)

        try:
            await self.app(scope, limited_receive, guarded_send)
        except Exception:
            # The app failing on the synthetic disconnect is expected once the
            # 413 is out; anything else is a real error.
            if not rejected:
                raise
            logger.debug("Upload handler aborted after size rejection", exc_info=True)
