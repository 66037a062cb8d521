from loguru import logger
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from photoqr.services.errors import PayloadTooLarge

# Room for the multipart boundary and part headers around the file itself.
MULTIPART_OVERHEAD = 64 * 1024


class UploadSizeLimit:
    """Refuse request bodies on ``path`` larger than ``max_body_bytes``.

    A declared Content-Length is checked before anything is read. Bodies sent
    without one are held up to the limit and then replayed to the app, so the
    multipart parser never sees an oversized upload.
    """

    def __init__(self, app: ASGIApp, path: str, max_body_bytes: int) -> None:
        self.app = app
        self.path = path
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] != self.path:
            await self.app(scope, receive, send)
            return

        declared = dict(scope["headers"]).get(b"content-length")
        if declared is not None:
            if declared.isdigit() and int(declared) > self.max_body_bytes:
                await self._reject(scope, receive, send, int(declared))
                return
            await self.app(scope, receive, send)
            return

        messages: list[Message] = []
        received = 0
        while True:
            message = await receive()
            messages.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self.max_body_bytes:
                await self._reject(scope, receive, send, received)
                return
            if not message.get("more_body", False):
                break

        async def replay() -> Message:
            if messages:
                return messages.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send, size: int) -> None:
        logger.warning(
            "Upload body refused path={} size_bytes={} limit_bytes={}",
            scope["path"],
            size,
            self.max_body_bytes,
        )
        response = JSONResponse(
            status_code=PayloadTooLarge.status_code,
            content={"error": "Request body exceeds the upload limit.", "code": PayloadTooLarge.code},
        )
        await response(scope, receive, send)
