"""
Request body size limit.

Rejects with 413 when Content-Length is over the limit, and also counts the
bytes actually received so chunked uploads without Content-Length are held
to the same limit. Under the limit, the buffered body is replayed to the app.
"""
import logging

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware:
    """Pure ASGI middleware: buffer the request body up to ``max_bytes``."""

    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        self.app = app
        self.max_bytes = max_bytes

    async def _reject(self, scope: Scope, receive: Receive, send: Send, size: str) -> None:
        logger.warning("Rejected %s %s — body of %s bytes", scope['method'], scope['path'], size)
        response = JSONResponse(status_code=413, content={'error': 'Request body too large'})
        await response(scope, receive, send)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope['type'] != 'http':
            await self.app(scope, receive, send)
            return

        length = Headers(scope=scope).get('content-length', '')
        if length.isdigit() and int(length) > self.max_bytes:
            await self._reject(scope, receive, send, length)
            return

        chunks = []
        size = 0
        while True:
            message = await receive()
            if message['type'] == 'http.disconnect':
                return
            chunk = message.get('body', b'')
            size += len(chunk)
            if size > self.max_bytes:
                await self._reject(scope, receive, send, f'>{self.max_bytes}')
                return
            chunks.append(chunk)
            if not message.get('more_body', False):
                break

        body = b''.join(chunks)
        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {'type': 'http.request', 'body': body, 'more_body': False}
            return await receive()

        await self.app(scope, replay, send)
