import logging

from openapi_audit.capture.payload import build_url, decode_payload
from openapi_audit.capture.record import TrafficDraft, TrafficLog

logger = logging.getLogger(__name__)


class TrafficRecorderMiddleware:
    """ASGI middleware for FastAPI and Starlette applications."""

    def __init__(self, app, *, log: TrafficLog) -> None:
        self.app = app
        self.log = log

    async def __call__(self, scope, receive, send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        draft = TrafficDraft(
            method=scope.get("method", "GET"),
            url=build_url(scope.get("path", "/"), scope.get("query_string", b"").decode("latin-1")),
        )
        body_chunks: list[bytes] = []

        async def capturing_receive():
            message = await receive()
            if message["type"] == "http.request":
                body_chunks.append(message.get("body", b""))
                if not message.get("more_body", False):
                    draft.request = decode_payload(b"".join(body_chunks))
            return message

        status_code: list[int] = [200]
        response_chunks: list[bytes] = []

        async def capturing_send(message):
            if message["type"] == "http.response.start":
                status_code[0] = message["status"]
            elif message["type"] == "http.response.body":
                response_chunks.append(message.get("body", b""))
                if not message.get("more_body", False):
                    self._record(draft, status_code[0], b"".join(response_chunks))
            await send(message)

        await self.app(scope, capturing_receive, capturing_send)

    def _record(self, draft: TrafficDraft, status_code: int, body: bytes) -> None:
        try:
            self.log.commit(draft, status_code, decode_payload(body))
        except Exception:
            logger.warning("openapi-audit: failed to record exchange", exc_info=True)
