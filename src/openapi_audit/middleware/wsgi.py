import io
import logging

from openapi_audit.capture.payload import build_url, decode_payload
from openapi_audit.capture.record import TrafficDraft, TrafficLog

logger = logging.getLogger(__name__)


def _read_body(environ: dict) -> bytes:
    stream = environ.get("wsgi.input")
    if stream is None:
        return b""

    raw_length = environ.get("CONTENT_LENGTH")
    if raw_length:
        try:
            return stream.read(max(int(raw_length), 0))
        except ValueError:
            logger.warning("openapi-audit: ignoring invalid Content-Length %r", raw_length)

    # Chunked bodies carry no length; the server terminates the stream instead
    chunked = "chunked" in environ.get("HTTP_TRANSFER_ENCODING", "").lower()
    if environ.get("wsgi.input_terminated") or chunked:
        return stream.read()
    return b""


class _RecordingIterable:
    """Wraps a WSGI response iterable and records the exchange once it is fully produced."""

    def __init__(self, iterable, on_complete) -> None:
        self._iterable = iterable
        self._on_complete = on_complete
        self._chunks: list[bytes] = []

    def __iter__(self):
        for chunk in self._iterable:
            self._chunks.append(chunk)
            yield chunk
        self._on_complete(b"".join(self._chunks))

    def close(self) -> None:
        try:
            close = getattr(self._iterable, "close", None)
            if close is not None:
                close()
        finally:
            # Covers servers that close without exhausting; commit() ignores the repeat
            self._on_complete(b"".join(self._chunks))


class TrafficRecorderMiddleware:
    """WSGI middleware for Flask and Django applications."""

    def __init__(self, wsgi_app, *, log: TrafficLog) -> None:
        self.wsgi_app = wsgi_app
        self.log = log

    def __call__(self, environ: dict, start_response):
        draft = TrafficDraft(
            method=environ.get("REQUEST_METHOD", "GET"),
            url=build_url(environ.get("PATH_INFO", "/"), environ.get("QUERY_STRING", "")),
        )

        body = _read_body(environ)
        environ["wsgi.input"] = io.BytesIO(body)
        environ["CONTENT_LENGTH"] = str(len(body))
        draft.request = decode_payload(body)

        status_code: list[int] = [200]

        def capturing_start_response(status: str, headers, exc_info=None):
            try:
                status_code[0] = int(status.split(" ", 1)[0])
            except (ValueError, IndexError):
                pass
            return start_response(status, headers, exc_info)

        response = self.wsgi_app(environ, capturing_start_response)

        def on_complete(response_body: bytes) -> None:
            try:
                self.log.commit(draft, status_code[0], decode_payload(response_body))
            except Exception:
                logger.warning("openapi-audit: failed to record exchange", exc_info=True)

        return _RecordingIterable(response, on_complete)
