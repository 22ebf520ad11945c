import logging

from opentelemetry.sdk.trace import ReadableSpan, SpanProcessor
from opentelemetry.trace import SpanKind

from openapi_audit.capture.payload import build_url
from openapi_audit.capture.record import TrafficLog, TrafficRecord

logger = logging.getLogger(__name__)

# Semantic convention keys; supports both old (v1.x) and new (v1.21+) conventions
_METHOD_KEYS = ("http.request.method", "http.method")
_STATUS_KEYS = ("http.response.status_code", "http.status_code")
_TARGET_KEY = "http.target"


def _extract_url(attributes: dict) -> str:
    """Rebuild the request target from span attributes, handling both semconv versions."""
    path = attributes.get("url.path")
    if path:
        return build_url(str(path), str(attributes.get("url.query") or ""))

    # Old semconv: http.target is the full path+query (e.g. "/api/orders?page=1")
    target = attributes.get(_TARGET_KEY)
    return str(target) if target else "/"


def _get_attr(attributes: dict, *keys: str) -> str | None:
    """Return the first non-empty value found among the given attribute keys."""
    for key in keys:
        value = attributes.get(key)
        if value is not None:
            return str(value)
    return None


class TrafficSpanProcessor(SpanProcessor):
    """
    OpenTelemetry SpanProcessor that records server exchanges into a TrafficLog.

    Use this instead of the HTTP middleware when the service under test already
    has OpenTelemetry instrumentation in place. Spans carry no bodies, so the
    ``request`` and ``response`` of each record are always ``None``; coverage
    accounting only needs method, url and status.

    Usage::

        from opentelemetry.sdk.trace import TracerProvider
        from openapi_audit.otel import TrafficSpanProcessor

        provider = TracerProvider()
        provider.add_span_processor(TrafficSpanProcessor(orchestrator.log))
    """

    def __init__(self, log: TrafficLog) -> None:
        self.log = log

    def on_start(self, span, parent_context=None) -> None:
        pass  # Nothing to do at span start

    def on_end(self, span: ReadableSpan) -> None:
        try:
            self._process(span)
        except Exception:
            logger.warning("openapi-audit: failed to process span", exc_info=True)

    def shutdown(self) -> None:
        pass

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return True

    def _process(self, span: ReadableSpan) -> None:
        # Only process server-side spans
        if span.kind != SpanKind.SERVER:
            return

        attributes = dict(span.attributes or {})

        # Only process HTTP spans; must have a method attribute
        method = _get_attr(attributes, *_METHOD_KEYS)
        if not method:
            return

        # No status means the response was never finalized
        status_code_raw = _get_attr(attributes, *_STATUS_KEYS)
        if not status_code_raw:
            return
        status_code = int(status_code_raw)

        self.log.append(TrafficRecord(
            method=method.upper(),
            url=_extract_url(attributes),
            status=status_code,
        ))
