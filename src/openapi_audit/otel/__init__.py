from openapi_audit.otel.span_processor import TrafficSpanProcessor

__all__ = ["TrafficSpanProcessor"]
