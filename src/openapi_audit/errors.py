class AuditError(Exception):
    """Base class for errors raised by openapi-audit."""


class SpecificationUnavailableError(AuditError):
    """The specification snapshot is missing or cannot be parsed at report time."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"specification unavailable at {path}: {reason}")


class RecorderAttachError(AuditError):
    """The application exposes neither an ASGI nor a WSGI hook point."""
