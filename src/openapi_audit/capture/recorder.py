import logging

from openapi_audit.capture.record import TrafficLog
from openapi_audit.errors import RecorderAttachError
from openapi_audit.middleware import asgi, wsgi

logger = logging.getLogger(__name__)


class TrafficRecorder:
    """
    Attaches traffic recording to a web application.

    ASGI applications that support ``add_middleware`` (FastAPI, Starlette) get
    the ASGI recorder registered as middleware. WSGI applications that expose
    ``wsgi_app`` (Flask) have it wrapped in place. Either way every completed
    exchange lands in ``log`` as one ``TrafficRecord``.

    Usage::

        log = TrafficLog()
        TrafficRecorder(log).attach(app)
    """

    def __init__(self, log: TrafficLog) -> None:
        self.log = log

    def attach(self, app):
        """Install the recorder on ``app`` and return the attach handle."""
        if hasattr(app, "add_middleware"):
            app.add_middleware(asgi.TrafficRecorderMiddleware, log=self.log)
            logger.debug("openapi-audit: recorder attached as ASGI middleware")
            return app
        if hasattr(app, "wsgi_app"):
            app.wsgi_app = wsgi.TrafficRecorderMiddleware(app.wsgi_app, log=self.log)
            logger.debug("openapi-audit: recorder attached as WSGI middleware")
            return app.wsgi_app
        raise RecorderAttachError(
            f"cannot attach recorder to {type(app).__name__}: "
            "expected an ASGI app with add_middleware or a WSGI app with wsgi_app"
        )
