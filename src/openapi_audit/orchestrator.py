import enum
import hashlib
import json
import logging
import re
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from openapi_audit.analysis.coverage import compute_coverage
from openapi_audit.analysis.specification import Specification
from openapi_audit.capture.record import TrafficLog, TrafficRecord
from openapi_audit.capture.recorder import TrafficRecorder
from openapi_audit.config import AuditorOptions
from openapi_audit.errors import SpecificationUnavailableError
from openapi_audit.generation.report import render_report
from openapi_audit.storage.base import FileOperations, parent_dir, resolve, supports_remove

logger = logging.getLogger(__name__)

_UNSAFE_NAME = re.compile(r"[^A-Za-z0-9._-]+")


class AuditState(enum.Enum):
    IDLE = "idle"
    PREPARING = "preparing"
    RECORDING = "recording"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


def _suite_file_name(suite_name: str, reserved: str) -> str:
    name = _UNSAFE_NAME.sub("-", suite_name).strip("-.") or "traffic"
    if name != suite_name or name == reserved:
        # Distinct suite names map to distinct files
        digest = hashlib.sha1(suite_name.encode("utf-8")).hexdigest()[:8]
        name = f"{name}-{digest}"
    return name


def _default_spec_source(app) -> dict:
    openapi = getattr(app, "openapi", None)
    if not callable(openapi):
        raise TypeError(f"{type(app).__name__} has no openapi(); pass spec_source explicitly")
    return openapi()


async def _close_app(app) -> None:
    for name in ("aclose", "close", "shutdown"):
        close = getattr(app, name, None)
        if callable(close):
            await resolve(close())
            return


class AuditOrchestrator:
    """
    Drives one audit cycle: clear stale artifacts, snapshot the specification,
    record traffic, persist snapshots and write the coverage report.

    The traffic log belongs to the orchestrator. Recorders attached through
    ``attach`` append to it; ``write_traffic`` and ``teardown`` discard what they persist.

    Typical test-session wiring::

        orchestrator = AuditOrchestrator(AuditorOptions(), LocalFileOperations())
        teardown = asyncio.run(orchestrator.setup(create_app))
        app = create_app()
        orchestrator.attach(app)
        ...  # run the tests against app
        asyncio.run(teardown())
    """

    def __init__(
        self,
        options: AuditorOptions,
        file_ops: FileOperations,
        *,
        log: TrafficLog | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.options = options
        self.file_ops = file_ops
        self.log = log if log is not None else TrafficLog()
        self.state = AuditState.IDLE
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # -- lifecycle ---------------------------------------------------------

    async def prepare(self) -> None:
        """Delete artifacts left by a previous cycle. Never raises."""
        self.state = AuditState.PREPARING

        if not supports_remove(self.file_ops):
            logger.warning("openapi-audit: file operations cannot remove files, stale artifacts kept")
            return

        stale: list[str] = []
        for pattern in (self.options.schema_path, self.options.traffic_pattern, self.options.report_path):
            stale += await self._safe_glob(pattern)

        removed = 0
        for path in dict.fromkeys(stale):
            try:
                await resolve(self.file_ops.remove_file(path))
                removed += 1
            except FileNotFoundError:
                pass
            except Exception:
                logger.warning("openapi-audit: could not remove %s", path, exc_info=True)

        logger.info("openapi-audit: cleared %d generated file(s)", removed)

    async def setup(
        self,
        create_app: Callable[[], Any],
        spec_source: Callable[[Any], Any] | None = None,
    ) -> Callable[[], Any]:
        """
        Clear stale artifacts, then build an app once to snapshot its OpenAPI document.

        ``create_app`` and ``spec_source`` may be plain or async callables.
        The app is stopped through the first of ``aclose``, ``close`` or
        ``shutdown`` it exposes. FastAPI and Flask apps have none of these and are
        never started here, so they are simply dropped; their lifespan and
        teardown hooks do not run.
        Returns ``teardown`` so test runners can use it as the session finalizer.
        """
        await self.prepare()

        schema_path = self.options.schema_path
        try:
            app = await resolve(create_app())
            try:
                document = await resolve((spec_source or _default_spec_source)(app))
            finally:
                await _close_app(app)

            await resolve(self.file_ops.mkdir(parent_dir(schema_path), recursive=True))
            await resolve(self.file_ops.write_file(schema_path, json.dumps(document, indent=2)))
        except Exception:
            self.state = AuditState.FAILED
            raise
        logger.info("openapi-audit: OpenAPI schema written to %s", schema_path)

        self.state = AuditState.RECORDING
        return self.teardown

    def attach(self, app):
        """Record every exchange ``app`` serves into this orchestrator's log."""
        return TrafficRecorder(self.log).attach(app)

    def get_traffic(self) -> list[TrafficRecord]:
        return self.log.records()

    async def write_traffic(self, suite_name: str) -> str | None:
        """
        Persist the current log as ``<traffic_dir>/<suite_name>.json`` and drop those records.

        Returns the written path, or None when there was nothing to write or
        the write failed. A failed write keeps the records for a later call.
        """
        if len(self.log) == 0:
            logger.info("openapi-audit: no traffic to write for %s", suite_name)
            return None

        path = self.options.traffic_path(_suite_file_name(suite_name, self.options.aggregate_name))
        records = self.log.records()
        try:
            await self._persist_traffic(path, records)
        except Exception:
            logger.warning("openapi-audit: failed to write traffic for %s", suite_name, exc_info=True)
            return None

        # Only records already persisted are dropped
        self.log.discard(len(records))
        return path

    async def teardown(self) -> str | None:
        """Persist remaining traffic and write the audit report. Never raises."""
        self.state = AuditState.FINALIZING
        try:
            records = self.log.records()
            if records:
                await self._persist_traffic(self.options.traffic_path(self.options.aggregate_name), records)
                self.log.discard(len(records))

            report = await self.generate_report()

            report_path = self.options.report_path
            await resolve(self.file_ops.mkdir(parent_dir(report_path), recursive=True))
            await resolve(self.file_ops.write_file(report_path, report))
        except Exception:
            self.state = AuditState.FAILED
            logger.warning("openapi-audit: failed to generate audit report", exc_info=True)
            return None

        self.state = AuditState.DONE
        logger.info("openapi-audit: audit report written to %s", report_path)
        return report_path

    # -- report ------------------------------------------------------------

    async def load_specification(self) -> Specification:
        path = self.options.schema_path
        try:
            content = await resolve(self.file_ops.read_file(path))
        except Exception as exc:
            raise SpecificationUnavailableError(path, f"cannot read: {exc}") from exc
        try:
            document = json.loads(content)
        except json.JSONDecodeError as exc:
            raise SpecificationUnavailableError(path, f"invalid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise SpecificationUnavailableError(path, "document is not a JSON object")
        return Specification.from_openapi(document)

    async def load_traffic(self) -> list[TrafficRecord]:
        """Load every traffic snapshot in storage, in file name order."""
        records: list[TrafficRecord] = []
        for path in sorted(await self._safe_glob(self.options.traffic_pattern)):
            try:
                content = await resolve(self.file_ops.read_file(path))
                records.extend(TrafficRecord.from_dict(item) for item in json.loads(content))
            except Exception:
                logger.warning("openapi-audit: skipping unreadable traffic snapshot %s", path, exc_info=True)
        return records

    async def generate_report(self) -> str:
        """Render the report from stored artifacts. Raises SpecificationUnavailableError."""
        specification = await self.load_specification()
        records = await self.load_traffic()
        coverage = compute_coverage(specification, records)
        return render_report(specification, coverage, len(records), self._clock())

    # -- helpers -----------------------------------------------------------

    async def _persist_traffic(self, path: str, records: list[TrafficRecord]) -> None:
        await resolve(self.file_ops.mkdir(self.options.traffic_dir, recursive=True))
        payload = json.dumps([record.to_dict() for record in records], indent=2, default=str)
        await resolve(self.file_ops.write_file(path, payload))
        logger.info("openapi-audit: traffic written to %s (%d requests)", path, len(records))

    async def _safe_glob(self, pattern: str) -> list[str]:
        try:
            return list(await resolve(self.file_ops.glob(pattern)))
        except Exception:
            logger.warning("openapi-audit: could not list %s", pattern, exc_info=True)
            return []
