from openapi_audit.analysis.coverage import CoverageResult, compute_coverage
from openapi_audit.analysis.matcher import match_path
from openapi_audit.analysis.specification import Specification
from openapi_audit.capture.record import TrafficLog, TrafficRecord
from openapi_audit.capture.recorder import TrafficRecorder
from openapi_audit.config import AuditorOptions
from openapi_audit.errors import AuditError, RecorderAttachError, SpecificationUnavailableError
from openapi_audit.generation.report import render_report
from openapi_audit.orchestrator import AuditOrchestrator, AuditState
from openapi_audit.storage.local import AsyncLocalFileOperations, LocalFileOperations

__all__ = [
    "AsyncLocalFileOperations",
    "AuditError",
    "AuditOrchestrator",
    "AuditState",
    "AuditorOptions",
    "CoverageResult",
    "LocalFileOperations",
    "RecorderAttachError",
    "Specification",
    "SpecificationUnavailableError",
    "TrafficLog",
    "TrafficRecord",
    "TrafficRecorder",
    "compute_coverage",
    "match_path",
    "render_report",
]
