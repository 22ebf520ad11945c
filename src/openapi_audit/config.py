import os
from dataclasses import dataclass

DEFAULT_SCHEMA_PATH = "./generated/openapi-schema.json"
DEFAULT_TRAFFIC_DIR = "./generated/traffic"
DEFAULT_REPORT_PATH = "./generated/audit-report.md"
DEFAULT_AGGREGATE_NAME = "integration-tests-traffic"


@dataclass
class AuditorOptions:
    """Where the audit cycle reads and writes its artifacts."""

    schema_path: str = DEFAULT_SCHEMA_PATH
    traffic_dir: str = DEFAULT_TRAFFIC_DIR
    report_path: str = DEFAULT_REPORT_PATH
    aggregate_name: str = DEFAULT_AGGREGATE_NAME

    @classmethod
    def from_env(cls) -> "AuditorOptions":
        return cls(
            schema_path=os.environ.get("OPENAPI_AUDIT_SCHEMA_PATH", DEFAULT_SCHEMA_PATH),
            traffic_dir=os.environ.get("OPENAPI_AUDIT_TRAFFIC_DIR", DEFAULT_TRAFFIC_DIR),
            report_path=os.environ.get("OPENAPI_AUDIT_REPORT_PATH", DEFAULT_REPORT_PATH),
        )

    @property
    def traffic_pattern(self) -> str:
        return f"{self.traffic_dir.rstrip('/')}/*.json"

    def traffic_path(self, name: str) -> str:
        return f"{self.traffic_dir.rstrip('/')}/{name}.json"
