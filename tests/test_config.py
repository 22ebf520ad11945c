from openapi_audit.config import AuditorOptions


class TestAuditorOptions:
    def test_defaults(self):
        options = AuditorOptions()
        assert options.schema_path == "./generated/openapi-schema.json"
        assert options.traffic_dir == "./generated/traffic"
        assert options.report_path == "./generated/audit-report.md"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("OPENAPI_AUDIT_SCHEMA_PATH", "out/schema.json")
        monkeypatch.setenv("OPENAPI_AUDIT_TRAFFIC_DIR", "out/traffic/")
        monkeypatch.delenv("OPENAPI_AUDIT_REPORT_PATH", raising=False)
        options = AuditorOptions.from_env()
        assert options.schema_path == "out/schema.json"
        assert options.report_path == "./generated/audit-report.md"
        assert options.traffic_pattern == "out/traffic/*.json"
        assert options.traffic_path("suite") == "out/traffic/suite.json"
