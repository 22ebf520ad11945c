from openapi_audit.capture.payload import build_url, decode_payload
from openapi_audit.capture.record import TrafficDraft, TrafficLog, TrafficRecord


class TestDecodePayload:
    def test_json_bytes(self):
        assert decode_payload(b'{"a": 1}') == {"a": 1}

    def test_json_text(self):
        assert decode_payload("[1, 2]") == [1, 2]

    def test_invalid_json_falls_back_to_text(self):
        assert decode_payload(b"not json") == "not json"

    def test_empty_is_absent(self):
        assert decode_payload(b"") is None
        assert decode_payload("") is None
        assert decode_payload(None) is None

    def test_non_utf8_bytes(self):
        assert decode_payload(b"\xff\xfe") == "\xff\xfe"


class TestBuildUrl:
    def test_with_query(self):
        assert build_url("/items", "page=2") == "/items?page=2"

    def test_without_query(self):
        assert build_url("/items", "") == "/items"


class TestTrafficRecord:
    def test_dict_keys(self):
        record = TrafficRecord(method="GET", url="/x", status=200, request=None, response={"ok": True})
        assert record.to_dict() == {
            "method": "GET", "url": "/x", "status": 200, "request": None, "response": {"ok": True},
        }

    def test_from_dict_tolerates_missing_payloads(self):
        record = TrafficRecord.from_dict({"method": "POST", "url": "/x", "status": "201"})
        assert record.status == 201
        assert record.request is None
        assert record.response is None


class TestTrafficLog:
    def test_commit_appends_once(self):
        log = TrafficLog()
        draft = TrafficDraft(method="GET", url="/x")
        assert log.commit(draft, 200, {"a": 1}) is True
        assert log.commit(draft, 500, None) is False
        assert len(log) == 1
        assert log.records()[0].status == 200

    def test_records_is_a_copy(self):
        log = TrafficLog()
        log.append(TrafficRecord(method="GET", url="/x", status=200))
        log.records().clear()
        assert len(log) == 1

    def test_discard_keeps_newer_records(self):
        log = TrafficLog()
        log.append(TrafficRecord(method="GET", url="/a", status=200))
        log.append(TrafficRecord(method="GET", url="/b", status=200))
        log.discard(1)
        assert [r.url for r in log.records()] == ["/b"]

    def test_independent_logs(self):
        first, second = TrafficLog(), TrafficLog()
        first.append(TrafficRecord(method="GET", url="/x", status=200))
        assert len(second) == 0
