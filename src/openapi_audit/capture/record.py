import threading
from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class TrafficRecord:
    method: str
    url: str
    status: int
    request: Any = None
    response: Any = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "TrafficRecord":
        return cls(
            method=str(data["method"]),
            url=str(data["url"]),
            status=int(data["status"]),
            request=data.get("request"),
            response=data.get("response"),
        )


@dataclass
class TrafficDraft:
    """A record under construction while its exchange is still in flight."""

    method: str
    url: str
    request: Any = None
    committed: bool = False


class TrafficLog:
    """Ordered log of completed exchanges, shared between recorders and the orchestrator."""

    def __init__(self) -> None:
        self._records: list[TrafficRecord] = []
        self._lock = threading.Lock()

    def append(self, record: TrafficRecord) -> None:
        with self._lock:
            self._records.append(record)

    def commit(self, draft: TrafficDraft, status: int, response: Any) -> bool:
        """Complete a draft and append it. A draft is only ever appended once."""
        with self._lock:
            if draft.committed:
                return False
            draft.committed = True
            self._records.append(TrafficRecord(
                method=draft.method,
                url=draft.url,
                status=status,
                request=draft.request,
                response=response,
            ))
            return True

    def records(self) -> list[TrafficRecord]:
        with self._lock:
            return self._records[:]

    def discard(self, count: int) -> None:
        """Drop the oldest `count` records, keeping anything appended since they were read."""
        with self._lock:
            del self._records[:count]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
