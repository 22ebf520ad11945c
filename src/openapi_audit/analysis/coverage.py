from collections.abc import Iterable
from dataclasses import dataclass, field

from openapi_audit.analysis.matcher import match_path, strip_query
from openapi_audit.analysis.specification import Specification
from openapi_audit.capture.record import TrafficRecord


def percentage(tested: int, total: int) -> int | None:
    """Integer percent rounded half up, or None when there is nothing to divide by."""
    if total <= 0:
        return None
    return (tested * 200 + total) // (2 * total)


@dataclass
class CoverageResult:
    tested_paths: list[str] = field(default_factory=list)
    tested_combos: set[tuple[str, str, int]] = field(default_factory=set)
    observed: dict[str, dict[str, set[int]]] = field(default_factory=dict)
    undocumented: dict[str, set[int]] = field(default_factory=dict)
    missing_entirely: dict[str, list[tuple[str, int]]] = field(default_factory=dict)
    partially_missing: dict[str, list[tuple[str, int]]] = field(default_factory=dict)
    total_paths: int = 0
    total_combos: int = 0
    traffic_count: int = 0

    @property
    def path_percentage(self) -> int | None:
        return percentage(len(self.tested_paths), self.total_paths)

    @property
    def combo_percentage(self) -> int | None:
        return percentage(len(self.tested_combos), self.total_combos)


def compute_coverage(specification: Specification, records: Iterable[TrafficRecord]) -> CoverageResult:
    """Compare recorded traffic with the declared (template, method, status) combos."""
    result = CoverageResult(
        total_paths=specification.total_paths,
        total_combos=specification.total_combos,
    )
    tested: set[str] = set()

    for record in records:
        result.traffic_count += 1
        method = record.method.lower()
        template = match_path(record.url, specification)

        if template is None:
            key = f"{record.method.upper()} {strip_query(record.url)}"
            result.undocumented.setdefault(key, set()).add(record.status)
            continue

        # Any traffic on a declared template counts for path coverage,
        # only declared statuses count for combo coverage
        tested.add(template)
        result.observed.setdefault(template, {}).setdefault(method, set()).add(record.status)
        if record.status in specification.declared(template, method):
            result.tested_combos.add((template, method, record.status))

    result.tested_paths = [t for t in specification.templates() if t in tested]

    for template in specification.templates():
        missing = [
            (method, status)
            for _, method, status in specification.combos(template)
            if (template, method, status) not in result.tested_combos
        ]
        if template not in tested:
            result.missing_entirely[template] = missing
        elif missing:
            result.partially_missing[template] = missing

    return result
