from datetime import datetime

from openapi_audit.analysis.coverage import CoverageResult
from openapi_audit.analysis.specification import Specification

TITLE = "# OpenAPI Traffic Audit Report"
NOT_APPLICABLE = "n/a"


def _timestamp(generated_at: datetime) -> str:
    return generated_at.isoformat()


def _ratio(tested: int, total: int, percent: int | None) -> str:
    shown = NOT_APPLICABLE if percent is None else f"{percent}%"
    return f"{tested}/{total} ({shown})"


def _codes(codes) -> str:
    return ", ".join(str(code) for code in sorted(codes))


def _method_order(specification: Specification, template: str, methods) -> list[str]:
    """Declared methods in declaration order, then undeclared ones alphabetically."""
    declared = [m for m in specification.paths.get(template, {}) if m in methods]
    extra = sorted(m for m in methods if m not in declared)
    return declared + extra


def _group_missing(missing: list[tuple[str, int]]) -> dict[str, list[int]]:
    grouped: dict[str, list[int]] = {}
    for method, status in missing:
        grouped.setdefault(method, []).append(status)
    return grouped


def render_empty_report(generated_at: datetime) -> str:
    return (
        f"{TITLE}\n\n"
        f"**Generated:** {_timestamp(generated_at)}\n\n"
        "No traffic data found. Make sure the tests ran with traffic recording enabled.\n"
    )


def render_report(
    specification: Specification,
    coverage: CoverageResult,
    traffic_count: int,
    generated_at: datetime,
) -> str:
    """Render coverage as a Markdown report. Output depends only on the arguments."""
    if traffic_count == 0:
        return render_empty_report(generated_at)

    lines: list[str] = [TITLE, "", f"**Generated:** {_timestamp(generated_at)}", ""]

    lines += ["## Coverage Summary", ""]
    lines.append(
        "- **Paths Tested:** "
        + _ratio(len(coverage.tested_paths), coverage.total_paths, coverage.path_percentage)
    )
    lines.append(
        "- **Method/Status Combinations Tested:** "
        + _ratio(len(coverage.tested_combos), coverage.total_combos, coverage.combo_percentage)
    )
    lines.append(f"- **Total Requests:** {traffic_count}")
    if coverage.undocumented:
        lines.append(f"- **Undocumented Endpoints Found:** {len(coverage.undocumented)}")
    lines.append("")

    if coverage.undocumented:
        lines += [
            "## Undocumented Endpoints",
            "",
            "*These endpoints were found in traffic but are not documented in the OpenAPI schema:*",
            "",
        ]
        for key in sorted(coverage.undocumented):
            lines.append(f"### `{key}`")
            lines.append(f"- Status codes: {_codes(coverage.undocumented[key])}")
            lines.append("")

    if coverage.tested_paths:
        lines += ["## Tested Endpoints", ""]
        for template in coverage.tested_paths:
            observed = coverage.observed.get(template, {})
            lines.append(f"### `{template}`")
            for method in _method_order(specification, template, observed):
                lines.append(f"- **{method.upper()}**: {_codes(observed[method])}")
            lines.append("")

    if coverage.missing_entirely or coverage.partially_missing:
        lines += ["## Missing Coverage", ""]

        if coverage.missing_entirely:
            lines += ["### Completely Untested Endpoints", ""]
            for template, missing in coverage.missing_entirely.items():
                lines.append(f"#### `{template}`")
                for method, codes in _group_missing(missing).items():
                    lines.append(f"- **{method.upper()}**: {_codes(codes)}")
                lines.append("")

        if coverage.partially_missing:
            lines += ["### Missing Status Code Coverage", ""]
            for template, missing in coverage.partially_missing.items():
                lines.append(f"#### `{template}`")
                for method, codes in _group_missing(missing).items():
                    lines.append(f"- **{method.upper()}**: Missing {_codes(codes)}")
                lines.append("")

    return "\n".join(lines)
