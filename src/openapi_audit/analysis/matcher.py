import re
from functools import lru_cache

from openapi_audit.analysis.specification import Specification

_PLACEHOLDER = re.compile(r"\{[^}/]+\}")


def strip_query(url: str) -> str:
    """Drop the query and fragment components of a request target."""
    return url.split("?", 1)[0].split("#", 1)[0]


@lru_cache(maxsize=1024)
def _compile_template(template: str) -> tuple[str | re.Pattern, ...]:
    """Split a template into literal segments and compiled patterns for placeholder segments."""
    segments: list[str | re.Pattern] = []
    for segment in template.split("/"):
        if not _PLACEHOLDER.search(segment):
            segments.append(segment)
            continue
        # Each placeholder covers at least one character, so never an empty segment
        literals = _PLACEHOLDER.split(segment)
        pattern = "[^/]+".join(re.escape(literal) for literal in literals)
        segments.append(re.compile(f"^{pattern}$"))
    return tuple(segments)


def template_matches(template: str, path: str) -> bool:
    """Whether a query-free concrete path structurally matches a template."""
    compiled = _compile_template(template)
    concrete = path.split("/")
    if len(compiled) != len(concrete):
        return False
    for expected, actual in zip(compiled, concrete):
        if isinstance(expected, str):
            if expected != actual:
                return False
        elif not expected.match(actual):
            return False
    return True


def match_path(url: str, specification: Specification) -> str | None:
    """
    Map a concrete request target to its declared template.

    An exact key match wins outright. Otherwise templates are tried in
    declaration order and the first structural match is returned, which makes
    overlapping templates resolve deterministically.
    """
    path = strip_query(url)
    if path in specification.paths:
        return path
    for template in specification.paths:
        if template_matches(template, path):
            return template
    return None
