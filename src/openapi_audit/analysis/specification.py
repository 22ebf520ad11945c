from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


def _status_codes(responses: Mapping) -> tuple[int, ...]:
    # "default" and range keys like "2XX" never equal a concrete status
    codes: list[int] = []
    for key in responses:
        text = str(key)
        if text.isdigit():
            codes.append(int(text))
    return tuple(codes)


@dataclass
class Specification:
    """Declared path templates mapped to methods and their declared status codes, in document order."""

    paths: dict[str, dict[str, tuple[int, ...]]] = field(default_factory=dict)

    @classmethod
    def from_openapi(cls, document: Mapping) -> "Specification":
        """Build from a full OpenAPI document, reading only its ``paths`` object."""
        paths: dict[str, dict[str, tuple[int, ...]]] = {}
        for template, path_item in (document.get("paths") or {}).items():
            methods: dict[str, tuple[int, ...]] = {}
            for key, operation in (path_item or {}).items():
                method = str(key).lower()
                if method not in HTTP_METHODS:
                    continue
                methods[method] = _status_codes((operation or {}).get("responses") or {})
            paths[template] = methods
        return cls(paths=paths)

    @classmethod
    def from_mapping(cls, mapping: Mapping) -> "Specification":
        """Build from ``{template: {method: [status, ...]}}``."""
        return cls(paths={
            template: {
                str(method).lower(): tuple(int(code) for code in codes)
                for method, codes in methods.items()
            }
            for template, methods in mapping.items()
        })

    def templates(self) -> list[str]:
        return list(self.paths)

    def declared(self, template: str, method: str) -> tuple[int, ...]:
        return self.paths.get(template, {}).get(method, ())

    def combos(self, template: str | None = None) -> Iterator[tuple[str, str, int]]:
        """Yield (template, method, status) triples in declaration order."""
        templates = [template] if template is not None else self.paths
        for path in templates:
            for method, codes in self.paths.get(path, {}).items():
                for code in codes:
                    yield path, method, code

    @property
    def total_paths(self) -> int:
        return len(self.paths)

    @property
    def total_combos(self) -> int:
        return sum(len(codes) for methods in self.paths.values() for codes in methods.values())
