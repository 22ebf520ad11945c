import inspect
from collections.abc import Awaitable
from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class FileOperations(Protocol):
    """
    File access used by the orchestrator to persist and load artifacts.

    Every operation may either return its result directly or return an
    awaitable; callers go through ``resolve`` so both kinds behave the same.
    ``remove_file`` is optional: ports without it leave stale files in place.
    """

    def read_file(self, path: str) -> str | Awaitable[str]: ...

    def write_file(self, path: str, content: str) -> None | Awaitable[None]: ...

    def mkdir(self, path: str, recursive: bool = True) -> None | Awaitable[None]: ...

    def glob(self, pattern: str) -> list[str] | Awaitable[list[str]]: ...


async def resolve(result: T | Awaitable[T]) -> T:
    """Await ``result`` when the port handed back an awaitable, else return it as is."""
    if inspect.isawaitable(result):
        return await result
    return result


def parent_dir(path: str) -> str:
    """Directory portion of a slash-separated path ("" for a bare file name)."""
    return path.rsplit("/", 1)[0] if "/" in path else ""


def supports_remove(file_ops: Any) -> bool:
    return callable(getattr(file_ops, "remove_file", None))
