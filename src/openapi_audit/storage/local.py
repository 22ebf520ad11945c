import asyncio
import glob as _glob
from pathlib import Path


class LocalFileOperations:
    """Synchronous artifact storage on the local file system."""

    encoding = "utf-8"

    def read_file(self, path: str) -> str:
        return Path(path).read_text(encoding=self.encoding)

    def write_file(self, path: str, content: str) -> None:
        Path(path).write_text(content, encoding=self.encoding)

    def mkdir(self, path: str, recursive: bool = True) -> None:
        if path:
            Path(path).mkdir(parents=recursive, exist_ok=True)

    def glob(self, pattern: str) -> list[str]:
        return sorted(p for p in _glob.glob(pattern) if Path(p).is_file())

    def remove_file(self, path: str) -> None:
        Path(path).unlink(missing_ok=True)


class AsyncLocalFileOperations:
    """Awaitable variant of LocalFileOperations; blocking calls run in a worker thread."""

    def __init__(self) -> None:
        self._sync = LocalFileOperations()

    async def read_file(self, path: str) -> str:
        return await asyncio.to_thread(self._sync.read_file, path)

    async def write_file(self, path: str, content: str) -> None:
        await asyncio.to_thread(self._sync.write_file, path, content)

    async def mkdir(self, path: str, recursive: bool = True) -> None:
        await asyncio.to_thread(self._sync.mkdir, path, recursive)

    async def glob(self, pattern: str) -> list[str]:
        return await asyncio.to_thread(self._sync.glob, pattern)

    async def remove_file(self, path: str) -> None:
        await asyncio.to_thread(self._sync.remove_file, path)
