"""Process-lifetime transform cache validated by full source comparison."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import psutil

from cssmodules.errors import CacheReadError
from cssmodules.models import LoadResult
from cssmodules.observability import StructuredLogger
from cssmodules.paths import read_source

MEMORY_LIMIT_BYTES = 250 * 1024 * 1024

MemoryProbe = Callable[[], int]


def process_rss() -> int:
    """Resident set size of the current process in bytes."""
    return psutil.Process().memory_info().rss


@dataclass(frozen=True, slots=True)
class CacheEntry:
    input_snapshot: str
    result: LoadResult


class TransformCache:
    """Maps absolute source paths to the load result produced from them.

    An entry is only served while the file's current text equals the text it
    was built from. Once the process exceeds ``memory_limit`` bytes resident,
    the next ``set`` drops every entry before inserting. A cache built without
    a logger adopts the pipeline's logger when handed to one.
    """

    def __init__(
        self,
        *,
        memory_probe: MemoryProbe = process_rss,
        memory_limit: int = MEMORY_LIMIT_BYTES,
        logger: StructuredLogger | None = None,
    ) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._memory_probe = memory_probe
        self._memory_limit = memory_limit
        self.logger = logger

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, abs_path: object) -> bool:
        if not isinstance(abs_path, (str, Path)):
            return False
        return os.fspath(abs_path) in self._entries

    async def get(self, abs_path: str | Path) -> LoadResult | None:
        entry = self._entries.get(os.fspath(abs_path))
        if entry is None:
            return None
        current = await self._read(abs_path)
        if current == entry.input_snapshot:
            return entry.result
        return None

    async def set(self, abs_path: str | Path, result: LoadResult, origin_content: str = "") -> None:
        snapshot = origin_content or await self._read(abs_path)
        rss = self._memory_probe()
        if rss > self._memory_limit:
            self._log_clear(abs_path, rss)
            self.clear()
        self._entries[os.fspath(abs_path)] = CacheEntry(input_snapshot=snapshot, result=result)

    def _log_clear(self, abs_path: str | Path, rss: int) -> None:
        if self.logger is None:
            return
        self.logger.log(
            operation="cache_clear",
            phase="building",
            path=os.fspath(abs_path),
            message="Process memory above limit; dropping all cached transforms.",
            level="warning",
            extra={"rss_bytes": rss, "limit_bytes": self._memory_limit, "entries": len(self)},
        )

    def clear(self) -> None:
        self._entries.clear()

    async def _read(self, abs_path: str | Path) -> str:
        try:
            return await read_source(abs_path)
        except OSError as exc:
            raise CacheReadError(
                "Failed to read source while validating a cached transform.",
                hint="Check that the file still exists and is readable.",
                context={"operation": "cache_read", "path": os.fspath(abs_path)},
            ) from exc
