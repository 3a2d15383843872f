"""Build-root path helpers for stable, machine-independent module ids.

Every id handed to the engine or to the host is expressed relative to the
build root with ``/`` separators, so the same source at the same relative
position hashes identically on any machine and any OS.
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from pathlib import Path

CURRENT_DIR_PREFIX = "./"


def root_dir(abs_working_dir: str | Path | None = None) -> Path:
    """Return the absolute working directory of a build.

    An explicitly configured directory wins over the process cwd; a relative
    configured directory is resolved against the cwd.
    """
    base = Path(abs_working_dir) if abs_working_dir else Path.cwd()
    return Path(os.path.abspath(base))


def to_posix(path: str | Path) -> str:
    return str(path).replace("\\", "/")


def relative(build_root: str | Path, target: str | Path) -> str:
    """Return the root-relative id for *target*.

    Relative targets are returned unchanged apart from a leading ``./`` when
    they do not already start with ``.``; absolute targets are rewritten
    relative to *build_root*.
    """
    if not os.path.isabs(target):
        text = to_posix(target)
        return text if text.startswith(".") else f"{CURRENT_DIR_PREFIX}{text}"
    return f"{CURRENT_DIR_PREFIX}{to_posix(os.path.relpath(target, build_root))}"


def absolute(build_root: str | Path, path: str | Path) -> Path:
    """Join a root-relative id back onto *build_root*, collapsing ``.`` and ``..``."""
    if os.path.isabs(path):
        return Path(os.path.normpath(path))
    return Path(os.path.normpath(os.path.join(build_root, *to_posix(path).split("/"))))


async def read_source(path: str | Path) -> str:
    """Read a source file as UTF-8 without blocking the event loop.

    Undecodable bytes become U+FFFD, so a file that exists always reads.
    """
    return await asyncio.to_thread(Path(path).read_text, encoding="utf-8", errors="replace")


@dataclass(frozen=True, slots=True)
class PathResolver:
    """Binds the path helpers to one build root."""

    build_root: Path

    @classmethod
    def for_working_dir(cls, abs_working_dir: str | Path | None = None) -> PathResolver:
        return cls(build_root=root_dir(abs_working_dir))

    def relative(self, target: str | Path) -> str:
        return relative(self.build_root, target)

    def absolute(self, path: str | Path) -> Path:
        return absolute(self.build_root, path)


__all__ = [
    "CURRENT_DIR_PREFIX",
    "PathResolver",
    "absolute",
    "read_source",
    "relative",
    "root_dir",
    "to_posix",
]
