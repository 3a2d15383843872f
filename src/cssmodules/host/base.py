"""Protocol for bundler hosts that drive resolve/load plugin hooks."""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from cssmodules.models import LoadArgs, LoadResult, ResolveArgs, ResolveResult

ResolveCallback = Callable[[ResolveArgs], Awaitable[ResolveResult | None]]
LoadCallback = Callable[[LoadArgs], Awaitable[LoadResult | None]]


@dataclass(frozen=True, slots=True)
class HostOptions:
    abs_working_dir: str | Path | None = None
    watch: bool = False


class PluginBuild(Protocol):
    initial_options: HostOptions

    def on_resolve(
        self,
        *,
        pattern: re.Pattern[str],
        namespace: str,
        callback: ResolveCallback,
    ) -> None:
        """Register *callback* for import paths matching *pattern* in *namespace*."""

    def on_load(
        self,
        *,
        pattern: re.Pattern[str],
        namespace: str,
        callback: LoadCallback,
    ) -> None:
        """Register *callback* for module paths matching *pattern* in *namespace*."""

    async def resolve(self, path: str, *, resolve_dir: str | None = None) -> ResolveResult:
        """Run the host's own file resolution for *path*."""


@dataclass(frozen=True, slots=True)
class Plugin:
    name: str
    setup: Callable[[PluginBuild], Awaitable[None]]
