"""In-process bundler host for testing and embedding.

Runs registered resolve/load hooks the way an esbuild-style bundler does but
stops short of bundling: every module reachable from the entries is resolved
and loaded once per build and returned in discovery order. Suitable for:
- Unit tests that walk the virtual module graph
- Tooling that needs generated JS/CSS without a bundler installed
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from pathlib import Path

from cssmodules.errors import ResolutionError
from cssmodules.host.base import HostOptions, LoadCallback, Plugin, ResolveCallback
from cssmodules.models import FILE_NAMESPACE, LoadArgs, LoadResult, Loader, ResolveArgs, ResolveResult
from cssmodules.paths import absolute, read_source, root_dir

IMPORT_PATTERN = re.compile(r'^import\s+"([^"]+)";', re.MULTILINE)

# Map file suffixes to loaders for modules no plugin claims
LOADERS_BY_SUFFIX: dict[str, Loader] = {
    ".css": "css",
    ".js": "js",
    ".mjs": "js",
}


@dataclass(frozen=True, slots=True)
class _Hook:
    pattern: re.Pattern[str]
    namespace: str
    callback: ResolveCallback | LoadCallback


@dataclass(frozen=True, slots=True)
class BuiltModule:
    namespace: str
    path: str
    suffix: str
    loader: Loader
    contents: str
    resolve_dir: str | None = None
    plugin_data: object = None

    @property
    def key(self) -> str:
        return f"{self.namespace}:{self.path}{self.suffix}"


@dataclass(slots=True)
class InProcessHost:
    """Host that walks the module graph in-process."""

    plugins: tuple[Plugin, ...] = ()
    initial_options: HostOptions = field(default_factory=HostOptions)
    _resolve_hooks: list[_Hook] = field(init=False, default_factory=list, repr=False)
    _load_hooks: list[_Hook] = field(init=False, default_factory=list, repr=False)
    _set_up: bool = field(init=False, default=False, repr=False)

    def on_resolve(
        self,
        *,
        pattern: re.Pattern[str],
        namespace: str,
        callback: ResolveCallback,
    ) -> None:
        self._resolve_hooks.append(_Hook(pattern=pattern, namespace=namespace, callback=callback))

    def on_load(
        self,
        *,
        pattern: re.Pattern[str],
        namespace: str,
        callback: LoadCallback,
    ) -> None:
        self._load_hooks.append(_Hook(pattern=pattern, namespace=namespace, callback=callback))

    async def setup(self) -> None:
        if self._set_up:
            return
        self._set_up = True
        for plugin in self.plugins:
            await plugin.setup(self)

    async def resolve(self, path: str, *, resolve_dir: str | None = None) -> ResolveResult:
        base = resolve_dir or root_dir(self.initial_options.abs_working_dir)
        candidate = absolute(base, path)
        if not await asyncio.to_thread(candidate.is_file):
            raise ResolutionError(
                "Could not resolve module path.",
                hint="Check the import specifier and the importer's directory.",
                context={"operation": "resolve", "path": path, "resolve_dir": str(base)},
            )
        return ResolveResult(path=str(candidate), namespace=FILE_NAMESPACE)

    async def resolve_import(self, args: ResolveArgs) -> ResolveResult:
        for hook in self._resolve_hooks:
            if hook.namespace == args.namespace and hook.pattern.search(args.path):
                result = await hook.callback(args)  # type: ignore[arg-type]
                if result is not None:
                    return result
        if args.namespace != FILE_NAMESPACE:
            raise ResolutionError(
                "No plugin resolved an import from a virtual module.",
                context={"operation": "resolve", "path": args.path, "namespace": args.namespace},
            )
        return await self.resolve(args.path, resolve_dir=args.resolve_dir)

    async def load(self, resolved: ResolveResult) -> LoadResult:
        args = LoadArgs(
            path=resolved.path,
            namespace=resolved.namespace,
            suffix=resolved.suffix,
            plugin_data=resolved.plugin_data,
        )
        for hook in self._load_hooks:
            if hook.namespace == args.namespace and hook.pattern.search(args.path):
                result = await hook.callback(args)  # type: ignore[arg-type]
                if result is not None:
                    return result
        if resolved.namespace != FILE_NAMESPACE:
            raise ResolutionError(
                "No plugin loaded a virtual module.",
                context={"operation": "load", "path": resolved.path, "namespace": resolved.namespace},
            )
        path = Path(resolved.path)
        contents = await read_source(path)
        return LoadResult(
            contents=contents,
            loader=LOADERS_BY_SUFFIX.get(path.suffix, "js"),
            resolve_dir=str(path.parent),
        )

    async def build(self, *entries: str, resolve_dir: str | None = None) -> tuple[BuiltModule, ...]:
        """Resolve and load every module reachable from *entries*.

        Calling ``build`` again reuses the already set-up plugins, which is
        how a watch-mode rebuild reaches a plugin's process-lifetime state.
        """
        await self.setup()
        seen: set[str] = set()
        modules: list[BuiltModule] = []
        await asyncio.gather(
            *(
                self._visit(ResolveArgs(path=entry, resolve_dir=resolve_dir), seen, modules)
                for entry in entries
            )
        )
        return tuple(modules)

    async def _visit(self, args: ResolveArgs, seen: set[str], modules: list[BuiltModule]) -> None:
        resolved = await self.resolve_import(args)
        if resolved.external:
            return
        key = f"{resolved.namespace}:{resolved.path}{resolved.suffix}"
        if key in seen:
            return
        seen.add(key)
        loaded = await self.load(resolved)
        modules.append(
            BuiltModule(
                namespace=resolved.namespace,
                path=resolved.path,
                suffix=resolved.suffix,
                loader=loaded.loader,
                contents=loaded.contents,
                resolve_dir=loaded.resolve_dir,
                plugin_data=loaded.plugin_data,
            )
        )
        if loaded.loader != "js":
            return
        for specifier in IMPORT_PATTERN.findall(loaded.contents):
            await self._visit(
                ResolveArgs(
                    path=specifier,
                    namespace=resolved.namespace,
                    resolve_dir=loaded.resolve_dir,
                    importer=resolved.path,
                    plugin_data=loaded.plugin_data,
                ),
                seen,
                modules,
            )
