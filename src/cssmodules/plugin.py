"""Virtual-module pipeline serving CSS Modules as a JS module plus a CSS module.

A real ``*.module.css`` path moves through four hooks::

    resolve (file)      -> ./x.module.css  ?css-modules-plugin-building
    load    (building)  -> JS: import "./x.module.css?css-modules-plugin-built"
    resolve (built)     -> ./x.module.css?css-modules-plugin-built
    load    (built)     -> CSS text produced by the building load

Both virtual ids name the same physical file; the suffix keeps them apart in
the host's module graph.
"""

from __future__ import annotations

import base64
import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from cssmodules.cache import TransformCache
from cssmodules.engine import EngineRequest, TransformEngine, make_specifier_resolver
from cssmodules.errors import PluginDataError, ResolutionError, ValidationError
from cssmodules.exports import normalize_exports, parse_exports
from cssmodules.host.base import Plugin, PluginBuild
from cssmodules.models import (
    BUILDING_CSS_SUFFIX,
    BUILT_CSS_SUFFIX,
    FILE_NAMESPACE,
    PLUGIN_NAME,
    PLUGIN_NAMESPACE,
    BuildingData,
    BuiltData,
    LoadArgs,
    LoadResult,
    ResolveArgs,
    ResolveResult,
    TransformResult,
    VirtualModuleId,
    foreign_plugin_data,
)
from cssmodules.observability import StructuredLogger
from cssmodules.options import PluginOptions
from cssmodules.paths import PathResolver, read_source, to_posix

MODULES_CSS_PATTERN = re.compile(r"\.module\.css$")
BUILT_MODULES_CSS_PATTERN = re.compile(
    r"\.module\.css" + re.escape(BUILT_CSS_SUFFIX) + "$",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class BuildContext:
    """Per-build state created at plugin setup."""

    build_root: Path
    app_directory: Path
    paths: PathResolver
    cache: TransformCache
    logger: StructuredLogger = field(default_factory=StructuredLogger)

    def relative(self, target: str | Path) -> str:
        return self.paths.relative(target)


def built_import_path(file_name: str) -> str:
    """Return the specifier the generated JS uses to import its built CSS."""
    name = to_posix(file_name).strip().replace(BUILDING_CSS_SUFFIX, "")
    return f"./{name}{BUILT_CSS_SUFFIX}"


def inline_source_map(css: str, source_map: bytes | None) -> str:
    if not source_map:
        return css
    encoded = base64.b64encode(source_map).decode("ascii")
    return f"{css}\n/*# sourceMappingURL=data:application/json;base64,{encoded} */"


class VirtualModulePipeline:
    """Owns the four resolve/load hooks and the build's transform cache."""

    def __init__(
        self,
        options: PluginOptions,
        engine: TransformEngine,
        *,
        cache: TransformCache | None = None,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.options = options
        self.engine = engine
        self.logger = logger or StructuredLogger()
        self._cache = cache
        self._build: PluginBuild | None = None
        self._context: BuildContext | None = None

    @property
    def context(self) -> BuildContext:
        if self._context is None:
            raise ValidationError(
                "The css-modules pipeline was used before setup().",
                hint="Register the plugin with the host so setup() runs first.",
            )
        return self._context

    @property
    def build(self) -> PluginBuild:
        if self._build is None:
            raise ValidationError("The css-modules pipeline has no host build attached.")
        return self._build

    @property
    def use_cache(self) -> bool:
        # Only watch-mode builds consult or fill the cache.
        return bool(self.build.initial_options.watch)

    async def setup(self, build: PluginBuild) -> None:
        paths = PathResolver.for_working_dir(build.initial_options.abs_working_dir)
        cache = self._cache if self._cache is not None else TransformCache()
        if cache.logger is None:
            cache.logger = self.logger
        self._build = build
        self._context = BuildContext(
            build_root=paths.build_root,
            app_directory=self.options.app_directory,
            paths=paths,
            cache=cache,
            logger=self.logger,
        )
        build.on_resolve(
            pattern=MODULES_CSS_PATTERN,
            namespace=FILE_NAMESPACE,
            callback=self.resolve_source,
        )
        build.on_load(
            pattern=MODULES_CSS_PATTERN,
            namespace=PLUGIN_NAMESPACE,
            callback=self.load_building,
        )
        build.on_resolve(
            pattern=BUILT_MODULES_CSS_PATTERN,
            namespace=PLUGIN_NAMESPACE,
            callback=self.resolve_built,
        )
        build.on_load(
            pattern=BUILT_MODULES_CSS_PATTERN,
            namespace=PLUGIN_NAMESPACE,
            callback=self.load_built,
        )

    # ── Stage 1: real file -> building ──────────────────────────────

    async def resolve_source(self, args: ResolveArgs) -> ResolveResult:
        resolved = await self.build.resolve(args.path, resolve_dir=args.resolve_dir)
        module_id = VirtualModuleId(
            relative_path=self.context.relative(resolved.path),
            phase="building",
        )
        self.logger.log(
            operation="resolve_building",
            phase="building",
            path=module_id.relative_path,
            message="Resolved CSS module source to its building id.",
        )
        return ResolveResult(
            path=module_id.relative_path,
            namespace=PLUGIN_NAMESPACE,
            suffix=module_id.suffix,
            external=False,
            side_effects=True,
            plugin_data=BuildingData(
                relative_path_to_build_root=module_id.relative_path,
                extra=foreign_plugin_data(args.plugin_data),
            ),
            plugin_name=PLUGIN_NAME,
        )

    # ── Stage 2: load building -> JS ────────────────────────────────

    async def load_building(self, args: LoadArgs) -> LoadResult:
        context = self.context
        abs_path = context.paths.absolute(args.path)
        use_cache = self.use_cache

        if use_cache:
            cached = await context.cache.get(abs_path)
            if cached is not None:
                self.logger.log(
                    operation="cache_hit",
                    phase="building",
                    path=context.relative(abs_path),
                    message="Reusing cached transform; source text unchanged.",
                )
                return cached
            self.logger.log(
                operation="cache_miss",
                phase="building",
                path=context.relative(abs_path),
                message="No valid cached transform.",
            )

        if args.plugin_data is None:
            incoming = BuildingData(relative_path_to_build_root=context.relative(abs_path))
        else:
            incoming = BuildingData.coerce(args.plugin_data)

        transformed = await self.build_css_modules_js(abs_path)
        result = LoadResult(
            contents=transformed.js,
            loader="js",
            resolve_dir=transformed.resolve_dir,
            plugin_data=BuiltData(
                relative_path_to_build_root=incoming.relative_path_to_build_root,
                css=transformed.css,
                exports=transformed.exports,
                extra=incoming.extra,
            ),
            plugin_name=PLUGIN_NAME,
        )

        if use_cache:
            await context.cache.set(abs_path, result, transformed.origin_css)
            self.logger.log(
                operation="cache_store",
                phase="building",
                path=context.relative(abs_path),
                message="Stored transform result.",
                extra={"entries": len(context.cache)},
            )
        return result

    async def build_css_modules_js(self, abs_path: Path) -> TransformResult:
        """Run the engine over *abs_path* and assemble the generated JS and CSS."""
        context = self.context
        filename = context.relative(abs_path)
        try:
            origin_css = await read_source(abs_path)
        except OSError as exc:
            raise ResolutionError(
                "Failed to read CSS module source.",
                hint="Check that the file exists and is readable.",
                context={"operation": "load", "path": os.fspath(abs_path)},
            ) from exc

        request = EngineRequest(
            filename=filename,
            source=origin_css,
            pattern=self.options.pattern,
            resolver=make_specifier_resolver(context.app_directory),
        )
        try:
            output = await self.engine.transform(request)
        except Exception as exc:
            self.logger.log(
                operation="transform",
                phase="building",
                path=filename,
                message="CSS engine rejected the module.",
                level="error",
                extra={"error": str(exc)},
            )
            raise

        exports = parse_exports(output.exports)
        mapping = normalize_exports(exports)
        js = "\n".join(
            [
                f'import "{built_import_path(abs_path.name)}";',
                f"export default {json.dumps(mapping, ensure_ascii=False, separators=(',', ':'))};",
            ]
        )
        self.logger.log(
            operation="transform",
            phase="building",
            path=filename,
            message="Transformed CSS module.",
            extra={"classes": len(mapping), "source_map": output.map is not None},
        )
        return TransformResult(
            js=js,
            css=inline_source_map(output.code.decode("utf-8"), output.map),
            exports=exports,
            origin_css=origin_css,
            resolve_dir=str(abs_path.parent),
        )

    # ── Stage 3: built import -> built id ───────────────────────────

    async def resolve_built(self, args: ResolveArgs) -> ResolveResult:
        data = BuiltData.coerce(args.plugin_data)
        module_id = VirtualModuleId(relative_path=data.relative_path_to_build_root, phase="built")
        self.logger.log(
            operation="resolve_built",
            phase="built",
            path=module_id.relative_path,
            message="Resolved built CSS import.",
        )
        return ResolveResult(
            path=str(module_id),
            namespace=PLUGIN_NAMESPACE,
            external=False,
            side_effects=True,
            plugin_data=data,
            plugin_name=PLUGIN_NAME,
        )

    # ── Stage 4: load built -> CSS ──────────────────────────────────

    async def load_built(self, args: LoadArgs) -> LoadResult:
        data = BuiltData.coerce(args.plugin_data)
        module_id = VirtualModuleId.parse(args.path)
        if module_id.phase != "built" or module_id.relative_path != data.relative_path_to_build_root:
            raise PluginDataError(
                "Built CSS was requested for a module its plugin data does not describe.",
                hint="Load built ids only through the resolve step of the css-modules plugin.",
                context={
                    "operation": "load_built",
                    "path": args.path,
                    "expected": data.relative_path_to_build_root,
                },
            )
        abs_path = self.context.paths.absolute(module_id.relative_path)
        self.logger.log(
            operation="load_built",
            phase=module_id.phase,
            path=module_id.relative_path,
            message="Serving generated CSS.",
        )
        return LoadResult(
            contents=data.css,
            loader="css",
            resolve_dir=str(abs_path.parent),
            plugin_data=data,
            plugin_name=PLUGIN_NAME,
        )


def css_modules_plugin(
    *,
    mode: str,
    app_directory: str | Path,
    engine: TransformEngine,
    cache: TransformCache | None = None,
    logger: StructuredLogger | None = None,
) -> Plugin:
    """Create the host plugin; ``mode="production"`` selects hash-only class names."""
    pipeline = VirtualModulePipeline(
        PluginOptions.for_mode(mode, app_directory),
        engine,
        cache=cache,
        logger=logger,
    )
    return Plugin(name=PLUGIN_NAME, setup=pipeline.setup)


__all__ = [
    "BUILT_MODULES_CSS_PATTERN",
    "MODULES_CSS_PATTERN",
    "BuildContext",
    "VirtualModulePipeline",
    "built_import_path",
    "css_modules_plugin",
    "inline_source_map",
]
