"""Core typed dataclasses for hook arguments, hook results and phase carriers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

from cssmodules.errors import PluginDataError

Phase = Literal["building", "built"]
Loader = Literal["js", "css"]

PLUGIN_NAME = "css-modules-plugin"
PLUGIN_NAMESPACE = f"{PLUGIN_NAME}-namespace"
FILE_NAMESPACE = "file"
BUILDING_CSS_SUFFIX = f"?{PLUGIN_NAME}-building"
BUILT_CSS_SUFFIX = f"?{PLUGIN_NAME}-built"

PHASE_SUFFIXES: dict[Phase, str] = {
    "building": BUILDING_CSS_SUFFIX,
    "built": BUILT_CSS_SUFFIX,
}

RELATIVE_PATH_KEY = "relative_path_to_build_root"
CSS_KEY = "css"
EXPORTS_KEY = "exports"


@dataclass(frozen=True, slots=True)
class VirtualModuleId:
    """A root-relative id tagged with the phase it is served in."""

    relative_path: str
    phase: Phase

    @property
    def suffix(self) -> str:
        return PHASE_SUFFIXES[self.phase]

    def __str__(self) -> str:
        return f"{self.relative_path}{self.suffix}"

    @classmethod
    def parse(cls, value: str) -> VirtualModuleId:
        for phase, suffix in PHASE_SUFFIXES.items():
            if value.endswith(suffix):
                return cls(relative_path=value[: -len(suffix)], phase=phase)
        raise PluginDataError(
            "Path is not a virtual CSS module id.",
            hint=f"Virtual ids end in {BUILDING_CSS_SUFFIX!r} or {BUILT_CSS_SUFFIX!r}.",
            context={"path": value},
        )


@dataclass(frozen=True, slots=True)
class ComposedClass:
    name: str


@dataclass(frozen=True, slots=True)
class CssExport:
    """One class entry of the engine's export table."""

    name: str
    composes: tuple[ComposedClass, ...] = ()


@dataclass(frozen=True, slots=True)
class ResolveArgs:
    path: str
    namespace: str = FILE_NAMESPACE
    resolve_dir: str | None = None
    importer: str = ""
    plugin_data: object = None


@dataclass(frozen=True, slots=True)
class ResolveResult:
    path: str
    namespace: str = FILE_NAMESPACE
    suffix: str = ""
    external: bool = False
    side_effects: bool | None = None
    plugin_data: object = None
    plugin_name: str | None = None


@dataclass(frozen=True, slots=True)
class LoadArgs:
    path: str
    namespace: str = FILE_NAMESPACE
    suffix: str = ""
    plugin_data: object = None


@dataclass(frozen=True, slots=True)
class LoadResult:
    contents: str
    loader: Loader
    resolve_dir: str | None = None
    plugin_data: object = None
    plugin_name: str | None = None


@dataclass(frozen=True, slots=True)
class TransformResult:
    """Output of one engine run for a building-phase module."""

    js: str
    css: str
    exports: Mapping[str, CssExport]
    origin_css: str
    resolve_dir: str


# ── Phase carriers ──────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class BuildingData:
    """Plugin data handed from the source resolve to the building load."""

    relative_path_to_build_root: str
    extra: Mapping[str, object] = field(default_factory=dict)

    @classmethod
    def coerce(cls, data: object) -> BuildingData:
        if isinstance(data, (BuildingData, BuiltData)):
            return cls(
                relative_path_to_build_root=data.relative_path_to_build_root,
                extra=data.extra,
            )
        if isinstance(data, Mapping):
            relative_path = data.get(RELATIVE_PATH_KEY)
            if isinstance(relative_path, str) and relative_path:
                return cls(
                    relative_path_to_build_root=relative_path,
                    extra=foreign_plugin_data(data),
                )
        raise PluginDataError(
            "Building-phase plugin data is missing the build-root relative path.",
            hint="Resolve the source through the css-modules plugin before loading it.",
            context={"received": type(data).__name__},
        )


@dataclass(frozen=True, slots=True)
class BuiltData:
    """Plugin data handed from the building load to the built resolve/load."""

    relative_path_to_build_root: str
    css: str
    exports: Mapping[str, CssExport] = field(default_factory=dict)
    extra: Mapping[str, object] = field(default_factory=dict)

    @classmethod
    def coerce(cls, data: object) -> BuiltData:
        if isinstance(data, BuiltData):
            return data
        if isinstance(data, Mapping):
            relative_path = data.get(RELATIVE_PATH_KEY)
            css = data.get(CSS_KEY)
            exports = data.get(EXPORTS_KEY, {})
            if (
                isinstance(relative_path, str)
                and relative_path
                and isinstance(css, str)
                and isinstance(exports, Mapping)
            ):
                return cls(
                    relative_path_to_build_root=relative_path,
                    css=css,
                    exports=exports,
                    extra=foreign_plugin_data(data),
                )
        raise PluginDataError(
            "Built-phase plugin data is missing the generated CSS.",
            hint="Import the built module only from the JS generated for its source.",
            context={"received": type(data).__name__},
        )


def foreign_plugin_data(data: object) -> dict[str, object]:
    """Return the keys of *data* that belong to other plugins."""
    if isinstance(data, (BuildingData, BuiltData)):
        return dict(data.extra)
    if isinstance(data, Mapping):
        own = {RELATIVE_PATH_KEY, CSS_KEY, EXPORTS_KEY}
        return {str(k): v for k, v in data.items() if k not in own}
    return {}


__all__ = [
    "BUILDING_CSS_SUFFIX",
    "BUILT_CSS_SUFFIX",
    "FILE_NAMESPACE",
    "PLUGIN_NAME",
    "PLUGIN_NAMESPACE",
    "BuildingData",
    "BuiltData",
    "ComposedClass",
    "CssExport",
    "LoadArgs",
    "LoadResult",
    "Loader",
    "Phase",
    "ResolveArgs",
    "ResolveResult",
    "TransformResult",
    "VirtualModuleId",
    "foreign_plugin_data",
]
