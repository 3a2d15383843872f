"""Public package entrypoint for the CSS Modules virtual-module pipeline."""

from .cache import TransformCache
from .engine import EngineOutput, EngineRequest, TransformEngine, make_specifier_resolver
from .errors import (
    CacheReadError,
    CssModulesError,
    ErrorCode,
    PluginDataError,
    ResolutionError,
    TransformError,
    ValidationError,
)
from .exports import normalize_exports
from .host import HostOptions, InProcessHost, Plugin, PluginBuild
from .models import (
    BUILDING_CSS_SUFFIX,
    BUILT_CSS_SUFFIX,
    PLUGIN_NAME,
    PLUGIN_NAMESPACE,
    BuildingData,
    BuiltData,
    ComposedClass,
    CssExport,
    LoadArgs,
    LoadResult,
    ResolveArgs,
    ResolveResult,
    TransformResult,
    VirtualModuleId,
)
from .observability import StructuredLogger
from .options import PluginOptions
from .paths import PathResolver
from .plugin import BuildContext, VirtualModulePipeline, css_modules_plugin

__all__ = [
    "BUILDING_CSS_SUFFIX",
    "BUILT_CSS_SUFFIX",
    "PLUGIN_NAME",
    "PLUGIN_NAMESPACE",
    "BuildContext",
    "BuildingData",
    "BuiltData",
    "CacheReadError",
    "ComposedClass",
    "CssExport",
    "CssModulesError",
    "EngineOutput",
    "EngineRequest",
    "ErrorCode",
    "HostOptions",
    "InProcessHost",
    "LoadArgs",
    "LoadResult",
    "PathResolver",
    "Plugin",
    "PluginBuild",
    "PluginDataError",
    "PluginOptions",
    "ResolutionError",
    "ResolveArgs",
    "ResolveResult",
    "StructuredLogger",
    "TransformCache",
    "TransformEngine",
    "TransformError",
    "TransformResult",
    "ValidationError",
    "VirtualModuleId",
    "VirtualModulePipeline",
    "css_modules_plugin",
    "make_specifier_resolver",
    "normalize_exports",
]
