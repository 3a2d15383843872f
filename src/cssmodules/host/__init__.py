"""Bundler host interfaces and implementations."""

from .base import HostOptions, LoadCallback, Plugin, PluginBuild, ResolveCallback
from .inprocess import BuiltModule, InProcessHost

__all__ = [
    "BuiltModule",
    "HostOptions",
    "InProcessHost",
    "LoadCallback",
    "Plugin",
    "PluginBuild",
    "ResolveCallback",
]
