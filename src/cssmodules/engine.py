"""Contract for the external CSS transform engine."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from cssmodules.models import CssExport

APP_ALIAS_PREFIX = "~/"

SpecifierResolver = Callable[[str, str], str]


@dataclass(frozen=True, slots=True)
class EngineRequest:
    """Inputs for one bundle-and-scope run over a CSS module source."""

    filename: str
    source: str
    pattern: str
    resolver: SpecifierResolver
    minify: bool = False
    source_map: bool = True
    analyze_dependencies: bool = False
    dashed_idents: bool = False


@dataclass(frozen=True, slots=True)
class EngineOutput:
    code: bytes
    exports: Mapping[str, CssExport | Mapping[str, Any]] = field(default_factory=dict)
    map: bytes | None = None


class TransformEngine(Protocol):
    async def transform(self, request: EngineRequest) -> EngineOutput:
        """Bundle *request.source*, scope its classes and return code, exports and map."""


def make_specifier_resolver(app_directory: str | Path) -> SpecifierResolver:
    """Return the ``(specifier, from_path) -> path`` resolver handed to the engine.

    ``~/``-prefixed specifiers resolve against *app_directory* regardless of
    the importer; everything else resolves against the importer's directory.
    """
    root = os.fspath(app_directory)

    def resolve(specifier: str, from_path: str) -> str:
        if specifier.startswith(APP_ALIAS_PREFIX):
            return os.path.normpath(os.path.join(root, specifier[len(APP_ALIAS_PREFIX) :]))
        return os.path.normpath(os.path.join(os.path.dirname(from_path), specifier))

    return resolve


__all__ = [
    "APP_ALIAS_PREFIX",
    "EngineOutput",
    "EngineRequest",
    "SpecifierResolver",
    "TransformEngine",
    "make_specifier_resolver",
]
