"""Flatten the engine's class export table into a deterministic mapping."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from cssmodules.errors import TransformError
from cssmodules.models import ComposedClass, CssExport


def parse_exports(raw: Mapping[str, CssExport | Mapping[str, Any]]) -> dict[str, CssExport]:
    """Coerce an engine export table into typed records, keeping engine order."""
    return {str(original): _parse_export(str(original), entry) for original, entry in raw.items()}


def normalize_exports(exports: Mapping[str, CssExport | Mapping[str, Any]]) -> dict[str, str]:
    """Return ``{original class: "generated composed..."}`` in sorted key order.

    Engines may emit keys in any order; sorting keeps the generated JS
    byte-identical across builds and machines.
    """
    parsed = parse_exports(exports)
    mapping: dict[str, str] = {}
    for original in sorted(parsed):
        entry = parsed[original]
        if entry.composes:
            composed = " ".join(composed_class.name for composed_class in entry.composes)
            mapping[original] = f"{entry.name} {composed}"
        else:
            mapping[original] = entry.name
    return mapping


def _parse_export(original: str, entry: CssExport | Mapping[str, Any]) -> CssExport:
    if isinstance(entry, CssExport):
        return entry
    if isinstance(entry, Mapping):
        name = entry.get("name")
        composes = entry.get("composes") or ()
        if isinstance(name, str) and name:
            return CssExport(
                name=name,
                composes=tuple(_parse_composed(original, item) for item in composes),
            )
    raise TransformError(
        "Engine export entry has no generated class name.",
        hint="The CSS engine must report a 'name' for every exported class.",
        context={"class": original},
    )


def _parse_composed(original: str, item: object) -> ComposedClass:
    if isinstance(item, ComposedClass):
        return item
    if isinstance(item, Mapping) and isinstance(item.get("name"), str):
        return ComposedClass(name=item["name"])
    raise TransformError(
        "Engine compose entry has no generated class name.",
        context={"class": original},
    )


__all__ = ["normalize_exports", "parse_exports"]
