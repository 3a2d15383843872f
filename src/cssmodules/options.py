"""Plugin configuration and naming-pattern selection."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from cssmodules.errors import ValidationError

Mode = Literal["production", "development", "test"]

PRODUCTION_PATTERN = "[hash]"
DEVELOPMENT_PATTERN = "[name]_[local]_[hash]"


def pattern_for_mode(mode: str) -> str:
    """Hash-only class names in production, readable debug names otherwise."""
    return PRODUCTION_PATTERN if mode == "production" else DEVELOPMENT_PATTERN


@dataclass(frozen=True, slots=True)
class PluginOptions:
    pattern: str
    app_directory: Path

    @classmethod
    def for_mode(cls, mode: str, app_directory: str | Path) -> PluginOptions:
        if not app_directory:
            raise ValidationError(
                "css_modules_plugin() requires an app_directory.",
                hint="Pass the absolute directory that '~/' specifiers resolve against.",
                context={"mode": mode},
            )
        if not os.path.isabs(app_directory):
            raise ValidationError(
                "app_directory must be an absolute path.",
                hint="Resolve the app directory before configuring the plugin.",
                context={"app_directory": str(app_directory)},
            )
        return cls(pattern=pattern_for_mode(mode), app_directory=Path(app_directory))


__all__ = [
    "DEVELOPMENT_PATTERN",
    "PRODUCTION_PATTERN",
    "Mode",
    "PluginOptions",
    "pattern_for_mode",
]
