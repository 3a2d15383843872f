"""Typed pipeline error model with stable, machine-readable error codes.

Each subclass maps to one failure class the host can act on: a module that
cannot be found, an engine result that cannot be used, a cache freshness read
that failed, or plugin data that does not belong to the phase it reached.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import ClassVar


class ErrorCode(StrEnum):
    VALIDATION = "E_VALIDATION"
    RESOLUTION = "E_RESOLUTION"
    TRANSFORM = "E_TRANSFORM"
    CACHE_READ = "E_CACHE_READ"
    PLUGIN_DATA = "E_PLUGIN_DATA"


class CssModulesError(Exception):
    """Base error carrying a stable code, an optional hint and string context."""

    default_code: ClassVar[ErrorCode] = ErrorCode.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code: str = self.default_code.value
        self.hint = hint
        self.context: dict[str, str] = dict(context or {})

    @property
    def path(self) -> str | None:
        """The module path the failure concerns, when one was recorded."""
        return self.context.get("path")

    def __str__(self) -> str:
        lines = [f"[{self.code}] {self.message}"]
        if self.hint:
            lines.append(f"Hint: {self.hint}")
        lines.extend(f"  {key}: {value}" for key, value in self.context.items() if value)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ValidationError(CssModulesError):
    default_code = ErrorCode.VALIDATION


class ResolutionError(CssModulesError):
    default_code = ErrorCode.RESOLUTION


class TransformError(CssModulesError):
    default_code = ErrorCode.TRANSFORM


class CacheReadError(CssModulesError):
    default_code = ErrorCode.CACHE_READ


class PluginDataError(CssModulesError):
    default_code = ErrorCode.PLUGIN_DATA


__all__ = [
    "CacheReadError",
    "CssModulesError",
    "ErrorCode",
    "PluginDataError",
    "ResolutionError",
    "TransformError",
    "ValidationError",
]
