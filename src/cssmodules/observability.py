"""Structured event records for the pipeline.

The pipeline outlives any single build pass in watch mode, so its logger
keeps only the most recent ``max_records`` events and counts what it dropped.
"""

from __future__ import annotations

import json
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cssmodules.errors import ValidationError

DEFAULT_MAX_RECORDS = 2048


@dataclass(slots=True)
class StructuredLogger:
    max_records: int = DEFAULT_MAX_RECORDS
    records: deque[dict[str, Any]] = field(init=False, repr=False)
    dropped: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        if self.max_records < 1:
            raise ValidationError(
                "StructuredLogger needs room for at least one record.",
                context={"max_records": str(self.max_records)},
            )
        self.records = deque(maxlen=self.max_records)

    def log(
        self,
        *,
        operation: str,
        phase: str | None,
        path: str | None,
        message: str,
        level: str = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        if len(self.records) == self.max_records:
            self.dropped += 1
        event: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "phase": phase,
            "path": path,
            "message": message,
        }
        if extra is not None:
            event["extra"] = extra
        self.records.append(event)

    def records_for_path(self, path: str) -> list[dict[str, Any]]:
        return [event for event in self.records if event["path"] == path]

    def records_for_operation(self, operation: str) -> list[dict[str, Any]]:
        return [event for event in self.records if event["operation"] == operation]

    def clear(self) -> None:
        self.records.clear()
        self.dropped = 0

    def to_json_lines(self, path: str | Path) -> Path:
        """Write retained events, oldest first, one JSON object per line."""
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("w", encoding="utf-8") as handle:
            for event in self.records:
                handle.write(json.dumps(event, sort_keys=True) + "\n")
        return output_path


__all__ = ["DEFAULT_MAX_RECORDS", "StructuredLogger"]
