import asyncio
import json
from pathlib import Path

import pytest

from conftest import FakeEngine, make_host
from cssmodules.cache import TransformCache
from cssmodules.errors import ValidationError
from cssmodules.observability import DEFAULT_MAX_RECORDS, StructuredLogger


def test_pipeline_logs_every_stage_for_a_module(project: Path, fake_engine: FakeEngine) -> None:
    logger = StructuredLogger()
    host = make_host(project, fake_engine, logger=logger)

    asyncio.run(host.build("./app/entry.js"))

    records = logger.records_for_path("./app/styles/button.module.css")
    assert [record["operation"] for record in records] == [
        "resolve_building",
        "transform",
        "resolve_built",
        "load_built",
    ]
    assert records[1]["extra"] == {"classes": 3, "source_map": True}


def test_watch_mode_logs_cache_traffic(project: Path, fake_engine: FakeEngine) -> None:
    logger = StructuredLogger()
    host = make_host(
        project,
        fake_engine,
        watch=True,
        cache=TransformCache(memory_probe=lambda: 0),
        logger=logger,
    )

    asyncio.run(host.build("./app/entry.js"))
    asyncio.run(host.build("./app/entry.js"))

    operations = [record["operation"] for record in logger.records]
    assert operations.count("cache_miss") == 1
    assert operations.count("cache_store") == 1
    assert operations.count("cache_hit") == 1


def test_records_export_as_json_lines(tmp_path: Path) -> None:
    logger = StructuredLogger()
    logger.log(operation="transform", phase="building", path="./a.module.css", message="done")

    output = logger.to_json_lines(tmp_path / "logs" / "events.jsonl")

    lines = output.read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[0])["operation"] == "transform"


def test_watch_rebuilds_keep_logger_bounded(project: Path, fake_engine: FakeEngine) -> None:
    logger = StructuredLogger(max_records=20)
    host = make_host(
        project,
        fake_engine,
        watch=True,
        cache=TransformCache(memory_probe=lambda: 0),
        logger=logger,
    )

    for _ in range(50):
        asyncio.run(host.build("./app/entry.js"))

    assert len(logger.records) == 20
    assert logger.dropped > 0
    assert logger.records[-1]["operation"] == "load_built"
    assert len(fake_engine.calls) == 1


def test_default_logger_is_bounded() -> None:
    logger = StructuredLogger()
    for index in range(DEFAULT_MAX_RECORDS + 5):
        logger.log(operation="transform", phase="building", path=f"./{index}.module.css", message="done")

    assert len(logger.records) == DEFAULT_MAX_RECORDS
    assert logger.dropped == 5
    assert logger.records[0]["path"] == "./5.module.css"


def test_logger_rejects_empty_buffer() -> None:
    with pytest.raises(ValidationError):
        StructuredLogger(max_records=0)


def test_clear_resets_records_and_drop_count() -> None:
    logger = StructuredLogger(max_records=1)
    logger.log(operation="a", phase=None, path=None, message="first")
    logger.log(operation="b", phase=None, path=None, message="second")
    assert logger.dropped == 1

    logger.clear()

    assert len(logger.records) == 0
    assert logger.dropped == 0
