"""Shared test fixtures."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from cssmodules import EngineOutput, EngineRequest, HostOptions, InProcessHost, css_modules_plugin
from cssmodules.cache import TransformCache
from cssmodules.observability import StructuredLogger

CLASS_PATTERN = re.compile(r"\.([A-Za-z_][\w-]*)\s*\{([^}]*)\}")
COMPOSES_PATTERN = re.compile(r"composes:\s*([^;]+);")

SOURCE_MAP = b'{"version":3,"sources":[],"mappings":""}'


@dataclass(slots=True)
class FakeEngine:
    """Deterministic stand-in for the CSS engine.

    Exports every ``.class { ... }`` rule in source order and honours local
    ``composes: a b;`` declarations.
    """

    source_map: bytes | None = SOURCE_MAP
    exports: dict[str, Any] | None = None
    error: Exception | None = None
    calls: list[EngineRequest] = field(default_factory=list)

    async def transform(self, request: EngineRequest) -> EngineOutput:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        exports = self.exports if self.exports is not None else _derive_exports(request)
        code = f"/* {request.filename} {request.pattern} */\n{request.source}"
        return EngineOutput(code=code.encode("utf-8"), exports=exports, map=self.source_map)


def scoped_name(filename: str, local: str) -> str:
    return f"{local}_{hashlib.sha256(f'{filename}:{local}'.encode()).hexdigest()[:6]}"


def _derive_exports(request: EngineRequest) -> dict[str, Any]:
    exports: dict[str, Any] = {}
    for local, body in CLASS_PATTERN.findall(request.source):
        composes = []
        match = COMPOSES_PATTERN.search(body)
        if match:
            composes = [
                {"name": scoped_name(request.filename, composed)}
                for composed in match.group(1).split()
            ]
        exports[local] = {"name": scoped_name(request.filename, local), "composes": composes}
    return exports


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A build root with an entry importing one CSS module."""
    root = tmp_path / "project"
    styles = root / "app" / "styles"
    styles.mkdir(parents=True)
    (styles / "button.module.css").write_text(
        ".btn { color: red; }\n.Alert { composes: btn; }\n.zzz { margin: 0; }\n",
        encoding="utf-8",
    )
    (root / "app" / "entry.js").write_text(
        'import "./styles/button.module.css";\n',
        encoding="utf-8",
    )
    return root


def make_host(
    root: Path,
    engine: FakeEngine,
    *,
    mode: str = "development",
    watch: bool = False,
    cache: TransformCache | None = None,
    logger: StructuredLogger | None = None,
) -> InProcessHost:
    plugin = css_modules_plugin(
        mode=mode,
        app_directory=root / "app",
        engine=engine,
        cache=cache,
        logger=logger,
    )
    return InProcessHost(
        plugins=(plugin,),
        initial_options=HostOptions(abs_working_dir=root, watch=watch),
    )
