from pathlib import Path

import pytest

from cssmodules.paths import PathResolver, absolute, relative, root_dir


def test_root_dir_prefers_configured_directory(tmp_path: Path) -> None:
    assert root_dir(tmp_path) == tmp_path


def test_root_dir_falls_back_to_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert root_dir() == Path.cwd()
    assert root_dir(None).is_absolute()


def test_root_dir_resolves_relative_configuration(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    assert root_dir("nested") == tmp_path / "nested"


def test_relative_rewrites_absolute_paths_against_root(tmp_path: Path) -> None:
    target = tmp_path / "app" / "styles" / "button.module.css"
    assert relative(tmp_path, target) == "./app/styles/button.module.css"


def test_relative_prefixes_bare_relative_paths() -> None:
    assert relative("/root", "app/x.module.css") == "./app/x.module.css"
    assert relative("/root", "./app/x.module.css") == "./app/x.module.css"
    assert relative("/root", "../shared/x.module.css") == "../shared/x.module.css"


def test_relative_normalizes_backslash_separators() -> None:
    assert relative("/root", "app\\styles\\x.module.css") == "./app/styles/x.module.css"


def test_relative_and_absolute_round_trip_outside_root(tmp_path: Path) -> None:
    root = tmp_path / "project"
    target = tmp_path / "shared" / "theme.module.css"

    rel = relative(root, target)

    assert rel == "./../shared/theme.module.css"
    assert absolute(root, rel) == target


def test_path_resolver_binds_build_root(tmp_path: Path) -> None:
    resolver = PathResolver.for_working_dir(tmp_path)
    target = tmp_path / "a" / "b.module.css"

    assert resolver.relative(target) == "./a/b.module.css"
    assert resolver.absolute("./a/b.module.css") == target
    assert resolver.absolute(target) == target
