from __future__ import annotations

from pathlib import Path

from knockweb_core.home import ensure_knockweb_layout, resolve_knockweb_home


def test_resolve_knockweb_home_from_env(tmp_path: Path) -> None:
    home = resolve_knockweb_home({"KNOCKWEB_HOME": str(tmp_path)})
    assert home == tmp_path.resolve()


def test_ensure_knockweb_layout_creates_required_dirs(tmp_path: Path) -> None:
    paths = ensure_knockweb_layout(tmp_path)

    assert paths.home.exists()
    assert paths.config_dir.is_dir()
    assert paths.logs_dir.is_dir()
    assert paths.tmp_dir.is_dir()
    assert paths.config_path == tmp_path / "config" / "knock.json"
