from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from knockweb_core.config import (
    CoreConfig,
    load_core_config,
    resolve_configured_paths,
    write_core_config,
)
from knockweb_core.home import ensure_knockweb_layout


def test_load_core_config_defaults_when_missing(tmp_path: Path) -> None:
    paths = ensure_knockweb_layout(tmp_path)
    cfg = load_core_config(paths)
    assert isinstance(cfg, CoreConfig)
    assert cfg.network.bind_host == "127.0.0.1"
    assert cfg.knock.server_port == 62201
    assert cfg.knock.access_port_list == "tcp/22"
    assert cfg.knock.destination is None
    assert cfg.web.use_https_only is True


def test_load_core_config_validation_error(tmp_path: Path) -> None:
    paths = ensure_knockweb_layout(tmp_path)

    paths.config_path.write_text(
        json.dumps({"knock": {"server_port": 70000}}),
        encoding="utf-8",
    )

    with pytest.raises(ValidationError):
        load_core_config(paths)


def test_destination_list_is_keyed_by_position() -> None:
    cfg = CoreConfig.model_validate({"knock": {"destination": ["a.example", "b.example"]}})
    assert cfg.knock.destination == {"0": "a.example", "1": "b.example"}


def test_write_core_config_keeps_explicit_nulls(tmp_path: Path) -> None:
    paths = ensure_knockweb_layout(tmp_path)
    cfg = CoreConfig.model_validate({"knock": {"server_port": None, "access_port_list": None}})

    write_core_config(paths, cfg)
    loaded = load_core_config(paths)

    assert loaded.knock.server_port is None
    assert loaded.knock.access_port_list is None


def test_resolve_configured_paths_creates_overrides(tmp_path: Path) -> None:
    paths = ensure_knockweb_layout(tmp_path)

    cfg = CoreConfig.model_validate({"paths": {"logs_dir": "custom_logs", "tmp_dir": "scratch"}})

    resolved = resolve_configured_paths(paths, cfg)
    assert resolved.logs_dir.is_dir()
    assert resolved.tmp_dir.is_dir()

    assert resolved.logs_dir == (tmp_path / "custom_logs").resolve()
    assert resolved.tmp_dir == (tmp_path / "scratch").resolve()

    # config/ is not configurable.
    assert resolved.config_dir == paths.config_dir
