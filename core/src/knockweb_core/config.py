from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from knockweb_core.home import KnockWebPaths


class NetworkConfig(BaseModel):
    bind_host: str = Field(default="127.0.0.1")
    port: int = Field(default=8080, ge=1, le=65535)


class FwknopConfig(BaseModel):
    cli_path: str = Field(default="/usr/bin/fwknop", description="Path to the fwknop client")
    verbose: bool = Field(
        default=False,
        description="Pass --verbose and show the (masked) command and output after each knock.",
    )


class KnockConfig(BaseModel):
    """Knock parameters. A field left as None is asked for in the form instead."""

    server_port: int | None = Field(default=62201, ge=1, le=65535)
    access_port_list: str | None = Field(
        default="tcp/22",
        description='Ports to open, e.g. "tcp/22,udp/53".',
    )
    destination: str | dict[str, str] | None = Field(
        default=None,
        description=(
            "Fixed destination (';' separates several hosts), a key -> host map offered as a "
            "multi-select list, or None to ask for a host name."
        ),
    )
    encryption_key: str | None = Field(default=None)

    @field_validator("destination", mode="before")
    @classmethod
    def _list_to_map(cls, value: Any) -> Any:
        # A plain list of hosts is keyed by position.
        if isinstance(value, list):
            return {str(i): str(v) for i, v in enumerate(value)}
        return value


class WebConfig(BaseModel):
    use_https_only: bool = Field(default=True)
    url_domain: str | None = Field(
        default=None,
        description=(
            "Host used for the HTTPS redirect. Set it in production; without it the request's "
            "Host header is used when it is a plain host[:port]."
        ),
    )
    path_application: str = Field(default="/")
    title: str = Field(default="KnockWeb")


class PathOverrides(BaseModel):
    logs_dir: str | None = None
    tmp_dir: str | None = None


class LoggingConfig(BaseModel):
    max_size_mb: int = Field(
        default=10, ge=1, description="Max size of a log file in MB before rolling."
    )
    backup_count: int = Field(default=5, ge=1, description="Number of log archives to keep.")


class CoreConfig(BaseModel):
    version: str = Field(default="1")
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    fwknop: FwknopConfig = Field(default_factory=FwknopConfig)
    knock: KnockConfig = Field(default_factory=KnockConfig)
    web: WebConfig = Field(default_factory=WebConfig)
    paths: PathOverrides = Field(default_factory=PathOverrides)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _read_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_core_config(paths: KnockWebPaths) -> CoreConfig:
    """Load config from ${KNOCKWEB_HOME}/config/knock.json.

    - If missing: returns defaults.
    - Validation is performed by Pydantic.
    """

    config_path = paths.config_path
    if not config_path.exists():
        return CoreConfig()

    raw = _read_json(config_path)
    return CoreConfig.model_validate(raw)


def write_core_config(paths: KnockWebPaths, config: CoreConfig) -> None:
    # None is meaningful here (ask in the form), so it is written out explicitly.
    payload = config.model_dump(mode="json")
    paths.config_dir.mkdir(parents=True, exist_ok=True)
    paths.config_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def resolve_configured_paths(paths: KnockWebPaths, config: CoreConfig) -> KnockWebPaths:
    """Apply the logs/tmp directory overrides; config/ itself is not configurable."""

    def _resolve_dir(raw: str | None, default: Path) -> Path:
        if raw is None or not str(raw).strip():
            return default
        candidate = Path(raw).expanduser()
        if not candidate.is_absolute():
            candidate = (paths.home / candidate).resolve()
        else:
            candidate = candidate.resolve()
        return candidate

    logs_dir = _resolve_dir(config.paths.logs_dir, paths.logs_dir)
    tmp_dir = _resolve_dir(config.paths.tmp_dir, paths.tmp_dir)

    for p in (logs_dir, tmp_dir):
        p.mkdir(parents=True, exist_ok=True)

    return KnockWebPaths(
        home=paths.home,
        config_dir=paths.config_dir,
        logs_dir=logs_dir,
        tmp_dir=tmp_dir,
    )
