from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class KnockWebPaths:
    home: Path
    config_dir: Path
    logs_dir: Path
    tmp_dir: Path

    @property
    def config_path(self) -> Path:
        return self.config_dir / "knock.json"


def resolve_knockweb_home(environ: dict[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ

    raw = (env.get("KNOCKWEB_HOME") or "").strip()
    if raw:
        candidate = Path(raw).expanduser()
        if not candidate.is_absolute():
            candidate = (Path.home() / candidate).resolve()
        else:
            candidate = candidate.resolve()
        return candidate

    def default_home() -> Path:
        if sys.platform.startswith("win"):
            base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
            if base:
                return Path(base) / "KnockWeb"
            return Path.home() / "AppData" / "Local" / "KnockWeb"

        if sys.platform == "darwin":
            return Path.home() / "Library" / "Application Support" / "KnockWeb"

        xdg = os.environ.get("XDG_DATA_HOME")
        if xdg:
            return Path(xdg) / "knockweb"
        return Path.home() / ".local" / "share" / "knockweb"

    return default_home().resolve()


def ensure_knockweb_layout(home: Path) -> KnockWebPaths:
    home.mkdir(parents=True, exist_ok=True)

    config_dir = home / "config"
    logs_dir = home / "logs"
    tmp_dir = home / "tmp"

    for path in (config_dir, logs_dir, tmp_dir):
        path.mkdir(parents=True, exist_ok=True)

    return KnockWebPaths(
        home=home,
        config_dir=config_dir,
        logs_dir=logs_dir,
        tmp_dir=tmp_dir,
    )
