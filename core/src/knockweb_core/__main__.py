from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

import uvicorn

from knockweb_core.app import create_app
from knockweb_core.config import load_core_config, resolve_configured_paths
from knockweb_core.home import ensure_knockweb_layout, resolve_knockweb_home


def main() -> None:
    home = resolve_knockweb_home()
    paths = ensure_knockweb_layout(home)
    config = load_core_config(paths)
    paths = resolve_configured_paths(paths, config)

    log_file = paths.logs_dir / "knockweb.log"
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            RotatingFileHandler(
                log_file,
                maxBytes=config.logging.max_size_mb * 1024 * 1024,
                backupCount=config.logging.backup_count,
            ),
            logging.StreamHandler(),
        ],
    )

    host = os.environ.get("KNOCKWEB_BIND") or config.network.bind_host

    env_port = os.environ.get("KNOCKWEB_PORT")
    port = int(env_port) if env_port else config.network.port

    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    main()
