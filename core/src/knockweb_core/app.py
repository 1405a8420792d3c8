from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.staticfiles import StaticFiles

from knockweb_core import __version__
from knockweb_core.config import load_core_config, resolve_configured_paths
from knockweb_core.home import ensure_knockweb_layout, resolve_knockweb_home
from knockweb_core.responses import fail, status_to_code
from knockweb_core.ui.router import STATIC_DIR as UI_STATIC_DIR
from knockweb_core.ui.router import router as ui_router

logger = logging.getLogger(__name__)

HTTPS_EXEMPT_PATHS = {"/healthz"}

# host or host:port, IPv6 literals in brackets
SAFE_HOST_RE = re.compile(
    r"^(?:[A-Za-z0-9](?:[A-Za-z0-9.-]*[A-Za-z0-9])?|\[[0-9A-Fa-f:.]+\])(?::[0-9]{1,5})?$"
)


def _is_https(request: Request) -> bool:
    if request.url.scheme == "https":
        return True
    forwarded = request.headers.get("x-forwarded-proto") or ""
    return forwarded.split(",")[0].strip().lower() == "https"


def create_app() -> FastAPI:
    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        home = resolve_knockweb_home()
        paths = ensure_knockweb_layout(home)
        config_present = paths.config_path.is_file()
        config = load_core_config(paths)
        paths = resolve_configured_paths(paths, config)

        log_path = paths.logs_dir / "knockweb.log"
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=config.logging.max_size_mb * 1024 * 1024,
            backupCount=config.logging.backup_count,
            encoding="utf-8",
        )
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        file_handler.setFormatter(formatter)

        root = logging.getLogger()
        root.setLevel(logging.INFO)
        # Avoid adding duplicate handlers if reloaded
        if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
            root.addHandler(file_handler)

        logger.info("KnockWeb starting up")
        logger.info(f"Logs directory: {paths.logs_dir}")
        if not config_present:
            logger.warning(f"No config file at {paths.config_path}; using defaults")

        app.state.knockweb_home = home
        app.state.knockweb_paths = paths
        app.state.knockweb_config = config
        app.state.knockweb_config_present = config_present

        yield

    app = FastAPI(title="KnockWeb", version=__version__, lifespan=_lifespan)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} - {response.status_code}")
        return response

    @app.middleware("http")
    async def require_https(request: Request, call_next):
        config = getattr(request.app.state, "knockweb_config", None)
        if (
            config is None
            or not config.web.use_https_only
            or request.url.path in HTTPS_EXEMPT_PATHS
            or _is_https(request)
        ):
            return await call_next(request)

        # Without url_domain the client's Host header is all there is; only plain
        # host names are redirected to.
        domain = config.web.url_domain or request.headers.get("host") or ""
        if not config.web.url_domain and SAFE_HOST_RE.match(domain) is None:
            return PlainTextResponse("Unknown URL.", status_code=400)
        return RedirectResponse(
            url=f"https://{domain}{config.web.path_application}", status_code=301
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=fail(
                code=status_to_code(exc.status_code),
                message=exc.detail if isinstance(exc.detail, str) else "HTTP error",
            ).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=fail(code="internal_error", message="Internal server error").model_dump(
                mode="json"
            ),
        )

    if UI_STATIC_DIR.is_dir():
        app.mount("/static", StaticFiles(directory=str(UI_STATIC_DIR)), name="static")
    else:
        logger.warning(
            "UI static directory is missing (%s); /static will not be served", UI_STATIC_DIR
        )
    app.include_router(ui_router)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app
