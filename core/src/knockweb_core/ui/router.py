from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool

from knockweb_core import PRODUCT_NAME, __version__
from knockweb_core.config import CoreConfig
from knockweb_core.forms import FIELD_NAMESPACE, Form, RequestContext, parse_namespaced_fields
from knockweb_core.home import KnockWebPaths
from knockweb_core.knock import (
    build_knock_form,
    masked_command,
    resolve_encryption_key,
    run_knock,
)
from knockweb_core.messages import MessageLog
from knockweb_core.ui.buttons import ButtonBar

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(tags=["ui"])


def _get_config(request: Request) -> CoreConfig:
    config = getattr(request.app.state, "knockweb_config", None)
    if config is None:
        raise HTTPException(status_code=500, detail="Config not loaded")
    return config


def _get_paths(request: Request) -> KnockWebPaths:
    paths = getattr(request.app.state, "knockweb_paths", None)
    if paths is None:
        raise HTTPException(status_code=500, detail="Paths not initialized")
    return paths


def _preflight(request: Request, paths: KnockWebPaths, messages: MessageLog) -> bool:
    ok = True
    if not getattr(request.app.state, "knockweb_config_present", False):
        messages.add_error(
            f'Config file "{paths.config_path}" does not exist or is not readable. '
            "Create it to configure the knock parameters."
        )
        ok = False
    if not os.access(paths.tmp_dir, os.W_OK):
        messages.add_error(f'Temporary directory "{paths.tmp_dir}" is not writable.')
        ok = False
    return ok


def _knock(config: CoreConfig, paths: KnockWebPaths, form: Form, messages: MessageLog) -> None:
    try:
        outcomes = run_knock(config, paths, form)
    except FileNotFoundError:
        logger.error(f"fwknop binary not found at {config.fwknop.cli_path}")
        messages.add_error(f'Unable to execute fwknop: "{config.fwknop.cli_path}" not found.')
        return
    except OSError as exc:
        logger.error(f"Could not run fwknop at {config.fwknop.cli_path}: {exc}")
        messages.add_error(
            f'Unable to execute fwknop: "{config.fwknop.cli_path}" could not be run '
            f"({exc.strerror or exc})."
        )
        return

    key = resolve_encryption_key(config, form)
    for outcome in outcomes:
        if outcome.ok:
            messages.add_message(
                f'Knock sent successfully to "{outcome.target}". With correct settings, you '
                "should be able to access the server for a limited time now."
            )
        else:
            messages.add_error(f'Unable to execute fwknop. It says: "{outcome.output}".')

        if config.fwknop.verbose:
            messages.add_message(
                f"Command: {masked_command(outcome.command, key)}\nOutput: {outcome.output}"
            )


def _render_knock_page(request: Request, submitted: dict[str, Any]) -> HTMLResponse:
    config = _get_config(request)
    paths = _get_paths(request)

    messages = MessageLog()
    buttons = ButtonBar()
    buttons.add_button("knock", "knock knock", "start knocking")

    remote_addr = request.client.host if request.client else None
    form = build_knock_form(config, remote_addr=remote_addr)
    form.fetch(RequestContext(request=submitted))

    ready = _preflight(request, paths, messages)

    do_knock = form.element("doKnock")
    if ready and do_knock is not None and do_knock.value() == "1" and form.validate():
        _knock(config, paths, form, messages)

    return templates.TemplateResponse(
        request,
        "knock.html",
        {
            "title": config.web.title,
            "product": PRODUCT_NAME,
            "version": __version__,
            "messages": messages,
            "form_attributes": form.attributes(),
            "rows": form.render_body(),
            "buttons": buttons,
        },
    )


@router.get("/", response_class=HTMLResponse)
def ui_knock(request: Request) -> HTMLResponse:
    return _render_knock_page(request, {})


@router.post("/", response_class=HTMLResponse)
async def ui_knock_post(request: Request) -> HTMLResponse:
    raw = await request.form()
    submitted = parse_namespaced_fields(raw.multi_items(), namespace=FIELD_NAMESPACE)
    # fwknop runs synchronously; keep it off the event loop.
    return await run_in_threadpool(_render_knock_page, request, submitted)
