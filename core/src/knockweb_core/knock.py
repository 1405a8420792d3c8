from __future__ import annotations

import logging
import re
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path

from knockweb_core.config import CoreConfig
from knockweb_core.forms import Form
from knockweb_core.home import KnockWebPaths

logger = logging.getLogger(__name__)

_OCTET = r"(?:[1-9]?\d|1\d\d|2[0-4]\d|25[0-5])"
IPV4_RE = re.compile(
    rf"^(?P<first>{_OCTET})\.(?P<second>{_OCTET})\.(?P<third>{_OCTET})\.(?P<fourth>{_OCTET})$"
)
ACCESS_PORT_LIST_RE = re.compile(r"^(tcp|udp)/[0-9]+( *, *(tcp|udp)/[0-9]+)*$", re.IGNORECASE)

DESTINATION_HINT = "You may enter multiple server IPs or hostnames separated by a semicolon."
ACCESS_PORT_LIST_HINT = (
    'Provide a list of ports and protocols to access on a remote computer. The format of this '
    'list is "<proto>/<port>,...,<proto>/<port>", e.g. "tcp/22,udp/53".'
)


@dataclass(frozen=True)
class KnockOutcome:
    target: str
    returncode: int
    output: str
    command: list[str]

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def build_knock_form(config: CoreConfig, *, remote_addr: str | None = None) -> Form:
    """Build the knock form; only parameters not fixed by config are asked for."""

    knock = config.knock
    form = Form("knock", action=config.web.path_application)

    if isinstance(knock.destination, dict):
        form.add_element(
            "Dropdown",
            "destination",
            "Server",
            knock.destination,
            maximum_size=20,
            is_multiple=True,
            not_null=True,
        )
    elif knock.destination is None:
        form.add_element(
            "Text", "destination", "Server IP/Hostname", hint=DESTINATION_HINT, not_null=True
        )

    if knock.server_port is None:
        form.add_element("Integer", "serverPort", "Server port", minimum=1, maximum=65535)

    if knock.access_port_list is None:
        form.add_element(
            "Text",
            "accessPortList",
            "Access port list",
            hint=ACCESS_PORT_LIST_HINT,
            pattern=ACCESS_PORT_LIST_RE,
        )

    if knock.encryption_key is None:
        form.add_element("Password", "encryptionKey", "Encryption key")

    form.add_element(
        "Text", "allowIp", "Source IP", default=remote_addr, pattern=IPV4_RE, not_null=True
    )
    form.add_element("Hidden", "doKnock", default="1")
    return form


def _split_hosts(raw: str) -> list[str]:
    return [h.strip() for h in raw.split(";") if h.strip()]


def resolve_hosts(config: CoreConfig, form: Form) -> list[str]:
    destination = config.knock.destination
    if isinstance(destination, str):
        return _split_hosts(destination)

    element = form.element("destination")
    if element is None or element.is_empty():
        return []

    value = element.db_value()
    if isinstance(destination, dict):
        # Numeric keys point into the configured map; anything else is a host already.
        keys = value if isinstance(value, list) else [value]
        return [destination.get(k, k) if k.isdigit() else k for k in map(str, keys)]

    return _split_hosts(str(value))


def _form_text(form: Form, name: str) -> str | None:
    element = form.element(name)
    if element is None or element.is_empty():
        return None
    return str(element.db_value())


def resolve_encryption_key(config: CoreConfig, form: Form) -> str:
    if config.knock.encryption_key is not None:
        return config.knock.encryption_key
    return _form_text(form, "encryptionKey") or ""


def build_fwknop_args(
    config: CoreConfig, form: Form, *, target: str, key_file: Path
) -> list[str]:
    args = [config.fwknop.cli_path]
    if config.fwknop.verbose:
        args.append("--verbose")

    args += ["-G", str(key_file)]

    server_port = config.knock.server_port
    if server_port is not None:
        args += ["--server-port", str(server_port)]
    else:
        port = _form_text(form, "serverPort")
        if port is not None:
            args += ["--server-port", port]

    access = config.knock.access_port_list
    if access is None:
        access = _form_text(form, "accessPortList")
    if access is not None:
        args += ["-A", access.replace(" ", "")]

    allow_ip = _form_text(form, "allowIp")
    if allow_ip is not None:
        args += ["-a", allow_ip.strip()]

    args += ["-D", target]
    return args


def masked_command(command: list[str], secret: str) -> str:
    line = " ".join(command)
    if secret:
        line = line.replace(secret, "****")
    return line


def run_knock(config: CoreConfig, paths: KnockWebPaths, form: Form) -> list[KnockOutcome]:
    """Run fwknop once per destination host.

    Each call gets its own key file in the tmp dir, created readable by the owner
    only and always removed afterwards.
    """

    cli = Path(config.fwknop.cli_path)
    if not cli.exists():
        raise FileNotFoundError(str(cli))

    key = resolve_encryption_key(config, form)
    tmp_dir = paths.tmp_dir
    outcomes: list[KnockOutcome] = []

    with tempfile.NamedTemporaryFile(
        mode="w", prefix=".fwknop.", suffix=".pass", dir=tmp_dir, delete=False, encoding="utf-8"
    ) as f:
        key_file = Path(f.name)

    try:
        for target in resolve_hosts(config, form):
            key_file.write_text(f"{target}:{key}", encoding="utf-8")

            args = build_fwknop_args(config, form, target=target, key_file=key_file)
            proc = subprocess.run(
                args,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                cwd=str(tmp_dir),
                env={"HOME": str(tmp_dir)},
                check=False,
            )

            outcome = KnockOutcome(
                target=target,
                returncode=proc.returncode,
                output=(proc.stdout or "").rstrip("\n"),
                command=args,
            )
            if outcome.ok:
                logger.info(f"Knock sent to {target}")
            else:
                logger.warning(f"fwknop exited with code {proc.returncode} for {target}")
            outcomes.append(outcome)
    finally:
        try:
            key_file.unlink(missing_ok=True)
        except OSError:
            logger.error(f"Could not remove key file {key_file}")

    return outcomes
