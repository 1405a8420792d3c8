from __future__ import annotations

import subprocess
from pathlib import Path

from fastapi.testclient import TestClient

from knockweb_core import knock as knock_module
from knockweb_core.app import create_app
from knockweb_core.config import CoreConfig, write_core_config
from knockweb_core.home import ensure_knockweb_layout

HTTPS = "https://testserver"


def _configure(tmp_path: Path, monkeypatch, **overrides) -> Path:
    monkeypatch.setenv("KNOCKWEB_HOME", str(tmp_path))
    cli = tmp_path / "fwknop"
    cli.write_text("", encoding="utf-8")

    data = {"fwknop": {"cli_path": str(cli)}}
    data.update(overrides)
    write_core_config(ensure_knockweb_layout(tmp_path), CoreConfig.model_validate(data))
    return cli


def test_healthz_ok_over_plain_http(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("KNOCKWEB_HOME", str(tmp_path))

    with TestClient(create_app()) as client:
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


def test_plain_http_is_redirected_to_https(tmp_path: Path, monkeypatch) -> None:
    _configure(tmp_path, monkeypatch)

    with TestClient(create_app()) as client:
        r = client.get("/", follow_redirects=False)
        assert r.status_code == 301
        assert r.headers["location"] == "https://testserver/"


def test_redirect_uses_configured_domain_and_path(tmp_path: Path, monkeypatch) -> None:
    _configure(
        tmp_path,
        monkeypatch,
        web={"url_domain": "knock.example", "path_application": "/knock/"},
    )

    with TestClient(create_app()) as client:
        r = client.get("/", follow_redirects=False)
        assert r.status_code == 301
        assert r.headers["location"] == "https://knock.example/knock/"


def test_redirect_refuses_unsafe_host_header(tmp_path: Path, monkeypatch) -> None:
    _configure(tmp_path, monkeypatch)

    with TestClient(create_app()) as client:
        r = client.get("/", headers={"Host": "evil.example/phish"}, follow_redirects=False)
        assert r.status_code == 400
        assert r.text == "Unknown URL."

        ok = client.get("/", headers={"Host": "knock.example:8443"}, follow_redirects=False)
        assert ok.status_code == 301
        assert ok.headers["location"] == "https://knock.example:8443/"


def test_forwarded_proto_counts_as_https(tmp_path: Path, monkeypatch) -> None:
    _configure(tmp_path, monkeypatch)

    with TestClient(create_app()) as client:
        r = client.get("/", headers={"X-Forwarded-Proto": "https"}, follow_redirects=False)
        assert r.status_code == 200


def test_https_can_be_disabled(tmp_path: Path, monkeypatch) -> None:
    _configure(tmp_path, monkeypatch, web={"use_https_only": False})

    with TestClient(create_app()) as client:
        assert client.get("/").status_code == 200


def test_get_renders_form_with_hidden_trigger_first(tmp_path: Path, monkeypatch) -> None:
    _configure(tmp_path, monkeypatch)

    with TestClient(create_app(), base_url=HTTPS) as client:
        r = client.get("/")
        assert r.status_code == 200
        html = r.text

        assert 'name="data[doKnock]"' in html
        assert html.index('name="data[doKnock]"') < html.index('name="data[destination]"')
        assert 'name="data[encryptionKey]"' in html
        assert 'name="data[allowIp]"' in html
        assert 'name="data[serverPort]"' not in html
        assert "knock knock" in html
        assert "does not exist" not in html


def test_missing_config_is_reported(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("KNOCKWEB_HOME", str(tmp_path))

    with TestClient(create_app(), base_url=HTTPS) as client:
        r = client.get("/")
        assert r.status_code == 200
        assert "does not exist or is not readable" in r.text


def test_invalid_post_shows_errors_and_does_not_knock(tmp_path: Path, monkeypatch) -> None:
    _configure(tmp_path, monkeypatch)
    calls: list[list[str]] = []

    def fake_run(args, **kwargs):
        calls.append(args)
        return subprocess.CompletedProcess(args, 0, stdout="")

    monkeypatch.setattr(knock_module.subprocess, "run", fake_run)

    with TestClient(create_app(), base_url=HTTPS) as client:
        r = client.post(
            "/",
            data={"data[destination]": "", "data[allowIp]": "999.1.1.1", "data[doKnock]": "1"},
        )
        assert r.status_code == 200
        assert "A value is required." in r.text
        assert "Invalid value." in r.text
        assert 'value="999.1.1.1"' in r.text
        assert calls == []


def test_valid_post_runs_knock_and_reports_success(tmp_path: Path, monkeypatch) -> None:
    _configure(tmp_path, monkeypatch)
    calls: list[list[str]] = []

    def fake_run(args, **kwargs):
        calls.append(args)
        return subprocess.CompletedProcess(args, 0, stdout="ok\n")

    monkeypatch.setattr(knock_module.subprocess, "run", fake_run)

    with TestClient(create_app(), base_url=HTTPS) as client:
        r = client.post(
            "/",
            data={
                "data[destination]": "a.example",
                "data[encryptionKey]": "s3cret",
                "data[allowIp]": "10.0.0.5",
                "data[doKnock]": "1",
            },
        )
        assert r.status_code == 200
        assert "Knock sent successfully" in r.text
        assert "s3cret" not in r.text

    assert len(calls) == 1
    assert calls[0][-2:] == ["-D", "a.example"]
    assert calls[0][calls[0].index("-a") + 1] == "10.0.0.5"


def test_post_without_trigger_does_not_knock(tmp_path: Path, monkeypatch) -> None:
    _configure(tmp_path, monkeypatch)
    calls: list[list[str]] = []
    monkeypatch.setattr(
        knock_module.subprocess,
        "run",
        lambda args, **kwargs: calls.append(args),
    )

    with TestClient(create_app(), base_url=HTTPS) as client:
        r = client.post(
            "/",
            data={"data[destination]": "a.example", "data[allowIp]": "10.0.0.5"},
        )
        assert r.status_code == 200
        assert calls == []


def test_failed_knock_shows_fwknop_output(tmp_path: Path, monkeypatch) -> None:
    _configure(tmp_path, monkeypatch, fwknop={"verbose": True})

    def fake_run(args, **kwargs):
        return subprocess.CompletedProcess(args, 1, stdout="could not resolve host\n")

    monkeypatch.setattr(knock_module.subprocess, "run", fake_run)

    with TestClient(create_app(), base_url=HTTPS) as client:
        r = client.post(
            "/",
            data={
                "data[destination]": "nowhere.invalid",
                "data[encryptionKey]": "s3cret",
                "data[allowIp]": "10.0.0.5",
                "data[doKnock]": "1",
            },
        )
        assert "Unable to execute fwknop" in r.text
        assert "could not resolve host" in r.text
        assert "Command:" in r.text


def test_missing_fwknop_binary_is_reported(tmp_path: Path, monkeypatch) -> None:
    cli = _configure(tmp_path, monkeypatch)
    cli.unlink()

    with TestClient(create_app(), base_url=HTTPS) as client:
        r = client.post(
            "/",
            data={
                "data[destination]": "a.example",
                "data[encryptionKey]": "k",
                "data[allowIp]": "10.0.0.5",
                "data[doKnock]": "1",
            },
        )
        assert r.status_code == 200
        assert "not found" in r.text


def test_unrunnable_fwknop_binary_is_reported(tmp_path: Path, monkeypatch) -> None:
    cli = _configure(tmp_path, monkeypatch)
    cli.chmod(0o644)

    with TestClient(create_app(), base_url=HTTPS) as client:
        r = client.post(
            "/",
            data={
                "data[destination]": "a.example",
                "data[encryptionKey]": "k",
                "data[allowIp]": "10.0.0.5",
                "data[doKnock]": "1",
            },
        )
        assert r.status_code == 200
        assert "Unable to execute fwknop" in r.text
        assert "could not be run" in r.text

    assert list((tmp_path / "tmp").iterdir()) == []
