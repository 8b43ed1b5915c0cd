"""End-to-end tests for the ``authbox`` command line."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from authbox import __version__
from authbox.app import app
from authbox.config import ENV_CLIENT_ID, ENV_DOMAIN
from authbox.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_ARGUMENT

runner = CliRunner()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv(ENV_CLIENT_ID, raising=False)
    monkeypatch.delenv(ENV_DOMAIN, raising=False)


@pytest.fixture
def write_config(tmp_path: Path):
    def factory(options: dict[str, Any] | None = None, **fields: Any) -> Path:
        data = {"client_id": "cli-client", "domain": "example.auth0.com", **fields}
        data["options"] = options or {}
        path = tmp_path / "widget.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return factory


# ---------------------------------------------------------------------------
# Top level
# ---------------------------------------------------------------------------


class TestTopLevel:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("providers", "state", "preview"):
            assert command in result.stdout


# ---------------------------------------------------------------------------
# providers
# ---------------------------------------------------------------------------


class TestProviders:
    def test_json(self) -> None:
        result = runner.invoke(app, ["--json", "providers"])
        assert result.exit_code == 0
        rows = {row["provider"]: row for row in json.loads(result.stdout)}
        assert rows["hcaptcha"]["variant"] == "extended"
        assert rows["recaptcha_enterprise"]["script"].startswith("https://")
        assert rows["(none or unknown)"] == {
            "provider": "(none or unknown)",
            "variant": "input",
            "script": "-",
        }

    def test_plain(self) -> None:
        result = runner.invoke(app, ["--plain", "providers"])
        assert result.exit_code == 0
        assert result.stdout.splitlines()[0] == "provider\tvariant\tscript"


# ---------------------------------------------------------------------------
# state
# ---------------------------------------------------------------------------


class TestState:
    def test_prints_initial_state(self, write_config) -> None:
        path = write_config({"container": "host-div", "remember_last_login": True})
        result = runner.invoke(app, ["--json", "state", str(path)])
        assert result.exit_code == 0, result.output

        state = json.loads(result.stdout)
        assert state["client_id"] == "cli-client"
        assert state["ui"]["visible"] is False
        assert state["ui"]["container_id"] == "host-div"
        assert state["ui"]["closable"] is False
        assert state["screens"] == {"remember_last_login": True}

    def test_cli_overrides(self, write_config, monkeypatch) -> None:
        monkeypatch.setenv(ENV_DOMAIN, "env.auth0.com")
        path = write_config()
        result = runner.invoke(
            app, ["--json", "state", str(path), "--client-id", "override"]
        )
        assert result.exit_code == 0, result.output
        state = json.loads(result.stdout)
        assert state["client_id"] == "override"
        assert state["domain"] == "env.auth0.com"

    def test_invalid_options(self, write_config) -> None:
        path = write_config({"mobile": "definitely not"})
        result = runner.invoke(app, ["--json", "state", str(path)])
        assert result.exit_code == EXIT_INVALID_ARGUMENT

    def test_missing_config_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["state", str(tmp_path / "missing.json")])
        assert result.exit_code == EXIT_GENERIC_FAILURE

    def test_no_client_id(self) -> None:
        result = runner.invoke(app, ["state", "--domain", "example.auth0.com"])
        assert result.exit_code == EXIT_GENERIC_FAILURE


# ---------------------------------------------------------------------------
# preview
# ---------------------------------------------------------------------------


class TestPreview:
    def test_login_preview(self, write_config) -> None:
        path = write_config()
        result = runner.invoke(app, ["--json", "preview", str(path)])
        assert result.exit_code == 0, result.output

        data = json.loads(result.stdout)
        props = data["props"]
        assert props["screen_name"] == "login"
        assert props["title"] == "Log In"
        assert props["is_modal"] is True
        assert props["closable"] is True
        assert props["handlers"] == {"back": False, "submit": True, "close": True}
        assert data["events"] == ["show", "signin ready"]

    def test_extended_captcha(self, write_config) -> None:
        path = write_config(
            {"captcha": {"provider": "hcaptcha", "site_key": "mySiteKey", "required": True}}
        )
        result = runner.invoke(app, ["--json", "preview", str(path), "-s", "signUp"])
        assert result.exit_code == 0, result.output

        data = json.loads(result.stdout)
        assert data["props"]["captcha"] == {
            "kind": "extended",
            "value": "",
            "provider": "hcaptcha",
            "site_key": "mySiteKey",
        }
        assert data["events"] == ["show", "signup ready"]

    def test_default_captcha(self, write_config) -> None:
        path = write_config({"captcha": {"required": True}})
        result = runner.invoke(app, ["--json", "preview", str(path)])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["props"]["captcha"] == {"kind": "input", "value": ""}

    def test_sign_up_terms(self, write_config) -> None:
        path = write_config({"must_accept_terms": True})
        result = runner.invoke(app, ["--json", "preview", str(path), "--screen", "main.signUp"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["props"]["disable_submit_button"] is True

    def test_invalid_options(self, write_config) -> None:
        path = write_config({"captcha": "hcaptcha"})
        result = runner.invoke(app, ["preview", str(path)])
        assert result.exit_code == EXIT_INVALID_ARGUMENT
