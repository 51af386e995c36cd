"""Tests for the command-line interface."""

import httpx
from typer.testing import CliRunner

from weight_log_sync.cli import main
from weight_log_sync.cli.main import app, render_month
from weight_log_sync.infrastructure.github_client.client import GitHubContentsClient
from weight_log_sync.services.sync import RemoteSyncClient

runner = CliRunner()

CONFIG = "remote:\n  owner: someone\n  repo: weights\nlogging:\n  level: WARNING\n"


def _patch_client(monkeypatch, fake_repo, token="secret") -> None:
    def build(param_loader):
        contents = GitHubContentsClient(
            param_loader.get_remote_config(), transport=httpx.MockTransport(fake_repo.handler)
        )
        return RemoteSyncClient(contents, token=token, max_value=300.0)

    monkeypatch.setattr(main, "build_sync_client", build)


def test_render_month_with_values() -> None:
    """Test calendar rendering and start/current/change figures."""
    text = render_month({5: 70.2, 9: 69.8}, "2026-01")

    if not text.startswith("January 2026"):
        raise AssertionError(text)
    if " 5  70.2" not in text or " 9  69.8" not in text:
        raise AssertionError(text)
    if not text.endswith("Start: 70.2  Current: 69.8  Change: -0.4 kg"):
        raise AssertionError(text)


def test_render_month_empty() -> None:
    """Test rendering without data."""
    text = render_month({}, "2026-02")

    if not text.endswith("Start: --  Current: --  Change: --"):
        raise AssertionError(text)


def test_save_and_show(tmp_path, monkeypatch, fake_repo) -> None:
    """Test saving a value and showing it."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(CONFIG, encoding="utf-8")
    _patch_client(monkeypatch, fake_repo)

    result = runner.invoke(
        app, ["save", "69.8", "--config-path", str(config_file), "--date", "2026-01-05"]
    )

    if result.exit_code != 0:
        raise AssertionError(result.output)
    if fake_repo.text != "Date,Name,Weight\n2026-01-05,User,69.8\n":
        raise AssertionError(f"Unexpected file: {fake_repo.text!r}")

    result = runner.invoke(app, ["show", "--config-path", str(config_file), "--month", "2026-01"])

    if result.exit_code != 0 or " 5  69.8" not in result.output:
        raise AssertionError(result.output)


def test_save_rejects_invalid_value(tmp_path, monkeypatch, fake_repo) -> None:
    """Test that an invalid value exits with an error and writes nothing."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(CONFIG, encoding="utf-8")
    _patch_client(monkeypatch, fake_repo)

    result = runner.invoke(
        app, ["save", "abc", "--config-path", str(config_file), "--date", "2026-01-05"]
    )

    if result.exit_code != 1:
        raise AssertionError(f"Expected exit code 1, got {result.exit_code}")
    if fake_repo.text is not None:
        raise AssertionError("Nothing should have been written")


def test_refresh_without_token(tmp_path, monkeypatch, fake_repo) -> None:
    """Test that a missing token is reported."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(CONFIG, encoding="utf-8")
    _patch_client(monkeypatch, fake_repo, token=None)

    result = runner.invoke(app, ["refresh", "--config-path", str(config_file)])

    if result.exit_code != 1:
        raise AssertionError(f"Expected exit code 1, got {result.exit_code}")
    if fake_repo.requests:
        raise AssertionError("No request should have been made")


def test_missing_config_file(tmp_path) -> None:
    """Test that a missing configuration file exits with an error."""
    result = runner.invoke(app, ["refresh", "--config-path", str(tmp_path / "absent.yaml")])

    if result.exit_code != 1:
        raise AssertionError(f"Expected exit code 1, got {result.exit_code}")
