"""CLI error-handling tests for concise stage-aware diagnostics."""

from __future__ import annotations

from pathlib import Path

from pytest import MonkeyPatch
from typer.testing import CliRunner

from readaloud.cli import app
from readaloud.errors import PipelineStageError


def test_generate_without_api_key_reports_config_stage(tmp_path: Path, audio_root: Path) -> None:
    """Generation should fail fast with a hint when no API key is available."""

    runner = CliRunner()

    result = runner.invoke(
        app,
        ["generate", "--ledger", str(tmp_path / "ledger.csv"), "--root", str(audio_root)],
    )

    assert result.exit_code == 1
    assert "generate failed at stage `config`" in result.output
    assert "Hint: Set `GEMINI_API_KEY`" in result.output


def test_run_without_api_key_leaves_ledger_untouched(
    tmp_path: Path, audio_root: Path, write_source
) -> None:
    """`run` should check for a key before discovery writes anything."""

    write_source("Quiz.pdf", "1. Apple")
    ledger_path = tmp_path / "ledger.csv"
    runner = CliRunner()

    result = runner.invoke(app, ["run", "--ledger", str(ledger_path), "--root", str(audio_root)])

    assert result.exit_code == 1
    assert "run failed at stage `config`" in result.output
    assert not ledger_path.exists()


def test_missing_config_file_is_reported() -> None:
    """A missing `--config` path should produce a config-stage diagnostic."""

    runner = CliRunner()

    result = runner.invoke(app, ["discover", "--config", "missing-readaloud.yaml"])

    assert result.exit_code == 1
    assert "discover failed at stage `config`" in result.output
    assert "Config file not found: `missing-readaloud.yaml`." in result.output


def test_invalid_config_payload_is_reported(tmp_path: Path) -> None:
    """Unsupported YAML keys should fail before any stage runs."""

    config_path = tmp_path / "invalid.yaml"
    config_path.write_text("ledger_path: l.csv\naudio_root: audio\nvoice: Kore\n", encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(app, ["analyze", "--config", str(config_path)])

    assert result.exit_code == 1
    assert "analyze failed at stage `config`" in result.output
    assert "unsupported key(s): voice." in result.output


def test_missing_paths_without_config_or_environment_are_reported() -> None:
    """Without flags, config, or environment, the CLI should name the missing variable."""

    runner = CliRunner()

    result = runner.invoke(app, ["discover"])

    assert result.exit_code == 1
    assert "Environment variable `READALOUD_LEDGER_PATH` is required." in result.output


def test_non_stage_errors_use_fallback_diagnostics(
    monkeypatch: MonkeyPatch, tmp_path: Path, audio_root: Path
) -> None:
    """Unexpected exceptions should still exit 1 with a one-line message."""

    def _failing_discover(*_: object, **__: object) -> None:
        """Raise a generic error to verify fallback CLI diagnostics."""

        raise RuntimeError("disk vanished")

    monkeypatch.setattr("readaloud.cli.ReadAloudPipeline.discover", _failing_discover)
    runner = CliRunner()

    result = runner.invoke(
        app, ["discover", "--ledger", str(tmp_path / "l.csv"), "--root", str(audio_root)]
    )

    assert result.exit_code == 1
    assert "discover failed: disk vanished" in result.output


def test_stage_errors_print_hint(monkeypatch: MonkeyPatch, tmp_path: Path, audio_root: Path) -> None:
    """Stage errors raised inside a pass should print their hint line."""

    def _failing_analyze(*_: object, **__: object) -> None:
        """Raise a stage-specific error to simulate an analysis failure."""

        raise PipelineStageError(stage="analyze", detail="Ledger is locked.", hint="Close it.")

    monkeypatch.setattr("readaloud.cli.ReadAloudPipeline.analyze", _failing_analyze)
    runner = CliRunner()

    result = runner.invoke(
        app, ["analyze", "--ledger", str(tmp_path / "l.csv"), "--root", str(audio_root)]
    )

    assert result.exit_code == 1
    assert "analyze failed at stage `analyze`: Ledger is locked." in result.output
    assert "Hint: Close it." in result.output


def test_credentials_status_and_roundtrip(credential_store) -> None:
    """`credentials` should report, store, and clear the key via the store."""

    runner = CliRunner()

    status = runner.invoke(app, ["credentials"])
    stored = runner.invoke(app, ["credentials", "--set-api-key"], input="secret-key\n")
    stored_key = credential_store.api_key
    status_after = runner.invoke(app, ["credentials"])
    cleared = runner.invoke(app, ["credentials", "--clear-api-key"])

    assert "Stored Gemini API key: not set" in status.output
    assert stored.exit_code == 0, stored.output
    assert stored_key == "secret-key"
    assert credential_store.api_key is None
    assert "Stored Gemini API key: present" in status_after.output
    assert "Stored API key cleared" in cleared.output


def test_credentials_rejects_conflicting_flags() -> None:
    """Setting and clearing in one invocation should be refused."""

    runner = CliRunner()

    result = runner.invoke(app, ["credentials", "--set-api-key", "--clear-api-key"])

    assert result.exit_code == 1
    assert "cannot be used together" in result.output
