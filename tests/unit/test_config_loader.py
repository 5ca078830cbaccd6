"""Unit tests for configuration loading and runtime precedence."""

from __future__ import annotations

from pathlib import Path

import pytest

from readaloud.config import ConfigLoader, ReadAloudConfig, RuntimeConfigSources


def test_from_yaml_loads_values_and_defaults(tmp_path: Path) -> None:
    """YAML configs should load explicit values and keep defaults for the rest."""

    config_path = tmp_path / "readaloud.yaml"
    config_path.write_text(
        "\n".join(
            [
                "ledger_path: data/ledger.csv",
                "audio_root: data/audio",
                "time_budget_seconds: 120",
                "requests_per_minute: 10",
                "public_base_url: https://files.example/audio",
            ]
        ),
        encoding="utf-8",
    )

    config = ConfigLoader.from_yaml(config_path)

    assert config.ledger_path == Path("data/ledger.csv")
    assert config.audio_root == Path("data/audio")
    assert config.source_folder_name == "Assessment PDFs"
    assert config.tts_model == "gemini-2.5-flash-preview-tts"
    assert config.tts_voice == "Kore"
    assert config.time_budget_seconds == 120.0
    assert config.requests_per_minute == 10.0
    assert config.public_base_url == "https://files.example/audio"


@pytest.mark.parametrize(
    ("yaml_text", "message"),
    [
        ("audio_root: a\n", "missing required key(s): ledger_path"),
        ("ledger_path: l\naudio_root: a\nvoice: Kore\n", "unsupported key(s): voice"),
        ("ledger_path: l\naudio_root: a\nextra: {}\n", "unsupported key(s): extra"),
        ("ledger_path: l\naudio_root: a\ntime_budget_seconds: 0\n", "positive number"),
        ("ledger_path: l\naudio_root: a\nrequests_per_minute: fast\n", "positive number"),
        ("- just\n- a list\n", "top-level mapping"),
    ],
)
def test_from_yaml_rejects_invalid_payloads(tmp_path: Path, yaml_text: str, message: str) -> None:
    """Schema and value errors should raise actionable `ValueError`s."""

    config_path = tmp_path / "invalid.yaml"
    config_path.write_text(yaml_text, encoding="utf-8")

    with pytest.raises(ValueError, match=message.replace("(", r"\(").replace(")", r"\)")):
        ConfigLoader.from_yaml(config_path)


def test_from_env_reads_prefixed_variables() -> None:
    """Environment configs should read `READALOUD_*` variables and the API key."""

    config = ConfigLoader.from_env(
        {
            "READALOUD_LEDGER_PATH": "ledger.csv",
            "READALOUD_AUDIO_ROOT": "audio",
            "READALOUD_SOURCE_FOLDER": "PDFs",
            "READALOUD_TIME_BUDGET_SECONDS": "240",
            "GEMINI_API_KEY": "env-key",
            "UNRELATED": "ignored",
        }
    )

    assert config.source_folder_name == "PDFs"
    assert config.time_budget_seconds == 240.0
    assert config.api_key == "env-key"
    assert dict(config.runtime_sources.env) == {"GEMINI_API_KEY": "env-key"}


def test_from_env_requires_ledger_and_root() -> None:
    """Missing required variables should name the variable."""

    with pytest.raises(ValueError, match="READALOUD_LEDGER_PATH"):
        ConfigLoader.from_env({"READALOUD_AUDIO_ROOT": "audio"})


def test_provider_runtime_precedence_is_cli_secure_env_default() -> None:
    """CLI values beat secure storage, which beats env, which beats defaults."""

    config = ReadAloudConfig(ledger_path=Path("l.csv"), audio_root=Path("a"))
    sources = RuntimeConfigSources(
        cli={"tts_voice": "Puck"},
        secure={"api_key": "secure-key", "tts_voice": "Charon"},
        env={"GEMINI_API_KEY": "env-key", "READALOUD_TTS_MODEL": "env-model"},
    )

    runtime = config.resolved_provider_runtime(sources)

    assert runtime.tts_voice == "Puck"
    assert runtime.api_key == "secure-key"
    assert runtime.tts_model == "env-model"
    assert config.resolved_provider_runtime().api_key is None


def test_validate_rejects_blank_names() -> None:
    """Blank model, voice, or folder names should fail validation."""

    config = ReadAloudConfig(ledger_path=Path("l.csv"), audio_root=Path("a"), tts_voice=" ")

    with pytest.raises(ValueError, match="tts_voice"):
        config.validate()
