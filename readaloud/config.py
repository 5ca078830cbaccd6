"""Configuration model and loaders for ReadAloud.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Resolve provider runtime values with deterministic precedence.
- Provide loader entry points for YAML- and environment-based configuration.

Key types:
- `ReadAloudConfig`: normalized settings for one invocation.
- `ProviderRuntimeConfig`: resolved provider model/voice/key values.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers for `ReadAloudConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import normalize_optional_string


_DEFAULT_SOURCE_FOLDER = "Assessment PDFs"
_DEFAULT_TTS_MODEL = "gemini-2.5-flash-preview-tts"
_DEFAULT_TTS_VOICE = "Kore"
_DEFAULT_TIME_BUDGET_SECONDS = 300.0
_DEFAULT_REQUEST_TIMEOUT_SECONDS = 120.0


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProviderRuntimeConfig:
    """Resolved synthesis-provider values for one invocation.

    Attributes:
        tts_model: Speech model identifier.
        tts_voice: Prebuilt narrator voice identifier.
        api_key: Optional provider API key; never logged or persisted.
    """

    tts_model: str
    tts_voice: str
    api_key: str | None = None


@dataclass(slots=True)
class ReadAloudConfig:
    """Runtime configuration for one invocation.

    Attributes:
        ledger_path: CSV ledger path.
        audio_root: Top-level folder holding the source folder and artifact folders.
        source_folder_name: Well-known source folder name under `audio_root`.
        tts_model: Speech model identifier.
        tts_voice: Narrator voice identifier.
        api_key: Optional provider API key.
        time_budget_seconds: Wall-clock ceiling for one invocation.
        request_timeout_seconds: Per-request provider timeout.
        requests_per_minute: Optional provider pacing quota.
        public_base_url: Optional URL prefix for direct-download locators.
        runtime_sources: Optional runtime source overrides injected by CLI.
    """

    ledger_path: Path
    audio_root: Path
    source_folder_name: str = _DEFAULT_SOURCE_FOLDER
    tts_model: str = _DEFAULT_TTS_MODEL
    tts_voice: str = _DEFAULT_TTS_VOICE
    api_key: str | None = None
    time_budget_seconds: float = _DEFAULT_TIME_BUDGET_SECONDS
    request_timeout_seconds: float = _DEFAULT_REQUEST_TIMEOUT_SECONDS
    requests_per_minute: float | None = None
    public_base_url: str | None = None
    runtime_sources: RuntimeConfigSources = field(default_factory=RuntimeConfigSources)

    def validate(self) -> None:
        """Validate configuration values before any stage runs."""

        self._require_non_empty(self.source_folder_name, "source_folder_name")
        self._require_non_empty(self.tts_model, "tts_model")
        self._require_non_empty(self.tts_voice, "tts_voice")
        if self.time_budget_seconds <= 0:
            raise ValueError("`time_budget_seconds` must be a positive number.")
        if self.request_timeout_seconds <= 0:
            raise ValueError("`request_timeout_seconds` must be a positive number.")
        if self.requests_per_minute is not None and self.requests_per_minute <= 0:
            raise ValueError("`requests_per_minute` must be a positive number.")

    def resolved_provider_runtime(
        self, sources: RuntimeConfigSources | None = None
    ) -> ProviderRuntimeConfig:
        """Resolve provider values with `cli` > `secure` > `env` > field default."""

        resolved_sources = sources if sources is not None else self.runtime_sources
        tts_model = self._resolve_value("tts_model", "READALOUD_TTS_MODEL", self.tts_model, resolved_sources)
        tts_voice = self._resolve_value("tts_voice", "READALOUD_TTS_VOICE", self.tts_voice, resolved_sources)
        api_key = self._resolve_value("api_key", "GEMINI_API_KEY", self.api_key, resolved_sources)
        if tts_model is None:
            raise ValueError("`tts_model` could not be resolved from CLI, secure storage, env, or defaults.")
        if tts_voice is None:
            raise ValueError("`tts_voice` could not be resolved from CLI, secure storage, env, or defaults.")
        return ProviderRuntimeConfig(tts_model=tts_model, tts_voice=tts_voice, api_key=api_key)

    @staticmethod
    def _resolve_value(
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str | None:
        """Resolve one runtime value from sources in precedence order."""

        for mapping, lookup_key in (
            (sources.cli, key),
            (sources.secure, key),
            (sources.env, env_key),
        ):
            value = normalize_optional_string(mapping.get(lookup_key))
            if value is not None:
                return value
        return normalize_optional_string(default_value)

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


class ConfigLoader:
    """Factory methods for creating `ReadAloudConfig` from external sources."""

    _REQUIRED_YAML_KEYS = frozenset({"ledger_path", "audio_root"})
    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "ledger_path",
            "audio_root",
            "source_folder_name",
            "tts_model",
            "tts_voice",
            "api_key",
            "time_budget_seconds",
            "request_timeout_seconds",
            "requests_per_minute",
            "public_base_url",
        }
    )
    _RUNTIME_ENV_KEYS = frozenset({"READALOUD_TTS_MODEL", "READALOUD_TTS_VOICE", "GEMINI_API_KEY"})

    @staticmethod
    def from_yaml(path: Path) -> ReadAloudConfig:
        """Create a validated config from a YAML file."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> ReadAloudConfig:
        """Create a validated config from `READALOUD_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload: dict[str, Any] = {}
        for key, env_key in (
            ("ledger_path", "READALOUD_LEDGER_PATH"),
            ("audio_root", "READALOUD_AUDIO_ROOT"),
            ("source_folder_name", "READALOUD_SOURCE_FOLDER"),
            ("tts_model", "READALOUD_TTS_MODEL"),
            ("tts_voice", "READALOUD_TTS_VOICE"),
            ("api_key", "GEMINI_API_KEY"),
            ("time_budget_seconds", "READALOUD_TIME_BUDGET_SECONDS"),
            ("request_timeout_seconds", "READALOUD_REQUEST_TIMEOUT_SECONDS"),
            ("requests_per_minute", "READALOUD_REQUESTS_PER_MINUTE"),
            ("public_base_url", "READALOUD_PUBLIC_BASE_URL"),
        ):
            value = normalize_optional_string(env_map.get(env_key))
            if value is not None:
                payload[key] = value

        for key, env_key in (("ledger_path", "READALOUD_LEDGER_PATH"), ("audio_root", "READALOUD_AUDIO_ROOT")):
            if key not in payload:
                raise ValueError(f"Environment variable `{env_key}` is required.")

        config = ConfigLoader._build_config_from_mapping(payload, source_label="Environment")
        config.runtime_sources = RuntimeConfigSources(
            env={
                key: value
                for key, value in env_map.items()
                if key in ConfigLoader._RUNTIME_ENV_KEYS
                and normalize_optional_string(value) is not None
            }
        )
        return config

    @staticmethod
    def _build_config_from_mapping(payload: Mapping[str, Any], source_label: str) -> ReadAloudConfig:
        """Build a validated config from a mapping payload."""

        ConfigLoader._validate_keys(payload, source_label)

        def optional_string(key: str) -> str | None:
            return normalize_optional_string(payload.get(key))

        config = ReadAloudConfig(
            ledger_path=ConfigLoader._required_path(payload, "ledger_path", source_label),
            audio_root=ConfigLoader._required_path(payload, "audio_root", source_label),
            source_folder_name=optional_string("source_folder_name") or _DEFAULT_SOURCE_FOLDER,
            tts_model=optional_string("tts_model") or _DEFAULT_TTS_MODEL,
            tts_voice=optional_string("tts_voice") or _DEFAULT_TTS_VOICE,
            api_key=optional_string("api_key"),
            time_budget_seconds=ConfigLoader._optional_positive_float(
                payload, "time_budget_seconds", source_label, _DEFAULT_TIME_BUDGET_SECONDS
            ),
            request_timeout_seconds=ConfigLoader._optional_positive_float(
                payload, "request_timeout_seconds", source_label, _DEFAULT_REQUEST_TIMEOUT_SECONDS
            ),
            requests_per_minute=ConfigLoader._optional_positive_float(
                payload, "requests_per_minute", source_label, None
            ),
            public_base_url=optional_string("public_base_url"),
        )
        config.validate()
        return config

    @staticmethod
    def _validate_keys(payload: Mapping[str, Any], source_label: str) -> None:
        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            raise ValueError(f"{source_label} includes unsupported key(s): {', '.join(unknown)}.")
        missing = sorted(key for key in ConfigLoader._REQUIRED_YAML_KEYS if key not in payload)
        if missing:
            raise ValueError(f"{source_label} is missing required key(s): {', '.join(missing)}.")

    @staticmethod
    def _required_path(payload: Mapping[str, Any], key: str, source_label: str) -> Path:
        value = normalize_optional_string(payload.get(key))
        if value is None:
            raise ValueError(f"{source_label} requires non-empty `{key}`.")
        return Path(value)

    @staticmethod
    def _optional_positive_float(
        payload: Mapping[str, Any],
        key: str,
        source_label: str,
        default: float | None,
    ) -> float | None:
        """Read and validate a positive number field."""

        if key not in payload:
            return default
        raw_value = payload[key]
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a positive number.")
        normalized = normalize_optional_string(raw_value)
        if normalized is None:
            return default
        try:
            parsed = float(normalized)
        except ValueError as exc:
            raise ValueError(f"{source_label} field `{key}` must be a positive number.") from exc
        if parsed <= 0:
            raise ValueError(f"{source_label} field `{key}` must be a positive number.")
        return parsed
