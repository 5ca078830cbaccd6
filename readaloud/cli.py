"""Command-line interface for ReadAloud.

Responsibilities:
- Expose stage passes (`discover`, `analyze`, `generate`, `run`) as commands.
- Expose the serving gate as a one-shot `fetch` and an HTTP `serve` command.
- Manage the securely stored provider API key.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer
import uvicorn

from .cli_rendering import echo_json_payload, echo_pass_report, exit_with_command_error
from .cli_runtime import resolve_provider_runtime_sources
from .config import ConfigLoader, ReadAloudConfig, RuntimeConfigSources
from .credentials import create_credential_store
from .errors import PipelineStageError
from .parsing import normalize_optional_string
from .pipeline import ReadAloudPipeline
from .serving.app import create_app
from .serving.gate import AssessmentFound
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="readaloud",
    no_args_is_help=True,
    help="ReadAloud CLI.",
)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file."),
]
LedgerOption = Annotated[
    Path | None,
    typer.Option("--ledger", help="CSV ledger path (overrides config value)."),
]
RootOption = Annotated[
    Path | None,
    typer.Option("--root", help="Audio root folder (overrides config value)."),
]
TtsModelOption = Annotated[
    str | None,
    typer.Option("--tts-model", help="Speech model id override."),
]
TtsVoiceOption = Annotated[
    str | None,
    typer.Option("--tts-voice", help="Narrator voice id override."),
]
ApiKeyOption = Annotated[
    str | None,
    typer.Option(
        "--api-key",
        help="Gemini API key override. Prefer `--prompt-api-key` to avoid shell history.",
    ),
]
PromptApiKeyOption = Annotated[
    bool,
    typer.Option("--prompt-api-key", help="Prompt for API key with hidden input."),
]
StoreApiKeyOption = Annotated[
    bool,
    typer.Option(
        "--store-api-key/--no-store-api-key",
        help="Persist a CLI-entered API key to secure credential storage.",
    ),
]
TimeBudgetOption = Annotated[
    float | None,
    typer.Option("--time-budget", help="Seconds before no further row is started."),
]


def _load_yaml_config(config_path: Path) -> ReadAloudConfig:
    """Load a YAML config file and map failures to stage errors."""

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc
    except Exception as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Failed to load config file `{config_path}`: {exc}",
            hint="Verify YAML syntax and file permissions.",
        ) from exc


def _resolve_command_base_config(
    config_file: Path | None,
    ledger: Path | None,
    root: Path | None,
    time_budget: float | None = None,
) -> ReadAloudConfig:
    """Resolve effective config from YAML, environment, and explicit CLI overrides."""

    if config_file is not None:
        config = _load_yaml_config(config_file)
    elif ledger is not None and root is not None:
        config = ReadAloudConfig(ledger_path=ledger, audio_root=root)
    else:
        try:
            config = ConfigLoader.from_env()
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=str(exc),
                hint=(
                    "Pass `--ledger` and `--root`, use `--config <path.yaml>`, or set "
                    "`READALOUD_LEDGER_PATH` and `READALOUD_AUDIO_ROOT`."
                ),
            ) from exc

    if ledger is not None:
        config = replace(config, ledger_path=ledger)
    if root is not None:
        config = replace(config, audio_root=root)
    if time_budget is not None:
        config = replace(config, time_budget_seconds=time_budget)
    try:
        config.validate()
    except ValueError as exc:
        raise PipelineStageError(stage="config", detail=str(exc)) from exc
    return config


def _apply_runtime_sources(
    base_config: ReadAloudConfig,
    runtime_cli_values: dict[str, str],
    runtime_secure_values: dict[str, str],
) -> ReadAloudConfig:
    """Attach runtime source mappings while keeping base config defaults intact."""

    return replace(
        base_config,
        runtime_sources=RuntimeConfigSources(
            cli=runtime_cli_values,
            secure=runtime_secure_values,
            env=os.environ,
        ),
    )


def _provider_config(
    config_file: Path | None,
    ledger: Path | None,
    root: Path | None,
    time_budget: float | None,
    tts_model: str | None,
    tts_voice: str | None,
    api_key: str | None,
    prompt_api_key: bool,
    store_api_key: bool,
) -> ReadAloudConfig:
    runtime_cli_values, runtime_secure_values = resolve_provider_runtime_sources(
        tts_model=tts_model,
        tts_voice=tts_voice,
        api_key=api_key,
        prompt_api_key=prompt_api_key,
        store_api_key=store_api_key,
        credential_store_factory=create_credential_store,
    )
    base_config = _resolve_command_base_config(config_file, ledger, root, time_budget)
    return _apply_runtime_sources(base_config, runtime_cli_values, runtime_secure_values)


@app.command("run")
def run_command(
    config_file: ConfigOption = None,
    ledger: LedgerOption = None,
    root: RootOption = None,
    time_budget: TimeBudgetOption = None,
    tts_model: TtsModelOption = None,
    tts_voice: TtsVoiceOption = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = True,
) -> None:
    """Run discovery, analysis, and generation within one time budget."""

    try:
        config = _provider_config(
            config_file, ledger, root, time_budget,
            tts_model, tts_voice, api_key, prompt_api_key, store_api_key,
        )
        reports = ReadAloudPipeline(config, run_logger=RunLogger()).run_all()
    except Exception as exc:
        exit_with_command_error("run", exc)

    for report in reports:
        echo_pass_report(report)


@app.command("discover")
def discover_command(
    config_file: ConfigOption = None,
    ledger: LedgerOption = None,
    root: RootOption = None,
) -> None:
    """Register new source documents as ledger rows."""

    try:
        config = _resolve_command_base_config(config_file, ledger, root)
        report = ReadAloudPipeline(config, run_logger=RunLogger()).discover()
    except Exception as exc:
        exit_with_command_error("discover", exc)

    echo_pass_report(report)


@app.command("analyze")
def analyze_command(
    config_file: ConfigOption = None,
    ledger: LedgerOption = None,
    root: RootOption = None,
) -> None:
    """Record chunk counts for rows that have not been analyzed yet."""

    try:
        config = _resolve_command_base_config(config_file, ledger, root)
        report = ReadAloudPipeline(config, run_logger=RunLogger()).analyze()
    except Exception as exc:
        exit_with_command_error("analyze", exc)

    echo_pass_report(report)


@app.command("generate")
def generate_command(
    config_file: ConfigOption = None,
    ledger: LedgerOption = None,
    root: RootOption = None,
    time_budget: TimeBudgetOption = None,
    tts_model: TtsModelOption = None,
    tts_voice: TtsVoiceOption = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = True,
) -> None:
    """Generate missing chunk audio for analyzed rows."""

    try:
        config = _provider_config(
            config_file, ledger, root, time_budget,
            tts_model, tts_voice, api_key, prompt_api_key, store_api_key,
        )
        report = ReadAloudPipeline(config, run_logger=RunLogger()).generate()
    except Exception as exc:
        exit_with_command_error("generate", exc)

    echo_pass_report(report)


@app.command("fetch")
def fetch_command(
    identity: Annotated[str, typer.Argument(help="Requester identity, e.g. an e-mail address.")],
    secret: Annotated[
        str,
        typer.Option("--secret", prompt=True, hide_input=True, help="Shared access secret."),
    ],
    config_file: ConfigOption = None,
    ledger: LedgerOption = None,
    root: RootOption = None,
) -> None:
    """Look up a finished document as a requester would and print the JSON payload."""

    try:
        config = _resolve_command_base_config(config_file, ledger, root)
        result = ReadAloudPipeline(config).serving_gate().fetch(identity, secret)
    except Exception as exc:
        exit_with_command_error("fetch", exc)

    echo_json_payload(result.to_payload())
    if not isinstance(result, AssessmentFound):
        raise typer.Exit(code=1)


@app.command("serve")
def serve_command(
    config_file: ConfigOption = None,
    ledger: LedgerOption = None,
    root: RootOption = None,
    host: Annotated[str, typer.Option("--host", help="Bind address.")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", help="Bind port.")] = 8000,
    allow_origin: Annotated[
        list[str] | None,
        typer.Option("--allow-origin", help="CORS origin allowed to call the API; repeatable."),
    ] = None,
) -> None:
    """Serve finished documents over HTTP."""

    try:
        config = _resolve_command_base_config(config_file, ledger, root)
        pipeline = ReadAloudPipeline(config, run_logger=RunLogger())
        http_app = create_app(pipeline.serving_gate, allowed_origins=allow_origin)
    except Exception as exc:
        exit_with_command_error("serve", exc)

    uvicorn.run(http_app, host=host, port=port)


@app.command("credentials")
def credentials_command(
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it securely.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear stored API key from secure credential storage.",
        ),
    ] = False,
) -> None:
    """Manage the securely stored Gemini API key."""

    if set_api_key and clear_api_key:
        exit_with_command_error(
            "credentials",
            PipelineStageError(
                stage="credentials",
                detail="`--set-api-key` and `--clear-api-key` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    credential_store = create_credential_store()
    if set_api_key:
        prompted_api_key = normalize_optional_string(
            typer.prompt(
                "Gemini API key (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_api_key is None:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail="No API key entered.",
                    hint="Provide a non-empty API key when using `--set-api-key`.",
                ),
            )
        try:
            credential_store.set_api_key(prompted_api_key)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail=f"Failed to store API key securely: {exc}",
                    hint="Configure a keyring backend and retry.",
                ),
            )
        typer.echo("API key stored in secure credential storage.")
        return

    if clear_api_key:
        if credential_store.clear_api_key():
            typer.echo("Stored API key cleared from secure credential storage.")
        else:
            typer.echo("No stored API key found in secure credential storage.")
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    status = "present" if credential_store.get_api_key() is not None else "not set"
    typer.echo(f"Secure credential storage: {availability}")
    typer.echo(f"Stored Gemini API key: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
