"""graph2code CLI for building and sending graph translation requests."""

from __future__ import annotations

import json
from pathlib import Path

import typer
from pydantic import ValidationError

from graph2code.llm.capabilities import (
    MODEL_CAPABILITIES,
    supports_structured_output,
)
from graph2code.llm.config import ProviderConfig
from graph2code.llm.errors import ResponseParseError, SchemaParseError, is_error_body
from graph2code.llm.payload import build_request_payload
from graph2code.llm.prompts import FileSourceMaterialProvider, PromptMerger
from graph2code.llm.providers import OpenAIProvider
from graph2code.llm.schema import load_translation_schema
from graph2code.llm.transport import RequestsTransport
from graph2code.shared.logging_config import setup_logging
from graph2code.shared.settings import (
    ProviderSettings,
    load_provider_settings,
    log_level_from_env,
)

app = typer.Typer(add_completion=False, help="graph2code: graph-to-code LLM request adapter")


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise typer.BadParameter(f"Cannot read {path}: {exc}") from exc


def _load_settings(config: Path | None) -> ProviderSettings:
    try:
        return load_provider_settings(config)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(str(exc)) from exc


def _emit(payload: object) -> None:
    typer.echo(json.dumps(payload, indent=2))


@app.callback()
def main(ctx: typer.Context, log_level: str = typer.Option("", "--log-level")) -> None:
    ctx.obj = {"log_level": log_level}
    setup_logging(log_level or log_level_from_env())


def _apply_settings_log_level(ctx: typer.Context, settings: ProviderSettings) -> None:
    # An explicit --log-level wins over the settings file.
    if not (ctx.obj or {}).get("log_level"):
        setup_logging(settings.log_level)


@app.command()
def models() -> None:
    """Print the known models and how requests are shaped for them."""
    rows = [
        {
            "model": model_id,
            "supports_system_role": capability.supports_system_role,
            "supports_structured_output": supports_structured_output(model_id),
        }
        for model_id, capability in sorted(MODEL_CAPABILITIES.items())
    ]
    _emit(rows)


@app.command()
def show_schema() -> None:
    """Print the structured-output schema attached to requests."""
    try:
        _emit(load_translation_schema())
    except SchemaParseError as exc:
        _emit(exc.as_dict())
        raise typer.Exit(code=1)


@app.command()
def build_payload(
    ctx: typer.Context,
    user_file: Path = typer.Option(..., "--user-file"),
    system_file: Path = typer.Option(..., "--system-file"),
    model: str = typer.Option("", "--model"),
    source_file: list[Path] = typer.Option([], "--source-file"),
    config: Path = typer.Option(None, "--config"),
) -> None:
    """Print the wire payload for a request without sending it."""
    settings = _load_settings(config)
    _apply_settings_log_level(ctx, settings)
    sources = source_file or list(settings.source_files)
    merger = PromptMerger(FileSourceMaterialProvider(sources) if sources else None)
    try:
        provider_config = ProviderConfig(model=model or settings.model)
    except ValidationError as exc:
        message = exc.errors()[0]["msg"]
        raise typer.BadParameter(f"Invalid model: {message}", param_hint="--model") from exc
    try:
        payload = build_request_payload(
            _read_text(user_file),
            _read_text(system_file),
            provider_config,
            prompt_merger=merger,
            default_supports_system_role=settings.default_supports_system_role,
        )
    except SchemaParseError as exc:
        _emit(exc.as_dict())
        raise typer.Exit(code=1)
    _emit(payload.to_wire())


@app.command()
def send(
    ctx: typer.Context,
    user_file: Path = typer.Option(..., "--user-file"),
    system_file: Path = typer.Option(..., "--system-file"),
    config: Path = typer.Option(None, "--config"),
    raw: bool = typer.Option(False, "--raw"),
) -> None:
    """Send a translation request and print the normalized result."""
    settings = _load_settings(config)
    _apply_settings_log_level(ctx, settings)
    source_provider = (
        FileSourceMaterialProvider(settings.source_files) if settings.source_files else None
    )
    provider = OpenAIProvider(
        transport_factory=lambda _config: RequestsTransport(timeout_s=settings.timeout_s),
        source_provider=source_provider,
        default_supports_system_role=settings.default_supports_system_role,
    )
    if not provider.initialize(settings.config_values()):
        _emit({"error": "provider_initialization_failed", "settings": settings.redacted()})
        raise typer.Exit(code=1)

    body = provider.submit(_read_text(user_file), _read_text(system_file)).result()
    if is_error_body(body):
        typer.echo(body)
        raise typer.Exit(code=1)
    if raw:
        typer.echo(body)
        return

    try:
        result = provider.parse_response(body)
    except ResponseParseError as exc:
        _emit(exc.as_dict())
        raise typer.Exit(code=1)
    _emit(result.model_dump(by_alias=True))
