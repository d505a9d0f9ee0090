from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError
from typer.testing import CliRunner

import graph2code.cli as cli
from graph2code.cli import app
from graph2code.llm.completion import CompletionCallback

TRANSLATION = {
    "graphs": [
        {
            "graph_name": "Toggle",
            "graph_type": "Function",
            "graph_class": "BP_Switch",
            "code": {
                "graphDeclaration": "void Toggle();",
                "graphImplementation": "void ABP_Switch::Toggle() { bOn = !bOn; }",
            },
        }
    ]
}


class _CannedTransport:
    response = json.dumps(
        {"model": "gpt-4o", "choices": [{"message": {"content": json.dumps(TRANSLATION)}}]}
    )
    instances: list["_CannedTransport"] = []

    def __init__(self, timeout_s: float = 0.0) -> None:
        self.timeout_s = timeout_s
        self.extra_headers: dict[str, str] = {}
        self.payloads: list[dict] = []
        _CannedTransport.instances.append(self)

    def post(
        self, endpoint: str, auth_token: str, payload: str, on_complete: CompletionCallback
    ) -> None:
        self.payloads.append(json.loads(payload))
        on_complete(self.response)


@pytest.fixture()
def prompt_files(tmp_path: Path) -> tuple[Path, Path]:
    user_file = tmp_path / "user.json"
    user_file.write_text('{"graph": "BP_Switch"}', encoding="utf-8")
    system_file = tmp_path / "system.txt"
    system_file.write_text("Translate blueprint graphs to C++.", encoding="utf-8")
    return user_file, system_file


@pytest.fixture()
def canned_transport(monkeypatch: pytest.MonkeyPatch) -> type[_CannedTransport]:
    _CannedTransport.instances = []
    monkeypatch.setattr(cli, "RequestsTransport", _CannedTransport)
    return _CannedTransport


def test_models_lists_capabilities() -> None:
    result = CliRunner().invoke(app, ["models"])

    assert result.exit_code == 0
    rows = {row["model"]: row for row in json.loads(result.stdout)}
    assert rows["gpt-4o"]["supports_system_role"] is True
    assert rows["o1-mini"] == {
        "model": "o1-mini",
        "supports_system_role": False,
        "supports_structured_output": False,
    }


def test_show_schema_prints_response_format_schema() -> None:
    result = CliRunner().invoke(app, ["show-schema"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["name"] == "graph_translation"


def test_build_payload_for_system_role_model(prompt_files: tuple[Path, Path]) -> None:
    user_file, system_file = prompt_files
    result = CliRunner().invoke(
        app,
        ["build-payload", "--user-file", str(user_file), "--system-file", str(system_file)],
    )

    assert result.exit_code == 0
    wire = json.loads(result.stdout)
    assert wire["model"] == "gpt-4o"
    assert [m["role"] for m in wire["messages"]] == ["system", "user"]
    assert wire["max_tokens"] == 8192


def test_build_payload_with_model_override_and_sources(
    prompt_files: tuple[Path, Path], tmp_path: Path
) -> None:
    user_file, system_file = prompt_files
    header = tmp_path / "Switch.h"
    header.write_text("class ABP_Switch;", encoding="utf-8")
    result = CliRunner().invoke(
        app,
        [
            "build-payload",
            "--user-file",
            str(user_file),
            "--system-file",
            str(system_file),
            "--model",
            "o1-mini",
            "--source-file",
            str(header),
        ],
    )

    assert result.exit_code == 0
    wire = json.loads(result.stdout)
    assert len(wire["messages"]) == 1
    content = wire["messages"][0]["content"]
    assert content.startswith("<reference_sources>")
    assert "Translate blueprint graphs to C++." in content
    assert "response_format" not in wire


def test_send_prints_normalized_translation(
    prompt_files: tuple[Path, Path],
    canned_transport: type[_CannedTransport],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("G2C_OPENAI_API_KEY", "k")
    monkeypatch.setenv("G2C_HTTP_TIMEOUT_S", "15")
    user_file, system_file = prompt_files

    result = CliRunner().invoke(
        app, ["send", "--user-file", str(user_file), "--system-file", str(system_file)]
    )

    assert result.exit_code == 0
    output = json.loads(result.stdout)
    assert output["graphs"][0]["code"]["graphDeclaration"] == "void Toggle();"
    transport = canned_transport.instances[0]
    assert transport.timeout_s == 15.0
    assert transport.extra_headers["Authorization"] == "Bearer k"
    assert transport.payloads[0]["temperature"] == 0.0


def test_send_exits_non_zero_on_error_body(
    prompt_files: tuple[Path, Path],
    canned_transport: type[_CannedTransport],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(canned_transport, "response", '{"error": "HTTP Error 500"}')
    user_file, system_file = prompt_files

    result = CliRunner().invoke(
        app, ["send", "--user-file", str(user_file), "--system-file", str(system_file)]
    )

    assert result.exit_code == 1
    assert "HTTP Error 500" in result.stdout


def test_send_reports_invalid_configuration(
    prompt_files: tuple[Path, Path],
    canned_transport: type[_CannedTransport],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("G2C_OPENAI_ENDPOINT", "not-a-url")
    monkeypatch.setenv("G2C_OPENAI_API_KEY", "sk-1234567890abcdef")
    user_file, system_file = prompt_files

    result = CliRunner().invoke(
        app, ["send", "--user-file", str(user_file), "--system-file", str(system_file)]
    )

    assert result.exit_code == 1
    assert "provider_initialization_failed" in result.stdout
    assert "sk-1234567890abcdef" not in result.stdout
    assert canned_transport.instances == []


def test_build_payload_rejects_blank_model_as_usage_error(
    prompt_files: tuple[Path, Path],
) -> None:
    user_file, system_file = prompt_files
    result = CliRunner().invoke(
        app,
        [
            "build-payload",
            "--user-file",
            str(user_file),
            "--system-file",
            str(system_file),
            "--model",
            " ",
        ],
    )

    assert result.exit_code == 2
    assert not isinstance(result.exception, ValidationError)
    assert "Invalid model" in result.output


def test_models_ignores_unrelated_malformed_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("G2C_HTTP_TIMEOUT_S", "soon")
    result = CliRunner().invoke(app, ["models"])

    assert result.exit_code == 0
    assert "gpt-4o" in result.output


@pytest.fixture()
def info_settings_file(tmp_path: Path) -> Path:
    path = tmp_path / "graph2code.yml"
    path.write_text("api_key: k\nlog_level: info\n", encoding="utf-8")
    return path


def test_send_applies_log_level_from_settings_file(
    prompt_files: tuple[Path, Path],
    canned_transport: type[_CannedTransport],
    info_settings_file: Path,
) -> None:
    user_file, system_file = prompt_files
    result = CliRunner().invoke(
        app,
        [
            "send",
            "--user-file",
            str(user_file),
            "--system-file",
            str(system_file),
            "--config",
            str(info_settings_file),
        ],
    )

    assert result.exit_code == 0
    assert "Sending request to openai using model: gpt-4o" in result.output


def test_log_level_option_wins_over_settings_file(
    prompt_files: tuple[Path, Path],
    canned_transport: type[_CannedTransport],
    info_settings_file: Path,
) -> None:
    user_file, system_file = prompt_files
    result = CliRunner().invoke(
        app,
        [
            "--log-level",
            "ERROR",
            "send",
            "--user-file",
            str(user_file),
            "--system-file",
            str(system_file),
            "--config",
            str(info_settings_file),
        ],
    )

    assert result.exit_code == 0
    assert "Sending request" not in result.output
