from __future__ import annotations

import io
import json
import logging

from graph2code.shared.logging_config import setup_logging


def test_setup_logging_emits_json_lines_for_package_loggers() -> None:
    stream = io.StringIO()
    setup_logging("INFO", stream=stream)

    logging.getLogger("graph2code.llm.providers.openai").info("Sending request to %s", "openai")
    logging.getLogger("graph2code.llm.providers.openai").debug("hidden payload")

    lines = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert len(lines) == 1
    assert lines[0]["level"] == "INFO"
    assert lines[0]["logger"] == "graph2code.llm.providers.openai"
    assert lines[0]["message"] == "Sending request to openai"
    assert "timestamp" in lines[0]


def test_setup_logging_includes_exception_text() -> None:
    stream = io.StringIO()
    setup_logging("ERROR", stream=stream)

    try:
        raise ConnectionResetError("socket closed")
    except ConnectionResetError:
        logging.getLogger("graph2code.llm.providers.openai").exception("Transport raised")

    entry = json.loads(stream.getvalue())
    assert "ConnectionResetError: socket closed" in entry["exception"]


def test_setup_logging_is_repeatable_without_duplicate_handlers() -> None:
    setup_logging("INFO", stream=io.StringIO())
    setup_logging("INFO", stream=io.StringIO())
    assert len(logging.getLogger("graph2code").handlers) == 1
