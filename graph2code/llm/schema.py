"""Structured-output schema asset for graph translation responses."""

from __future__ import annotations

import copy
import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from graph2code.llm.errors import SchemaParseError

_SCHEMA_DIR = Path(__file__).resolve().parents[1] / "schema" / "llm"
TRANSLATION_SCHEMA_FILE = "graph_translation.schema.json"
SCHEMA_VERSION = "graph_translation/v1"


def _read_schema_asset(filename: str) -> dict[str, Any]:
    path = _SCHEMA_DIR / filename
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise SchemaParseError(f"Failed to parse JSON schema: {filename}") from exc
    if not isinstance(document, dict) or not isinstance(document.get("schema"), dict):
        raise SchemaParseError(f"Failed to parse JSON schema: {filename}")
    if document.get("schema_version") != SCHEMA_VERSION:
        raise SchemaParseError(
            f"Unexpected schema version in {filename}: {document.get('schema_version')!r}"
        )
    return document


@lru_cache(maxsize=None)
def _cached_translation_schema() -> dict[str, Any]:
    return _read_schema_asset(TRANSLATION_SCHEMA_FILE)


def load_translation_schema() -> dict[str, Any]:
    """Return the ``json_schema`` object sent as the response format.

    The asset is parsed once per process; callers receive a private copy.
    """
    document = _cached_translation_schema()
    return copy.deepcopy({"name": document["name"], "schema": document["schema"]})


def validate_against_schema(
    payload: Any,
    schema: dict[str, Any],
    *,
    path: str = "$",
) -> list[dict[str, str]]:
    """Return deterministic machine-readable violations of a JSON schema subset."""
    errors: list[dict[str, str]] = []

    schema_type = schema.get("type")
    if schema_type == "object":
        if not isinstance(payload, dict):
            return [{"path": path, "code": "SCHEMA_TYPE", "message": "value must be an object"}]

        for field in sorted(schema.get("required", [])):
            if field not in payload:
                errors.append(
                    {
                        "path": f"{path}.{field}",
                        "code": "SCHEMA_REQUIRED",
                        "message": f"'{field}' is a required property",
                    }
                )

        properties = schema.get("properties", {})
        additional_properties = schema.get("additionalProperties", True)
        for key in sorted(payload.keys()):
            key_path = f"{path}.{key}"
            if key in properties:
                errors.extend(validate_against_schema(payload[key], properties[key], path=key_path))
            elif additional_properties is False:
                errors.append(
                    {
                        "path": key_path,
                        "code": "SCHEMA_ADDITIONAL_PROPERTY",
                        "message": "additional properties are not allowed",
                    }
                )
        return errors

    if schema_type == "array":
        if not isinstance(payload, list):
            return [{"path": path, "code": "SCHEMA_TYPE", "message": "value must be an array"}]
        item_schema = schema.get("items")
        if isinstance(item_schema, dict):
            for index, item in enumerate(payload):
                errors.extend(validate_against_schema(item, item_schema, path=f"{path}[{index}]"))
        return errors

    if schema_type == "string" and not isinstance(payload, str):
        errors.append({"path": path, "code": "SCHEMA_TYPE", "message": "value must be a string"})
    return errors
