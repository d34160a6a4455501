from __future__ import annotations

from functools import lru_cache
from importlib import resources
import json
from typing import Any

from jsonschema import Draft202012Validator

SCHEMA_FILES = {
    "sample": "telemetry-sample.schema.json",
    "metadata": "run-metadata.schema.json",
}


def load_schema(kind: str) -> dict[str, Any]:
    try:
        filename = SCHEMA_FILES[kind]
    except KeyError:
        raise ValueError(f"Unknown schema kind: {kind}") from None
    schema_path = resources.files("batlab").joinpath(f"schemas/{filename}")
    return json.loads(schema_path.read_text(encoding="utf-8"))


@lru_cache(maxsize=None)
def get_validator(kind: str) -> Draft202012Validator:
    schema = load_schema(kind)
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema=schema)


def validate_payload(payload: dict[str, Any], kind: str = "sample") -> list[str]:
    validator = get_validator(kind)
    errors = sorted(validator.iter_errors(payload), key=lambda e: [str(part) for part in e.path])
    return [error.message for error in errors]
