"""
Config validation for the helm-update-image step.

The raw (untyped) step configuration is checked against
schemas/helm_update_image.json before it is converted to a StepConfig.
Every violation is collected, not just the first, and reported as
"<path>: <message>" with "(root)" for the top level of the config.

The JSON schema encodes the oneOf between the two entry shapes:
- image set and non-empty: value must be a ValueKind token
- image absent or empty: value is a free literal
A violation of that exclusivity is one combined problem on the element.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from jsonschema import Draft7Validator
from jsonschema.exceptions import ValidationError as SchemaViolation

from promostep.errors import ValidationError

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schemas" / "helm_update_image.json"

_JSON_TYPES = {
    dict: "object",
    list: "array",
    str: "string",
    bool: "boolean",
    int: "integer",
    float: "number",
    type(None): "null",
}

# Lazy-initialized validator
_VALIDATOR: Draft7Validator | None = None


def get_validator() -> Draft7Validator:
    """Get the schema validator, loading the schema on first use."""
    global _VALIDATOR
    if _VALIDATOR is None:
        schema = json.loads(SCHEMA_PATH.read_text())
        Draft7Validator.check_schema(schema)
        _VALIDATOR = Draft7Validator(schema)
    return _VALIDATOR


def _format_path(path: Iterable[Any]) -> str:
    parts = [str(p) for p in path]
    return ".".join(parts) if parts else "(root)"


def _json_type(value: Any) -> str:
    return _JSON_TYPES.get(type(value), type(value).__name__)


def _describe(error: SchemaViolation) -> list[str]:
    """Render one schema violation as one or more "<path>: <message>" problems."""
    where = _format_path(error.absolute_path)
    kind = error.validator

    if kind == "required":
        instance = error.instance if isinstance(error.instance, dict) else {}
        return [
            f"{where}: {prop} is required"
            for prop in error.validator_value
            if prop not in instance
        ]
    if kind == "additionalProperties":
        allowed = error.schema.get("properties", {})
        return [
            f"{where}: Additional property {prop} is not allowed"
            for prop in error.instance
            if prop not in allowed
        ]
    if kind == "minLength":
        return [f"{where}: String length must be greater than or equal to {error.validator_value}"]
    if kind == "minItems":
        return [f"{where}: Array must have at least {error.validator_value} items"]
    if kind == "oneOf":
        return [f"{where}: Must validate one and only one schema"]
    if kind == "type":
        return [f"{where}: Invalid type. Expected: {error.validator_value}, given: {_json_type(error.instance)}"]
    if kind == "enum":
        field = str(error.absolute_path[-1]) if error.absolute_path else "(root)"
        allowed = ", ".join(json.dumps(v) for v in error.validator_value)
        return [f"{where}: {field} must be one of the following: {allowed}"]
    return [f"{where}: {error.message}"]


def collect_problems(raw: Any) -> list[str]:
    """
    Return every schema problem found in raw, in a stable order.

    An empty list means the configuration is valid.
    """
    errors = sorted(
        get_validator().iter_errors(raw),
        key=lambda e: _format_path(e.absolute_path),
    )
    problems: list[str] = []
    for error in errors:
        problems.extend(_describe(error))
    # required/additionalProperties errors may report the same property twice
    return list(dict.fromkeys(problems))


def validate(raw: Any) -> None:
    """
    Validate a raw step configuration.

    Args:
        raw: The configuration as decoded from YAML/JSON

    Raises:
        ValidationError: With every problem found
    """
    problems = collect_problems(raw)
    if problems:
        logger.warning(
            "Step config failed validation with %d problem(s)", len(problems),
            extra={"event": "config_invalid", "metadata": {"problems": problems}},
        )
        raise ValidationError(problems)
