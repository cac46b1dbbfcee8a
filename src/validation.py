"""
Schema Validation - JSON Schema validation of declared monitoring jobs.

Declared state is checked against MONITORING_JOB_SCHEMA before it reaches
the translator, so the translator and reconciler can assume well-formed
input.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from jsonschema import Draft7Validator, ValidationError

from models import POLICIES, DeclaredState

logger = logging.getLogger(__name__)


MONITORING_JOB_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "job_type", "regions", "frequency", "config"],
    "properties": {
        "id": {"type": "string"},
        "name": {"type": "string", "minLength": 1},
        "job_type": {"type": "string", "minLength": 1},
        "regions": {"type": "array", "items": {"type": "string"}},
        "frequency": {"type": "integer"},
        "config": {
            "type": "object",
            "additionalProperties": {"type": ["string", "integer", "boolean"]},
        },
        "active": {"type": "boolean"},
        "rapid_recheck": {"type": "boolean"},
        "mute": {"type": "boolean"},
        "policy": {"type": "string", "enum": list(POLICIES)},
        "notes": {"type": "string"},
        "notify_delay": {"type": "integer"},
        "notify_repeat": {"type": "integer"},
        "notify_failback": {"type": "boolean"},
        "notify_regional": {"type": "boolean"},
        "notify_list": {"type": "string"},
        "rules": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["key", "comparison", "value"],
                "properties": {
                    "key": {"type": "string"},
                    "comparison": {"type": "string"},
                    "value": {"type": ["string", "integer"]},
                },
                "additionalProperties": False,
            },
        },
    },
    "additionalProperties": False,
}


class StateValidationError(Exception):
    """Raised when declared state does not satisfy the job schema."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def validate_declared_state(
    data: Dict[str, Any], schema: Dict[str, Any] = MONITORING_JOB_SCHEMA
) -> Tuple[bool, Optional[str]]:
    """
    Validate a declared monitoring job against the job schema.

    Args:
        data: The declared job, as loaded from YAML or JSON
        schema: The JSON Schema to validate against

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        validator = Draft7Validator(schema)
        errors = list(validator.iter_errors(data))

        if not errors:
            return True, None

        error_messages = []
        for error in errors:
            path = ".".join(str(p) for p in error.absolute_path) or "(root)"
            error_messages.append(f"{path}: {error.message}")

        return False, "; ".join(error_messages)

    except ValidationError as e:
        return False, f"Validation error: {str(e)}"


def parse_declared_state(data: Dict[str, Any]) -> DeclaredState:
    """
    Validate a declared job and build its state record.

    Raises:
        StateValidationError: If the declaration does not match the schema.
    """
    is_valid, error = validate_declared_state(data)
    if not is_valid:
        logger.error(f"Invalid monitoring job declaration: {error}")
        raise StateValidationError(error)
    return DeclaredState.from_dict(data)
