"""
State Translator - Pure mapping between declared state and job records.

to_state() renders a job returned by the NS1 API into the flat,
string-typed record operators declare; to_domain() goes the other way.
Neither function performs I/O.

The API types config values by key name. A fixed table decides which keys
are boolean and which literal pair each one is written with; every other
key holds text or a number.
"""

import logging
import math
import re
from decimal import Decimal
from typing import Any, Dict, List

from models import (
    DEFAULT_POLICY,
    REGION_SCOPE_FIXED,
    ConfigValue,
    DeclaredRule,
    DeclaredState,
    JobRule,
    MonitoringJob,
    RuleValue,
)

logger = logging.getLogger(__name__)

# Boolean config keys mapped to their (true, false) flat literals.
# ssl is the odd one out and must stay "1"/"0" for API compatibility.
BOOLEAN_CONFIG_KEYS: Dict[str, tuple] = {
    "ssl": ("1", "0"),
    "follow_redirect": ("true", "false"),
    "ipv6": ("true", "false"),
    "tls_skip_verify": ("true", "false"),
    "tls_add_verify": ("true", "false"),
}

TRUE_LITERALS = ("1", "true")
FALSE_LITERALS = ("0", "false")

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class TranslationError(Exception):
    """Raised when a value cannot be mapped between the two representations."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def parse_integer(text: str):
    """
    Parse base-10 integer text, returning None when it is not one.

    Only an optional sign followed by digits is accepted; whitespace,
    underscores and values outside the signed 64-bit range are rejected.
    """
    if not _INTEGER_RE.fullmatch(text):
        return None
    value = int(text)
    if value < _INT64_MIN or value > _INT64_MAX:
        return None
    return value


def format_number(value) -> str:
    """Shortest decimal text that round-trips, never in exponent form."""
    if isinstance(value, int):
        return str(value)
    if not math.isfinite(value):
        raise TranslationError(f"Cannot represent non-finite number {value!r}")
    return format(Decimal(repr(value)).normalize(), "f")


# Domain -> state


def _config_to_state(config: Dict[str, ConfigValue]) -> Dict[str, str]:
    flat: Dict[str, str] = {}
    for key, value in config.items():
        if key in BOOLEAN_CONFIG_KEYS:
            if not isinstance(value, bool):
                raise TranslationError(
                    f"Config key '{key}' must be a boolean, got {type(value).__name__}"
                )
            true_literal, false_literal = BOOLEAN_CONFIG_KEYS[key]
            flat[key] = true_literal if value else false_literal
        elif isinstance(value, str):
            flat[key] = value
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            flat[key] = format_number(value)
        else:
            raise TranslationError(
                f"Config key '{key}' has unsupported type {type(value).__name__}"
            )
    return flat


def _rule_value_to_state(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_number(value)
    raise TranslationError(f"Rule value has unsupported type {type(value).__name__}")


def to_state(job: MonitoringJob) -> DeclaredState:
    """
    Render a job record as flat state.

    Raises:
        TranslationError: If a config or rule value has a type the flat
            form cannot carry.
    """
    regions = sorted(job.regions) if job.regions else []
    rules = [
        DeclaredRule(
            key=rule.key,
            comparison=rule.comparison,
            value=_rule_value_to_state(rule.value),
        )
        for rule in job.rules
    ]
    return DeclaredState(
        id=job.id,
        name=job.name,
        job_type=job.job_type,
        active=job.active,
        mute=job.mute,
        regions=regions,
        frequency=job.frequency,
        rapid_recheck=job.rapid_recheck,
        config=_config_to_state(job.config),
        policy=job.policy,
        notes=job.notes,
        notify_delay=job.notify_delay,
        notify_repeat=job.notify_repeat,
        notify_regional=job.notify_regional,
        notify_failback=job.notify_failback,
        notify_list=job.notify_list,
        rules=rules,
    )


# State -> domain


def _config_to_domain(flat: Dict[str, str]) -> Dict[str, ConfigValue]:
    config: Dict[str, ConfigValue] = {}
    for key, text in flat.items():
        if key in BOOLEAN_CONFIG_KEYS:
            if text in TRUE_LITERALS:
                config[key] = True
            elif text in FALSE_LITERALS:
                config[key] = False
            else:
                raise TranslationError(
                    f"Config key '{key}' must be one of "
                    f"{', '.join(TRUE_LITERALS + FALSE_LITERALS)}, got '{text}'"
                )
            continue
        number = parse_integer(text)
        config[key] = text if number is None else number
    return config


def _rule_value_to_domain(text: str) -> RuleValue:
    number = parse_integer(text)
    return text if number is None else number


def _rules_to_domain(declared: List[DeclaredRule]) -> List[JobRule]:
    return [
        JobRule(
            key=rule.key,
            comparison=rule.comparison,
            value=_rule_value_to_domain(rule.value),
        )
        for rule in declared
    ]


def to_domain(state: DeclaredState) -> MonitoringJob:
    """
    Build the job record to send to the API from declared state.

    Raises:
        TranslationError: If a boolean config key carries text that is
            neither a true nor a false literal.
    """
    regions = list(state.regions)
    if len(regions) > 1:
        regions.sort()

    job = MonitoringJob(
        id=state.id,
        name=state.name,
        job_type=state.job_type,
        active=state.active,
        mute=state.mute,
        regions=regions,
        frequency=state.frequency,
        rapid_recheck=state.rapid_recheck,
        rules=_rules_to_domain(state.rules),
        config=_config_to_domain(state.config),
        region_scope=REGION_SCOPE_FIXED,
        policy=state.policy or DEFAULT_POLICY,
    )

    # Copy only what was declared; undeclared fields keep the zero value
    if state.notes is not None:
        job.notes = state.notes
    if state.notify_delay is not None:
        job.notify_delay = state.notify_delay
    if state.notify_repeat is not None:
        job.notify_repeat = state.notify_repeat
    if state.notify_regional is not None:
        job.notify_regional = state.notify_regional
    if state.notify_failback is not None:
        job.notify_failback = state.notify_failback
    if state.notify_list is not None:
        job.notify_list = state.notify_list

    logger.debug(f"Translated declared state for job '{state.name}' to job record")
    return job
