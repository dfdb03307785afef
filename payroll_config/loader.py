"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Loads a YAML payroll policy file and parses it into a
``payroll_config.schema.PayrollConfig``.  Runtime callers go through
``payroll_config.get_active_config()``; these functions are exposed for
tests and tooling.

Invariants enforced
-------------------
* Numeric policy values become ``Decimal`` via ``str()``; YAML floats
  never reach wage arithmetic.
* Missing required keys raise ``KeyError``; bad values raise ``ValueError``.
* ``compute_checksum`` is deterministic for identical content.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import PayrollConfig


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_decimal(value: Any, key: str) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"{key}: expected a number, got {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"{key}: expected a number, got {value!r}") from e


def parse_payroll_config(data: dict[str, Any]) -> PayrollConfig:
    """
    Parse a ``PayrollConfig`` from a dict.

    Expected layout::

        config_id: US-WA-AG
        version: 1
        scope:
          jurisdiction: US-WA
          currency: USD
          timezone: America/Los_Angeles
          effective_from: "2025-01-01"
        wages:
          statewide_minimum_wage: "16.28"
        rest_breaks:
          minutes: "10"
          interval_hours: "4"
        sick_leave:
          hours_per_sick_hour: "40"

    Raises:
        KeyError: if required keys are missing.
        ValueError: if values cannot be parsed or fail validation.
    """
    scope = data["scope"]
    wages = data["wages"]
    breaks = data.get("rest_breaks", {})
    sick = data.get("sick_leave", {})

    return PayrollConfig(
        config_id=str(data["config_id"]),
        version=int(data.get("version", 1)),
        jurisdiction=str(scope["jurisdiction"]),
        currency=str(scope.get("currency", "USD")),
        timezone=str(scope["timezone"]),
        effective_from=(
            parse_date(scope["effective_from"]) if scope.get("effective_from") else None
        ),
        statewide_minimum_wage=parse_decimal(
            wages["statewide_minimum_wage"], "statewide_minimum_wage",
        ),
        rest_break_minutes=parse_decimal(breaks.get("minutes", "10"), "rest_breaks.minutes"),
        rest_break_interval_hours=parse_decimal(
            breaks.get("interval_hours", "4"), "rest_breaks.interval_hours",
        ),
        hours_per_sick_hour=parse_decimal(
            sick.get("hours_per_sick_hour", "40"), "sick_leave.hours_per_sick_hour",
        ),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
