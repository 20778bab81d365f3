"""
Settings Loader (``capital_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into the frozen
``LedgerSettings`` dataclass.  The single public entry point for runtime
settings is ``capital_config.get_active_settings()``.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for the required ``settings`` section.
* ``compute_checksum`` produces a deterministic SHA-256 hash for settings
  identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing ``settings`` section  -> ``KeyError``.
* Non-numeric or negative amounts, empty tags  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from capital_kernel.domain.settings import LedgerSettings


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, field_name: str) -> Decimal:
    """Parse a Decimal from YAML (string, int or float)."""
    if isinstance(value, bool):
        raise ValueError(f"{field_name}: expected a number, got {value!r}")
    try:
        result = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"{field_name}: cannot parse decimal from {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"{field_name}: must be finite, got {value!r}")
    return result


def parse_settings(data: dict[str, Any]) -> LedgerSettings:
    """
    Parse ``LedgerSettings`` from a loaded YAML document.

    Preconditions:
        - ``data`` contains a ``settings`` mapping.  Keys absent from it
          keep their ``LedgerSettings`` defaults.
    Raises:
        KeyError: if the ``settings`` section is missing.
        ValueError: if a value is malformed or out of range.
    """
    section = data["settings"]
    if not isinstance(section, dict):
        raise ValueError("settings: expected a mapping")

    defaults = LedgerSettings()
    settings = LedgerSettings(
        export_version=str(section.get("export_version", defaults.export_version)),
        proof_origin=str(section.get("proof_origin", defaults.proof_origin)),
        default_rate_multiplier=parse_decimal(
            section.get("default_rate_multiplier", defaults.default_rate_multiplier),
            "default_rate_multiplier",
        ),
        default_salvage_value=parse_decimal(
            section.get("default_salvage_value", defaults.default_salvage_value),
            "default_salvage_value",
        ),
    )
    validate_settings(settings)
    return settings


def validate_settings(settings: LedgerSettings) -> None:
    """
    Range-check parsed settings.

    Raises:
        ValueError: naming the first offending field.
    """
    if not settings.export_version:
        raise ValueError("export_version must not be empty")
    if not settings.proof_origin:
        raise ValueError("proof_origin must not be empty")
    if settings.default_rate_multiplier < 0:
        raise ValueError("default_rate_multiplier must not be negative")
    if settings.default_salvage_value < 0:
        raise ValueError("default_salvage_value must not be negative")


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
