"""
capital_config -- single public entrypoint for ledger settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()``.  No other component reads settings files
    directly.  Returns a frozen ``LedgerSettings``.

Architecture position:
    Configuration -- YAML-driven.  The kernel depends only on the
    ``LedgerSettings`` type; loading happens here.

Failure modes:
    - ``FileNotFoundError`` -- the requested settings file does not exist.
    - ``KeyError`` / ``ValueError`` -- structural or range validation failed.

Audit relevance:
    Every successful ``get_active_settings()`` call emits a
    ``ledger_settings_loaded`` log entry with the file path and settings
    checksum, tying exported audit trails to the settings that shaped them.
"""

from __future__ import annotations

from pathlib import Path

from capital_config.loader import compute_checksum, load_yaml_file, parse_settings
from capital_kernel.domain.settings import LedgerSettings
from capital_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default settings file
DEFAULT_SETTINGS_PATH = Path(__file__).parent / "sets" / "default.yaml"

__all__ = [
    "DEFAULT_SETTINGS_PATH",
    "LedgerSettings",
    "get_active_settings",
]


def get_active_settings(config_path: Path | None = None) -> LedgerSettings:
    """The ONLY public settings entrypoint.

    Args:
        config_path: YAML settings file.  Defaults to the shipped
            ``sets/default.yaml``.

    Returns:
        Validated, frozen ``LedgerSettings``.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_SETTINGS_PATH
    settings = parse_settings(load_yaml_file(path))

    _logger.info(
        "ledger_settings_loaded",
        extra={
            "config_path": str(path),
            "checksum": compute_checksum(settings.to_dict()),
            "export_version": settings.export_version,
            "proof_origin": settings.proof_origin,
        },
    )
    return settings
