"""
Ledger settings.

The typed, frozen settings the capital kernel runs with.  The kernel never
reads settings files itself: ``capital_config`` parses YAML into this type
and callers pass it in.  Defaults match ``capital_config/sets/default.yaml``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class LedgerSettings:
    """Settings consumed by the ledger, orchestrator and proof generator."""

    export_version: str = "1.0.0"
    proof_origin: str = "ICL"
    default_rate_multiplier: Decimal = Decimal("2.0")
    default_salvage_value: Decimal = Decimal("0")

    def to_dict(self) -> dict[str, str]:
        return {
            "export_version": self.export_version,
            "proof_origin": self.proof_origin,
            "default_rate_multiplier": str(self.default_rate_multiplier),
            "default_salvage_value": str(self.default_salvage_value),
        }
