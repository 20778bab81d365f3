"""
capital_ingestion.domain.types -- Pure frozen dataclasses for attribution intake.

ZERO I/O.  Parsing raises IntegrationError from the kernel exception
hierarchy so callers catch one type for every intake failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from capital_kernel.domain.clock import ensure_utc
from capital_kernel.exceptions import IntegrationError

_REQUIRED_FIELDS = ("asset_id", "inference_cost", "execution_time", "timestamp", "model_version")


@dataclass(frozen=True)
class AttributionRecord:
    """Cost attribution for one execution of an intelligence asset."""

    asset_id: str
    inference_cost: Decimal
    execution_time: Decimal  # seconds
    timestamp: datetime
    model_version: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset_id": self.asset_id,
            "inference_cost": str(self.inference_cost),
            "execution_time": str(self.execution_time),
            "timestamp": self.timestamp.isoformat(),
            "model_version": self.model_version,
        }


@dataclass(frozen=True)
class ReconciliationSummary:
    """Outcome of reconciling attributions with the financial systems."""

    status: str
    timestamp: datetime
    attribution_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "timestamp": self.timestamp.isoformat(),
            "attribution_count": self.attribution_count,
        }


def _parse_decimal(value: Any, field_name: str, external_id: str) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise IntegrationError(
            f"Invalid attribution data format for {external_id}: {field_name} is not a number",
            external_id=external_id,
        )
    try:
        result = Decimal(str(value))
    except InvalidOperation as exc:
        raise IntegrationError(
            f"Invalid attribution data format for {external_id}: {field_name} is not a number",
            external_id=external_id,
        ) from exc
    if not result.is_finite():
        raise IntegrationError(
            f"Invalid attribution data format for {external_id}: {field_name} must be finite",
            external_id=external_id,
        )
    return result


def _parse_timestamp(value: Any, external_id: str) -> datetime:
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, str):
        try:
            return ensure_utc(datetime.fromisoformat(value))
        except ValueError as exc:
            raise IntegrationError(
                f"Invalid attribution data format for {external_id}: bad timestamp {value!r}",
                external_id=external_id,
            ) from exc
    raise IntegrationError(
        f"Invalid attribution data format for {external_id}: bad timestamp {value!r}",
        external_id=external_id,
    )


def parse_attribution(external_id: str, data: Any) -> AttributionRecord:
    """
    Parse one raw attribution record.

    Raises:
        IntegrationError: ``data`` is not a mapping, a field is missing or
            malformed, or the inference cost is negative.
    """
    if not isinstance(data, Mapping):
        raise IntegrationError(
            f"Invalid attribution data format for {external_id}", external_id=external_id
        )
    missing = [name for name in _REQUIRED_FIELDS if name not in data]
    if missing:
        raise IntegrationError(
            f"Invalid attribution data format for {external_id}: missing {', '.join(missing)}",
            external_id=external_id,
        )

    inference_cost = _parse_decimal(data["inference_cost"], "inference_cost", external_id)
    if inference_cost < 0:
        raise IntegrationError(
            f"Invalid inference cost for {external_id}: must be non-negative",
            external_id=external_id,
        )

    return AttributionRecord(
        asset_id=str(data["asset_id"]),
        inference_cost=inference_cost,
        execution_time=_parse_decimal(data["execution_time"], "execution_time", external_id),
        timestamp=_parse_timestamp(data["timestamp"], external_id),
        model_version=str(data["model_version"]),
    )
