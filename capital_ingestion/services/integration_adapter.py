"""
IntegrationAdapter -- attribution intake and financial system emission.

Responsibility:
    Accepts third-party cost-attribution records keyed by external
    identifier, answers attribution lookups for assets, forwards ledger
    events to configured financial system sinks, and reports a
    reconciliation summary.

Architecture position:
    Ingestion > Services -- sits outside the capital kernel core and does
    not touch the ledger.  Callers decide which ledger events to emit.

Failure modes:
    - IntegrationError: non-mapping batch, malformed or negative-cost
      record, or a None event payload.  A failing batch may have stored the
      records that preceded the bad one.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping
from uuid import UUID

from capital_ingestion.adapters.base import FinancialSystemSink, InMemorySink
from capital_ingestion.domain.types import (
    AttributionRecord,
    ReconciliationSummary,
    parse_attribution,
)
from capital_kernel.domain.clock import Clock, SystemClock
from capital_kernel.exceptions import IntegrationError
from capital_kernel.logging_config import get_logger

logger = get_logger("ingestion.integration")


class IntegrationAdapter:
    """Bridge between the ledger and external attribution/financial systems."""

    def __init__(
        self,
        sinks: Iterable[FinancialSystemSink] | None = None,
        clock: Clock | None = None,
    ):
        """
        Args:
            sinks: Destinations for ``emit_to_financial_system``.  Defaults
                to a single ``InMemorySink``.
            clock: Clock for reconciliation timestamps.
        """
        self.sinks: list[FinancialSystemSink] = list(sinks) if sinks is not None else [InMemorySink()]
        self._clock = clock or SystemClock()
        self._attributions: dict[str, AttributionRecord] = {}

    @property
    def attribution_count(self) -> int:
        return len(self._attributions)

    def consume_attribution(self, attribution_data: Mapping[str, Any]) -> None:
        """
        Store attribution records keyed by external identifier.

        Raises:
            IntegrationError: the batch is not a mapping, or any record is
                malformed or has a negative inference cost.
        """
        if not isinstance(attribution_data, Mapping):
            raise IntegrationError("Attribution data must be an object")

        for external_id, raw in attribution_data.items():
            try:
                record = parse_attribution(str(external_id), raw)
            except IntegrationError as exc:
                logger.warning("attribution_rejected", extra={
                    "external_id": str(external_id),
                    "reason": exc.reason,
                    "error_code": exc.code,
                })
                raise
            self._attributions[str(external_id)] = record

        logger.info("attributions_consumed", extra={
            "batch_size": len(attribution_data),
            "attribution_count": self.attribution_count,
        })

    def emit_to_financial_system(self, event: Any) -> bool:
        """
        Forward an event payload to every sink.

        Raises:
            IntegrationError: ``event`` is None.
        """
        if event is None:
            raise IntegrationError("Event cannot be null")
        for sink in self.sinks:
            sink.emit(event)
        logger.debug("event_emitted", extra={"sink_count": len(self.sinks)})
        return True

    def validate_attribution(self, asset_id: UUID | str) -> bool:
        """True when attribution is on file for ``asset_id``."""
        return str(asset_id) in self._attributions

    def get_execution_attribution(self, asset_id: UUID | str) -> AttributionRecord | None:
        return self._attributions.get(str(asset_id))

    def reconcile_with_financial_systems(self) -> ReconciliationSummary:
        summary = ReconciliationSummary(
            status="reconciled",
            timestamp=self._clock.now_utc(),
            attribution_count=self.attribution_count,
        )
        logger.info("attributions_reconciled", extra={
            "attribution_count": summary.attribution_count,
        })
        return summary

    def clear_attributions(self) -> None:
        self._attributions.clear()
