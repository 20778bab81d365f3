"""
LifecycleOrchestrator -- the intelligence asset state machine.

Responsibility:
    Sequences every multi-step ledger write: capitalization (asset +
    journal entry), allocation (owner change + event), utilization (event),
    depreciation (period check + engine + asset update + event + journal
    entry) and retirement (asset update + event + write-off journal entry).

Architecture position:
    Kernel > Services -- the only writer that touches more than one ledger
    structure per call.  Uses ``IntegrityChecker`` and the pure depreciation
    engine as collaborators.

State machine:
    ACTIVE ---depreciate to salvage---> DEPRECIATED
    ACTIVE | DEPRECIATED ---retire---> RETIRED (terminal)

    DEPRECIATED is informational; it does not block allocation or further
    depreciation.  RETIRED blocks allocate, depreciate and retire.
    Utilization is usage tracking only and is accepted in every state.

Failure modes:
    - AssetNotFoundError, AssetRetiredError, ValidationError.
    - InvalidDateRangeError, DepreciationError, OverlappingDepreciationError
      from depreciation.

Audit relevance:
    Writes are NOT atomic.  Each step is applied as soon as it succeeds; if
    a later step raises, the earlier ones stay in the ledger (e.g. an event
    without its journal entry).  Callers needing atomicity must snapshot
    and restore the ledger themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from capital_kernel.domain.clock import Clock, ensure_utc
from capital_kernel.domain.depreciation import calculate_depreciation
from capital_kernel.domain.models import (
    AccountType,
    AssetStatus,
    CapitalEvent,
    DepreciationMethod,
    EventType,
    IntelligenceAsset,
    JournalEntry,
)
from capital_kernel.domain.settings import LedgerSettings
from capital_kernel.domain.values import ZERO, AttributeBag, numeric_attribute, to_decimal
from capital_kernel.exceptions import AssetRetiredError, ValidationError
from capital_kernel.logging_config import LogContext, get_logger
from capital_kernel.services.integrity_checker import IntegrityChecker
from capital_kernel.services.ledger_service import CapitalLedger

logger = get_logger("services.lifecycle")


@dataclass(frozen=True)
class AssetSummary:
    """Read-only aggregation of one asset's ledger footprint."""

    asset: IntelligenceAsset
    event_count: int
    journal_entry_count: int
    total_depreciation: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset": self.asset.to_dict(),
            "event_count": self.event_count,
            "journal_entry_count": self.journal_entry_count,
            "total_depreciation": self.total_depreciation,
        }


class LifecycleOrchestrator:
    """
    Drives intelligence assets through their lifecycle.

    Contract:
        Every transition re-reads the asset from the ledger before
        validating it.  Asset changes are written by replacing the ledger's
        record with an updated copy, not by replaying events.

    Non-goals:
        - Does NOT roll back partially applied operations.
        - Does NOT call ``ensure_no_retroactive_modification``; timestamps
          come from the injected clock.
    """

    def __init__(
        self,
        ledger: CapitalLedger,
        clock: Clock | None = None,
        settings: LedgerSettings | None = None,
    ):
        """
        Args:
            ledger: The ledger to write to.
            clock: Clock for event and journal timestamps.  Defaults to the
                ledger's clock.
            settings: Defaults for salvage value and rate multiplier.
                Defaults to the ledger's settings.
        """
        self.ledger = ledger
        self._clock = clock or ledger.clock
        self._settings = settings or ledger.settings

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_mutable(self, asset_id: UUID) -> IntelligenceAsset:
        asset = self.ledger.require_asset(asset_id)
        if asset.is_retired:
            logger.warning("lifecycle_rejected_retired", extra={
                "asset_id": str(asset_id),
                "error_code": AssetRetiredError.code,
            })
            raise AssetRetiredError(asset_id)
        return asset

    def _new_event(self, asset_id: UUID, event_type: str, details: AttributeBag) -> CapitalEvent:
        return CapitalEvent(
            event_id=uuid4(),
            asset_id=asset_id,
            event_type=event_type,
            timestamp=self._clock.now_utc(),
            details=details,
        )

    def _journal(
        self,
        event_id: UUID,
        debit: AccountType,
        credit: AccountType,
        amount: Decimal,
        description: str,
        metadata: AttributeBag,
    ) -> JournalEntry:
        entry = JournalEntry(
            entry_id=uuid4(),
            event_id=event_id,
            timestamp=self._clock.now_utc(),
            debit_account=debit,
            credit_account=credit,
            amount=amount,
            description=description,
            metadata=metadata,
        )
        self.ledger.record_journal_entry(entry)
        return entry

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def capitalize(
        self,
        asset_id: UUID,
        owner: str,
        initial_value: Decimal,
        depreciation_method: DepreciationMethod,
        useful_life_months: int,
    ) -> IntelligenceAsset:
        """
        Create the asset and book its initial value.

        The capitalization journal entry references a freshly minted event
        id: no capital event is recorded for capitalization.
        """
        with LogContext.bind(asset_id=str(asset_id)):
            asset = self.ledger.create_asset(
                asset_id, owner, initial_value, depreciation_method, useful_life_months
            )
            self._journal(
                event_id=uuid4(),
                debit=AccountType.ASSET,
                credit=AccountType.ACCUMULATED_DEPRECIATION,
                amount=asset.initial_value,
                description="Asset capitalization",
                metadata={
                    "asset_id": str(asset_id),
                    "owner": asset.owner,
                    "initial_value": asset.initial_value,
                },
            )
            logger.info("asset_capitalized", extra={
                "initial_value": str(asset.initial_value),
                "depreciation_method": str(depreciation_method),
            })
            return asset

    def allocate(self, asset_id: UUID, target_owner: str) -> CapitalEvent:
        """Transfer ownership and record an allocation event."""
        with LogContext.bind(asset_id=str(asset_id)):
            asset = self._require_mutable(asset_id)
            old_owner = asset.owner

            self.ledger.store_asset(replace(asset, owner=target_owner))

            event = self._new_event(asset_id, EventType.ALLOCATION, {
                "from_owner": old_owner,
                "to_owner": target_owner,
            })
            self.ledger.record_event(event)
            logger.info("asset_allocated", extra={
                "event_id": str(event.event_id),
                "from_owner": old_owner,
                "to_owner": target_owner,
            })
            return event

    def utilize(self, asset_id: UUID, amount: Decimal) -> CapitalEvent:
        """Record usage of the asset.  Does not change its value."""
        with LogContext.bind(asset_id=str(asset_id)):
            self.ledger.require_asset(asset_id)

            usage = to_decimal(amount)
            if usage <= ZERO:
                raise ValidationError("event", "amount", "Utilization amount must be positive")

            event = self._new_event(asset_id, EventType.UTILIZATION, {"amount": usage})
            self.ledger.record_event(event)
            logger.info("asset_utilized", extra={
                "event_id": str(event.event_id),
                "amount": str(usage),
            })
            return event

    def depreciate(
        self,
        asset_id: UUID,
        start_date: datetime,
        end_date: datetime,
        salvage_value: Decimal | None = None,
        rate_multiplier: Decimal | None = None,
    ) -> CapitalEvent:
        """
        Depreciate the asset over ``[start_date, end_date)``.

        The period is checked for overlap with earlier depreciation before
        anything is computed.  The asset becomes DEPRECIATED once its value
        reaches ``salvage_value``.  A journal entry is written only when the
        amount is positive.

        Args:
            salvage_value: Floor value; defaults to the configured
                ``default_salvage_value``.
            rate_multiplier: Declining-balance multiplier; defaults to the
                configured ``default_rate_multiplier``.  Ignored by LINEAR.
        """
        salvage = to_decimal(
            salvage_value if salvage_value is not None else self._settings.default_salvage_value
        )
        multiplier = to_decimal(
            rate_multiplier if rate_multiplier is not None else self._settings.default_rate_multiplier
        )

        with LogContext.bind(asset_id=str(asset_id)):
            asset = self._require_mutable(asset_id)

            IntegrityChecker(self.ledger).validate_depreciation_period(
                asset_id, start_date, end_date
            )

            previous_value = asset.effective_value
            depreciation_amount, new_value = calculate_depreciation(
                asset, start_date, end_date, salvage, multiplier
            )

            status = AssetStatus.DEPRECIATED if new_value <= salvage else asset.status
            self.ledger.store_asset(replace(asset, current_value=new_value, status=status))

            event = self._new_event(asset_id, EventType.DEPRECIATION, {
                "amount": depreciation_amount,
                "start_date": ensure_utc(start_date).isoformat(),
                "end_date": ensure_utc(end_date).isoformat(),
                "salvage_value": salvage,
                "rate_multiplier": multiplier,
                "previous_value": previous_value,
                "new_value": new_value,
            })
            self.ledger.record_event(event)

            if depreciation_amount > ZERO:
                metadata: AttributeBag = {
                    "asset_id": str(asset_id),
                    "previous_value": previous_value,
                    "new_value": new_value,
                }
                metadata.update(event.details)
                self._journal(
                    event_id=event.event_id,
                    debit=AccountType.DEPRECIATION_EXPENSE,
                    credit=AccountType.ACCUMULATED_DEPRECIATION,
                    amount=depreciation_amount,
                    description="Asset depreciation",
                    metadata=metadata,
                )

            logger.info("depreciation_recorded", extra={
                "event_id": str(event.event_id),
                "amount": str(depreciation_amount),
                "previous_value": str(previous_value),
                "new_value": str(new_value),
                "status": str(status),
            })
            return event

    def retire(self, asset_id: UUID) -> CapitalEvent:
        """Retire the asset, writing off whatever value remains."""
        with LogContext.bind(asset_id=str(asset_id)):
            asset = self._require_mutable(asset_id)

            remaining_value = asset.current_value
            self.ledger.store_asset(
                replace(asset, status=AssetStatus.RETIRED, current_value=ZERO)
            )

            event = self._new_event(asset_id, EventType.RETIREMENT, {
                "retired_value": remaining_value if remaining_value is not None else ZERO,
            })
            self.ledger.record_event(event)

            if remaining_value is not None and remaining_value > ZERO:
                self._journal(
                    event_id=event.event_id,
                    debit=AccountType.ACCUMULATED_DEPRECIATION,
                    credit=AccountType.ASSET,
                    amount=remaining_value,
                    description="Asset retirement write-off",
                    metadata={
                        "asset_id": str(asset_id),
                        "retired_value": remaining_value,
                    },
                )

            logger.info("asset_retired", extra={
                "event_id": str(event.event_id),
                "retired_value": str(remaining_value),
            })
            return event

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_asset_summary(self, asset_id: UUID) -> AssetSummary:
        asset = self.ledger.require_asset(asset_id)
        events = self.ledger.get_events_for_asset(asset_id)
        journal_entries = self.ledger.get_journal_entries_for_asset(asset_id)

        total_depreciation = ZERO
        for event in events:
            if event.event_type != EventType.DEPRECIATION:
                continue
            amount = numeric_attribute(event.details, "amount")
            if amount is not None:
                total_depreciation += amount

        return AssetSummary(
            asset=asset,
            event_count=len(events),
            journal_entry_count=len(journal_entries),
            total_depreciation=total_depreciation,
        )
