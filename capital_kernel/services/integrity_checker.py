"""
IntegrityChecker -- read-only validation of ledger structure and history.

Responsibility:
    Validates assets, events and entries against the ledger invariants,
    rejects retroactive events and overlapping depreciation periods, and
    walks the per-asset proof hash chains for breaks.

Architecture position:
    Kernel > Services -- stateless reader bound to a ``CapitalLedger``.
    Called by ``LifecycleOrchestrator.depreciate`` before any depreciation
    is computed, and by auditors at any later time.

Invariants enforced:
    ASSET_WELL_FORMED, EVENT_WELL_FORMED, ENTRY_TIME_ORDER,
    NO_RETROACTIVE_EVENTS, NON_OVERLAPPING_DEPRECIATION,
    PROOF_CHAIN_LINKAGE (see ``capital_kernel.invariants``).

Failure modes:
    - IntegrityViolationError: tagged with the broken ``LedgerInvariant``.
    - AssetNotFoundError: event/entry references an unknown asset.
    - InvalidDateRangeError / OverlappingDepreciationError: from
      ``validate_depreciation_period``.

Audit relevance:
    ``check_all_integrity`` never short-circuits: it returns every
    violation it finds so an auditor sees the full damage at once.
    Time ordering is checked against the GLOBAL log (last entry / last
    event across all assets), not per asset.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Any
from uuid import UUID

from capital_kernel.domain.clock import ensure_utc
from capital_kernel.domain.models import (
    CapitalEvent,
    CapitalProof,
    EventType,
    IntelligenceAsset,
    LedgerEntry,
)
from capital_kernel.domain.values import ZERO
from capital_kernel.exceptions import (
    AssetNotFoundError,
    CapitalKernelError,
    IntegrityViolationError,
    InvalidDateRangeError,
    OverlappingDepreciationError,
)
from capital_kernel.invariants import LedgerInvariant
from capital_kernel.logging_config import get_logger
from capital_kernel.services.ledger_service import CapitalLedger

logger = get_logger("services.integrity")


def _parse_stored_date(value: Any) -> datetime | None:
    """Parse an ISO-8601 period bound stored in event details, or None."""
    if not isinstance(value, str):
        return None
    try:
        return ensure_utc(datetime.fromisoformat(value))
    except ValueError:
        return None


class IntegrityChecker:
    """
    Validator over a borrowed ledger.

    Contract:
        Never writes to the ledger.  Holds no state besides the ledger
        reference, so a fresh checker can be built per operation.
    """

    def __init__(self, ledger: CapitalLedger):
        self.ledger = ledger

    # ------------------------------------------------------------------
    # Record-level validation
    # ------------------------------------------------------------------

    def validate_asset(self, asset: IntelligenceAsset) -> None:
        if not asset.owner:
            raise IntegrityViolationError(
                "Asset must have an owner", LedgerInvariant.ASSET_WELL_FORMED
            )
        if asset.initial_value <= ZERO:
            raise IntegrityViolationError(
                "Initial value must be positive", LedgerInvariant.ASSET_WELL_FORMED
            )
        if asset.useful_life_months <= 0:
            raise IntegrityViolationError(
                "Useful life must be positive", LedgerInvariant.ASSET_WELL_FORMED
            )
        if asset.current_value is not None:
            if asset.current_value < ZERO:
                raise IntegrityViolationError(
                    "Current value cannot be negative", LedgerInvariant.ASSET_WELL_FORMED
                )
            if asset.current_value > asset.initial_value:
                raise IntegrityViolationError(
                    "Current value cannot exceed initial value",
                    LedgerInvariant.ASSET_WELL_FORMED,
                )

    def validate_event(self, event: CapitalEvent) -> None:
        if event.asset_id not in self.ledger.assets:
            raise AssetNotFoundError(event.asset_id)
        if not event.event_type:
            raise IntegrityViolationError(
                "Event type is required", LedgerInvariant.EVENT_WELL_FORMED
            )

    def validate_entry(self, entry: LedgerEntry) -> None:
        """
        Check an entry's asset exists and that it does not predate the
        last entry recorded in the ledger.
        """
        if entry.asset_id not in self.ledger.assets:
            raise AssetNotFoundError(entry.asset_id)

        last_entry = self.ledger.last_entry
        if last_entry is not None and entry.timestamp < last_entry.timestamp:
            raise IntegrityViolationError(
                "Ledger entries must be time-ordered", LedgerInvariant.ENTRY_TIME_ORDER
            )

    def ensure_no_retroactive_modification(self, new_event: CapitalEvent) -> None:
        """
        Reject an event that predates the last event in the global log.

        Raises:
            IntegrityViolationError: ``new_event`` is earlier than the last
                recorded event of any asset.
        """
        last_event = self.ledger.last_event
        if last_event is not None and new_event.timestamp < last_event.timestamp:
            raise IntegrityViolationError(
                "Cannot add event with timestamp before last recorded event",
                LedgerInvariant.NO_RETROACTIVE_EVENTS,
            )

    # ------------------------------------------------------------------
    # Depreciation periods
    # ------------------------------------------------------------------

    def validate_depreciation_period(
        self,
        asset_id: UUID,
        start: datetime,
        end: datetime,
    ) -> None:
        """
        Reject a period that overlaps any depreciation already recorded
        for the asset.

        Periods are half-open: ``[start, end)`` and ``[ex_start, ex_end)``
        overlap iff ``start < ex_end and end > ex_start``, so back-to-back
        periods are accepted.  Recorded periods whose stored dates do not
        parse are skipped.

        Raises:
            InvalidDateRangeError: ``start >= end``.
            OverlappingDepreciationError: an overlap was found.
        """
        start, end = ensure_utc(start), ensure_utc(end)
        if start >= end:
            raise InvalidDateRangeError(start.isoformat(), end.isoformat())

        for dep_event in self.ledger.get_events_for_asset(asset_id):
            if dep_event.event_type != EventType.DEPRECIATION:
                continue

            ex_start = _parse_stored_date(dep_event.details.get("start_date"))
            ex_end = _parse_stored_date(dep_event.details.get("end_date"))
            if ex_start is None or ex_end is None:
                logger.debug("depreciation_period_unparseable", extra={
                    "event_id": str(dep_event.event_id),
                    "asset_id": str(asset_id),
                })
                continue

            if start < ex_end and end > ex_start:
                logger.warning("depreciation_period_overlap", extra={
                    "asset_id": str(asset_id),
                    "start": start.isoformat(),
                    "end": end.isoformat(),
                    "existing_event_id": str(dep_event.event_id),
                    "error_code": OverlappingDepreciationError.code,
                })
                raise OverlappingDepreciationError(
                    asset_id,
                    start.isoformat(),
                    end.isoformat(),
                    existing_event_id=dep_event.event_id,
                )

    # ------------------------------------------------------------------
    # Proof chain
    # ------------------------------------------------------------------

    def verify_proof_chain(self) -> list[str]:
        """
        Report every broken link in the per-asset proof chains.

        Proofs are grouped by asset and stably sorted by timestamp.  For
        each adjacent pair the earlier proof's hash must equal the later
        proof's previous hash; pairs where either is absent are skipped.
        """
        errors: list[str] = []
        proofs_by_asset: dict[UUID, list[CapitalProof]] = defaultdict(list)
        for proof in self.ledger.proofs:
            proofs_by_asset[proof.asset_id].append(proof)

        for asset_id, proofs in proofs_by_asset.items():
            ordered = sorted(proofs, key=lambda p: p.timestamp)
            for prev, curr in zip(ordered, ordered[1:]):
                if prev.proof_hash is None or curr.previous_proof_hash is None:
                    continue
                if prev.proof_hash != curr.previous_proof_hash:
                    errors.append(
                        f"Proof chain break for asset {asset_id}: proof "
                        f"{curr.proof_id} references wrong previous hash"
                    )
        return errors

    # ------------------------------------------------------------------
    # Full scan
    # ------------------------------------------------------------------

    def check_all_integrity(self) -> list[str]:
        """Validate every asset, event, entry and proof link; collect all violations."""
        errors: list[str] = []

        for asset in self.ledger.assets.values():
            try:
                self.validate_asset(asset)
            except CapitalKernelError as exc:
                errors.append(f"Asset {asset.asset_id}: {exc}")

        for event in self.ledger.events:
            try:
                self.validate_event(event)
            except CapitalKernelError as exc:
                errors.append(f"Event {event.event_id}: {exc}")

        for entry in self.ledger.entries:
            try:
                self.validate_entry(entry)
            except CapitalKernelError as exc:
                errors.append(f"Entry {entry.entry_id}: {exc}")

        errors.extend(self.verify_proof_chain())

        if errors:
            logger.warning("integrity_check_failed", extra={
                "violation_count": len(errors),
            })
        else:
            logger.info("integrity_check_passed", extra={
                "asset_count": self.ledger.asset_count,
                "event_count": self.ledger.event_count,
                "proof_count": len(self.ledger.proofs),
            })
        return errors
