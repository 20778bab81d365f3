"""
ProofGenerator -- hash-chained audit proofs over ledger snapshots.

Responsibility:
    Builds asset, execution and financial-outcome proofs chained to the
    latest stored proof of the same asset, and verifies a proof's hash
    against its own fields.

Architecture position:
    Kernel > Services -- pure reader of a ``CapitalLedger``.  Generated
    proofs are returned, not stored; callers anchor them with
    ``CapitalLedger.record_proof`` when they want them in the chain.

Invariants enforced:
    PROOF_CHAIN_LINKAGE -- ``previous_proof_hash`` is the hash of the
    asset's most recent stored proof by append order.

Failure modes:
    - AssetNotFoundError: unknown asset.
    - InvalidDateRangeError: financial-outcome period with start >= end.

Audit relevance:
    Proof content snapshots the asset's owner, values, method and status
    at generation time.  Altering any hashed field after the fact makes
    ``verify_proof`` return False.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from capital_kernel.domain.clock import Clock, ensure_utc
from capital_kernel.domain.models import CapitalProof, EventType
from capital_kernel.domain.proofs import build_asset_proof, compute_proof_hash, enrich_proof
from capital_kernel.domain.settings import LedgerSettings
from capital_kernel.domain.values import ZERO, copy_bag, numeric_attribute
from capital_kernel.exceptions import InvalidDateRangeError
from capital_kernel.logging_config import get_logger
from capital_kernel.services.ledger_service import CapitalLedger

logger = get_logger("services.proofs")


class ProofGenerator:
    """Generates and verifies capital proofs for a ledger."""

    def __init__(
        self,
        ledger: CapitalLedger,
        clock: Clock | None = None,
        settings: LedgerSettings | None = None,
    ):
        self.ledger = ledger
        self._clock = clock or ledger.clock
        self._settings = settings or ledger.settings

    def generate_asset_proof(self, asset_id: UUID) -> CapitalProof:
        """Proof of the asset's current state, chained to its latest stored proof."""
        asset = self.ledger.require_asset(asset_id)
        previous_hash = None
        for proof in reversed(self.ledger.proofs):
            if proof.asset_id == asset_id:
                previous_hash = proof.proof_hash
                break

        return build_asset_proof(
            asset,
            timestamp=self._clock.now_utc(),
            origin=self._settings.proof_origin,
            previous_proof_hash=previous_hash,
        )

    def generate_execution_proof(self, asset_id: UUID, event_id: UUID) -> CapitalProof:
        """Asset proof linked to the event it attests."""
        proof = enrich_proof(
            self.generate_asset_proof(asset_id),
            {"proof_type": "execution"},
            event_id=event_id,
        )
        logger.info("execution_proof_generated", extra={
            "proof_id": str(proof.proof_id),
            "asset_id": str(asset_id),
            "event_id": str(event_id),
        })
        return proof

    def generate_financial_outcome_proof(
        self,
        asset_id: UUID,
        period_start: datetime,
        period_end: datetime,
    ) -> CapitalProof:
        """
        Asset proof carrying the depreciation booked within a period.

        ``total_depreciation`` sums the amounts of the asset's depreciation
        events whose recorded ``[start_date, end_date)`` lies inside
        ``[period_start, period_end]``.  Events with unparseable dates are
        left out.
        """
        lower, upper = ensure_utc(period_start), ensure_utc(period_end)
        if lower >= upper:
            raise InvalidDateRangeError(lower.isoformat(), upper.isoformat())

        total_depreciation = ZERO
        for event in self.ledger.get_events_for_asset(asset_id):
            if event.event_type != EventType.DEPRECIATION:
                continue
            amount = numeric_attribute(event.details, "amount")
            try:
                start = ensure_utc(datetime.fromisoformat(event.details["start_date"]))
                end = ensure_utc(datetime.fromisoformat(event.details["end_date"]))
            except (KeyError, TypeError, ValueError):
                continue
            if amount is not None and lower <= start and end <= upper:
                total_depreciation += amount

        proof = enrich_proof(
            self.generate_asset_proof(asset_id),
            {
                "proof_type": "financial_outcome",
                "period_start": lower.isoformat(),
                "period_end": upper.isoformat(),
                "total_depreciation": total_depreciation,
            },
        )
        logger.info("financial_outcome_proof_generated", extra={
            "proof_id": str(proof.proof_id),
            "asset_id": str(asset_id),
            "total_depreciation": str(total_depreciation),
        })
        return proof

    def reconstruct_proof(self, proof_id: UUID) -> CapitalProof | None:
        """Stored proof with ``proof_id``, if any."""
        for proof in self.ledger.proofs:
            if proof.proof_id == proof_id:
                return proof
        return None

    def get_asset_history(self, asset_id: UUID) -> list[dict[str, Any]]:
        """The asset's events as plain dicts, in recording order."""
        return [
            {
                "event_id": str(event.event_id),
                "event_type": event.event_type,
                "timestamp": event.timestamp.isoformat(),
                "details": copy_bag(event.details),
            }
            for event in self.ledger.get_events_for_asset(asset_id)
        ]

    def verify_proof(self, proof: CapitalProof) -> bool:
        """True iff the proof carries a hash equal to one recomputed from its fields."""
        if proof.proof_hash is None:
            return False
        verified = proof.proof_hash == compute_proof_hash(proof)
        if not verified:
            logger.warning("proof_verification_failed", extra={
                "proof_id": str(proof.proof_id),
                "asset_id": str(proof.asset_id),
            })
        return verified
