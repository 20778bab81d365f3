"""
CapitalLedger -- the in-memory intelligence capital ledger.

Responsibility:
    Owns every collection in the system (assets, capital events, ledger
    entries, journal entries, capital proofs) plus the secondary indexes
    used to query them by asset or by event.  Exposes creation, append,
    query, proof, and export operations.

Architecture position:
    Kernel > Services -- the single mutable aggregate.  The lifecycle
    orchestrator takes it for exclusive writes; the integrity checker and
    proof generator only read it.  It is always passed explicitly and is
    never module-level state.

Invariants enforced:
    - Asset well-formedness at creation (owner, initial value, useful life).
    - Events reference an existing asset and carry a non-empty type.
    - Each recorded event yields exactly one ledger entry.
    - Journal entry amounts are strictly positive.
    - Proofs chain from the most recent proof of the same asset.

Failure modes:
    - AssetNotFoundError / AssetAlreadyExistsError.
    - ValidationError for malformed assets, events, journal entries, proofs.
    - UnsupportedFormatError / SerializationError from export.

Audit relevance:
    Append-only: nothing recorded here is ever removed.  Asset records are
    replaced (never deleted) when the orchestrator changes owner, value or
    status.  Entry time ordering is NOT enforced on write; the integrity
    checker reports violations after the fact.
"""

from __future__ import annotations

import csv
import io
import json
from collections import defaultdict
from dataclasses import replace
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Mapping
from uuid import UUID, uuid4

from capital_kernel.domain.clock import Clock, SystemClock
from capital_kernel.domain.models import (
    AssetStatus,
    CapitalEvent,
    CapitalProof,
    DepreciationMethod,
    IntelligenceAsset,
    JournalEntry,
    LedgerEntry,
)
from capital_kernel.domain.proofs import build_asset_proof
from capital_kernel.domain.settings import LedgerSettings
from capital_kernel.domain.values import (
    ZERO,
    copy_bag,
    numeric_attribute,
    to_decimal,
    validate_attribute_bag,
)
from capital_kernel.exceptions import (
    AssetAlreadyExistsError,
    AssetNotFoundError,
    SerializationError,
    UnsupportedFormatError,
    ValidationError,
)
from capital_kernel.invariants import LedgerInvariant
from capital_kernel.logging_config import get_logger

logger = get_logger("services.ledger")

CSV_HEADER = ("entry_id", "event_id", "asset_id", "timestamp", "amount", "description")


class _ExportEncoder(json.JSONEncoder):
    """JSON encoder for Decimal amounts in exported audit trails."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Decimal):
            return float(obj)
        return super().default(obj)


class CapitalLedger:
    """
    In-memory store of intelligence capital records.

    Contract:
        Every write appends; nothing is deleted.  ``store_asset`` is the
        only way an existing record changes, and only the lifecycle
        orchestrator calls it.

    Guarantees:
        - ``get_events_for_asset`` / ``get_entries_for_asset`` return records
          in append order.
        - Journal entries are indexed by their event id.  The asset-scoped
          journal query joins through the asset's event ids.

    Non-goals:
        - No persistence: the ledger lives for one process run.
        - No locking: concurrent writers must be serialized by the caller.
        - No transactions: multi-step writes are not rolled back on failure.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        settings: LedgerSettings | None = None,
    ):
        """
        Args:
            clock: Clock for creation, proof and export timestamps.
                Defaults to SystemClock.
            settings: Ledger settings. Defaults to ``LedgerSettings()``.
        """
        self.clock = clock or SystemClock()
        self.settings = settings or LedgerSettings()

        self._assets: dict[UUID, IntelligenceAsset] = {}
        self._events: list[CapitalEvent] = []
        self._entries: list[LedgerEntry] = []
        self._journal_entries: list[JournalEntry] = []
        self._proofs: list[CapitalProof] = []

        self._events_by_asset: dict[UUID, list[CapitalEvent]] = defaultdict(list)
        self._entries_by_asset: dict[UUID, list[LedgerEntry]] = defaultdict(list)
        self._journal_entries_by_event: dict[UUID, list[JournalEntry]] = defaultdict(list)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def assets(self) -> Mapping[UUID, IntelligenceAsset]:
        return MappingProxyType(self._assets)

    @property
    def events(self) -> tuple[CapitalEvent, ...]:
        return tuple(self._events)

    @property
    def entries(self) -> tuple[LedgerEntry, ...]:
        return tuple(self._entries)

    @property
    def journal_entries(self) -> tuple[JournalEntry, ...]:
        return tuple(self._journal_entries)

    @property
    def proofs(self) -> tuple[CapitalProof, ...]:
        return tuple(self._proofs)

    @property
    def last_event(self) -> CapitalEvent | None:
        return self._events[-1] if self._events else None

    @property
    def last_entry(self) -> LedgerEntry | None:
        return self._entries[-1] if self._entries else None

    @property
    def asset_count(self) -> int:
        return len(self._assets)

    @property
    def event_count(self) -> int:
        return len(self._events)

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    def create_asset(
        self,
        asset_id: UUID,
        owner: str,
        initial_value: Decimal,
        depreciation_method: DepreciationMethod,
        useful_life_months: int,
    ) -> IntelligenceAsset:
        """
        Insert a new Active asset whose current value equals its initial value.

        Raises:
            AssetAlreadyExistsError: ``asset_id`` is already present.
            ValidationError: empty owner, non-positive initial value or
                non-positive useful life.
        """
        if asset_id in self._assets:
            logger.warning("asset_create_rejected", extra={
                "asset_id": str(asset_id), "error_code": AssetAlreadyExistsError.code,
            })
            raise AssetAlreadyExistsError(asset_id)

        if not owner:
            raise ValidationError("asset", "owner", "Owner cannot be empty")

        initial = to_decimal(initial_value)
        if initial <= ZERO:
            raise ValidationError("asset", "initial_value", "Initial value must be positive")

        if useful_life_months <= 0:
            raise ValidationError("asset", "useful_life_months", "Useful life must be positive")

        asset = IntelligenceAsset(
            asset_id=asset_id,
            owner=owner,
            initial_value=initial,
            depreciation_method=depreciation_method,
            useful_life_months=useful_life_months,
            created_at=self.clock.now_utc(),
            status=AssetStatus.ACTIVE,
            current_value=initial,
        )
        self._assets[asset_id] = asset

        logger.info("asset_created", extra={
            "asset_id": str(asset_id),
            "owner": owner,
            "initial_value": str(initial),
            "depreciation_method": str(depreciation_method),
            "useful_life_months": useful_life_months,
        })
        return asset

    def get_asset(self, asset_id: UUID) -> IntelligenceAsset | None:
        return self._assets.get(asset_id)

    def require_asset(self, asset_id: UUID) -> IntelligenceAsset:
        """Return the asset or raise AssetNotFoundError."""
        asset = self._assets.get(asset_id)
        if asset is None:
            raise AssetNotFoundError(asset_id)
        return asset

    def store_asset(self, asset: IntelligenceAsset) -> None:
        """
        Overwrite the stored record of an existing asset.

        Raises:
            AssetNotFoundError: no asset with this id was ever created.
        """
        if asset.asset_id not in self._assets:
            raise AssetNotFoundError(asset.asset_id)
        self._assets[asset.asset_id] = asset

    # ------------------------------------------------------------------
    # Events and entries
    # ------------------------------------------------------------------

    def record_event(self, event: CapitalEvent) -> LedgerEntry:
        """
        Append an event and its derived ledger entry.

        The entry's amount is ``details["amount"]`` when numeric, else 0;
        its description is the event type and its metadata a copy of the
        details.
        The ledger keeps its own copy of the event, so later changes to
        the caller's ``details`` do not reach recorded history.

        Raises:
            AssetNotFoundError: the event's asset does not exist.
            ValidationError: empty event type or malformed details.
        """
        if event.asset_id not in self._assets:
            raise AssetNotFoundError(event.asset_id)

        if not event.event_type:
            raise ValidationError("event", "event_type", "Event type cannot be empty")

        validate_attribute_bag(event.details, entity="event")

        stored = replace(event, details=copy_bag(event.details))
        self._events.append(stored)
        self._events_by_asset[stored.asset_id].append(stored)

        amount = numeric_attribute(event.details, "amount")
        entry = LedgerEntry(
            entry_id=uuid4(),
            event_id=event.event_id,
            asset_id=event.asset_id,
            timestamp=event.timestamp,
            amount=amount if amount is not None else ZERO,
            description=event.event_type,
            metadata=copy_bag(event.details),
        )
        self._entries.append(entry)
        self._entries_by_asset[event.asset_id].append(entry)

        logger.debug("event_recorded", extra={
            "event_id": str(event.event_id),
            "asset_id": str(event.asset_id),
            "event_type": event.event_type,
            "entry_id": str(entry.entry_id),
            "amount": str(entry.amount),
        })
        return entry

    def get_events_for_asset(self, asset_id: UUID) -> list[CapitalEvent]:
        return list(self._events_by_asset.get(asset_id, ()))

    def get_entries_for_asset(self, asset_id: UUID) -> list[LedgerEntry]:
        return list(self._entries_by_asset.get(asset_id, ()))

    # ------------------------------------------------------------------
    # Journal
    # ------------------------------------------------------------------

    def record_journal_entry(self, journal_entry: JournalEntry) -> None:
        """
        Append a journal entry, indexed by its event id.

        Raises:
            ValidationError: amount is not strictly positive.
        """
        if not journal_entry.amount > ZERO:
            logger.warning("journal_entry_rejected", extra={
                "entry_id": str(journal_entry.entry_id),
                "amount": str(journal_entry.amount),
                "error_code": ValidationError.code,
            })
            raise ValidationError(
                "journal_entry",
                "amount",
                "Journal entry amount must be positive",
                invariant=LedgerInvariant.POSITIVE_JOURNAL_AMOUNT,
            )

        stored = replace(journal_entry, metadata=copy_bag(journal_entry.metadata))
        self._journal_entries.append(stored)
        self._journal_entries_by_event[stored.event_id].append(stored)

        logger.debug("journal_entry_recorded", extra={
            "entry_id": str(journal_entry.entry_id),
            "event_id": str(journal_entry.event_id),
            "debit_account": str(journal_entry.debit_account),
            "credit_account": str(journal_entry.credit_account),
            "amount": str(journal_entry.amount),
        })

    def get_journal_entries_for_event(self, event_id: UUID) -> list[JournalEntry]:
        return list(self._journal_entries_by_event.get(event_id, ()))

    def get_journal_entries_for_asset(self, asset_id: UUID) -> list[JournalEntry]:
        """
        Journal entries whose event belongs to ``asset_id``, in append order.

        There is no per-asset journal index: the lookup collects the asset's
        event ids first and filters the journal by them, so entries whose
        event reference has no recorded event (capitalization) are not found.
        """
        event_ids = {event.event_id for event in self.get_events_for_asset(asset_id)}
        return [je for je in self._journal_entries if je.event_id in event_ids]

    def verify_journal_balance(self) -> bool:
        """True iff every journal entry amount is strictly positive."""
        return all(je.amount > ZERO for je in self._journal_entries)

    # ------------------------------------------------------------------
    # Proofs
    # ------------------------------------------------------------------

    def _last_proof_for_asset(self, asset_id: UUID) -> CapitalProof | None:
        for proof in reversed(self._proofs):
            if proof.asset_id == asset_id:
                return proof
        return None

    def latest_proof_hash(self, asset_id: UUID) -> str | None:
        """
        Hash to chain the asset's next proof from.

        None when the asset has no proof yet; empty string when its latest
        proof carries no hash.
        """
        last = self._last_proof_for_asset(asset_id)
        if last is None:
            return None
        return last.proof_hash or ""

    def generate_proof(self, asset_id: UUID, event_id: UUID | None = None) -> CapitalProof:
        """
        Snapshot the asset into a new hash-chained proof and append it.

        Raises:
            AssetNotFoundError: the asset does not exist.
        """
        asset = self.require_asset(asset_id)
        proof = build_asset_proof(
            asset,
            timestamp=self.clock.now_utc(),
            origin=self.settings.proof_origin,
            previous_proof_hash=self.latest_proof_hash(asset_id),
            event_id=event_id,
        )
        self._proofs.append(proof)

        logger.info("proof_generated", extra={
            "proof_id": str(proof.proof_id),
            "asset_id": str(asset_id),
            "proof_hash": proof.proof_hash,
            "previous_proof_hash": proof.previous_proof_hash,
        })
        return replace(proof, content=copy_bag(proof.content))

    def record_proof(self, proof: CapitalProof) -> None:
        """
        Append a proof built elsewhere (e.g. by ProofGenerator).

        Raises:
            AssetNotFoundError: the proof's asset does not exist.
            ValidationError: the proof has not been hashed.
        """
        self.require_asset(proof.asset_id)
        if not proof.proof_hash:
            raise ValidationError("proof", "proof_hash", "Proof must be hashed before recording")
        self._proofs.append(replace(proof, content=copy_bag(proof.content)))

        logger.info("proof_recorded", extra={
            "proof_id": str(proof.proof_id),
            "asset_id": str(proof.asset_id),
            "proof_hash": proof.proof_hash,
        })

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_audit_trail(self, export_format: str) -> str:
        """
        Export the ledger as ``"json"`` (full dump) or ``"csv"`` (entries only).

        Raises:
            UnsupportedFormatError: any other format.
            SerializationError: the JSON dump failed.
        """
        if export_format == "json":
            return self._export_json()
        if export_format == "csv":
            return self._export_csv()
        logger.warning("export_rejected", extra={
            "export_format": export_format,
            "error_code": UnsupportedFormatError.code,
        })
        raise UnsupportedFormatError(export_format)

    def _export_json(self) -> str:
        data = {
            "version": self.settings.export_version,
            "exported_at": self.clock.now_utc().isoformat(),
            "assets": [a.to_dict() for a in self._assets.values()],
            "events": [e.to_dict() for e in self._events],
            "entries": [e.to_dict() for e in self._entries],
            "journal_entries": [je.to_dict() for je in self._journal_entries],
            "proofs": [p.to_dict() for p in self._proofs],
        }
        try:
            return json.dumps(data, indent=2, cls=_ExportEncoder)
        except (TypeError, ValueError) as exc:
            raise SerializationError(str(exc)) from exc

    def _export_csv(self) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for entry in self._entries:
            writer.writerow((
                str(entry.entry_id),
                str(entry.event_id),
                str(entry.asset_id),
                entry.timestamp.isoformat(),
                str(entry.amount),
                entry.description.replace(",", ";"),
            ))
        return buffer.getvalue()
