"""
Capital Ledger Domain Models.

The nouns of the intelligence capital ledger: assets, capital events,
ledger entries, journal entries, and capital proofs.

All records are frozen dataclasses.  The ledger owns every instance;
"mutating" an asset means storing an updated copy (``dataclasses.replace``)
under the same id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from capital_kernel.domain.values import AttributeBag


class AssetStatus(Enum):
    """Asset lifecycle states."""
    ACTIVE = "Active"
    DEPRECIATED = "Depreciated"  # informational, does not block mutation
    RETIRED = "Retired"  # terminal

    def __str__(self) -> str:
        return self.value


class DepreciationMethod(Enum):
    """Supported depreciation methods."""
    LINEAR = "Linear"
    DECLINING_BALANCE = "DecliningBalance"

    def __str__(self) -> str:
        return self.value


class AccountType(Enum):
    """Accounts used by the capital ledger's double-entry journal."""
    ASSET = "Asset"
    ACCUMULATED_DEPRECIATION = "AccumulatedDepreciation"
    DEPRECIATION_EXPENSE = "DepreciationExpense"

    def __str__(self) -> str:
        return self.value


class EventType:
    """Event type tags written by the lifecycle orchestrator."""
    ALLOCATION = "allocation"
    UTILIZATION = "utilization"
    DEPRECIATION = "depreciation"
    RETIREMENT = "retirement"


@dataclass(frozen=True)
class IntelligenceAsset:
    """A capitalized intelligence asset with ownership and depreciation rules."""
    asset_id: UUID
    owner: str
    initial_value: Decimal
    depreciation_method: DepreciationMethod
    useful_life_months: int
    created_at: datetime
    status: AssetStatus = AssetStatus.ACTIVE
    current_value: Decimal | None = None

    @property
    def effective_value(self) -> Decimal:
        """Current value, falling back to the initial value when unset."""
        return self.current_value if self.current_value is not None else self.initial_value

    @property
    def is_retired(self) -> bool:
        return self.status is AssetStatus.RETIRED

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset_id": str(self.asset_id),
            "owner": self.owner,
            "initial_value": self.initial_value,
            "depreciation_method": str(self.depreciation_method),
            "useful_life_months": self.useful_life_months,
            "created_at": self.created_at.isoformat(),
            "status": str(self.status),
            "current_value": self.current_value,
        }


@dataclass(frozen=True)
class CapitalEvent:
    """A discrete economic event affecting intelligence capital."""
    event_id: UUID
    asset_id: UUID
    event_type: str
    timestamp: datetime
    details: AttributeBag = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": str(self.event_id),
            "asset_id": str(self.asset_id),
            "event_type": self.event_type,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }


@dataclass(frozen=True)
class LedgerEntry:
    """Immutable ledger entry derived from a capital event."""
    entry_id: UUID
    event_id: UUID
    asset_id: UUID
    timestamp: datetime
    amount: Decimal
    description: str
    metadata: AttributeBag = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_id": str(self.entry_id),
            "event_id": str(self.event_id),
            "asset_id": str(self.asset_id),
            "timestamp": self.timestamp.isoformat(),
            "amount": self.amount,
            "description": self.description,
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class JournalEntry:
    """Double-entry accounting journal entry."""
    entry_id: UUID
    event_id: UUID
    timestamp: datetime
    debit_account: AccountType
    credit_account: AccountType
    amount: Decimal
    description: str
    metadata: AttributeBag = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_id": str(self.entry_id),
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "debit_account": str(self.debit_account),
            "credit_account": str(self.credit_account),
            "amount": self.amount,
            "description": self.description,
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class CapitalProof:
    """
    Machine-verifiable proof of capital state for audit purposes.

    ``proof_hash`` is filled in right after construction (see
    ``capital_kernel.domain.proofs``).  Enriching a proof produces a new
    value with a recomputed hash; a hashed proof is never mutated.
    """
    proof_id: UUID
    asset_id: UUID
    event_id: UUID | None
    timestamp: datetime
    origin: str
    content: AttributeBag
    previous_proof_hash: str | None = None
    proof_hash: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "proof_id": str(self.proof_id),
            "asset_id": str(self.asset_id),
            "event_id": str(self.event_id) if self.event_id else None,
            "timestamp": self.timestamp.isoformat(),
            "origin": self.origin,
            "content": self.content,
            "previous_proof_hash": self.previous_proof_hash,
            "proof_hash": self.proof_hash,
        }
