"""
Pure domain layer.

Data model, attribute bags, the depreciation engine, and proof
construction, with NO dependencies on the ledger or on I/O.  Time enters
only through an injected ``Clock``.
"""

from capital_kernel.domain.clock import Clock, DeterministicClock, SequentialClock, SystemClock
from capital_kernel.domain.depreciation import (
    DepreciationResult,
    calculate_depreciation,
    months_between,
)
from capital_kernel.domain.models import (
    AccountType,
    AssetStatus,
    CapitalEvent,
    CapitalProof,
    DepreciationMethod,
    EventType,
    IntelligenceAsset,
    JournalEntry,
    LedgerEntry,
)
from capital_kernel.domain.settings import LedgerSettings
from capital_kernel.domain.values import AttributeBag, AttributeValue

__all__ = [
    "AccountType",
    "AssetStatus",
    "AttributeBag",
    "AttributeValue",
    "CapitalEvent",
    "CapitalProof",
    "Clock",
    "DepreciationMethod",
    "DepreciationResult",
    "DeterministicClock",
    "EventType",
    "IntelligenceAsset",
    "JournalEntry",
    "LedgerEntry",
    "LedgerSettings",
    "SequentialClock",
    "SystemClock",
    "calculate_depreciation",
    "months_between",
]
