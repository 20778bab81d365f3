"""
Ledger Invariants Contract.

These invariants are structural law for the capital ledger.  Some are
enforced at write time by ``CapitalLedger`` and ``LifecycleOrchestrator``;
the rest are checked after the fact by ``IntegrityChecker``, which tags
every ``IntegrityViolationError`` with the invariant it found broken.
"""

from enum import Enum, unique


@unique
class LedgerInvariant(str, Enum):
    """Non-configurable invariants of the capital ledger."""

    ASSET_WELL_FORMED = "asset_well_formed"
    """Owner non-empty, initial value and useful life positive, current
    value within [0, initial_value]. Enforced by create_asset, checked by
    IntegrityChecker.validate_asset."""

    EVENT_WELL_FORMED = "event_well_formed"
    """Events reference an existing asset and carry a non-empty type."""

    ENTRY_TIME_ORDER = "entry_time_order"
    """Ledger entries are non-decreasing in timestamp across the whole
    ledger. Checked, not enforced by construction."""

    NO_RETROACTIVE_EVENTS = "no_retroactive_events"
    """A new event may not predate the last event in the global log."""

    NON_OVERLAPPING_DEPRECIATION = "non_overlapping_depreciation"
    """Depreciation periods [start, end) of one asset never overlap."""

    PROOF_CHAIN_LINKAGE = "proof_chain_linkage"
    """Each proof's previous_proof_hash equals the hash of the asset's
    preceding proof."""

    POSITIVE_JOURNAL_AMOUNT = "positive_journal_amount"
    """Journal entry amounts are strictly positive. Enforced by
    record_journal_entry."""

    RETIREMENT_TERMINAL = "retirement_terminal"
    """Retired assets accept no further allocation, depreciation or
    retirement."""

