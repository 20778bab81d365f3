"""
Typed Exception Hierarchy for the Capital Kernel.

===============================================================================
TYPED EXCEPTIONS
===============================================================================

Every failure the kernel reports is a typed exception with:
  1. A dedicated class (catch by type, not by message)
  2. A ``code`` class attribute (machine-readable, API-safe)
  3. Structured attributes carrying the offending identifiers and values

Example:
    try:
        lifecycle.depreciate(asset_id, start, end)
    except OverlappingDepreciationError as e:
        log.warning(f"Period already depreciated for {e.asset_id}")
    except AssetRetiredError as e:
        api_response(code=e.code, asset_id=str(e.asset_id))

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from CapitalKernelError:

    CapitalKernelError (base)
    |
    +-- AssetError
    |   +-- AssetNotFoundError
    |   +-- AssetAlreadyExistsError
    |   +-- AssetRetiredError
    |
    +-- LedgerError
    |   +-- ValidationError
    |
    +-- DepreciationError
    |   +-- InvalidDateRangeError
    |
    +-- IntegrityError
    |   +-- IntegrityViolationError
    |   +-- OverlappingDepreciationError
    |
    +-- ExportError
    |   +-- SerializationError
    |   +-- UnsupportedFormatError
    |
    +-- IntegrationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Asset           | ASSET_NOT_FOUND             | Asset ID doesn't exist in the ledger
                | ASSET_ALREADY_EXISTS        | Duplicate asset ID on capitalization
                | ASSET_RETIRED               | Mutation attempted on a retired asset
----------------|-----------------------------|-----------------------------------------
Ledger          | VALIDATION_ERROR            | Invalid asset/event/entry fields
----------------|-----------------------------|-----------------------------------------
Depreciation    | DEPRECIATION_ERROR          | Bad salvage value
                | INVALID_DATE_RANGE          | start >= end
----------------|-----------------------------|-----------------------------------------
Integrity       | INTEGRITY_VIOLATION         | Structural or temporal rule broken
                | OVERLAPPING_DEPRECIATION    | Period conflicts with a recorded one
----------------|-----------------------------|-----------------------------------------
Export          | SERIALIZATION_ERROR         | Audit trail could not be encoded
                | UNSUPPORTED_FORMAT          | Export format is not json/csv
----------------|-----------------------------|-----------------------------------------
Integration     | INTEGRATION_ERROR           | Attribution intake or emission failed

===============================================================================
PARTIAL WRITES
===============================================================================

Nothing in the kernel rolls back.  If a lifecycle operation fails after one
of its writes succeeded (e.g. the event was recorded but the journal entry
was rejected), the earlier write stays in the ledger.  Callers needing
atomicity wrap lifecycle calls in their own snapshot/restore logic.
"""

from __future__ import annotations

from uuid import UUID

from capital_kernel.invariants import LedgerInvariant


class CapitalKernelError(Exception):
    """
    Base exception for all capital kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "CAPITAL_KERNEL_ERROR"


# Asset-related exceptions


class AssetError(CapitalKernelError):
    """Base exception for asset-related errors."""

    code: str = "ASSET_ERROR"


class AssetNotFoundError(AssetError):
    """Asset with given ID was not found."""

    code: str = "ASSET_NOT_FOUND"

    def __init__(self, asset_id: UUID):
        self.asset_id = asset_id
        super().__init__(f"Asset {asset_id} not found")


class AssetAlreadyExistsError(AssetError):
    """Asset with given ID already exists."""

    code: str = "ASSET_ALREADY_EXISTS"

    def __init__(self, asset_id: UUID):
        self.asset_id = asset_id
        super().__init__(f"Asset {asset_id} already exists")


class AssetRetiredError(AssetError):
    """Asset is retired; retirement is terminal."""

    code: str = "ASSET_RETIRED"

    def __init__(self, asset_id: UUID):
        self.asset_id = asset_id
        self.invariant = LedgerInvariant.RETIREMENT_TERMINAL
        super().__init__(f"Asset {asset_id} is retired and cannot be modified")


# Ledger write exceptions


class LedgerError(CapitalKernelError):
    """Base exception for ledger write errors."""

    code: str = "LEDGER_ERROR"


class ValidationError(LedgerError):
    """
    An asset, event, or entry failed field validation.

    ``entity`` names what was being validated ("asset", "event",
    "journal_entry", "proof"); ``field`` names the offending field.
    ``invariant`` is set when the check guards a ledger invariant.
    """

    code: str = "VALIDATION_ERROR"

    def __init__(
        self,
        entity: str,
        field: str,
        reason: str,
        invariant: LedgerInvariant | None = None,
    ):
        self.entity = entity
        self.field = field
        self.reason = reason
        self.invariant = invariant
        super().__init__(f"Invalid {entity}: {reason}")


# Depreciation exceptions


class DepreciationError(CapitalKernelError):
    """Depreciation inputs are unusable (salvage value out of range)."""

    code: str = "DEPRECIATION_ERROR"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Depreciation error: {reason}")


class InvalidDateRangeError(DepreciationError):
    """Period start is not strictly before period end."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, start: str, end: str):
        self.start = start
        self.end = end
        super().__init__(f"invalid date range, start {start} must be before end {end}")


# Integrity exceptions


class IntegrityError(CapitalKernelError):
    """Base exception for integrity rule failures."""

    code: str = "INTEGRITY_ERROR"


class IntegrityViolationError(IntegrityError):
    """A structural or temporal ledger invariant was broken."""

    code: str = "INTEGRITY_VIOLATION"

    def __init__(self, reason: str, invariant: LedgerInvariant | None = None):
        self.reason = reason
        self.invariant = invariant
        super().__init__(f"Integrity violation: {reason}")


class OverlappingDepreciationError(IntegrityError):
    """Requested depreciation period overlaps one already recorded."""

    code: str = "OVERLAPPING_DEPRECIATION"

    def __init__(
        self,
        asset_id: UUID,
        start: str,
        end: str,
        existing_event_id: UUID | None = None,
    ):
        self.asset_id = asset_id
        self.start = start
        self.end = end
        self.existing_event_id = existing_event_id
        super().__init__(
            f"Overlapping depreciation period detected for asset {asset_id}: "
            f"[{start}, {end})"
        )


# Export exceptions


class ExportError(CapitalKernelError):
    """Base exception for audit trail export errors."""

    code: str = "EXPORT_ERROR"


class SerializationError(ExportError):
    """Ledger contents could not be serialized."""

    code: str = "SERIALIZATION_ERROR"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Serialization error: {reason}")


class UnsupportedFormatError(ExportError):
    """Requested export format is not supported."""

    code: str = "UNSUPPORTED_FORMAT"

    def __init__(self, export_format: str):
        self.export_format = export_format
        super().__init__(f"Unsupported format: {export_format}")


# Integration exceptions


class IntegrationError(CapitalKernelError):
    """Attribution intake or outbound emission failed."""

    code: str = "INTEGRATION_ERROR"

    def __init__(self, reason: str, external_id: str | None = None):
        self.reason = reason
        self.external_id = external_id
        super().__init__(f"Integration error: {reason}")
