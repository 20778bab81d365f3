"""
Tests for IntegrityChecker: record validation, retroactive events,
depreciation period overlap, and the full integrity scan.
"""

import dataclasses
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from capital_kernel.domain.models import CapitalEvent, EventType, LedgerEntry
from capital_kernel.exceptions import (
    AssetNotFoundError,
    IntegrityViolationError,
    InvalidDateRangeError,
    OverlappingDepreciationError,
)
from capital_kernel.invariants import LedgerInvariant


def _utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


def _depreciation_event(asset_id, start, end) -> CapitalEvent:
    return CapitalEvent(
        event_id=uuid4(),
        asset_id=asset_id,
        event_type=EventType.DEPRECIATION,
        timestamp=_utc(2024, 1, 1),
        details={"amount": Decimal("1"), "start_date": start, "end_date": end},
    )


class TestValidateAsset:

    def test_capitalized_asset_is_valid(self, checker, create_asset):
        checker.validate_asset(create_asset())

    @pytest.mark.parametrize("changes, reason", [
        ({"owner": ""}, "owner"),
        ({"initial_value": Decimal("0")}, "Initial value"),
        ({"useful_life_months": 0}, "Useful life"),
        ({"current_value": Decimal("-1")}, "negative"),
        ({"current_value": Decimal("999999")}, "exceed"),
    ])
    def test_malformed(self, checker, create_asset, changes, reason):
        asset = dataclasses.replace(create_asset(), **changes)
        with pytest.raises(IntegrityViolationError, match=reason) as exc_info:
            checker.validate_asset(asset)
        assert exc_info.value.invariant is LedgerInvariant.ASSET_WELL_FORMED


class TestValidateEventAndEntry:

    def test_event_for_unknown_asset(self, checker, clock):
        event = CapitalEvent(uuid4(), uuid4(), "utilization", clock.now_utc())
        with pytest.raises(AssetNotFoundError):
            checker.validate_event(event)

    def test_event_without_type(self, checker, create_asset, clock):
        asset = create_asset()
        event = CapitalEvent(uuid4(), asset.asset_id, "", clock.now_utc())
        with pytest.raises(IntegrityViolationError) as exc_info:
            checker.validate_event(event)
        assert exc_info.value.invariant is LedgerInvariant.EVENT_WELL_FORMED

    def test_entry_earlier_than_last_entry(self, checker, orchestrator, create_asset, clock):
        asset = create_asset()
        orchestrator.utilize(asset.asset_id, Decimal("1"))
        stale = LedgerEntry(
            entry_id=uuid4(),
            event_id=uuid4(),
            asset_id=asset.asset_id,
            timestamp=clock.now_utc() - timedelta(seconds=1),
            amount=Decimal("0"),
            description="utilization",
        )
        with pytest.raises(IntegrityViolationError) as exc_info:
            checker.validate_entry(stale)
        assert exc_info.value.invariant is LedgerInvariant.ENTRY_TIME_ORDER

    def test_entry_for_unknown_asset(self, checker, clock):
        entry = LedgerEntry(uuid4(), uuid4(), uuid4(), clock.now_utc(), Decimal("0"), "x")
        with pytest.raises(AssetNotFoundError):
            checker.validate_entry(entry)


class TestNoRetroactiveModification:

    def test_earlier_than_any_asset_rejected(self, checker, orchestrator, create_asset, clock):
        first = create_asset()
        second = create_asset()
        orchestrator.utilize(first.asset_id, Decimal("1"))
        candidate = CapitalEvent(
            uuid4(), second.asset_id, "utilization", clock.now_utc() - timedelta(minutes=5)
        )
        with pytest.raises(IntegrityViolationError) as exc_info:
            checker.ensure_no_retroactive_modification(candidate)
        assert exc_info.value.invariant is LedgerInvariant.NO_RETROACTIVE_EVENTS

    def test_same_or_later_accepted(self, checker, orchestrator, create_asset, clock):
        asset = create_asset()
        orchestrator.utilize(asset.asset_id, Decimal("1"))
        checker.ensure_no_retroactive_modification(
            CapitalEvent(uuid4(), asset.asset_id, "utilization", clock.now_utc())
        )

    def test_empty_ledger_accepts_anything(self, checker):
        checker.ensure_no_retroactive_modification(
            CapitalEvent(uuid4(), uuid4(), "utilization", _utc(1990, 1, 1))
        )


class TestValidateDepreciationPeriod:

    def test_invalid_range(self, checker, create_asset):
        asset = create_asset()
        with pytest.raises(InvalidDateRangeError):
            checker.validate_depreciation_period(asset.asset_id, _utc(2024, 2, 1), _utc(2024, 2, 1))

    @pytest.mark.parametrize("start, end", [
        ((2024, 2, 1), (2024, 3, 1)),
        ((2023, 12, 1), (2024, 1, 2)),
        ((2024, 3, 31), (2024, 6, 1)),
        ((2023, 1, 1), (2025, 1, 1)),
    ])
    def test_overlap(self, checker, orchestrator, create_asset, start, end):
        asset = create_asset()
        existing = orchestrator.depreciate(asset.asset_id, _utc(2024, 1, 1), _utc(2024, 4, 1))
        with pytest.raises(OverlappingDepreciationError) as exc_info:
            checker.validate_depreciation_period(asset.asset_id, _utc(*start), _utc(*end))
        assert exc_info.value.existing_event_id == existing.event_id
        assert exc_info.value.asset_id == asset.asset_id

    @pytest.mark.parametrize("start, end", [
        ((2023, 10, 1), (2024, 1, 1)),
        ((2024, 4, 1), (2024, 8, 1)),
    ])
    def test_touching_periods_do_not_overlap(self, checker, orchestrator, create_asset, start, end):
        asset = create_asset()
        orchestrator.depreciate(asset.asset_id, _utc(2024, 1, 1), _utc(2024, 4, 1))
        checker.validate_depreciation_period(asset.asset_id, _utc(*start), _utc(*end))

    def test_other_assets_ignored(self, checker, orchestrator, create_asset):
        first = create_asset()
        second = create_asset()
        orchestrator.depreciate(first.asset_id, _utc(2024, 1, 1), _utc(2024, 4, 1))
        checker.validate_depreciation_period(second.asset_id, _utc(2024, 1, 1), _utc(2024, 4, 1))

    def test_malformed_stored_dates_skipped(self, checker, ledger, create_asset):
        asset = create_asset()
        ledger.record_event(_depreciation_event(asset.asset_id, "not-a-date", "2024-04-01"))
        ledger.record_event(_depreciation_event(asset.asset_id, 20240101, "2024-04-01"))
        checker.validate_depreciation_period(asset.asset_id, _utc(2024, 1, 1), _utc(2024, 4, 1))

    def test_naive_bounds_treated_as_utc(self, checker, orchestrator, create_asset):
        asset = create_asset()
        orchestrator.depreciate(asset.asset_id, _utc(2024, 1, 1), _utc(2024, 4, 1))
        with pytest.raises(OverlappingDepreciationError):
            checker.validate_depreciation_period(
                asset.asset_id, datetime(2024, 2, 1), datetime(2024, 3, 1)
            )

    def test_naive_start_with_aware_end(self, checker, orchestrator, create_asset):
        asset = create_asset()
        orchestrator.depreciate(asset.asset_id, _utc(2024, 1, 1), _utc(2024, 4, 1))
        checker.validate_depreciation_period(asset.asset_id, datetime(2024, 4, 1), _utc(2024, 6, 1))
        with pytest.raises(OverlappingDepreciationError):
            checker.validate_depreciation_period(asset.asset_id, datetime(2024, 3, 1), _utc(2024, 6, 1))

    def test_naive_start_after_aware_end(self, checker, create_asset):
        asset = create_asset()
        with pytest.raises(InvalidDateRangeError):
            checker.validate_depreciation_period(asset.asset_id, datetime(2024, 6, 1), _utc(2024, 1, 1))


class TestCheckAllIntegrity:

    def test_clean_ledger(self, checker, orchestrator, create_asset, ledger, captured_logs):
        asset = create_asset()
        orchestrator.utilize(asset.asset_id, Decimal("3"))
        orchestrator.depreciate(asset.asset_id, _utc(2024, 1, 1), _utc(2024, 2, 1))
        ledger.generate_proof(asset.asset_id)

        assert checker.check_all_integrity() == []
        assert any(r["message"] == "integrity_check_passed" for r in captured_logs())

    def test_collects_every_violation(self, checker, ledger, create_asset):
        first = create_asset()
        second = create_asset()
        ledger.store_asset(dataclasses.replace(first, owner=""))
        ledger.store_asset(dataclasses.replace(second, current_value=Decimal("-1")))

        errors = checker.check_all_integrity()
        assert len(errors) == 2
        assert errors[0].startswith(f"Asset {first.asset_id}: ")
        assert errors[1].startswith(f"Asset {second.asset_id}: ")

    def test_entry_ordering_is_checked_against_the_global_last_entry(
        self, checker, orchestrator, create_asset, clock
    ):
        asset = create_asset()
        orchestrator.utilize(asset.asset_id, Decimal("1"))
        clock.tick()
        orchestrator.utilize(asset.asset_id, Decimal("2"))

        errors = checker.check_all_integrity()
        assert len(errors) == 1
        assert errors[0].startswith("Entry ")
        assert "time-ordered" in errors[0]

    def test_includes_proof_chain_breaks(self, checker, ledger, create_asset, clock):
        asset = create_asset()
        ledger.generate_proof(asset.asset_id)
        clock.tick()
        ledger.generate_proof(asset.asset_id)
        ledger._proofs[1] = dataclasses.replace(ledger._proofs[1], previous_proof_hash="0" * 64)

        errors = checker.check_all_integrity()
        assert len(errors) == 1
        assert errors[0].startswith(f"Proof chain break for asset {asset.asset_id}")
