"""
Tests for the pure depreciation engine.

Covers linear and declining-balance schedules, the salvage floor, whole-month
counting, and the precondition errors raised before any method runs.
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from capital_kernel.domain.depreciation import (
    calculate_depreciation,
    declining_balance_depreciation,
    linear_depreciation,
    months_between,
)
from capital_kernel.domain.models import DepreciationMethod, IntelligenceAsset
from capital_kernel.exceptions import DepreciationError, InvalidDateRangeError

CENT = Decimal("0.01")


def _asset(
    initial_value: str = "12000",
    method: DepreciationMethod = DepreciationMethod.LINEAR,
    useful_life_months: int = 12,
    current_value: str | None = None,
) -> IntelligenceAsset:
    return IntelligenceAsset(
        asset_id=uuid4(),
        owner="research-lab",
        initial_value=Decimal(initial_value),
        depreciation_method=method,
        useful_life_months=useful_life_months,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        current_value=Decimal(current_value) if current_value is not None else None,
    )


def _utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


class TestMonthsBetween:

    def test_same_day_of_month(self):
        assert months_between(_utc(2024, 1, 15), _utc(2024, 3, 15)) == 2

    def test_partial_trailing_month_dropped(self):
        assert months_between(_utc(2024, 1, 31), _utc(2024, 2, 28)) == 0

    def test_across_year_boundary(self):
        assert months_between(_utc(2023, 11, 1), _utc(2024, 2, 1)) == 3

    def test_never_negative(self):
        assert months_between(_utc(2024, 5, 1), _utc(2024, 1, 1)) == 0


class TestLinear:

    def test_half_life_depreciates_half_the_base(self):
        asset = _asset("12000", useful_life_months=12)
        amount, new_value = calculate_depreciation(
            asset, _utc(2024, 1, 1), _utc(2024, 7, 1), Decimal("0"), Decimal("2")
        )
        assert amount.quantize(CENT) == Decimal("6000.00")
        assert new_value.quantize(CENT) == Decimal("6000.00")

    def test_salvage_reduces_base(self):
        asset = _asset("12000", useful_life_months=12)
        amount, new_value = calculate_depreciation(
            asset, _utc(2024, 1, 1), _utc(2025, 1, 1), Decimal("2400"), Decimal("2")
        )
        assert amount.quantize(CENT) == Decimal("9600.00")
        assert new_value.quantize(CENT) == Decimal("2400.00")

    def test_capped_at_remaining_value(self):
        asset = _asset("12000", useful_life_months=12, current_value="1000")
        result = linear_depreciation(asset, 6, Decimal("0"))
        assert result.depreciation_amount == Decimal("1000")
        assert result.new_value == Decimal("0")

    def test_zero_months_is_noop(self):
        asset = _asset("12000", current_value="8000")
        result = linear_depreciation(asset, 0, Decimal("0"))
        assert result == (Decimal("0"), Decimal("8000"))

    @pytest.mark.parametrize("life", [3, 7, 9])
    def test_full_life_reaches_salvage_exactly(self, life):
        asset = _asset("1000", useful_life_months=life)
        end = _utc(2024 + (life // 12), 1 + life % 12, 1)
        amount, new_value = calculate_depreciation(
            asset, _utc(2024, 1, 1), end, Decimal("0"), Decimal("2")
        )
        assert amount == Decimal("1000")
        assert new_value == Decimal("0")

    def test_amount_rounded_to_the_cent(self):
        asset = _asset("1000", useful_life_months=3)
        result = linear_depreciation(asset, 1, Decimal("0"))
        assert result.depreciation_amount == Decimal("333.33")
        assert result.new_value == Decimal("666.67")

    def test_float_salvage_uses_its_decimal_text(self):
        asset = _asset("1000", useful_life_months=10)
        from_float = calculate_depreciation(
            asset, _utc(2024, 1, 1), _utc(2024, 11, 1), 100.1, Decimal("2")
        )
        from_text = calculate_depreciation(
            asset, _utc(2024, 1, 1), _utc(2024, 11, 1), Decimal("100.1"), Decimal("2")
        )
        assert from_float == from_text
        assert from_float.new_value == Decimal("100.1")

    def test_period_shorter_than_a_month(self):
        asset = _asset("12000")
        amount, new_value = calculate_depreciation(
            asset, _utc(2024, 1, 1), _utc(2024, 1, 20), Decimal("0"), Decimal("2")
        )
        assert amount == Decimal("0")
        assert new_value == Decimal("12000")


class TestDecliningBalance:

    def test_first_month(self):
        asset = _asset("10000", DepreciationMethod.DECLINING_BALANCE, 10)
        result = declining_balance_depreciation(asset, 1, Decimal("0"), Decimal("2"))
        assert result.depreciation_amount == Decimal("2000")
        assert result.new_value == Decimal("8000")

    def test_compounds_month_by_month(self):
        asset = _asset("10000", DepreciationMethod.DECLINING_BALANCE, 10)
        result = declining_balance_depreciation(asset, 2, Decimal("0"), Decimal("2"))
        assert result.depreciation_amount == Decimal("3600")
        assert result.new_value == Decimal("6400")

    def test_stops_at_salvage(self):
        asset = _asset("10000", DepreciationMethod.DECLINING_BALANCE, 10)
        result = declining_balance_depreciation(asset, 3, Decimal("7000"), Decimal("2"))
        assert result.depreciation_amount == Decimal("3000")
        assert result.new_value == Decimal("7000")

    def test_dispatched_by_method(self):
        asset = _asset("10000", DepreciationMethod.DECLINING_BALANCE, 10)
        amount, new_value = calculate_depreciation(
            asset, _utc(2024, 1, 1), _utc(2024, 2, 1), Decimal("0"), Decimal("2")
        )
        assert amount == Decimal("2000")
        assert new_value == Decimal("8000")

    def test_float_multiplier_uses_its_decimal_text(self):
        asset = _asset("10000", DepreciationMethod.DECLINING_BALANCE, 10)
        from_float = calculate_depreciation(
            asset, _utc(2024, 1, 1), _utc(2024, 4, 1), Decimal("0"), 0.3
        )
        from_text = calculate_depreciation(
            asset, _utc(2024, 1, 1), _utc(2024, 4, 1), Decimal("0"), Decimal("0.3")
        )
        assert from_float == from_text

    def test_starts_from_current_value(self):
        asset = _asset("10000", DepreciationMethod.DECLINING_BALANCE, 10, current_value="5000")
        result = declining_balance_depreciation(asset, 1, Decimal("0"), Decimal("2"))
        assert result.depreciation_amount == Decimal("1000")
        assert result.new_value == Decimal("4000")


class TestPreconditions:

    def test_start_after_end(self):
        with pytest.raises(InvalidDateRangeError) as exc_info:
            calculate_depreciation(
                _asset(), _utc(2024, 6, 1), _utc(2024, 1, 1), Decimal("0"), Decimal("2")
            )
        assert exc_info.value.code == "INVALID_DATE_RANGE"

    def test_start_equals_end(self):
        with pytest.raises(InvalidDateRangeError):
            calculate_depreciation(
                _asset(), _utc(2024, 1, 1), _utc(2024, 1, 1), Decimal("0"), Decimal("2")
            )

    def test_invalid_range_is_a_depreciation_error(self):
        with pytest.raises(DepreciationError):
            calculate_depreciation(
                _asset(), _utc(2024, 2, 1), _utc(2024, 1, 1), Decimal("0"), Decimal("2")
            )

    def test_negative_salvage(self):
        with pytest.raises(DepreciationError, match="cannot be negative"):
            calculate_depreciation(
                _asset(), _utc(2024, 1, 1), _utc(2024, 2, 1), Decimal("-1"), Decimal("2")
            )

    def test_salvage_above_initial_value(self):
        with pytest.raises(DepreciationError, match="cannot exceed initial value"):
            calculate_depreciation(
                _asset("1000"), _utc(2024, 1, 1), _utc(2024, 2, 1), Decimal("1001"), Decimal("2")
            )

    def test_naive_start_with_aware_end(self):
        amount, _ = calculate_depreciation(
            _asset(), datetime(2024, 1, 1), _utc(2024, 4, 1), Decimal("0"), Decimal("2")
        )
        assert amount == Decimal("3000")

    def test_naive_start_after_aware_end(self):
        with pytest.raises(InvalidDateRangeError):
            calculate_depreciation(
                _asset(), datetime(2024, 6, 1), _utc(2024, 1, 1), Decimal("0"), Decimal("2")
            )
