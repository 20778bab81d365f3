"""
Depreciation Engine (``capital_kernel.domain.depreciation``).

Responsibility
--------------
Pure calculation of an intelligence asset's value decay over a period,
for the linear and declining-balance methods.  Given an asset snapshot,
a period, a salvage floor and a rate multiplier, returns the depreciation
amount and the asset's new value.  Never reads or writes the ledger.

Architecture position
---------------------
**Kernel > Domain** -- pure functions.  No I/O, no clock, no ledger
access.  Called by ``LifecycleOrchestrator.depreciate`` or from tests.

Invariants enforced
-------------------
* All monetary outputs are ``Decimal``; float inputs are converted through
  their repr.
* Linear amounts are rounded to the cent, multiplying before dividing so a
  full useful life depreciates exactly to salvage.
* ``new_value`` is never below ``salvage_value``.
* Period length is counted in whole months; a partial trailing month
  does not count.

Failure modes
-------------
* ``start >= end``  -> ``InvalidDateRangeError``.
* Negative salvage, or salvage above the initial value
  -> ``DepreciationError``.
* Period shorter than one whole month  -> ``(0, current_value)``.

Audit relevance
---------------
The declining-balance method is evaluated month by month rather than
through the closed-form geometric series, so recorded amounts carry the
same compounding rounding on every replay.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import NamedTuple

from capital_kernel.domain.clock import ensure_utc
from capital_kernel.domain.models import DepreciationMethod, IntelligenceAsset
from capital_kernel.domain.values import CENT, ZERO, to_decimal
from capital_kernel.exceptions import DepreciationError, InvalidDateRangeError


class DepreciationResult(NamedTuple):
    """Depreciation for one period; unpacks as ``(amount, new_value)``."""
    depreciation_amount: Decimal
    new_value: Decimal


def months_between(start: datetime, end: datetime) -> int:
    """
    Whole months from ``start`` to ``end``.

    Postconditions:
        - One month is dropped when ``end.day < start.day``.
        - Never negative.
    """
    total_months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        total_months -= 1
    return max(total_months, 0)


def calculate_depreciation(
    asset: IntelligenceAsset,
    start_date: datetime,
    end_date: datetime,
    salvage_value: Decimal,
    rate_multiplier: Decimal,
) -> DepreciationResult:
    """
    Depreciate ``asset`` over ``[start_date, end_date)``.

    Preconditions (checked before dispatch):
        - ``start_date < end_date``.
        - ``0 <= salvage_value <= asset.initial_value``.
    Postconditions:
        - ``salvage_value <= new_value <= asset.effective_value`` unless the
          asset already sits below salvage.
    """
    start_date, end_date = ensure_utc(start_date), ensure_utc(end_date)
    if start_date >= end_date:
        raise InvalidDateRangeError(start_date.isoformat(), end_date.isoformat())

    salvage_value = to_decimal(salvage_value)
    rate_multiplier = to_decimal(rate_multiplier)

    if salvage_value < ZERO:
        raise DepreciationError("Salvage value cannot be negative")

    if salvage_value > asset.initial_value:
        raise DepreciationError("Salvage value cannot exceed initial value")

    months = months_between(start_date, end_date)

    if asset.depreciation_method is DepreciationMethod.LINEAR:
        return linear_depreciation(asset, months, salvage_value)
    return declining_balance_depreciation(asset, months, salvage_value, rate_multiplier)


def linear_depreciation(
    asset: IntelligenceAsset,
    months: int,
    salvage_value: Decimal,
) -> DepreciationResult:
    """
    Straight-line depreciation for ``months`` whole months.

    Postconditions:
        - Amount is ``(initial - salvage) * months / useful_life`` rounded to
          the cent, capped at the value left above salvage and floored at
          zero.
    """
    current = asset.effective_value
    if months <= 0:
        return DepreciationResult(ZERO, current)

    depreciable_base = asset.initial_value - salvage_value
    scheduled = depreciable_base * months / Decimal(asset.useful_life_months)
    max_depreciation = scheduled.quantize(CENT)

    depreciation_amount = max(min(max_depreciation, current - salvage_value), ZERO)
    new_value = max(current - depreciation_amount, salvage_value)
    return DepreciationResult(depreciation_amount, new_value)


def declining_balance_depreciation(
    asset: IntelligenceAsset,
    months: int,
    salvage_value: Decimal,
    rate_multiplier: Decimal,
) -> DepreciationResult:
    """
    Declining-balance depreciation applied month by month.

    Postconditions:
        - Monthly rate is ``rate_multiplier / useful_life_months`` on the
          remaining value.
        - The month that would cross the salvage floor takes only the
          remainder down to salvage and ends the iteration.
    """
    current_value = asset.effective_value
    if months <= 0:
        return DepreciationResult(ZERO, current_value)

    rate = to_decimal(rate_multiplier) / Decimal(asset.useful_life_months)

    depreciation_amount = ZERO
    for _ in range(months):
        monthly_depreciation = current_value * rate
        if current_value - monthly_depreciation < salvage_value:
            depreciation_amount += current_value - salvage_value
            current_value = salvage_value
            break
        depreciation_amount += monthly_depreciation
        current_value -= monthly_depreciation

    return DepreciationResult(depreciation_amount, max(current_value, salvage_value))
