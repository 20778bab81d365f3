"""
Values -- attribute bags and numeric helpers.

Responsibility:
    Defines the open attribute bag used for event details, ledger entry
    metadata, journal entry metadata, and proof content.  Event and proof
    shapes differ by type, so the bag is a string-keyed mapping over a
    closed set of value variants rather than a fixed schema:

        null | bool | number (int, float, Decimal) | str
             | list[value] | dict[str, value]

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Failure modes:
    - ``validate_attribute_bag`` raises ``ValidationError`` for non-string
      keys or values outside the variant set.
"""

from __future__ import annotations

import copy
from decimal import Decimal
from typing import Any, Mapping, TypeAlias

from capital_kernel.exceptions import ValidationError

AttributeValue: TypeAlias = (
    bool
    | int
    | float
    | Decimal
    | str
    | list["AttributeValue"]
    | dict[str, "AttributeValue"]
    | None
)
AttributeBag: TypeAlias = dict[str, AttributeValue]

ZERO = Decimal("0")
CENT = Decimal("0.01")


def is_numeric(value: Any) -> bool:
    """True for int, float and Decimal values; bool is not a number here."""
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def to_decimal(value: int | float | Decimal) -> Decimal:
    """Convert a numeric bag value to Decimal (floats via their repr)."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def numeric_attribute(bag: Mapping[str, Any], key: str) -> Decimal | None:
    """Return ``bag[key]`` as Decimal if present and numeric, else None."""
    value = bag.get(key)
    if not is_numeric(value):
        return None
    return to_decimal(value)


def _check_value(value: Any, path: str, entity: str) -> None:
    if value is None or isinstance(value, (bool, str)) or is_numeric(value):
        return
    if isinstance(value, list):
        for i, item in enumerate(value):
            _check_value(item, f"{path}[{i}]", entity)
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise ValidationError(entity, path, f"non-string key {key!r} at {path}")
            _check_value(item, f"{path}.{key}", entity)
        return
    raise ValidationError(
        entity,
        path,
        f"unsupported attribute type {type(value).__name__} at {path}",
    )


def validate_attribute_bag(bag: Mapping[str, Any], entity: str = "event") -> None:
    """
    Check that ``bag`` is a well-formed attribute bag.

    Raises:
        ValidationError: naming the first offending path.
    """
    if not isinstance(bag, Mapping):
        raise ValidationError(entity, "details", "attributes must be a mapping")
    for key, value in bag.items():
        if not isinstance(key, str):
            raise ValidationError(entity, "details", f"non-string key {key!r}")
        _check_value(value, key, entity)


def copy_bag(bag: Mapping[str, AttributeValue]) -> AttributeBag:
    """Deep copy of a bag, so derived records never share nested values."""
    return copy.deepcopy(dict(bag))
