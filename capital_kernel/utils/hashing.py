"""
Deterministic hashing utilities.

All hashing in the capital kernel must be deterministic and reproducible.
This module provides the canonical hashing functions used by the ledger,
the proof generator, and the integrity checker.
"""

import hashlib
import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


def _json_serializer(obj: Any) -> Any:
    """
    Custom JSON serializer for types not natively supported.

    Raises:
        TypeError: If object type is not supported.
    """
    if isinstance(obj, Decimal):
        # Normalize so 6000, 6000.0 and 6000.00 hash identically
        return str(obj.normalize())
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value

    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonicalize_json(data: dict | list | Any) -> str:
    """
    Convert data to canonical JSON string.

    Produces a deterministic JSON representation:
    - Keys are sorted alphabetically
    - No whitespace
    - Consistent handling of special types (Decimal, datetime, UUID)
    """
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        default=_json_serializer,
    )


def hash_capital_proof(
    proof_id: UUID | str,
    timestamp: datetime,
    content: dict[str, Any],
    previous_proof_hash: str | None,
) -> str:
    """
    Compute the hash of a capital proof.

    The digest covers the proof id, the timestamp as integer epoch seconds,
    the canonical content, and the previous proof's hash (empty string for
    the first proof of an asset), concatenated without separators.  Any
    change to one of them changes the hash, which is what chains proofs
    together.

    Returns:
        Hex-encoded SHA-256 hash (64 characters).
    """
    hash_input = (
        f"{proof_id}"
        f"{int(timestamp.timestamp())}"
        f"{canonicalize_json(content)}"
        f"{previous_proof_hash or ''}"
    )
    return hashlib.sha256(hash_input.encode("utf-8")).hexdigest()
