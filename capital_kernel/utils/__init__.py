"""Utility modules for the capital kernel."""

from capital_kernel.utils.hashing import (
    canonicalize_json,
    hash_capital_proof,
)

__all__ = [
    "canonicalize_json",
    "hash_capital_proof",
]
