"""
Capital Kernel

An append-only ledger for capitalized intelligence assets with:
- Asset lifecycle state machine (capitalize, allocate, utilize, depreciate, retire)
- Linear and declining-balance depreciation
- Double-entry journal entries derived from lifecycle events
- Integrity checks over structure, time ordering and depreciation periods
- Hash-chained capital proofs for audit verification
"""

__version__ = "0.1.0"
