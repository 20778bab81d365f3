"""
Proof construction -- pure helpers shared by the ledger and the proof generator.

Responsibility:
    Snapshots an asset into proof content, builds ``CapitalProof`` values,
    and seals them with their hash.  Both ``CapitalLedger.generate_proof``
    and ``ProofGenerator`` go through these helpers so a proof built by
    either one verifies identically.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Time and ids are
    passed in by the caller.

Invariants enforced:
    - A sealed proof's ``proof_hash`` equals
      ``hash_capital_proof(proof_id, timestamp, content, previous_proof_hash)``.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from uuid import UUID, uuid4

from capital_kernel.domain.models import CapitalProof, IntelligenceAsset
from capital_kernel.domain.values import ZERO, AttributeBag, AttributeValue
from capital_kernel.utils.hashing import hash_capital_proof


def asset_snapshot(asset: IntelligenceAsset) -> AttributeBag:
    """Proof content describing the asset's current fields."""
    return {
        "asset_id": str(asset.asset_id),
        "owner": asset.owner,
        "initial_value": asset.initial_value,
        "depreciation_method": str(asset.depreciation_method),
        "useful_life_months": asset.useful_life_months,
        "status": str(asset.status),
        "current_value": asset.current_value if asset.current_value is not None else ZERO,
    }


def compute_proof_hash(proof: CapitalProof) -> str:
    """Recompute the hash of ``proof`` from its own stored fields."""
    return hash_capital_proof(
        proof.proof_id,
        proof.timestamp,
        proof.content,
        proof.previous_proof_hash,
    )


def seal_proof(proof: CapitalProof) -> CapitalProof:
    """Return a copy of ``proof`` carrying its computed hash."""
    return replace(proof, proof_hash=compute_proof_hash(proof))


def build_asset_proof(
    asset: IntelligenceAsset,
    *,
    timestamp: datetime,
    origin: str,
    previous_proof_hash: str | None,
    event_id: UUID | None = None,
) -> CapitalProof:
    """Build and seal a proof snapshotting ``asset``."""
    proof = CapitalProof(
        proof_id=uuid4(),
        asset_id=asset.asset_id,
        event_id=event_id,
        timestamp=timestamp,
        origin=origin,
        content=asset_snapshot(asset),
        previous_proof_hash=previous_proof_hash,
    )
    return seal_proof(proof)


def enrich_proof(
    proof: CapitalProof,
    fields: dict[str, AttributeValue],
    *,
    event_id: UUID | None = None,
) -> CapitalProof:
    """
    Return a resealed copy of ``proof`` with extra content fields.

    The original proof is left untouched.
    """
    content = dict(proof.content)
    content.update(fields)
    enriched = replace(
        proof,
        content=content,
        event_id=event_id if event_id is not None else proof.event_id,
        proof_hash=None,
    )
    return seal_proof(enriched)
