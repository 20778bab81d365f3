"""Services for the capital kernel: the ledger and its collaborators."""

from capital_kernel.services.integrity_checker import IntegrityChecker
from capital_kernel.services.ledger_service import CapitalLedger
from capital_kernel.services.lifecycle_orchestrator import AssetSummary, LifecycleOrchestrator
from capital_kernel.services.proof_generator import ProofGenerator

__all__ = [
    "AssetSummary",
    "CapitalLedger",
    "IntegrityChecker",
    "LifecycleOrchestrator",
    "ProofGenerator",
]
