"""
Pytest fixtures for the capital kernel test suite.

Provides:
- Structured logging configured for every test, with log capture
- A deterministic clock and a fresh in-memory ledger per test
- Service fixtures (orchestrator, integrity checker, proof generator)
- An asset factory for capitalizing test assets
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO
from uuid import UUID, uuid4

import pytest

from capital_kernel.domain.clock import DeterministicClock
from capital_kernel.domain.models import DepreciationMethod, IntelligenceAsset
from capital_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from capital_kernel.services.integrity_checker import IntegrityChecker
from capital_kernel.services.ledger_service import CapitalLedger
from capital_kernel.services.lifecycle_orchestrator import LifecycleOrchestrator
from capital_kernel.services.proof_generator import ProofGenerator

FIXED_NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture capital_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, orchestrator):
            orchestrator.retire(asset_id)
            logs = captured_logs()
            assert any(r["message"] == "asset_retired" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("capital_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Kernel fixtures
# =============================================================================


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(FIXED_NOW)


@pytest.fixture
def ledger(clock) -> CapitalLedger:
    return CapitalLedger(clock=clock)


@pytest.fixture
def orchestrator(ledger, clock) -> LifecycleOrchestrator:
    return LifecycleOrchestrator(ledger, clock=clock)


@pytest.fixture
def checker(ledger) -> IntegrityChecker:
    return IntegrityChecker(ledger)


@pytest.fixture
def proof_generator(ledger, clock) -> ProofGenerator:
    return ProofGenerator(ledger, clock=clock)


@pytest.fixture
def create_asset(orchestrator):
    """
    Factory that capitalizes an asset through the orchestrator.

    Usage::

        asset = create_asset(initial_value=Decimal("12000"))
    """

    def _create(
        asset_id: UUID | None = None,
        owner: str = "research-lab",
        initial_value: Decimal = Decimal("12000"),
        method: DepreciationMethod = DepreciationMethod.LINEAR,
        useful_life_months: int = 24,
    ) -> IntelligenceAsset:
        return orchestrator.capitalize(
            asset_id or uuid4(),
            owner,
            initial_value,
            method,
            useful_life_months,
        )

    return _create
