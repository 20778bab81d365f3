"""
Financial system sink protocol and in-memory sink.

Contract:
    FinancialSystemSink.emit() receives one event payload per call.  Sinks
    may raise; IntegrationAdapter does not catch sink errors.

Architecture: capital_ingestion/adapters. No kernel imports.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class FinancialSystemSink(Protocol):
    """Protocol for forwarding ledger events to an external financial system."""

    name: str

    def emit(self, payload: Any) -> None:
        """Deliver one event payload."""
        ...


class InMemorySink:
    """Sink that keeps every emitted payload, in order."""

    def __init__(self, name: str = "in_memory"):
        self.name = name
        self.payloads: list[Any] = []

    def emit(self, payload: Any) -> None:
        self.payloads.append(payload)
