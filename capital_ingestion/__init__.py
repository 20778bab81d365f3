"""
Capital ingestion: attribution intake and outbound emission for the ledger.

Subpackages:
  - domain: pure DTOs and record parsing (AttributionRecord, ReconciliationSummary).
  - adapters: FinancialSystemSink protocol and an in-memory sink.
  - services: IntegrationAdapter.
"""

from capital_ingestion.adapters.base import FinancialSystemSink, InMemorySink
from capital_ingestion.domain.types import AttributionRecord, ReconciliationSummary
from capital_ingestion.services.integration_adapter import IntegrationAdapter

__all__ = [
    "AttributionRecord",
    "FinancialSystemSink",
    "InMemorySink",
    "IntegrationAdapter",
    "ReconciliationSummary",
]
