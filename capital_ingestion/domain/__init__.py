"""Pure domain types for capital ingestion. ZERO I/O."""
