"""Outbound adapters: financial system sinks."""
