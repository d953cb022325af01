"""Adapters that connect the core to HTTP endpoints and terminal output."""
