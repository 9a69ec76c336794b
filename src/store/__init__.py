"""Sales storage layer.

This module persists sales records in a local SQLite table.
It owns transactions, conflict policies, and the SDK client.
"""
