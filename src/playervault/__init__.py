"""
playervault - Persistent per-player item vaults

This package provides:
- Core: vault model, item codec, container and session tracking
- Storage: one repository over SQLite, MySQL and PostgreSQL
- Service: the open / on-close / clear API for the UI layer
- CLI: Command-line administration tools
"""

__version__ = "1.0.0"
