"""
CLI command modules.
"""

# Configuration commands
from playervault.cli.commands.config import backends, config

# Database commands
from playervault.cli.commands.db import db

# Vault inspection and maintenance
from playervault.cli.commands.vault import clear, show

__all__ = [
    "backends",
    "clear",
    "config",
    "db",
    "show",
]
