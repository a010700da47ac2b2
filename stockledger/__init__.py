"""Stock ledger engine for multi-branch inventory and accounts reporting."""

__version__ = "1.0.0"
