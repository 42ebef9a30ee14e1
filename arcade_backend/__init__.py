"""Arcade tournament backend: score ingestion, leaderboards and on-chain tournament reconciliation."""

__version__ = "1.0.0"
