"""Whisper Market - binary prediction markets over a key-value ledger."""

__version__ = "0.1.0"
