"""Core of the devotional reading app: local stores, backend sync, Bible translations, payments."""

__version__ = "0.1.0"
