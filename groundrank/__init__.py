"""Multi-stage search result ranking with cross-source verification."""

__version__ = "0.1.0"