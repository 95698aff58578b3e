"""Health-gated batch text-to-speech client for a remote inference endpoint."""

__version__ = "0.1.0"
