"""Client for the Shumei content moderation and risk-control HTTP API."""

__version__ = "1.0.0"