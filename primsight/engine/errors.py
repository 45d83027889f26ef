"""Engine error types."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Invalid run configuration or target buffer; raised before any round runs."""
