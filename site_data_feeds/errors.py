from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Required identifier or credential is missing; raised before any network call."""


class TransportError(RuntimeError):
    """Primary report could not be fetched or decoded."""
