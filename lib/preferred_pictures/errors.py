from __future__ import annotations


class PreferredPicturesError(Exception):
    """Base client error."""


class ConfigurationError(PreferredPicturesError, ValueError):
    """Client settings or call options that contradict each other."""


class ValidationError(PreferredPicturesError, ValueError):
    """Request input rejected before signing."""
