from __future__ import annotations


class EngineError(Exception):
    """Base class for analytics engine errors."""


class NormalizationError(EngineError, ValueError):
    """A raw row cannot be turned into a complete vehicle record."""


class ConfigError(EngineError, ValueError):
    """A filter or sort configuration is structurally invalid."""
