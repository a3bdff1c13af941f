"""Error types for the observatory.

The core favors well-defined defaults over raising; these are reserved for
input that is invalid at construction or configuration time.
"""

from __future__ import annotations


class ObservatoryError(Exception):
    """Base class for observatory errors."""


class ConfigurationError(ObservatoryError, ValueError):
    """Invalid configuration or construction parameter."""
