"""Exceptions raised while building the static catalogs.

The combat math itself never raises on representable input; only catalog and
configuration loading can fail.
"""
from __future__ import annotations


class FormationError(RuntimeError):
    """Base class for fleet_formations errors."""


class ConfigError(FormationError):
    """Raised when a config file cannot be read or parsed."""


class CatalogError(FormationError):
    """Raised when a catalog document fails validation."""
