# errors.py
"""
Exception hierarchy for the set-associative cache.

A cache miss is never an error; these only signal misconfiguration
or a strategy object that breaks its contract.
"""


class CacheError(Exception):
    """Base exception for all cache errors."""


class ConfigurationError(CacheError, ValueError):
    """Raised for an invalid cache geometry or benchmark configuration."""


class ContractViolationError(CacheError, RuntimeError):
    """Raised when an evictor or hash generator returns an unusable result."""
