"""Exception types raised by samplers, drivers and estimators."""

from __future__ import annotations


class SamplerError(Exception):
    """Base class for all errors raised by ``nqsampler``."""


class ConfigurationError(SamplerError, ValueError):
    """Invalid argument detected at a call boundary.

    Raised before any state is touched: bad batch sizes, non-positive schedule
    steps, configurations of the wrong shape or with inadmissible values.
    """


class ContractViolationError(SamplerError, RuntimeError):
    """A collaborator (machine or operator) broke its interface contract."""
