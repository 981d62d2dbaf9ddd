"""Error types raised by the routewise engine."""

from __future__ import annotations


class RoutewiseError(Exception):
    """Base class for routewise errors."""


class RegistryFetchError(RoutewiseError):
    """The remote model listing could not be fetched or parsed."""


class SelectionError(RoutewiseError, ValueError):
    """Invalid input passed to a selector builder method."""


class InvalidStrategyError(SelectionError):
    pass


class InvalidCriteriaError(SelectionError):
    pass


class CapabilityError(RoutewiseError):
    """A model was asked to do something it does not advertise (strict mode)."""
