"""Errors raised while loading the endpoint configuration.

All of them derive from ValueError so callers that only care about "the
configuration is bad" can keep catching ValueError.
"""

from typing import Any


class EndpointConfigError(ValueError):
    """Base class for endpoint configuration failures."""


class DecodeError(EndpointConfigError):
    """The configuration document is malformed or does not match the schema."""


class InvalidModeError(EndpointConfigError):
    """An endpoint group declares a mode that is not recognized."""

    def __init__(self, mode: Any):
        self.mode = mode
        super().__init__(f"{mode!r} is wrong mode, expected '' or 'strict'")


class ModeConflictError(EndpointConfigError):
    """A strict endpoint group declares discovery sources."""

    def __init__(self, group_name: str):
        self.group_name = group_name
        super().__init__(f"no sd-files allowed in strict mode (group {group_name!r})")


class DuplicateEndpointError(EndpointConfigError):
    """The same endpoint address is configured more than once."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"{address} endpoint provided more than once")
