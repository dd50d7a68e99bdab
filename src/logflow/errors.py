"""Exception types raised by logflow."""
from __future__ import annotations


class LogflowError(Exception):
    """Base class for all logflow errors."""


class PluginConfigError(LogflowError, ValueError):
    """A plugin could not be built from the options it was given."""


class UnknownPluginError(LogflowError, KeyError):
    """No plugin is registered under the requested id."""

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0]) if self.args else ""
