"""Errors raised by Beacon tools."""

from __future__ import annotations


class ToolError(Exception):
    """Base class for every error a tool reports back to the caller."""


class InvalidInputError(ToolError, ValueError):
    """A required parameter is missing, empty, or malformed."""


class NotFoundError(ToolError, LookupError):
    """A Discord entity could not be resolved from the supplied ID."""


class DiscordActionError(ToolError):
    """A remote Discord call failed."""
