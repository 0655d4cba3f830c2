"""Exception hierarchy for aiohubscope."""

from __future__ import annotations


class HubScopeError(Exception):
    """Base exception for all aiohubscope errors."""


class DraftValidationError(HubScopeError):
    """An automation draft is malformed or incomplete."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or [message]


class AuthorizationError(HubScopeError):
    """The caller may not perform the operation.

    The message is safe to show to the caller: it never names the entity
    that caused the denial.
    """


class CompilerInvariantError(HubScopeError):
    """The compiler met a draft shape the validator should have rejected."""


class TransportError(HubScopeError):
    """The hub rejected a request or could not be reached."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class AutomationNotFoundError(TransportError):
    """The hub has no automation with the requested id."""


class PathSecurityError(TransportError):
    """A requested path resolved outside the allowed config directory."""


class YAMLParseError(TransportError):
    """Failed to parse a YAML automations file."""
