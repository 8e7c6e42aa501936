from __future__ import annotations


class MailerError(Exception):
    """Base for all mailer_core errors."""


class InvalidDefinitionError(MailerError, TypeError):
    """Raised when a mailer, compose or route argument has an unsupported shape."""


class RouteNotFoundError(MailerError, LookupError):
    """Raised when a route name is not registered at lookup time."""

    def __init__(self, name: str):
        super().__init__(f"No route registered under name {name!r}")
        self.name = name
