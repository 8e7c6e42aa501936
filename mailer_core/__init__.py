"""Composable mailer units, pipelines and named routes."""

from .composite import Composite, compose
from .config import Settings
from .errors import InvalidDefinitionError, MailerError, RouteNotFoundError
from .mailer import Mailer
from .models import ActionSpec, DerivedOptions, MailerContext, StaticOptions
from .options import is_cancelled, merge_options
from .router import Router, get_default_router, reset_default_router, route, send

__all__ = [
    "ActionSpec",
    "Composite",
    "DerivedOptions",
    "InvalidDefinitionError",
    "Mailer",
    "MailerContext",
    "MailerError",
    "RouteNotFoundError",
    "Router",
    "Settings",
    "StaticOptions",
    "compose",
    "get_default_router",
    "is_cancelled",
    "merge_options",
    "reset_default_router",
    "route",
    "send",
]
