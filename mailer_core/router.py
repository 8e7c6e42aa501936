from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .composite import Composite, compose
from .config import Settings
from .definitions import normalize_definitions
from .errors import InvalidDefinitionError, RouteNotFoundError
from .mailer import Mailer

logger = logging.getLogger(__name__)


class Router:
    """A table of named mailers.

    Usage::

        router = Router()
        router.route("log", log_email)
        router.route("welcome", render_welcome, {"template": "welcome"}, "log")
        router.send("welcome", {"to": "someone@example.com"})

    Route names inside a definition are looked up when the route is sent, so
    a route may refer to one registered afterwards.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self._routes: Dict[str, Mailer] = {}

    def route(self, name: str, *definitions: Any) -> Mailer:
        """Register ``definitions`` under ``name`` and return the registered mailer.

        A single definition is registered as that mailer, several as a
        Composite whose first plain action also receives the options passed
        to ``send``. An existing route with the same name is replaced.
        """
        if not isinstance(name, str) or not name:
            raise InvalidDefinitionError(f"Route name must be a non-empty string, got {name!r}")
        normalized = normalize_definitions(
            definitions, router=self, settings=self.settings, allow_action_pairs=False
        )
        if not normalized.mailers:
            raise InvalidDefinitionError(f"Route {name!r} requires at least one mailer definition.")

        mailers = normalized.mailers
        if len(mailers) == 1 and not mailers[0].has_derived_options:
            entry = mailers[0].renamed(name)
        else:
            entry = Composite(
                mailers,
                first_mailer=normalized.first_mailer,
                name=name,
                **self.settings.mailer_flags(),
            )

        if name in self._routes:
            logger.debug("Replacing existing route %s", name)
        self._routes[name] = entry
        logger.debug("Registered route %s with %s step(s)", name, len(mailers))
        return entry

    def send(self, name: str, message: Any, *options: Any) -> Any:
        return self.get(name).send(message, *options)

    def get(self, name: str) -> Mailer:
        try:
            return self._routes[name]
        except KeyError:
            raise RouteNotFoundError(name) from None

    def compose(self, *definitions: Any) -> Composite:
        return compose(*definitions, router=self)

    def names(self) -> List[str]:
        return list(self._routes)

    def reset(self) -> None:
        logger.debug("Clearing %s route(s)", len(self._routes))
        self._routes.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._routes

    def __len__(self) -> int:
        return len(self._routes)


# --------------------------------
# Process-wide default router

_default_router: Optional[Router] = None


def get_default_router() -> Router:
    """Return the process default router, creating it from the environment once."""
    global _default_router
    if _default_router is None:
        _default_router = Router(Settings.from_env())
    return _default_router


def reset_default_router(settings: Optional[Settings] = None) -> Router:
    """Replace the process default router with an empty one and return it."""
    global _default_router
    _default_router = Router(settings if settings is not None else Settings.from_env())
    return _default_router


def route(name: str, *definitions: Any) -> Mailer:
    return get_default_router().route(name, *definitions)


def send(name: str, message: Any, *options: Any) -> Any:
    return get_default_router().send(name, message, *options)
