from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Deque, Iterable, Iterator, List, Mapping, Optional

from .config import Settings
from .errors import InvalidDefinitionError
from .mailer import Mailer
from .models import DerivedOptions, MailerContext, StaticOptions

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .router import Router

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteReference:
    """Action that forwards to a route by name, looked up when it runs.

    Routes may therefore refer to routes registered later. Without an explicit
    router the process default router is used.
    """

    name: str
    router: Optional["Router"] = None

    def __call__(self, message: Any, context: MailerContext) -> Any:
        return self.resolve_router().send(self.name, message, context.options)

    def resolve_router(self) -> "Router":
        if self.router is not None:
            return self.router
        from .router import get_default_router

        return get_default_router()


@dataclass
class NormalizedDefinitions:
    mailers: List[Mailer] = field(default_factory=list)
    first_mailer: Optional[Mailer] = None


def normalize_definitions(
    definitions: Iterable[Any],
    *,
    router: Optional["Router"] = None,
    settings: Optional[Settings] = None,
    allow_action_pairs: bool = True,
) -> NormalizedDefinitions:
    """Turn heterogeneous mailer definitions into Mailer instances.

    Accepted shapes:
    - a Mailer, used as is
    - a callable action, optionally followed by its options mapping
    - an action pair: an object with ``action`` (and optionally ``options``
      and ``name``) attributes, such as ``ActionSpec``; only when
      ``allow_action_pairs`` is set
    - a route name, forwarding to that route at send time
    - a ``{route_name: options}`` mapping, one forwarding mailer per entry;
      options may be a function of the pipeline's options
    - lists or tuples of any of the above, flattened in order
    """
    flags = (settings or Settings()).mailer_flags()
    pending: Deque[Any] = deque(_flatten(definitions))
    result = NormalizedDefinitions()

    while pending:
        definition = pending.popleft()
        if isinstance(definition, Mailer):
            result.mailers.append(definition)
        elif isinstance(definition, str):
            result.mailers.append(Mailer(RouteReference(definition, router), name=definition, **flags))
        elif isinstance(definition, (DerivedOptions, StaticOptions)):
            raise InvalidDefinitionError("Option sources must follow the action they configure.")
        elif callable(definition):
            options = []
            if pending and _is_options(pending[0]):
                options.append(pending.popleft())
            mailer = Mailer(definition, *options, **flags)
            result.mailers.append(mailer)
            if result.first_mailer is None:
                result.first_mailer = mailer
        elif allow_action_pairs and _is_action_pair(definition):
            result.mailers.append(_from_action_pair(definition, flags))
        elif isinstance(definition, Mapping):
            for name, options in definition.items():
                if not isinstance(name, str):
                    raise InvalidDefinitionError(f"Route names must be strings, got {type(name).__name__}")
                result.mailers.append(Mailer(RouteReference(name, router), options, name=name, **flags))
        else:
            raise InvalidDefinitionError(f"Unsupported mailer definition: {definition!r}")

    logger.debug("Normalized %s mailer definition(s)", len(result.mailers))
    return result


def _flatten(definitions: Iterable[Any]) -> Iterator[Any]:
    for definition in definitions:
        if isinstance(definition, (list, tuple)):
            yield from _flatten(definition)
        else:
            yield definition


def _is_options(value: Any) -> bool:
    if isinstance(value, (StaticOptions, DerivedOptions)):
        return True
    return isinstance(value, Mapping)


def _is_action_pair(value: Any) -> bool:
    if isinstance(value, (Mailer, str, Mapping)) or callable(value):
        return False
    return callable(getattr(value, "action", None))


def _from_action_pair(value: Any, flags: Mapping[str, bool]) -> Mailer:
    options = getattr(value, "options", None)
    return Mailer(value.action, options, name=getattr(value, "name", None), **flags)
