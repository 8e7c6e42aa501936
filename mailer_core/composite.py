from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional

from .definitions import normalize_definitions
from .errors import InvalidDefinitionError
from .mailer import Mailer
from .models import MailerContext
from .options import is_cancelled, resolve_source

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .router import Router

logger = logging.getLogger(__name__)


def _run_members(message: Any, context: MailerContext) -> Any:
    return context.mailer.send_members(message, context.options)


class Composite(Mailer):
    """An ordered pipeline of mailers run one after another.

    Each member receives the message returned by the previous one. A member
    returning ``None`` or ``False`` stops the pipeline and that value is
    returned as is.

    Members keep their own options. Members whose options are a function get
    them computed from the pipeline's invocation options instead. Otherwise only
    ``first_mailer`` (set by routers for the first plain action of a route)
    also receives the invocation options directly.
    """

    def __init__(
        self,
        mailers: Iterable[Mailer],
        *options: Any,
        first_mailer: Optional[Mailer] = None,
        name: Optional[str] = None,
        share_options: bool = False,
        deep_merge: bool = False,
    ):
        super().__init__(
            _run_members,
            *options,
            name=name,
            share_options=share_options,
            deep_merge=deep_merge,
        )
        self.mailers = tuple(mailers)
        self.first_mailer = first_mailer
        self._first_index: Optional[int] = None
        if first_mailer is not None:
            for index, mailer in enumerate(self.mailers):
                if mailer is first_mailer:
                    self._first_index = index
                    break
            else:
                raise InvalidDefinitionError("first_mailer must be one of the composed mailers.")

    def send_members(self, message: Any, options: Mapping[str, Any]) -> Any:
        for index, mailer in enumerate(self.mailers):
            extra = []
            if mailer.has_derived_options:
                extra.append(resolve_source(mailer.option_source, options))
            elif index == self._first_index:
                extra.append(options)
            result = mailer.send(message, *extra)
            if is_cancelled(result):
                logger.debug(
                    "Pipeline %s cancelled at step %s/%s (%s)",
                    self.name or "<anonymous>",
                    index + 1,
                    len(self.mailers),
                    mailer.name or "<anonymous>",
                )
                return result
            message = result
        return message

    def __repr__(self) -> str:
        return f"Composite(name={self.name!r}, mailers={list(self.mailers)!r})"


def compose(*definitions: Any, router: Optional["Router"] = None) -> Composite:
    """Combine mailers, actions, route names and route mappings into one pipeline.

    Nested lists are flattened. Route names resolve through ``router`` when
    the pipeline runs, or through the default router when none is given.
    """
    if router is None:
        from .router import get_default_router

        settings = get_default_router().settings
    else:
        settings = router.settings
    normalized = normalize_definitions(definitions, router=router, settings=settings)
    if not normalized.mailers:
        raise InvalidDefinitionError("compose requires at least one mailer definition.")
    return Composite(normalized.mailers, **settings.mailer_flags())
