from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Mapping, Optional, Sequence

from .errors import InvalidDefinitionError
from .models import DerivedOptions, MailerContext, OptionSource, StaticOptions
from .options import as_option_source, is_option_mapping, merge_options

logger = logging.getLogger(__name__)

Action = Callable[[Any, MailerContext], Any]


class Mailer:
    """A single named action plus the options it runs with.

    The action is called as ``action(message, context)`` and should return the
    (usually mutated) message, or ``None``/``False`` to cancel sending::

        def add_domain(email, context):
            email["domain"] = context.options["domain"]
            return email

        mailer = Mailer(add_domain, {"domain": "example.com"})
        mailer.send({"to": "someone"})

    Options may also be a function of the options of an enclosing pipeline;
    such mailers get their options computed by the pipeline at send time.
    """

    def __init__(
        self,
        action: Action,
        *options: Any,
        name: Optional[str] = None,
        share_options: bool = False,
        deep_merge: bool = False,
    ):
        if not callable(action):
            raise InvalidDefinitionError(f"Mailer action must be callable, got {type(action).__name__}")
        self._action = action
        self.name = name
        self.share_options = share_options
        self.deep_merge = deep_merge
        self._source = self._build_source([o for o in options if o is not None])

    def _build_source(self, options: Sequence[Any]) -> OptionSource:
        if any(callable(o) for o in options):
            if len(options) > 1:
                raise InvalidDefinitionError("Derived options cannot be combined with other option sources.")
            return as_option_source(options[0])
        for source in options:
            if not is_option_mapping(source):
                raise InvalidDefinitionError(
                    f"Mailer options must be mappings, got {type(source).__name__}"
                )
        if self.share_options and len(options) == 1:
            return as_option_source(options[0])
        return StaticOptions(merge_options(*options, deep=self.deep_merge))

    @property
    def action(self) -> Action:
        return self._action

    @property
    def option_source(self) -> OptionSource:
        return self._source

    @property
    def options(self) -> Any:
        """The stored options mapping, or the function deriving them."""
        if isinstance(self._source, DerivedOptions):
            return self._source.fn
        return self._source.values

    @property
    def has_derived_options(self) -> bool:
        return isinstance(self._source, DerivedOptions)

    def send(self, message: Any, *options: Any) -> Any:
        """Run the action with this mailer's options overlaid by ``options``.

        Function sources are skipped; they are not option mappings. The
        action's return value is passed back untouched.
        """
        own = None if isinstance(self._source, DerivedOptions) else self._source.values
        merged = merge_options({}, own, *options, deep=self.deep_merge)
        logger.debug("Sending through mailer %s with option keys %s", self.name or "<anonymous>", list(merged))
        return self._action(message, MailerContext(options=merged, mailer=self))

    def extend(self, *options: Any) -> "Mailer":
        """Return a copy whose options are the current ones overlaid by ``options``."""
        for source in options:
            if not is_option_mapping(source):
                raise InvalidDefinitionError(
                    f"Mailer.extend accepts mappings only, got {type(source).__name__}"
                )
        if isinstance(self._source, DerivedOptions):
            parent_fn = self._source.fn
            deep = self.deep_merge

            def extended(parent: Mapping[str, Any]) -> Mapping[str, Any]:
                return merge_options(parent_fn(parent), *options, deep=deep)

            return self._clone(source=DerivedOptions(extended))
        values = merge_options(self._source.values, *options, deep=self.deep_merge)
        return self._clone(source=StaticOptions(values))

    def renamed(self, name: Optional[str]) -> "Mailer":
        return self._clone(name=name)

    def _clone(self, *, source: Optional[OptionSource] = None, name: Optional[str] = None) -> "Mailer":
        clone = copy.copy(self)
        if source is not None:
            clone._source = source
        if name is not None:
            clone.name = name
        return clone

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, options={self.options!r})"
