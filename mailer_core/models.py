from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Union

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .mailer import Mailer

Options = Dict[str, Any]


@dataclass(frozen=True)
class StaticOptions:
    values: Mapping[str, Any]


@dataclass(frozen=True)
class DerivedOptions:
    """Options computed at send time from the enclosing invocation's options."""

    fn: Callable[[Mapping[str, Any]], Mapping[str, Any]]

    def __call__(self, parent: Mapping[str, Any]) -> Mapping[str, Any]:
        return self.fn(parent)


OptionSource = Union[StaticOptions, DerivedOptions]


@dataclass
class MailerContext:
    options: Options
    mailer: "Mailer"


@dataclass(frozen=True)
class ActionSpec:
    """An action paired with its options, accepted by ``compose``."""

    action: Callable[[Any, "MailerContext"], Any]
    options: Any = None
    name: Optional[str] = None
