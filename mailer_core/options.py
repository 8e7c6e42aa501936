from __future__ import annotations

from typing import Any, Mapping, Optional

from .errors import InvalidDefinitionError
from .models import DerivedOptions, OptionSource, Options, StaticOptions


def is_cancelled(result: Any) -> bool:
    """Return True when an action result means "stop sending".

    Only ``None`` and ``False`` cancel. An empty message such as ``{}`` is a
    legitimate result and keeps the chain running.
    """
    return result is None or result is False


def is_option_mapping(value: Any) -> bool:
    return isinstance(value, (Mapping, StaticOptions))


def as_option_source(value: Any) -> OptionSource:
    if isinstance(value, (StaticOptions, DerivedOptions)):
        return value
    if isinstance(value, Mapping):
        return StaticOptions(value)
    if callable(value):
        return DerivedOptions(value)
    raise InvalidDefinitionError(
        f"Options must be a mapping or a function of the parent options, got {type(value).__name__}"
    )


def merge_options(*sources: Any, deep: bool = False) -> Options:
    """Overlay option sources left to right into a fresh dict.

    Later sources win on key collisions. ``None``, callables and
    ``DerivedOptions`` are not mappings and are skipped. With ``deep=True``
    nested mappings present on both sides are merged recursively instead of
    replaced.
    """
    merged: Options = {}
    for source in sources:
        values = _unwrap(source)
        if values is None:
            continue
        if deep:
            _deep_update(merged, values)
        else:
            merged.update(values)
    return merged


def resolve_source(source: OptionSource, parent: Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(source, DerivedOptions):
        derived = source(parent)
        if not isinstance(derived, Mapping):
            raise InvalidDefinitionError(
                f"Derived options must return a mapping, got {type(derived).__name__}"
            )
        return derived
    return source.values


def _unwrap(source: Any) -> Optional[Mapping[str, Any]]:
    if source is None or isinstance(source, DerivedOptions) or callable(source):
        return None
    if isinstance(source, StaticOptions):
        return source.values
    if isinstance(source, Mapping):
        return source
    raise InvalidDefinitionError(f"Cannot merge options of type {type(source).__name__}")


def _deep_update(target: Options, values: Mapping[str, Any]) -> None:
    for key, value in values.items():
        current = target.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            nested = dict(current)
            _deep_update(nested, value)
            target[key] = nested
        elif isinstance(value, Mapping):
            nested = {}
            _deep_update(nested, value)
            target[key] = nested
        else:
            target[key] = value
