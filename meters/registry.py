from __future__ import annotations

from typing import Any, Callable, Dict, Mapping

from errors import ConfigurationError
from meters.capabilities import Meter

MeterFactory = Callable[[Mapping[str, Any]], Meter]

_factories: Dict[str, MeterFactory] = {}


def register(type_name: str) -> Callable[[MeterFactory], MeterFactory]:
    """Register a factory building a meter from generic key/value config."""

    def wrapper(factory: MeterFactory) -> MeterFactory:
        key = type_name.lower()
        if key in _factories:
            raise ValueError(f"meter type {type_name!r} already registered")
        _factories[key] = factory
        return factory

    return wrapper


def types() -> list[str]:
    return sorted(_factories)


def create(type_name: str, other: Mapping[str, Any]) -> Meter:
    factory = _factories.get(type_name.lower())
    if factory is None:
        raise ConfigurationError(f"invalid meter type: {type_name}")
    return factory(other)
