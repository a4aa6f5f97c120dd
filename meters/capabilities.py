"""Capability interfaces and the battery decorator that composes them.

A meter always reports instantaneous power. Battery meters additionally
report state of charge and, depending on configuration, capacity and
operating limits. Each optional capability is a separate mixin so the
composed object's type answers ``isinstance`` checks truthfully: a missing
capability is absent from the type, never reported as zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Optional, Protocol, Tuple, Type, runtime_checkable

PowerFunc = Callable[[], float]
SocFunc = Callable[[], float]
CapacityFunc = Callable[[], float]
LimitsFunc = Callable[[], Tuple[float, float]]


@runtime_checkable
class Meter(Protocol):
    def current_power(self) -> float: ...


@runtime_checkable
class Battery(Protocol):
    def soc(self) -> float: ...


@runtime_checkable
class BatteryCapacity(Protocol):
    def capacity(self) -> float: ...


@runtime_checkable
class BatterySocLimiter(Protocol):
    def get_soc_limits(self) -> Tuple[float, float]: ...


@runtime_checkable
class BatteryPowerLimiter(Protocol):
    def get_power_limits(self) -> Tuple[float, float]: ...


@dataclass(frozen=True)
class BatteryCapacitySettings:
    """Usable battery capacity in kWh."""

    capacity: Optional[float] = None

    def decorator(self) -> Optional[CapacityFunc]:
        if self.capacity is None:
            return None
        capacity = self.capacity
        return lambda: capacity


@dataclass(frozen=True)
class BatterySocLimitSettings:
    min_soc: Optional[float] = None
    max_soc: Optional[float] = None

    def decorator(self) -> Optional[LimitsFunc]:
        if self.min_soc is None and self.max_soc is None:
            return None
        limits = (
            self.min_soc if self.min_soc is not None else 0.0,
            self.max_soc if self.max_soc is not None else 100.0,
        )
        return lambda: limits


@dataclass(frozen=True)
class BatteryPowerLimitSettings:
    max_charge_power: Optional[float] = None
    max_discharge_power: Optional[float] = None

    def decorator(self) -> Optional[LimitsFunc]:
        if self.max_charge_power is None and self.max_discharge_power is None:
            return None
        limits = (
            self.max_charge_power if self.max_charge_power is not None else 0.0,
            self.max_discharge_power if self.max_discharge_power is not None else 0.0,
        )
        return lambda: limits


class _BatteryMeter:
    """Base of every composed battery meter: power plus state of charge."""

    def __init__(
        self,
        meter: Meter,
        soc: SocFunc,
        capacity: Optional[CapacityFunc],
        soc_limits: Optional[LimitsFunc],
        power_limits: Optional[LimitsFunc],
    ) -> None:
        self._meter = meter
        self._soc = soc
        self._capacity = capacity
        self._soc_limits = soc_limits
        self._power_limits = power_limits

    def current_power(self) -> float:
        return self._meter.current_power()

    def soc(self) -> float:
        return self._soc()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._meter!r})"


class _CapacityMixin:
    def capacity(self) -> float:
        return self._capacity()  # type: ignore[attr-defined, misc]


class _SocLimitsMixin:
    def get_soc_limits(self) -> Tuple[float, float]:
        return self._soc_limits()  # type: ignore[attr-defined, misc]


class _PowerLimitsMixin:
    def get_power_limits(self) -> Tuple[float, float]:
        return self._power_limits()  # type: ignore[attr-defined, misc]


@lru_cache(maxsize=None)
def _composed_type(with_capacity: bool, with_soc_limits: bool, with_power_limits: bool) -> Type[_BatteryMeter]:
    mixins: list[type] = []
    name = "BatteryMeter"
    if with_capacity:
        mixins.append(_CapacityMixin)
        name += "WithCapacity"
    if with_soc_limits:
        mixins.append(_SocLimitsMixin)
        name += "WithSocLimits"
    if with_power_limits:
        mixins.append(_PowerLimitsMixin)
        name += "WithPowerLimits"
    return type(name, (*mixins, _BatteryMeter), {"__module__": __name__})


def decorate_meter_battery(
    meter: Meter,
    soc: SocFunc,
    capacity: Optional[CapacityFunc] = None,
    soc_limits: Optional[LimitsFunc] = None,
    power_limits: Optional[LimitsFunc] = None,
) -> Meter:
    """Wrap ``meter`` so it also satisfies :class:`Battery`.

    Each of ``capacity``, ``soc_limits`` and ``power_limits`` adds the
    matching capability when given and leaves it out entirely when ``None``.
    """
    cls = _composed_type(capacity is not None, soc_limits is not None, power_limits is not None)
    return cls(meter, soc, capacity, soc_limits, power_limits)
