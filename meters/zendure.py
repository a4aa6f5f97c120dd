from __future__ import annotations

import logging
import re
from datetime import timedelta
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from errors import ConfigurationError, InvalidUsageError
from gateways.zendure import ZendureConnection, build_connection
from meters.capabilities import (
    BatteryCapacitySettings,
    BatteryPowerLimitSettings,
    BatterySocLimitSettings,
    Meter,
    decorate_meter_battery,
)
from meters.registry import register
from models.records import UsageKind

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[str, str, str, float], ZendureConnection]

_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


class ZendureConfig(BaseModel):
    """Generic key/value configuration of a Zendure meter."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    usage: str
    account: str = ""
    serial: str = ""
    region: str = "EU"
    timeout: timedelta = timedelta(seconds=30)
    capacity: Optional[float] = None
    min_soc: Optional[float] = Field(None, alias="minsoc", ge=0, le=100)
    max_soc: Optional[float] = Field(None, alias="maxsoc", ge=0, le=100)
    max_charge_power: Optional[float] = Field(None, alias="maxchargepower", ge=0)
    max_discharge_power: Optional[float] = Field(None, alias="maxdischargepower", ge=0)

    @field_validator("region")
    @classmethod
    def _upper_region(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("timeout", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> Any:
        if isinstance(value, str):
            match = _DURATION_PATTERN.match(value)
            if match is None:
                raise ValueError(f"invalid duration: {value}")
            amount, unit = match.groups()
            return timedelta(seconds=float(amount) * _DURATION_UNITS[unit or "s"])
        return value

    @classmethod
    def decode(cls, other: Mapping[str, Any]) -> "ZendureConfig":
        normalized = {str(key).replace("_", "").lower(): value for key, value in other.items()}
        try:
            return cls.model_validate(normalized)
        except ValidationError as exc:
            raise ConfigurationError(f"invalid zendure config: {exc}") from exc

    def battery_capacity(self) -> BatteryCapacitySettings:
        return BatteryCapacitySettings(capacity=self.capacity)

    def battery_soc_limits(self) -> BatterySocLimitSettings:
        return BatterySocLimitSettings(min_soc=self.min_soc, max_soc=self.max_soc)

    def battery_power_limits(self) -> BatteryPowerLimitSettings:
        return BatteryPowerLimitSettings(
            max_charge_power=self.max_charge_power,
            max_discharge_power=self.max_discharge_power,
        )


class ZendureMeter:
    """Derives one usage-specific power reading from Zendure telemetry."""

    def __init__(self, usage: str, conn: ZendureConnection) -> None:
        self.usage = usage
        self._conn = conn

    def current_power(self) -> float:
        res = self._conn.data()

        if self.usage == UsageKind.pv:
            return float(res.solar_input_power)
        if self.usage == UsageKind.battery:
            return float(res.pack_input_power) - float(res.output_pack_power)
        raise InvalidUsageError(self.usage)

    def _soc(self) -> float:
        return float(self._conn.data().electric_level)

    def __repr__(self) -> str:
        return f"ZendureMeter(usage={self.usage!r}, serial={self._conn.serial!r})"


@register("zendure")
def new_zendure_from_config(
    other: Mapping[str, Any],
    connection_factory: Optional[ConnectionFactory] = None,
) -> Meter:
    """Build a Zendure meter, decorated as a battery when usage is ``battery``."""
    cc = ZendureConfig.decode(other)

    factory = connection_factory or build_connection
    conn = factory(cc.region, cc.account, cc.serial, cc.timeout.total_seconds())
    m = ZendureMeter(usage=cc.usage, conn=conn)
    logger.debug(
        "Created zendure meter",
        extra={"usage": cc.usage, "serial": cc.serial, "region": cc.region},
    )

    if cc.usage == UsageKind.battery:
        return decorate_meter_battery(
            m,
            m._soc,
            capacity=cc.battery_capacity().decorator(),
            soc_limits=cc.battery_soc_limits().decorator(),
            power_limits=cc.battery_power_limits().decorator(),
        )

    return m
