"""Domain models shared across gateways, meters and services."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class UsageKind(str, Enum):
    """Physical quantity a meter instance represents."""

    pv = "pv"
    battery = "battery"
    other = "other"


@dataclass(frozen=True, slots=True)
class TelemetrySnapshot:
    """A single point-in-time reading from a battery gateway."""

    solar_input_power: float
    pack_input_power: float
    output_pack_power: float
    electric_level: float


@dataclass(frozen=True, slots=True)
class EntityState:
    """One entry of a hub's entity-state catalog."""

    entity_id: str
    state: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    @property
    def domain(self) -> str:
        return self.entity_id.split(".", 1)[0]


@dataclass(frozen=True, slots=True)
class ServiceDomain:
    """Services a hub declares for one domain."""

    domain: str
    services: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Instance:
    """A hub base URL the service has connected to."""

    uri: str
    token: Optional[str] = None
