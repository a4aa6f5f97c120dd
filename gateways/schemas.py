"""Pydantic models for payloads returned by remote gateways."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class EntityStatePayload(BaseModel):
    """Element of the hub's ``/api/states`` response."""

    model_config = ConfigDict(extra="ignore")

    entity_id: str
    state: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)


class ServiceDomainPayload(BaseModel):
    """Element of the hub's ``/api/services`` response."""

    model_config = ConfigDict(extra="ignore")

    domain: str
    services: Dict[str, Any] = Field(default_factory=dict)


class ZendureProperties(BaseModel):
    """Device properties reported by the Zendure cloud."""

    model_config = ConfigDict(extra="ignore")

    solar_input_power: float = Field(0, alias="solarInputPower")
    pack_input_power: float = Field(0, alias="packInputPower")
    output_pack_power: float = Field(0, alias="outputPackPower")
    electric_level: float = Field(0, alias="electricLevel")


class ZendureDevicePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    properties: ZendureProperties
