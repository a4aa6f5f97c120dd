"""Point-in-time telemetry from the Zendure battery cloud."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

import httpx
from pydantic import ValidationError

from errors import ConfigurationError, GatewayConnectionError
from gateways.schemas import ZendureDevicePayload
from models.records import TelemetrySnapshot
from settings import get_settings

logger = logging.getLogger(__name__)

REGION_BASE_URLS = {
    "EU": "https://app.zendure.tech/eu",
    "GLOBAL": "https://app.zendure.tech",
}


class ZendureConnection:
    """Fetches device properties for a single serial number.

    Every call to :meth:`data` is a fresh round-trip; nothing is cached and
    nothing is retried. The timeout bounds each request.
    """

    def __init__(
        self,
        region: str,
        account: str,
        serial: str,
        timeout: float = 30.0,
        base_url: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        if not account:
            raise ConfigurationError("missing account")
        if not serial:
            raise ConfigurationError("missing serial")
        if region not in REGION_BASE_URLS:
            raise ConfigurationError(f"invalid region: {region}")
        base_url = base_url or REGION_BASE_URLS[region]

        self.region = region
        self.account = account
        self.serial = serial
        self._client = client or httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def data(self) -> TelemetrySnapshot:
        try:
            response = self._client.get(
                f"/developer/api/device/{self.serial}",
                params={"account": self.account},
            )
            response.raise_for_status()
            payload = ZendureDevicePayload.model_validate(response.json())
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning(
                "Zendure cloud rejected request",
                extra={"serial": self.serial, "region": self.region, "status": status},
            )
            raise GatewayConnectionError(f"zendure: unexpected status {status}") from exc
        except httpx.HTTPError as exc:
            raise GatewayConnectionError(f"zendure: {str(exc) or type(exc).__name__}") from exc
        except (ValueError, ValidationError) as exc:
            raise GatewayConnectionError("zendure: invalid device payload") from exc

        props = payload.properties
        return TelemetrySnapshot(
            solar_input_power=props.solar_input_power,
            pack_input_power=props.pack_input_power,
            output_pack_power=props.output_pack_power,
            electric_level=props.electric_level,
        )


@lru_cache
def build_connection(region: str, account: str, serial: str, timeout: float) -> ZendureConnection:
    """Share one connection per device identity across meter instances."""
    settings = get_settings()
    return ZendureConnection(
        region=region,
        account=account,
        serial=serial,
        timeout=timeout,
        base_url=settings.zendure_api_url,
    )
