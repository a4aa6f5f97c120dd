from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from errors import GatewayConnectionError
from gateways.schemas import EntityStatePayload, ServiceDomainPayload
from models.records import EntityState, ServiceDomain

logger = logging.getLogger(__name__)

_STATES_ADAPTER = TypeAdapter(List[EntityStatePayload])
_SERVICES_ADAPTER = TypeAdapter(List[ServiceDomainPayload])


class HomeAssistantConnection:
    """Blocking REST client for a home-automation hub."""

    def __init__(
        self,
        uri: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.uri = uri
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = client or httpx.Client(timeout=timeout)
        self._headers = headers

    def close(self) -> None:
        self._client.close()

    def get_states(self) -> list[EntityState]:
        payload = self._get_json("/api/states")
        try:
            items = _STATES_ADAPTER.validate_python(payload)
        except ValidationError as exc:
            raise GatewayConnectionError(f"unexpected states response from {self.uri}") from exc
        return [
            EntityState(entity_id=item.entity_id, state=item.state, attributes=item.attributes)
            for item in items
        ]

    def get_services(self) -> list[ServiceDomain]:
        payload = self._get_json("/api/services")
        try:
            items = _SERVICES_ADAPTER.validate_python(payload)
        except ValidationError as exc:
            raise GatewayConnectionError(f"unexpected services response from {self.uri}") from exc
        return [ServiceDomain(domain=item.domain, services=item.services) for item in items]

    def _get_json(self, path: str) -> Any:
        url = f"{self.uri}{path}"
        try:
            response = self._client.get(url, headers=self._headers)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.debug("Hub request rejected", extra={"uri": url, "status": status})
            raise GatewayConnectionError(f"{url}: unexpected status {status}") from exc
        except httpx.HTTPError as exc:
            logger.debug("Hub request failed", extra={"uri": url, "reason": str(exc)})
            raise GatewayConnectionError(f"{url}: {str(exc) or type(exc).__name__}") from exc
        except ValueError as exc:
            raise GatewayConnectionError(f"{url}: invalid JSON response") from exc
