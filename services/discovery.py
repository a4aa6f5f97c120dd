"""Entity and service discovery against a home-automation hub."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Protocol, Sequence

import httpx

from errors import InvalidRequestError, MeterHubError
from models.records import EntityState, ServiceDomain

logger = logging.getLogger(__name__)


class HubClient(Protocol):
    uri: str

    def get_states(self) -> List[EntityState]: ...

    def get_services(self) -> List[ServiceDomain]: ...

    def close(self) -> None: ...


def normalize_uri(raw: Optional[str]) -> str:
    """Strip one trailing slash and default the scheme to ``http``."""
    uri = (raw or "").strip()
    if uri.endswith("/"):
        uri = uri[:-1]
    if not uri:
        raise InvalidRequestError("missing uri")
    if "://" not in uri:
        uri = f"http://{uri}"
    try:
        parsed = httpx.URL(uri)
    except httpx.InvalidURL as exc:
        raise InvalidRequestError(f"invalid uri: {raw}") from exc
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise InvalidRequestError(f"invalid uri: {raw}")
    return uri


def parse_domains(raw: Optional[str]) -> list[str]:
    """Split a comma-separated domain filter; only an empty filter matches everything."""
    if not raw:
        return []
    return [domain.strip() for domain in raw.split(",")]


def matches_domains(entity_id: str, domains: Sequence[str]) -> bool:
    """Report whether ``entity_id`` belongs to one of ``domains``.

    An empty ``domains`` matches every entity. The domain must match
    exactly: ``climate.x`` matches ``climate`` but not ``clim``.
    """
    if not domains:
        return True
    return any(entity_id.startswith(f"{domain}.") for domain in domains)


class DiscoveryAggregator:
    """Pure discovery component that can be unit tested with a fake hub."""

    def get_entities(self, hub: HubClient, domains: Sequence[str] = ()) -> list[str]:
        states = hub.get_states()
        return self._filter_entities(states, domains)

    def get_services(self, hub: HubClient, domains: Sequence[str] = ()) -> list[str]:
        seen: set[str] = set()

        # declared services, e.g. notify.mobile_app_pixel
        for group in hub.get_services():
            if not domains or group.domain in domains:
                seen.update(f"{group.domain}.{service}" for service in group.services)

        # entity-based notifiers; the unfiltered entity universe is not scanned
        if domains:
            seen.update(self._enrich_from_states(hub, domains))

        return sorted(seen)

    def _enrich_from_states(self, hub: HubClient, domains: Sequence[str]) -> list[str]:
        try:
            states = hub.get_states()
        except MeterHubError as exc:
            logger.warning(
                "Skipping entity enrichment for service discovery",
                extra={"uri": hub.uri, "domain": list(domains), "reason": str(exc)},
            )
            return []
        return self._filter_entities(states, domains)

    @staticmethod
    def _filter_entities(states: Iterable[EntityState], domains: Sequence[str]) -> list[str]:
        return [state.entity_id for state in states if matches_domains(state.entity_id, domains)]
