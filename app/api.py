"""HTTP route definitions for the discovery surface."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse

from app.schemas import ErrorResponse, HealthResponse
from datastore.instances import InstanceRegistry, build_default_registry
from errors import MeterHubError
from gateways.homeassistant import HomeAssistantConnection
from services.discovery import DiscoveryAggregator, HubClient, normalize_uri, parse_domains
from settings import get_settings

logger = logging.getLogger(__name__)

HubFactory = Callable[[str, Optional[str]], HubClient]

router = APIRouter()

_ERROR_RESPONSES = {status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}}


def get_registry() -> InstanceRegistry:
    return build_default_registry()


def get_aggregator() -> DiscoveryAggregator:
    return DiscoveryAggregator()


def _connect(uri: str, token: Optional[str]) -> HubClient:
    return HomeAssistantConnection(uri, token=token, timeout=get_settings().hub_request_timeout)


def get_hub_factory() -> HubFactory:
    return _connect


def _error_response(exc: MeterHubError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error=str(exc)).model_dump(),
    )


def _discover(
    uri: Optional[str],
    domain: Optional[str],
    response: Response,
    registry: InstanceRegistry,
    hub_factory: HubFactory,
    lookup: Callable[[HubClient, List[str]], List[str]],
) -> List[str] | JSONResponse:
    try:
        base_uri = normalize_uri(uri)
        hub = hub_factory(base_uri, registry.token_for(base_uri))
        try:
            result = lookup(hub, parse_domains(domain))
        finally:
            hub.close()
    except MeterHubError as exc:
        logger.info("Discovery request failed", extra={"uri": uri, "domain": domain, "reason": str(exc)})
        return _error_response(exc)

    registry.remember(base_uri)
    response.headers["Cache-Control"] = f"max-age={get_settings().cache_max_age}"
    return result


@router.get(
    "/entities",
    response_model=List[str],
    responses=_ERROR_RESPONSES,
    summary="List hub entity ids, optionally filtered by domain.",
)
def get_entities(
    response: Response,
    uri: Optional[str] = Query(None, description="Hub base URL."),
    domain: Optional[str] = Query(None, description="Comma-separated domain filter."),
    registry: InstanceRegistry = Depends(get_registry),
    aggregator: DiscoveryAggregator = Depends(get_aggregator),
    hub_factory: HubFactory = Depends(get_hub_factory),
) -> List[str] | JSONResponse:
    return _discover(uri, domain, response, registry, hub_factory, aggregator.get_entities)


@router.get(
    "/services",
    response_model=List[str],
    responses=_ERROR_RESPONSES,
    summary="List callable hub services, sorted and deduplicated.",
)
def get_services(
    response: Response,
    uri: Optional[str] = Query(None, description="Hub base URL."),
    domain: Optional[str] = Query(None, description="Comma-separated domain filter."),
    registry: InstanceRegistry = Depends(get_registry),
    aggregator: DiscoveryAggregator = Depends(get_aggregator),
    hub_factory: HubFactory = Depends(get_hub_factory),
) -> List[str] | JSONResponse:
    return _discover(uri, domain, response, registry, hub_factory, aggregator.get_services)


@router.get(
    "/instances",
    response_model=List[str],
    summary="List hub base URLs previously connected to.",
)
def get_instances(registry: InstanceRegistry = Depends(get_registry)) -> List[str]:
    return registry.uris()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> HealthResponse:
    return HealthResponse()
