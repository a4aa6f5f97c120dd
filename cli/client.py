from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the discovery service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def get_entities(self, uri: str, domain: Optional[str] = None) -> List[str]:
        return self._get_list("/entities", self._discovery_params(uri, domain))

    def get_services(self, uri: str, domain: Optional[str] = None) -> List[str]:
        return self._get_list("/services", self._discovery_params(uri, domain))

    def get_instances(self) -> List[str]:
        return self._get_list("/instances", {})

    @staticmethod
    def _discovery_params(uri: str, domain: Optional[str]) -> Dict[str, str]:
        params = {"uri": uri}
        if domain:
            params["domain"] = domain
        return params

    def _get_list(self, path: str, params: Dict[str, str]) -> List[str]:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.HTTPError as exc:
            typer.secho(f"Request to {self._config.base_url} failed: {exc}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)
        payload: Any = response.json()
        if not isinstance(payload, list):
            raise typer.BadParameter(f"Unexpected response payload from {path}.")
        return [str(item) for item in payload]

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("error") or data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
