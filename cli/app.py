from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_identifiers, render_meter
from errors import MeterHubError
from meters import registry


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for hub discovery and meter readings.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Discovery API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for the discovery API.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("entities")
def entities_command(
    ctx: typer.Context,
    uri: str = typer.Argument(..., help="Hub base URL."),
    domain: Optional[str] = typer.Option(None, "--domain", "-d", help="Comma-separated domain filter."),
) -> None:
    """List entity ids known to a hub."""
    state = _get_state(ctx)
    render_identifiers("Entities", state.client.get_entities(uri, domain))


@app.command("services")
def services_command(
    ctx: typer.Context,
    uri: str = typer.Argument(..., help="Hub base URL."),
    domain: Optional[str] = typer.Option(None, "--domain", "-d", help="Comma-separated domain filter."),
) -> None:
    """List callable services of a hub."""
    state = _get_state(ctx)
    render_identifiers("Services", state.client.get_services(uri, domain))


@app.command("instances")
def instances_command(ctx: typer.Context) -> None:
    """List hubs the discovery service has connected to."""
    state = _get_state(ctx)
    render_identifiers("Instances", state.client.get_instances())


@app.command("meter")
def meter_command(
    usage: str = typer.Option(..., "--usage", help="pv, battery or other."),
    account: str = typer.Option(..., "--account", help="Zendure account e-mail."),
    serial: str = typer.Option(..., "--serial", help="Device serial number."),
    region: str = typer.Option("EU", "--region", help="EU or GLOBAL."),
    meter_timeout: str = typer.Option("30s", "--meter-timeout", help="Gateway fetch timeout."),
    capacity: Optional[float] = typer.Option(None, "--capacity", help="Battery capacity in kWh."),
    min_soc: Optional[float] = typer.Option(None, "--min-soc"),
    max_soc: Optional[float] = typer.Option(None, "--max-soc"),
    max_charge_power: Optional[float] = typer.Option(None, "--max-charge-power"),
    max_discharge_power: Optional[float] = typer.Option(None, "--max-discharge-power"),
) -> None:
    """Read a Zendure meter directly and print its capabilities."""
    other: Dict[str, Any] = {
        "usage": usage,
        "account": account,
        "serial": serial,
        "region": region,
        "timeout": meter_timeout,
        "capacity": capacity,
        "minSoc": min_soc,
        "maxSoc": max_soc,
        "maxChargePower": max_charge_power,
        "maxDischargePower": max_discharge_power,
    }
    try:
        meter = registry.create("zendure", {key: value for key, value in other.items() if value is not None})
        render_meter(meter)
    except MeterHubError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
