from __future__ import annotations

from typing import Any, Iterable, Sequence

import typer

from meters.capabilities import (
    Battery,
    BatteryCapacity,
    BatteryPowerLimiter,
    BatterySocLimiter,
    Meter,
)


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_identifiers(title: str, identifiers: Sequence[str]) -> None:
    echo_heading(f"{title} ({len(identifiers)})")
    if not identifiers:
        typer.echo("None found.")
        return
    for identifier in identifiers:
        typer.echo(f"  - {identifier}")


def render_meter(meter: Meter) -> None:
    """Print every capability the meter exposes, read once each."""
    echo_heading("Meter")
    pairs: list[tuple[str, Any]] = [("power_w", meter.current_power())]
    if isinstance(meter, Battery):
        pairs.append(("soc_pct", meter.soc()))
    if isinstance(meter, BatteryCapacity):
        pairs.append(("capacity_kwh", meter.capacity()))
    if isinstance(meter, BatterySocLimiter):
        min_soc, max_soc = meter.get_soc_limits()
        pairs.append(("soc_limits_pct", f"{min_soc}-{max_soc}"))
    if isinstance(meter, BatteryPowerLimiter):
        max_charge, max_discharge = meter.get_power_limits()
        pairs.append(("power_limits_w", f"charge={max_charge} discharge={max_discharge}"))
    echo_key_values(pairs)
