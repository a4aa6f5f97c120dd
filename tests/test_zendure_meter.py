"""Unit tests for the usage-scoped Zendure power adapter."""

from __future__ import annotations

from typing import List

import pytest

from errors import ConfigurationError, GatewayConnectionError, InvalidUsageError
from meters import registry
from meters.capabilities import (
    Battery,
    BatteryCapacity,
    BatteryPowerLimiter,
    BatterySocLimiter,
    Meter,
)
from meters.zendure import ZendureConfig, ZendureMeter, new_zendure_from_config
from models.records import TelemetrySnapshot


class FakeConnection:
    def __init__(self, snapshots: List[TelemetrySnapshot], serial: str = "SN-1") -> None:
        self.snapshots = list(snapshots)
        self.serial = serial
        self.calls = 0

    def data(self) -> TelemetrySnapshot:
        self.calls += 1
        return self.snapshots.pop(0)


class FailingConnection:
    serial = "SN-1"

    def __init__(self, error: Exception) -> None:
        self.error = error

    def data(self) -> TelemetrySnapshot:
        raise self.error


def _snapshot(
    solar: float = 0.0, pack_in: float = 0.0, pack_out: float = 0.0, level: float = 50.0
) -> TelemetrySnapshot:
    return TelemetrySnapshot(
        solar_input_power=solar,
        pack_input_power=pack_in,
        output_pack_power=pack_out,
        electric_level=level,
    )


def _factory(conn):
    captured = {}

    def factory(region: str, account: str, serial: str, timeout: float):
        captured.update(region=region, account=account, serial=serial, timeout=timeout)
        return conn

    return factory, captured


def test_pv_usage_reports_solar_input_power() -> None:
    meter = ZendureMeter("pv", FakeConnection([_snapshot(solar=412.0, pack_in=100.0)]))

    assert meter.current_power() == 412.0


@pytest.mark.parametrize(
    ("pack_in", "pack_out", "expected"),
    [(800.0, 0.0, 800.0), (0.0, 350.0, -350.0), (200.0, 200.0, 0.0), (120.0, 620.0, -500.0)],
)
def test_battery_usage_reports_net_charge_power(pack_in: float, pack_out: float, expected: float) -> None:
    meter = ZendureMeter("battery", FakeConnection([_snapshot(solar=999.0, pack_in=pack_in, pack_out=pack_out)]))

    assert meter.current_power() == expected


@pytest.mark.parametrize("usage", ["grid", "other", "PV", "Battery", ""])
def test_unknown_usage_fails_at_read_time(usage: str) -> None:
    conn = FakeConnection([_snapshot(solar=1.0)])
    meter = ZendureMeter(usage, conn)

    with pytest.raises(InvalidUsageError) as excinfo:
        meter.current_power()

    assert f"invalid usage: {usage}" == str(excinfo.value)
    assert excinfo.value.usage == usage


def test_gateway_error_propagates_unchanged() -> None:
    error = GatewayConnectionError("zendure: timed out")
    meter = ZendureMeter("pv", FailingConnection(error))

    with pytest.raises(GatewayConnectionError) as excinfo:
        meter.current_power()

    assert excinfo.value is error


def test_each_read_fetches_a_fresh_snapshot() -> None:
    conn = FakeConnection(
        [
            _snapshot(pack_in=100.0, level=40.0),
            _snapshot(pack_in=100.0, level=41.0),
            _snapshot(pack_in=300.0, level=42.0),
        ]
    )
    factory, _ = _factory(conn)
    meter = new_zendure_from_config({"usage": "battery", "account": "a", "serial": "s"}, factory)

    assert meter.current_power() == 100.0
    assert isinstance(meter, Battery)
    assert meter.soc() == 41.0
    assert meter.current_power() == 300.0
    assert conn.calls == 3


def test_config_defaults_and_region_normalization() -> None:
    factory, captured = _factory(FakeConnection([]))

    new_zendure_from_config({"Usage": "pv", "Account": "me@example.com", "Serial": "HOA1", "region": "global"}, factory)

    assert captured == {"region": "GLOBAL", "account": "me@example.com", "serial": "HOA1", "timeout": 30.0}


@pytest.mark.parametrize(("raw", "seconds"), [("45s", 45.0), ("2m", 120.0), (15, 15.0), ("500ms", 0.5)])
def test_config_timeout_accepts_durations(raw, seconds: float) -> None:
    config = ZendureConfig.decode({"usage": "pv", "timeout": raw})

    assert config.timeout.total_seconds() == seconds


def test_config_requires_usage() -> None:
    with pytest.raises(ConfigurationError):
        ZendureConfig.decode({"account": "a", "serial": "s"})


def test_config_rejects_malformed_timeout() -> None:
    with pytest.raises(ConfigurationError):
        ZendureConfig.decode({"usage": "pv", "timeout": "soon"})


def test_non_battery_usage_is_returned_undecorated() -> None:
    factory, _ = _factory(FakeConnection([]))

    meter = new_zendure_from_config({"usage": "pv", "capacity": 5.0, "minSoc": 10}, factory)

    assert isinstance(meter, ZendureMeter)
    assert isinstance(meter, Meter)
    assert not isinstance(meter, Battery)


def test_registry_creates_zendure_meters(monkeypatch) -> None:
    factory, captured = _factory(FakeConnection([_snapshot(solar=5.0)]))
    monkeypatch.setattr("meters.zendure.build_connection", factory)

    meter = registry.create("Zendure", {"usage": "pv", "account": "a", "serial": "s"})

    assert meter.current_power() == 5.0
    assert captured["serial"] == "s"
    assert "zendure" in registry.types()


def test_registry_rejects_unknown_type() -> None:
    with pytest.raises(ConfigurationError, match="invalid meter type: shelly"):
        registry.create("shelly", {})


@pytest.mark.parametrize(
    ("option", "soc_limits", "power_limits"),
    [
        ({"minSoc": 15}, (15.0, 100.0), None),
        ({"maxSoc": 90}, (0.0, 90.0), None),
        ({"maxChargePower": 1200}, None, (1200.0, 0.0)),
        ({"maxDischargePower": 800}, None, (0.0, 800.0)),
    ],
)
def test_battery_limit_keys_become_capabilities(option, soc_limits, power_limits) -> None:
    factory, _ = _factory(FakeConnection([]))

    meter = new_zendure_from_config({"usage": "battery", "account": "a", "serial": "s", **option}, factory)

    assert isinstance(meter, Battery)
    assert not isinstance(meter, BatteryCapacity)
    assert isinstance(meter, BatterySocLimiter) is (soc_limits is not None)
    assert isinstance(meter, BatteryPowerLimiter) is (power_limits is not None)
    if soc_limits is not None:
        assert meter.get_soc_limits() == soc_limits
    if power_limits is not None:
        assert meter.get_power_limits() == power_limits
