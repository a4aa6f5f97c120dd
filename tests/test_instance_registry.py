"""Unit tests for the hub instance registry."""

from __future__ import annotations

import json

from datastore.instances import InstanceRegistry, parse_instances


def test_register_and_lookup_token() -> None:
    registry = InstanceRegistry()

    registry.register("http://hub.local:8123", "secret")

    assert registry.token_for("http://hub.local:8123") == "secret"
    assert registry.token_for("http://other.local") is None


def test_remember_keeps_existing_token() -> None:
    registry = InstanceRegistry()
    registry.register("http://hub.local:8123", "secret")

    registry.remember("http://hub.local:8123")
    registry.remember("http://new.local")

    assert registry.token_for("http://hub.local:8123") == "secret"
    assert registry.uris() == ["http://hub.local:8123", "http://new.local"]


def test_uris_are_sorted() -> None:
    registry = InstanceRegistry()
    for uri in ("http://c.local", "http://a.local", "https://b.local"):
        registry.remember(uri)

    assert registry.uris() == ["http://a.local", "http://c.local", "https://b.local"]


def test_registry_persists_to_disk_and_reloads(tmp_path) -> None:
    path = tmp_path / "state" / "instances.json"
    registry = InstanceRegistry(persistence_path=path)

    registry.register("http://hub.local:8123", "secret")
    registry.remember("http://guest.local")

    payload = json.loads(path.read_text())
    assert payload == {
        "http://guest.local": {"token": None},
        "http://hub.local:8123": {"token": "secret"},
    }

    reloaded = InstanceRegistry(persistence_path=path)
    assert reloaded.uris() == ["http://guest.local", "http://hub.local:8123"]
    assert reloaded.token_for("http://hub.local:8123") == "secret"


def test_unreadable_file_starts_empty(tmp_path) -> None:
    path = tmp_path / "instances.json"
    path.write_text("{not json")

    registry = InstanceRegistry(persistence_path=path)

    assert registry.uris() == []


def test_parse_instances() -> None:
    raw = "http://hub.local:8123/=abc, https://remote.example.com=def ,http://bare.local,,=orphan"

    assert parse_instances(raw) == {
        "http://hub.local:8123": "abc",
        "https://remote.example.com": "def",
        "http://bare.local": None,
    }
