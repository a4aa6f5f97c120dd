from __future__ import annotations
import json
import logging
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, Optional

from models.records import Instance
from settings import get_settings

logger = logging.getLogger(__name__)


class InstanceRegistry:
    """Hub base URLs known to the service, with their access tokens."""

    def __init__(self, persistence_path: Optional[Path] = None) -> None:
        self._items: Dict[str, Instance] = {}
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def register(self, uri: str, token: Optional[str] = None) -> None:
        """Add ``uri`` or replace its token."""
        with self._lock:
            self._items[uri] = Instance(uri=uri, token=token)
            self._persist()

    def remember(self, uri: str) -> None:
        """Record a successful connection, keeping any known token."""
        with self._lock:
            if uri in self._items:
                return
            self._items[uri] = Instance(uri=uri)
            self._persist()

    def token_for(self, uri: str) -> Optional[str]:
        with self._lock:
            item = self._items.get(uri)
            return item.token if item else None

    def uris(self) -> list[str]:
        with self._lock:
            return sorted(self._items)

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = {uri: {"token": item.token} for uri, item in self._items.items()}
        self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            logger.warning(
                "Ignoring unreadable instance registry",
                extra={"reason": str(self.persistence_path)},
            )
            data = {}

        for uri, payload in data.items():
            token = payload.get("token") if isinstance(payload, dict) else None
            self._items[uri] = Instance(uri=uri, token=token)


def parse_instances(raw: str) -> Dict[str, Optional[str]]:
    """Parse ``uri=token,uri2=token2`` pairs; a bare uri has no token."""
    instances: Dict[str, Optional[str]] = {}
    for idx, entry in enumerate(raw.split(",")):
        entry = entry.strip()
        if not entry:
            continue
        uri, sep, token = entry.partition("=")
        uri = uri.strip().rstrip("/")
        if not uri:
            logger.warning("Skipping malformed HUB_INSTANCES entry at position %d", idx)
            continue
        instances[uri] = (token.strip() or None) if sep else None
    return instances


@lru_cache
def build_default_registry(path: Optional[str] = None) -> InstanceRegistry:
    settings = get_settings()
    registry_path = settings.hub_instances_path if path is None else path
    registry = InstanceRegistry(persistence_path=Path(registry_path) if registry_path else None)
    for uri, token in parse_instances(settings.hub_instances).items():
        registry.register(uri, token)
    return registry
