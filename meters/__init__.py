"""Meter adapters and the capability interfaces they expose."""

# Importing the adapter modules registers their factories.
from meters import zendure  # noqa: F401
