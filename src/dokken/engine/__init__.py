"""Container engine adapters."""

from dokken.engine.base import EngineClient, Lookup

__all__ = [
    "EngineClient",
    "Lookup",
]
