"""Resource providers for dokken."""

from dokken.providers.base import BaseProvider, ProviderStatus

__all__ = [
    "BaseProvider",
    "ProviderStatus",
]
