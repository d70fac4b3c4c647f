"""
Dokken - Ephemeral container test environments.

Provisions a disposable runner container for an instance under test,
sharing volumes from a reusable chef container and a data container,
and tears the runner and its work image down afterwards.
"""

__version__ = "1.0.0"
__author__ = "Dokken Development Team"

# Re-export key components for easier access
from dokken.driver import DokkenDriver
from dokken.models.config import DokkenConfig
from dokken.models.instance import InstanceSpec, PlatformSpec

__all__ = [
    "DokkenDriver",
    "DokkenConfig",
    "InstanceSpec",
    "PlatformSpec",
]
