"""Pydantic models for configuration and validation."""

from dokken.models.config import DokkenConfig
from dokken.models.container import ContainerSpec, HostConfigSpec, PortBinding
from dokken.models.image import ImageReference
from dokken.models.instance import InstanceSpec, PlatformSpec

__all__ = [
    "DokkenConfig",
    "ContainerSpec",
    "HostConfigSpec",
    "PortBinding",
    "ImageReference",
    "InstanceSpec",
    "PlatformSpec",
]
