"""Engine client interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from dokken.errors import TransientEngineError
from dokken.models.container import ContainerSpec
from dokken.providers.base import ProviderStatus


@dataclass
class Lookup:
    """Result of looking up a container by name.

    ``status`` is PRESENT with ``metadata`` set, ABSENT, or ERROR with
    the transient ``error`` that prevented an answer.
    """
    name: str
    status: ProviderStatus
    metadata: Optional[Dict[str, Any]] = None
    error: Optional[TransientEngineError] = None

    @classmethod
    def present(cls, name: str, metadata: Dict[str, Any]) -> "Lookup":
        return cls(name=name, status=ProviderStatus.PRESENT, metadata=metadata)

    @classmethod
    def absent(cls, name: str) -> "Lookup":
        return cls(name=name, status=ProviderStatus.ABSENT)

    @classmethod
    def failed(cls, name: str, error: TransientEngineError) -> "Lookup":
        return cls(name=name, status=ProviderStatus.ERROR, error=error)

    @property
    def found(self) -> bool:
        return self.status == ProviderStatus.PRESENT

    def resolve(self) -> "Lookup":
        """Return self, raising the carried error for an ERROR result."""
        if self.status == ProviderStatus.ERROR:
            raise self.error
        return self


class EngineClient(ABC):
    """Primitive operations against a container engine.

    Implementations raise :mod:`dokken.errors` exceptions only.
    """

    @abstractmethod
    def image_exists(self, ref: str) -> bool:
        """Check whether an image is available locally."""
        pass

    @abstractmethod
    def pull_image(self, repository: str, tag: str) -> None:
        """Pull an image from its registry."""
        pass

    @abstractmethod
    def build_image(self, context_dir: Path, nocache: bool = True, rm: bool = True) -> str:
        """Build the Dockerfile in ``context_dir`` and return the image id."""
        pass

    @abstractmethod
    def tag_image(self, image_id: str, repository: str, tag: str) -> None:
        """Tag an image, replacing any image already holding the tag."""
        pass

    @abstractmethod
    def remove_image(self, ref: str) -> None:
        """Force-remove an image."""
        pass

    @abstractmethod
    def create_container(self, spec: ContainerSpec) -> Dict[str, Any]:
        """Create a container and return its metadata.

        Raises ConflictError when the name is already taken.
        """
        pass

    @abstractmethod
    def inspect_container(self, name: str) -> Lookup:
        """Look up a container by name."""
        pass

    @abstractmethod
    def start_container(self, name: str) -> Dict[str, Any]:
        """Start a container and return its refreshed metadata."""
        pass

    @abstractmethod
    def stop_container(self, name: str) -> None:
        """Stop a container."""
        pass

    @abstractmethod
    def remove_container(self, name: str) -> None:
        """Force-remove a container together with its anonymous volumes."""
        pass

    def container_exists(self, name: str) -> bool:
        """Check whether a container exists."""
        return self.inspect_container(name).resolve().found
