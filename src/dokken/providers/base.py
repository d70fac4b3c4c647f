"""Base provider interface."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, TypeVar, TYPE_CHECKING

if TYPE_CHECKING:
    from dokken.engine.base import EngineClient
    from dokken.retry import RetryGovernor

T = TypeVar("T")


class ProviderStatus(Enum):
    """Provider resource status."""
    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"
    ERROR = "error"


class BaseProvider(ABC):
    """Common shape of the image and container providers."""

    def __init__(self, engine: "EngineClient", retry: "RetryGovernor"):
        """Bind the provider to an engine and a retry policy."""
        self.engine = engine
        self.retry = retry

    def call(self, operation: Callable[[], T]) -> T:
        """Run one engine call under the retry policy."""
        return self.retry.call(operation)

    @abstractmethod
    def status(self, spec: Any) -> ProviderStatus:
        """Check the current status of a resource."""
        pass

    @abstractmethod
    def present(self, spec: Any) -> Any:
        """Ensure the resource is present."""
        pass

    @abstractmethod
    def absent(self, spec: Any) -> bool:
        """Ensure the resource is absent; return whether anything was removed."""
        pass
