"""Container provider for creating, starting and removing containers."""

import logging
from typing import Any, Dict, Optional

from dokken.engine.base import Lookup
from dokken.errors import ConflictError, EngineError, NotFoundError
from dokken.models.container import ContainerSpec
from dokken.providers.base import BaseProvider, ProviderStatus


logger = logging.getLogger(__name__)


class ContainerProvider(BaseProvider):
    """Provider for engine containers."""

    def lookup(self, name: str) -> Lookup:
        """Look up a container, retrying lookups that failed transiently."""
        return self.call(lambda: self.engine.inspect_container(name).resolve())

    def status(self, spec: ContainerSpec) -> ProviderStatus:
        """Check if container exists."""
        return self.lookup(spec.name).status

    def create(self, spec: ContainerSpec) -> Dict[str, Any]:
        """Create a container, reusing one that already holds the name.

        Only the create call is retried; a conflict is resolved with a
        single retried lookup.
        """
        try:
            return self.call(lambda: self.engine.create_container(spec))
        except ConflictError:
            logger.debug(f"Container {spec.name} already exists, reusing it")
            existing = self.lookup(spec.name)
            if not existing.found:
                raise
            return existing.metadata

    def present(self, spec: ContainerSpec) -> Dict[str, Any]:
        """Ensure the container exists and is running; return its metadata."""
        logger.info(f"Starting container {spec.name}")
        self.create(spec)
        return self.call(lambda: self.engine.start_container(spec.name))

    def ensure_created(self, spec: ContainerSpec, strict: bool = False) -> Optional[Dict[str, Any]]:
        """Make sure a volume container exists without starting it.

        Create failures other than a name conflict are logged and
        swallowed unless ``strict`` is set. Returns the container
        metadata, or None when creation failed.
        """
        existing = self.lookup(spec.name)
        if existing.found:
            logger.debug(f"Volume container {spec.name} already exists")
            return existing.metadata

        logger.debug(f"Creating volume container {spec.name} from {spec.image}")
        try:
            return self.create(spec)
        except Exception as e:
            if strict:
                raise
            logger.info(f"Could not create volume container {spec.name}: {e}")
            return None

    def absent(self, name: str) -> bool:
        """Stop and remove a container if it exists.

        Best effort: a missing container or a failing engine is logged
        and reported as False, never raised.
        """
        try:
            existing = self.lookup(name)
        except EngineError as e:
            logger.info(f"Could not look up container {name}: {e}")
            return False
        if not existing.found:
            logger.info(f"Container {name} not found. Nothing to delete.")
            return False

        logger.info(f"Destroying container {name}.")
        try:
            self.call(lambda: self.engine.stop_container(name))
            self.call(lambda: self.engine.remove_container(name))
        except NotFoundError:
            logger.info(f"Container {name} disappeared while deleting it.")
            return False
        except EngineError as e:
            logger.info(f"Could not delete container {name}: {e}")
            return False
        return True
