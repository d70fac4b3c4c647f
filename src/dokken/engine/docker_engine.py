"""Engine client backed by the Docker SDK."""

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

import docker
import requests
from docker.constants import DEFAULT_DOCKER_API_VERSION
from docker.errors import APIError, BuildError, DockerException, NotFound
from docker.tls import TLSConfig

from dokken.engine.base import EngineClient, Lookup
from dokken.errors import (
    ConflictError,
    EngineError,
    EngineIOError,
    EngineTimeoutError,
    NotFoundError,
    ServerError,
    TransientEngineError,
    UnexpectedResponseError,
)
from dokken.models.config import DokkenConfig
from dokken.models.container import ContainerSpec


logger = logging.getLogger(__name__)


@contextmanager
def translate_errors(action: str) -> Iterator[None]:
    """Re-raise Docker SDK and transport errors as dokken engine errors."""
    try:
        yield
    except NotFound as e:
        raise NotFoundError(f"{action}: {e.explanation or e}") from e
    except APIError as e:
        message = f"{action}: {e.explanation or e}"
        if e.status_code == 409:
            raise ConflictError(message) from e
        if e.is_server_error():
            raise ServerError(message) from e
        raise UnexpectedResponseError(message) from e
    except BuildError as e:
        raise EngineError(f"{action}: {e.msg}") from e
    except requests.exceptions.Timeout as e:
        raise EngineTimeoutError(f"{action}: {e}") from e
    except requests.exceptions.InvalidJSONError as e:
        raise UnexpectedResponseError(f"{action}: {e}") from e
    except (requests.exceptions.ConnectionError, OSError) as e:
        raise EngineIOError(f"{action}: {e}") from e
    except DockerException as e:
        # The SDK wraps some transport failures in a plain DockerException
        if isinstance(e.__cause__, (requests.exceptions.ConnectionError, OSError)):
            raise EngineIOError(f"{action}: {e}") from e
        raise EngineError(f"{action}: {e}") from e


class DockerEngine(EngineClient):
    """Engine client talking to a Docker daemon."""

    def __init__(
        self,
        base_url: str,
        timeout: int = 3600,
        tls_verify: Optional[bool] = None,
    ):
        """Store connection settings; the connection is opened on first use."""
        self.base_url = base_url
        self.timeout = timeout
        self.tls_verify = tls_verify
        self._client: Optional[docker.DockerClient] = None
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: DokkenConfig) -> "DockerEngine":
        """Build an engine from driver configuration.

        The SDK takes a single timeout, so the longer of the read and
        write timeouts is used.
        """
        return cls(
            base_url=config.docker_host_url,
            timeout=max(config.read_timeout, config.write_timeout),
            tls_verify=config.tls_verify,
        )

    @property
    def client(self) -> docker.DockerClient:
        """Lazily connect to the daemon, once."""
        if self._client is None:
            with self._lock:
                if self._client is None:
                    kwargs: Dict[str, Any] = {
                        "base_url": self.base_url,
                        "timeout": self.timeout,
                        # A fixed API version keeps construction offline
                        "version": DEFAULT_DOCKER_API_VERSION,
                    }
                    if self.tls_verify is not None:
                        kwargs["tls"] = TLSConfig(verify=self.tls_verify)
                    with translate_errors(f"connect to {self.base_url}"):
                        self._client = docker.DockerClient(**kwargs)
                    logger.debug(f"Engine client ready for {self.base_url}")
        return self._client

    def image_exists(self, ref: str) -> bool:
        try:
            with translate_errors(f"inspect image {ref}"):
                self.client.images.get(ref)
            return True
        except NotFoundError:
            return False

    def pull_image(self, repository: str, tag: str) -> None:
        logger.info(f"Pulling image {repository}:{tag}")
        with translate_errors(f"pull image {repository}:{tag}"):
            self.client.images.pull(repository, tag=tag)

    def build_image(self, context_dir: Path, nocache: bool = True, rm: bool = True) -> str:
        logger.info(f"Building image from {context_dir}")
        with translate_errors(f"build image from {context_dir}"):
            image, build_logs = self.client.images.build(
                path=str(context_dir),
                nocache=nocache,
                rm=rm,
            )
            for chunk in build_logs:
                if "stream" in chunk:
                    logger.debug(f"[build] {chunk['stream'].rstrip()}")
        return image.id

    def tag_image(self, image_id: str, repository: str, tag: str) -> None:
        with translate_errors(f"tag image {repository}:{tag}"):
            self.client.api.tag(image_id, repository, tag=tag, force=True)

    def remove_image(self, ref: str) -> None:
        with translate_errors(f"remove image {ref}"):
            self.client.images.remove(image=ref, force=True)

    def create_container(self, spec: ContainerSpec) -> Dict[str, Any]:
        host = spec.host_config
        ports = {
            port: [b.host_port or None for b in bindings]
            for port, bindings in host.port_bindings.items()
        }
        kwargs: Dict[str, Any] = {
            "name": spec.name,
            "privileged": host.privileged,
            "publish_all_ports": host.publish_all_ports,
        }
        if host.volumes_from:
            kwargs["volumes_from"] = list(host.volumes_from)
        if ports:
            kwargs["ports"] = ports

        with translate_errors(f"create container {spec.name}"):
            container = self.client.containers.create(spec.image, command=spec.command, **kwargs)
        return container.attrs

    def inspect_container(self, name: str) -> Lookup:
        try:
            with translate_errors(f"inspect container {name}"):
                container = self.client.containers.get(name)
            return Lookup.present(name, container.attrs)
        except NotFoundError:
            return Lookup.absent(name)
        except TransientEngineError as e:
            return Lookup.failed(name, e)

    def start_container(self, name: str) -> Dict[str, Any]:
        with translate_errors(f"start container {name}"):
            container = self.client.containers.get(name)
            container.start()
            container.reload()
        return container.attrs

    def stop_container(self, name: str) -> None:
        with translate_errors(f"stop container {name}"):
            self.client.containers.get(name).stop()

    def remove_container(self, name: str) -> None:
        with translate_errors(f"remove container {name}"):
            self.client.containers.get(name).remove(v=True, force=True)
