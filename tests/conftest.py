"""Shared fixtures: an in-memory engine standing in for a Docker daemon."""

import copy
import itertools
from pathlib import Path
from typing import Any, Dict, List

import pytest

from dokken import naming
from dokken.engine.base import EngineClient, Lookup
from dokken.errors import ConflictError, NotFoundError, TransientEngineError
from dokken.models.config import DokkenConfig
from dokken.models.container import ContainerSpec
from dokken.models.instance import InstanceSpec, PlatformSpec


class FakeEngine(EngineClient):
    """Engine keeping images and containers in memory.

    ``fail(method, *errors)`` queues exceptions raised by the next calls
    of ``method``; every call is recorded in ``calls``.
    """

    def __init__(self, images=()):
        self.images = {naming.qualified(i) for i in images}
        self.containers: Dict[str, Dict[str, Any]] = {}
        self.dockerfiles: List[str] = []
        self.calls: List[tuple] = []
        self.failures: Dict[str, List[Exception]] = {}
        self._ids = itertools.count(1)

    def fail(self, method: str, *errors: Exception):
        self.failures.setdefault(method, []).extend(errors)

    def count(self, method: str) -> int:
        return sum(1 for c in self.calls if c[0] == method)

    def _record(self, method: str, *args):
        self.calls.append((method,) + args)
        queue = self.failures.get(method)
        if queue:
            raise queue.pop(0)

    def image_exists(self, ref):
        self._record("image_exists", ref)
        return naming.qualified(ref) in self.images

    def pull_image(self, repository, tag):
        self._record("pull_image", repository, tag)
        self.images.add(f"{repository}:{tag}")

    def build_image(self, context_dir: Path, nocache=True, rm=True):
        self._record("build_image", context_dir, nocache, rm)
        self.dockerfiles.append((Path(context_dir) / "Dockerfile").read_text())
        image_id = f"sha256:{next(self._ids):012d}"
        self.images.add(image_id)
        return image_id

    def tag_image(self, image_id, repository, tag):
        self._record("tag_image", image_id, repository, tag)
        self.images.add(f"{repository}:{tag}")

    def remove_image(self, ref):
        self._record("remove_image", ref)
        ref = naming.qualified(ref)
        if ref not in self.images:
            raise NotFoundError(f"No such image: {ref}")
        self.images.discard(ref)

    def create_container(self, spec: ContainerSpec):
        self._record("create_container", spec)
        if spec.name in self.containers:
            raise ConflictError(f"Conflict. The container name /{spec.name} is already in use")
        self.containers[spec.name] = {
            "Id": f"{next(self._ids):064x}",
            "Name": f"/{spec.name}",
            "Config": {"Image": spec.image, "Cmd": spec.command},
            "HostConfig": spec.host_config.to_api(),
            "State": {"Running": False},
        }
        return copy.deepcopy(self.containers[spec.name])

    def inspect_container(self, name):
        try:
            self._record("inspect_container", name)
        except TransientEngineError as e:
            return Lookup.failed(name, e)
        if name in self.containers:
            return Lookup.present(name, copy.deepcopy(self.containers[name]))
        return Lookup.absent(name)

    def start_container(self, name):
        self._record("start_container", name)
        if name not in self.containers:
            raise NotFoundError(f"No such container: {name}")
        self.containers[name]["State"]["Running"] = True
        return copy.deepcopy(self.containers[name])

    def stop_container(self, name):
        self._record("stop_container", name)
        if name not in self.containers:
            raise NotFoundError(f"No such container: {name}")
        self.containers[name]["State"]["Running"] = False

    def remove_container(self, name):
        self._record("remove_container", name)
        if name not in self.containers:
            raise NotFoundError(f"No such container: {name}")
        del self.containers[name]


@pytest.fixture
def engine():
    """Empty in-memory engine."""
    return FakeEngine()


@pytest.fixture
def config():
    """Driver configuration for a small platform image."""
    return DokkenConfig(image="base:1.0", api_retries=3, docker_host_url="unix:///tmp/docker.sock")


@pytest.fixture
def instance():
    """The web01 instance on centos-7."""
    return InstanceSpec(name="web01", platform=PlatformSpec(name="centos-7"))


@pytest.fixture
def engine_factory():
    """Build in-memory engines with preloaded images."""
    return FakeEngine
