"""Provisioning and teardown pipelines for one instance."""

import logging
import shlex
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional

from dokken import naming
from dokken.engine.base import EngineClient
from dokken.engine.docker_engine import DockerEngine
from dokken.models.config import DokkenConfig
from dokken.models.container import ContainerSpec, HostConfigSpec, PortBinding
from dokken.models.image import ImageReference
from dokken.models.instance import InstanceSpec
from dokken.providers.container import ContainerProvider
from dokken.providers.image import ImageProvider, render_dockerfile
from dokken.retry import RetryGovernor


logger = logging.getLogger(__name__)

DATA_CONTAINER_PORT = "22/tcp"

State = MutableMapping[str, Any]


class DokkenDriver:
    """Creates and destroys the containers backing a test instance.

    ``create`` runs the provisioning steps in a fixed order and records
    what it made in the caller's state record. ``destroy`` removes the
    runner container and the work image; the chef container (and by
    default the data container) stay around for the next run.
    """

    def __init__(
        self,
        config: DokkenConfig,
        instance: InstanceSpec,
        engine: Optional[EngineClient] = None,
        context_root: Optional[Path] = None,
    ):
        """Initialize the driver; an engine is built from config if not given."""
        self.config = config
        self.instance = instance
        self.engine = engine or DockerEngine.from_config(config)
        self.context_root = context_root
        self.retry = RetryGovernor(config.api_retries)
        self.images = ImageProvider(self.engine, self.retry)
        self.containers = ContainerProvider(self.engine, self.retry)

    # Names

    @property
    def instance_name(self) -> str:
        return self.instance.name

    @property
    def instance_platform_name(self) -> str:
        return self.instance.platform.name

    @property
    def platform_image(self) -> str:
        return self.config.image

    @property
    def work_image(self) -> str:
        return naming.work_image_name(self.config.image_prefix, self.instance_name)

    @property
    def chef_image(self) -> str:
        return naming.helper_image_name(self.config.chef_version)

    @property
    def chef_container_name(self) -> str:
        return naming.helper_container_name(self.config.chef_version)

    @property
    def data_container_name(self) -> str:
        return naming.data_container_name(self.instance_name)

    @property
    def runner_container_name(self) -> str:
        return naming.runner_container_name(self.instance_name)

    @property
    def build_context(self) -> Path:
        return naming.build_context_dir(self.instance_name, self.context_root)

    # Pipelines

    def create(self, state: State) -> None:
        """Provision the instance, recording results in ``state``."""
        logger.info(f"Creating instance {self.instance_name}")

        # image to config
        self.pull_platform_image()

        # chef
        self.pull_chef_image()
        self.start_chef_container(state)

        # data
        self.make_data_image()
        self.start_data_container(state)

        # work image
        self.build_work_image(state)

        # runner
        self.start_runner_container(state)

        # misc
        self.save_misc_state(state)
        logger.info(f"Instance {self.instance_name} created")

    def destroy(self, state: State) -> None:
        """Tear down the runner container and the work image."""
        logger.info(f"Destroying instance {self.instance_name}")
        self.delete_data()
        self.delete_runner()
        self.delete_work_image(state)
        logger.info(f"Instance {self.instance_name} destroyed")

    # Provisioning steps

    def pull_platform_image(self) -> None:
        logger.debug(f"driver - pulling {self.platform_image}")
        self.images.pull_if_missing(self.platform_image)

    def pull_chef_image(self) -> None:
        logger.debug(f"driver - pulling {self.chef_image}")
        self.images.pull_if_missing(self.chef_image)

    def start_chef_container(self, state: State) -> None:
        """Make sure the shared chef volume container exists."""
        spec = ContainerSpec(
            name=self.chef_container_name,
            image=naming.qualified(self.chef_image),
            command=["true"],
        )
        metadata = self.containers.ensure_created(
            spec, strict=self.config.strict_helper_container
        )
        if metadata is not None:
            state["chef_container"] = metadata

    def make_data_image(self) -> None:
        logger.debug(f"driver - pulling {self.config.data_image}")
        self.images.pull_if_missing(self.config.data_image)

    def start_data_container(self, state: State) -> None:
        logger.debug(f"driver - creating {self.data_container_name}")
        spec = ContainerSpec(
            name=self.data_container_name,
            image=naming.qualified(self.config.data_image),
            host_config=HostConfigSpec(
                port_bindings={DATA_CONTAINER_PORT: [PortBinding(host_port="")]},
                publish_all_ports=True,
            ),
        )
        state["data_container"] = self.containers.present(spec)

    def build_work_image(self, state: State) -> None:
        """Build the work image on top of the platform image if missing."""
        dockerfile = render_dockerfile(
            self.platform_image, self.config.intermediate_instructions
        )
        self.images.build(ImageReference.parse(self.work_image), self.build_context, dockerfile)
        state["work_image"] = self.work_image

    def start_runner_container(self, state: State) -> None:
        logger.debug(f"driver - starting {self.runner_container_name}")
        spec = ContainerSpec(
            name=self.runner_container_name,
            image=naming.qualified(self.work_image),
            command=shlex.split(self.config.pid_one_command),
            host_config=HostConfigSpec(
                privileged=self.config.privileged,
                volumes_from=[self.chef_container_name, self.data_container_name],
            ),
        )
        state["runner_container"] = self.containers.present(spec)

    def save_misc_state(self, state: State) -> None:
        state["platform_image"] = self.platform_image
        state["instance_name"] = self.instance_name
        state["instance_platform_name"] = self.instance_platform_name
        state["image_prefix"] = self.config.image_prefix

    # Teardown steps

    def delete_data(self) -> None:
        if not self.config.remove_data_container:
            logger.debug(f"driver - keeping data container {self.data_container_name}")
            return
        logger.debug(f"driver - deleting container {self.data_container_name}")
        self.containers.absent(self.data_container_name)

    def delete_runner(self) -> None:
        logger.debug(f"driver - deleting container {self.runner_container_name}")
        self.containers.absent(self.runner_container_name)

    def delete_work_image(self, state: Optional[State] = None) -> None:
        work_image = (state or {}).get("work_image") or self.work_image
        logger.debug(f"driver - deleting image {work_image}")
        self.images.absent(ImageReference.parse(work_image))

    def describe(self) -> Dict[str, str]:
        """Resolved names for this instance."""
        return {
            "instance": self.instance_name,
            "platform": self.instance_platform_name,
            "platform_image": self.platform_image,
            "work_image": self.work_image,
            "chef_container": self.chef_container_name,
            "data_container": self.data_container_name,
            "runner_container": self.runner_container_name,
        }
