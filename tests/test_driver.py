"""Tests for the provisioning and teardown pipelines."""

import pytest

from dokken.driver import DokkenDriver
from dokken.errors import EngineError, ServerError
from dokken.models.config import DokkenConfig
from dokken.models.instance import InstanceSpec, PlatformSpec


@pytest.fixture
def driver(config, instance, engine, tmp_path):
    """Driver for web01 on the in-memory engine."""
    return DokkenDriver(config, instance, engine=engine, context_root=tmp_path)


def make_driver(engine, tmp_path, **options):
    options.setdefault("image", "base:1.0")
    config = DokkenConfig(**options)
    instance = InstanceSpec(name="web01", platform=PlatformSpec(name="centos-7"))
    return DokkenDriver(config, instance, engine=engine, context_root=tmp_path)


class TestNames:
    """Test names resolved by the driver."""

    def test_default_names(self, driver):
        """Test names for web01 with chef 12.5.1 and no prefix."""
        assert driver.chef_container_name == "chef-12.5.1"
        assert driver.data_container_name == "web01-data"
        assert driver.runner_container_name == "web01"
        assert driver.work_image == "web01"
        assert driver.chef_image == "someara/chef:12.5.1"

    def test_prefixed_work_image(self, engine, tmp_path):
        """Test the image prefix is applied to the work image."""
        driver = make_driver(engine, tmp_path, image_prefix="acme")

        assert driver.work_image == "acme/web01"
        assert driver.describe()["work_image"] == "acme/web01"

    def test_build_context_under_root(self, driver, tmp_path):
        """Test the build context is unique to the instance."""
        assert driver.build_context == tmp_path / "dokken" / "web01"


class TestCreate:
    """Test the provisioning pipeline."""

    def test_end_to_end(self, driver, engine):
        """Test create records every resource in the state."""
        state = {}

        driver.create(state)

        assert state["work_image"] == "web01"
        assert state["runner_container"]
        assert state["data_container"]
        assert state["chef_container"]["Name"] == "/chef-12.5.1"
        assert state["platform_image"] == "base:1.0"
        assert state["instance_name"] == "web01"
        assert state["instance_platform_name"] == "centos-7"
        assert state["image_prefix"] is None

        assert {"base:1.0", "someara/chef:12.5.1", "someara/kitchen-cache:latest", "web01:latest"} <= engine.images
        assert set(engine.containers) == {"chef-12.5.1", "web01-data", "web01"}

    def test_step_order(self, driver, engine):
        """Test images and containers are handled in pipeline order."""
        driver.create({})

        pulls = [c[1:] for c in engine.calls if c[0] == "pull_image"]
        assert pulls == [
            ("base", "1.0"),
            ("someara/chef", "12.5.1"),
            ("someara/kitchen-cache", "latest"),
        ]
        created = [c[1].name for c in engine.calls if c[0] == "create_container"]
        assert created == ["chef-12.5.1", "web01-data", "web01"]

    def test_chef_container_not_started(self, driver, engine):
        """Test the chef container only exists as a volume source."""
        driver.create({})

        chef = engine.containers["chef-12.5.1"]
        assert chef["Config"]["Cmd"] == ["true"]
        assert chef["Config"]["Image"] == "someara/chef:12.5.1"
        assert chef["State"]["Running"] is False

    def test_data_container_publishes_ssh(self, driver, engine):
        """Test the data container binds 22/tcp to an engine-assigned port."""
        driver.create({})

        data = engine.containers["web01-data"]
        assert data["Config"]["Image"] == "someara/kitchen-cache:latest"
        assert data["HostConfig"]["PortBindings"] == {"22/tcp": [{"HostPort": ""}]}
        assert data["HostConfig"]["PublishAllPorts"] is True
        assert data["State"]["Running"] is True

    def test_runner_container(self, engine, tmp_path):
        """Test the runner mounts both volume containers and runs pid one."""
        driver = make_driver(engine, tmp_path, privileged=True)

        driver.create({})

        runner = engine.containers["web01"]
        assert runner["Config"]["Image"] == "web01:latest"
        assert runner["Config"]["Cmd"] == ["sh", "-c", "trap exit 0 SIGTERM; while :; do sleep 1; done"]
        assert runner["HostConfig"]["Privileged"] is True
        assert runner["HostConfig"]["VolumesFrom"] == ["chef-12.5.1", "web01-data"]
        assert runner["State"]["Running"] is True

    def test_work_image_dockerfile(self, engine, tmp_path):
        """Test the work image layers instructions on the platform image."""
        driver = make_driver(engine, tmp_path, intermediate_instructions=["RUN x", "RUN y"])

        driver.create({})

        assert engine.dockerfiles == [
            'FROM base:1.0\nRUN /bin/sh -c "echo Built with Test Kitchen"\nRUN x\nRUN y'
        ]
        assert (tmp_path / "dokken" / "web01" / "Dockerfile").exists()

    def test_prefixed_work_image_state(self, engine, tmp_path):
        """Test the prefixed work image is tagged and recorded."""
        driver = make_driver(engine, tmp_path, image_prefix="acme")
        state = {}

        driver.create(state)

        assert state["work_image"] == "acme/web01"
        assert state["image_prefix"] == "acme"
        assert "acme/web01:latest" in engine.images
        assert engine.containers["web01"]["Config"]["Image"] == "acme/web01:latest"

    def test_existing_images_not_pulled(self, engine_factory, tmp_path):
        """Test images already present locally are not pulled."""
        engine = engine_factory(images=["base:1.0", "someara/chef:12.5.1", "someara/kitchen-cache"])
        driver = make_driver(engine, tmp_path)

        driver.create({})

        assert engine.count("pull_image") == 0

    def test_create_twice_is_idempotent(self, driver, engine):
        """Test a second create reuses every resource."""
        first = {}
        driver.create(first)
        second = {}
        driver.create(second)

        assert set(engine.containers) == {"chef-12.5.1", "web01-data", "web01"}
        assert engine.count("build_image") == 1
        assert engine.count("pull_image") == 3
        assert second["runner_container"]["Id"] == first["runner_container"]["Id"]
        assert second["work_image"] == "web01"

    def test_helper_container_failure_is_not_fatal(self, driver, engine):
        """Test a failing chef container create does not stop the pipeline."""
        engine.fail("create_container", EngineError("no space left"))
        state = {}

        driver.create(state)

        assert "chef_container" not in state
        assert state["runner_container"]
        assert "chef-12.5.1" not in engine.containers

    def test_strict_helper_container(self, engine, tmp_path):
        """Test strict mode makes chef container failures fatal."""
        driver = make_driver(engine, tmp_path, strict_helper_container=True)
        engine.fail("create_container", EngineError("no space left"))
        state = {}

        with pytest.raises(EngineError):
            driver.create(state)

        assert "data_container" not in state

    def test_transient_errors_are_absorbed(self, driver, engine):
        """Test transient failures within the retry budget are invisible."""
        engine.fail("pull_image", ServerError("500"), ServerError("502"))
        engine.fail("start_container", ServerError("500"))
        state = {}

        driver.create(state)

        assert state["runner_container"]

    def test_exhausted_retries_abort(self, driver, engine):
        """Test exhausting retries aborts the rest of the pipeline."""
        engine.fail("build_image", *[ServerError("500")] * 4)
        state = {}

        with pytest.raises(ServerError):
            driver.create(state)

        assert engine.count("build_image") == 4
        assert state["data_container"]
        assert "work_image" not in state
        assert "runner_container" not in state
        assert "instance_name" not in state
        assert "web01" not in engine.containers


class TestDestroy:
    """Test the teardown pipeline."""

    def test_destroy_after_create(self, driver, engine):
        """Test destroy removes the runner and work image only."""
        state = {}
        driver.create(state)

        driver.destroy(state)

        assert "web01" not in engine.containers
        assert "web01:latest" not in engine.images
        assert "chef-12.5.1" in engine.containers
        assert "web01-data" in engine.containers

    def test_destroy_does_not_touch_state(self, driver):
        """Test destroy reads but does not modify the state."""
        state = {}
        driver.create(state)
        snapshot = dict(state)

        driver.destroy(state)

        assert state == snapshot

    def test_destroy_nothing(self, driver, engine):
        """Test destroying a missing instance is a no-op."""
        state = {}

        driver.destroy(state)

        assert state == {}
        assert engine.count("stop_container") == 0
        assert engine.count("remove_container") == 0
        assert engine.count("remove_image") == 0

    def test_destroy_twice(self, driver, engine):
        """Test a second destroy does not raise."""
        driver.create({})
        driver.destroy({})
        driver.destroy({})

        assert engine.count("remove_container") == 1
        assert engine.count("remove_image") == 1

    def test_remove_data_container(self, engine, tmp_path):
        """Test the data container is deleted first when enabled."""
        driver = make_driver(engine, tmp_path, remove_data_container=True)
        driver.create({})

        driver.destroy({})

        removed = [c[1] for c in engine.calls if c[0] == "remove_container"]
        assert removed == ["web01-data", "web01"]
        assert set(engine.containers) == {"chef-12.5.1"}

    def test_work_image_from_state(self, driver, engine):
        """Test the recorded work image is the one deleted."""
        engine.images.add("old/web01:latest")

        driver.destroy({"work_image": "old/web01"})

        assert "old/web01:latest" not in engine.images

    def test_destroy_retries(self, driver, engine):
        """Test teardown calls are retried."""
        driver.create({})
        engine.fail("stop_container", ServerError("500"))
        engine.fail("remove_image", ServerError("500"))

        driver.destroy({})

        assert "web01" not in engine.containers
        assert "web01:latest" not in engine.images

    def test_failed_runner_delete_still_removes_work_image(self, driver, engine):
        """Test teardown continues when the runner cannot be deleted."""
        driver.create({})
        engine.fail("stop_container", *[ServerError("500")] * 4)

        driver.destroy({})

        assert engine.count("stop_container") == 4
        assert "web01" in engine.containers
        assert "web01:latest" not in engine.images
