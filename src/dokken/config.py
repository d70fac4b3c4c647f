"""Configuration loading for instances."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from pydantic import ValidationError

from dokken.errors import ConfigError
from dokken.models.config import DokkenConfig
from dokken.models.instance import InstanceSpec, PlatformSpec
from dokken.utils.templates import deep_merge


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "dokken.yml"


def instance_name(suite: str, platform: str) -> str:
    """Instance name for a suite/platform pair."""
    name = f"{suite}-{platform}"
    name = re.sub(r"[_,/\s]", "-", name)
    return name.replace(".", "")


@dataclass
class InstanceEntry:
    """A configured instance with its resolved driver settings."""
    instance: InstanceSpec
    config: DokkenConfig
    suite: str

    @property
    def name(self) -> str:
        return self.instance.name


class ConfigManager:
    """Loads ``dokken.yml`` and expands it into instances.

    Driver settings are merged top-level ``driver`` first, then the
    platform's, then the suite's.
    """

    def __init__(self, config_file: Path):
        """Initialize configuration manager."""
        self.config_file = Path(config_file)
        self.yaml = YAML()
        self.yaml.preserve_quotes = True
        self.instances: Dict[str, InstanceEntry] = {}

    def load(self):
        """Load the configuration file."""
        logger.info(f"Loading configuration from {self.config_file}")
        if not self.config_file.exists():
            raise ConfigError(f"Config not found: {self.config_file}")

        data = self._read_yaml(self.config_file) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Invalid config {self.config_file}: expected a mapping")

        driver = dict(data.get("driver") or {})
        platforms = self._named_list(data, "platforms")
        suites = self._named_list(data, "suites")

        self.instances.clear()
        for suite in suites:
            for platform in platforms:
                if not self._suite_applies(suite, platform["name"]):
                    continue
                entry = self._build_entry(driver, suite, platform)
                self.instances[entry.name] = entry

        logger.info(f"Loaded {len(self.instances)} instance(s)")

    def _build_entry(
        self, driver: Dict[str, Any], suite: Dict[str, Any], platform: Dict[str, Any]
    ) -> InstanceEntry:
        settings = deep_merge(driver, platform.get("driver") or {}, suite.get("driver") or {})
        settings.setdefault("image", platform["name"])

        name = instance_name(suite["name"], platform["name"])
        try:
            config = DokkenConfig(**settings)
        except ValidationError as e:
            logger.error(f"Invalid driver config for {name}: {e}")
            raise ConfigError(f"Invalid driver config for {name}: {e}") from e

        return InstanceEntry(
            instance=InstanceSpec(name=name, platform=PlatformSpec(name=platform["name"])),
            config=config,
            suite=suite["name"],
        )

    def _named_list(self, data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
        """Read a list of mappings that each carry a ``name``."""
        items = data.get(key) or []
        if not isinstance(items, list):
            raise ConfigError(f"'{key}' must be a list")

        result = []
        for item in items:
            if not isinstance(item, dict) or not item.get("name"):
                raise ConfigError(f"Every entry in '{key}' needs a name")
            item = dict(item)
            item["name"] = str(item["name"])
            result.append(item)
        return result

    @staticmethod
    def _suite_applies(suite: Dict[str, Any], platform_name: str) -> bool:
        includes = suite.get("includes")
        if includes and platform_name not in includes:
            return False
        excludes = suite.get("excludes") or []
        return platform_name not in excludes

    def _read_yaml(self, file_path: Path) -> Any:
        """Read and parse YAML file."""
        try:
            return self.yaml.load(file_path.read_text())
        except YAMLError as e:
            raise ConfigError(f"Invalid YAML in {file_path}: {e}") from e

    def get_instance(self, name: str) -> Optional[InstanceEntry]:
        """Get instance by name."""
        return self.instances.get(name)

    def select(self, name: Optional[str] = None, all_instances: bool = False) -> List[InstanceEntry]:
        """Pick instances by exact name, by regular expression, or all of them."""
        if all_instances or not name:
            return list(self.instances.values())
        if name in self.instances:
            return [self.instances[name]]

        try:
            pattern = re.compile(name)
        except re.error as e:
            raise ConfigError(f"Invalid instance pattern {name!r}: {e}") from e
        matches = [entry for n, entry in self.instances.items() if pattern.search(n)]
        if not matches:
            raise ConfigError(f"No instances match {name!r}, try running 'dokken list'")
        return matches
