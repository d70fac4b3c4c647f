"""Canonical names for the images and containers of an instance.

All functions here are pure: they take explicit arguments and never
touch the engine.
"""

import tempfile
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_TAG = "latest"
HELPER_IMAGE_REPOSITORY = "someara/chef"


def split(ref: str) -> Tuple[str, str]:
    """Split an image reference into ``(repository, tag)``.

    The reference is split on the first colon only. A missing or empty
    tag resolves to ``latest``.
    """
    repository, _, tag = ref.partition(":")
    return repository, tag or DEFAULT_TAG


def repo(ref: str) -> str:
    """Repository part of an image reference."""
    return split(ref)[0]


def tag(ref: str) -> str:
    """Tag part of an image reference."""
    return split(ref)[1]


def qualified(ref: str) -> str:
    """Image reference with an explicit tag."""
    return "{}:{}".format(*split(ref))


def work_image_name(prefix: Optional[str], instance_name: str) -> str:
    """Name of the image built for an instance."""
    if prefix:
        return f"{prefix}/{instance_name}"
    return instance_name


def helper_image_name(chef_version: str) -> str:
    return f"{HELPER_IMAGE_REPOSITORY}:{chef_version}"


def helper_container_name(chef_version: str) -> str:
    return f"chef-{chef_version}"


def data_container_name(instance_name: str) -> str:
    return f"{instance_name}-data"


def runner_container_name(instance_name: str) -> str:
    return instance_name


def build_context_dir(instance_name: str, root: Optional[Path] = None) -> Path:
    """Directory holding the build context of an instance's work image."""
    base = Path(root) if root else Path(tempfile.gettempdir())
    return base / "dokken" / instance_name
