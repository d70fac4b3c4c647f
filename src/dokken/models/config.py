"""Driver configuration model."""

import os
from typing import List, Optional
from pydantic import BaseModel, Field, validator


DEFAULT_PID_ONE_COMMAND = 'sh -c "trap exit 0 SIGTERM; while :; do sleep 1; done"'
DEFAULT_DATA_IMAGE = "someara/kitchen-cache:latest"
DEFAULT_DOCKER_HOST_URL = "unix:///var/run/docker.sock"


def default_docker_host_url() -> str:
    """Engine URL from ``DOCKER_HOST``, falling back to the local socket."""
    return os.environ.get("DOCKER_HOST") or DEFAULT_DOCKER_HOST_URL


class DokkenConfig(BaseModel):
    """Driver configuration for one instance."""
    image: str = Field(..., description="Platform image reference")
    pid_one_command: str = Field(default=DEFAULT_PID_ONE_COMMAND)
    privileged: bool = Field(default=False)
    image_prefix: Optional[str] = Field(None, description="Prefix for the work image name")
    chef_version: str = Field(default="12.5.1")
    data_image: str = Field(default=DEFAULT_DATA_IMAGE)
    docker_host_url: str = Field(default_factory=default_docker_host_url)
    read_timeout: int = Field(default=3600, ge=1)
    write_timeout: int = Field(default=3600, ge=1)
    api_retries: int = Field(default=20, ge=0)
    intermediate_instructions: List[str] = Field(default_factory=list)

    # Connection scoped TLS verification; None leaves TLS unconfigured
    tls_verify: Optional[bool] = None
    # Surface non-conflict errors from the chef container create
    strict_helper_container: bool = Field(default=False)
    # Also delete the data container on destroy
    remove_data_container: bool = Field(default=False)

    @validator("intermediate_instructions", pre=True)
    def wrap_single_instruction(cls, v):
        """Accept a single instruction string as a one-element list."""
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

    @validator("chef_version")
    def validate_chef_version(cls, v):
        """Chef version ends up in an image tag and a container name."""
        if not v or ":" in v or "/" in v:
            raise ValueError(f"Invalid chef version: {v!r}")
        return v

    class Config:
        """Pydantic config."""
        extra = "ignore"
        frozen = True
