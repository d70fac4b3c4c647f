"""Container creation models."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class PortBinding(BaseModel):
    """Host side of a port binding; an empty host port is engine-assigned."""
    host_port: str = Field(default="")


class HostConfigSpec(BaseModel):
    """Host configuration block of a container."""
    privileged: bool = Field(default=False)
    volumes_from: List[str] = Field(default_factory=list)
    port_bindings: Dict[str, List[PortBinding]] = Field(default_factory=dict)
    publish_all_ports: bool = Field(default=False)

    def to_api(self) -> Dict[str, Any]:
        """Render the engine API ``HostConfig`` block."""
        return {
            "Privileged": self.privileged,
            "VolumesFrom": list(self.volumes_from),
            "PortBindings": {
                port: [{"HostPort": b.host_port} for b in bindings]
                for port, bindings in self.port_bindings.items()
            },
            "PublishAllPorts": self.publish_all_ports,
        }


class ContainerSpec(BaseModel):
    """Parameters for creating a container."""
    name: str = Field(..., description="Container name")
    image: str = Field(..., description="Image reference (repo:tag)")
    command: Optional[List[str]] = Field(None, description="Command argument list")
    host_config: HostConfigSpec = Field(default_factory=HostConfigSpec)

    class Config:
        """Pydantic config."""
        extra = "forbid"
