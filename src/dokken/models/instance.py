"""Instance identity models."""

from pydantic import BaseModel, Field


class PlatformSpec(BaseModel):
    """Platform an instance runs on."""
    name: str = Field(..., description="Platform name")

    class Config:
        """Pydantic config."""
        frozen = True


class InstanceSpec(BaseModel):
    """Identity of the instance under test."""
    name: str = Field(..., description="Instance name")
    platform: PlatformSpec

    class Config:
        """Pydantic config."""
        frozen = True
