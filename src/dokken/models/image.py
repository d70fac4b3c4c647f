"""Image reference model."""

from pydantic import BaseModel, Field

from dokken import naming


class ImageReference(BaseModel):
    """An image repository and tag."""
    repository: str = Field(..., min_length=1, description="Image repository")
    tag: str = Field(default=naming.DEFAULT_TAG)

    class Config:
        """Pydantic config."""
        frozen = True

    @classmethod
    def parse(cls, ref: str) -> "ImageReference":
        """Parse a ``repo:tag`` string."""
        repository, tag = naming.split(ref)
        return cls(repository=repository, tag=tag)

    def __str__(self) -> str:
        return f"{self.repository}:{self.tag}"
