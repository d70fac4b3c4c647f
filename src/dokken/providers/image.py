"""Image provider for pulling, building and removing images."""

import logging
from pathlib import Path
from typing import List

from dokken.models.image import ImageReference
from dokken.providers.base import BaseProvider, ProviderStatus
from dokken.utils.templates import render_template


logger = logging.getLogger(__name__)

BUILD_MARKER = 'RUN /bin/sh -c "echo Built with Test Kitchen"'

DOCKERFILE_TEMPLATE = (
    "FROM {{ platform_image }}\n"
    "{% for instruction in instructions %}"
    "{{ instruction }}{% if not loop.last %}\n{% endif %}"
    "{% endfor %}"
)


def render_dockerfile(platform_image: str, intermediate_instructions: List[str]) -> str:
    """Render the build descriptor layered on the platform image."""
    instructions = [BUILD_MARKER] + list(intermediate_instructions or [])
    return render_template(
        DOCKERFILE_TEMPLATE,
        platform_image=platform_image,
        instructions=instructions,
    )


class ImageProvider(BaseProvider):
    """Provider for engine images."""

    def status(self, spec: ImageReference) -> ProviderStatus:
        """Check if image exists locally."""
        if self.call(lambda: self.engine.image_exists(str(spec))):
            return ProviderStatus.PRESENT
        return ProviderStatus.ABSENT

    def present(self, spec: ImageReference) -> bool:
        """Pull the image unless it is already local; return whether it was pulled."""
        if self.status(spec) == ProviderStatus.PRESENT:
            logger.debug(f"Image {spec} already present")
            return False

        logger.info(f"Pulling image {spec}")
        self.call(lambda: self.engine.pull_image(spec.repository, spec.tag))
        return True

    def absent(self, spec: ImageReference) -> bool:
        """Remove the image if it exists."""
        if self.status(spec) == ProviderStatus.ABSENT:
            logger.debug(f"Image {spec} already absent")
            return False

        logger.info(f"Removing image {spec}")
        self.call(lambda: self.engine.remove_image(str(spec)))
        return True

    def build(self, spec: ImageReference, context_dir: Path, dockerfile: str) -> bool:
        """Build and tag an image unless it already exists.

        Returns whether a build took place.
        """
        if self.status(spec) == ProviderStatus.PRESENT:
            logger.debug(f"Image {spec} already built")
            return False

        context_dir.mkdir(parents=True, exist_ok=True)
        (context_dir / "Dockerfile").write_text(dockerfile)
        logger.debug(f"Wrote build context to {context_dir}")

        image_id = self.call(lambda: self.engine.build_image(context_dir, nocache=True, rm=True))
        self.call(lambda: self.engine.tag_image(image_id, spec.repository, spec.tag))
        logger.info(f"Built image {spec} ({image_id})")
        return True

    def pull_if_missing(self, ref: str) -> bool:
        """Convenience wrapper around :meth:`present` for a reference string."""
        return self.present(ImageReference.parse(ref))
