# app/core/context.py
"""
Application context: the collaborators shared by all requests.

Built once at startup, stored on app.state.context, closed at shutdown.
Tests build their own with fake collaborators.
"""
from dataclasses import dataclass

from app.config import Settings, settings as default_settings
from app.services.generation import ImageGenerator, build_generator
from app.services.image_host import CloudinaryImageHost, ImageHost
from app.services.images import ImageManager
from app.services.lifecycle import GenerationQueue


@dataclass
class AppContext:
    settings: Settings
    image_host: ImageHost
    images: ImageManager
    generation: GenerationQueue

    @classmethod
    def build(
        cls,
        settings: Settings | None = None,
        image_host: ImageHost | None = None,
        generator: ImageGenerator | None = None,
    ) -> "AppContext":
        settings = settings or default_settings
        host = image_host or CloudinaryImageHost.from_settings(settings)
        images = ImageManager(
            host,
            upload_folder=settings.cloudinary_upload_folder,
            max_upload_bytes=settings.max_upload_bytes,
        )
        queue = GenerationQueue(
            generator or build_generator(settings),
            images,
            delay_seconds=settings.generation_delay_seconds,
            generated_folder=settings.cloudinary_generated_folder,
        )
        return cls(settings=settings, image_host=host, images=images, generation=queue)

    async def close(self) -> None:
        """Stop pending generation work, then release the image host's HTTP client."""
        await self.generation.shutdown()
        await self.image_host.aclose()
