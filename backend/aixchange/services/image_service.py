"""Image Service — generated solution/event images and user uploads on local storage.

Invariants:
    - Solution images: solutions/<sanitized-title>-<timestamp>.<format>; failures raise
      ImageGenerationError so the route can answer with the default-image fallback
    - Event images: events/event-<md5(prompt)[:8]>.png; failures are logged and yield ""
    - Uploads go to <folder>/<sanitized-name>-<timestamp><ext>

Design Decisions:
    - One service instance per process (get_image_service, lru_cache); tests swap it
      through FastAPI dependency_overrides
"""

import logging
import time
from dataclasses import dataclass
from functools import lru_cache

from aixchange.config import Settings, get_settings
from aixchange.core.errors import ImageGenerationError
from aixchange.core.filenames import (
    build_event_image_filename, build_generated_filename, build_upload_filename,
)
from aixchange.infrastructure.image_client import ResilientImageClient
from aixchange.infrastructure.image_store import ImageStore

logger = logging.getLogger(__name__)

SOLUTION_FOLDER = "solutions"
EVENT_FOLDER = "events"


def solution_prompt(description: str) -> str:
    return (
        "Create a professional, modern visualization for an AI solution that "
        f"{description}. The image should be clean, minimalist, and suitable "
        "for a technology product card."
    )


def event_prompt(title: str, short_description: str | None) -> str:
    return f"{title} - {short_description}" if short_description else title


@dataclass
class StoredImage:
    url: str
    filename: str


def _now_ms() -> int:
    return int(time.time() * 1000)


class ImageService:
    def __init__(self, client: ResilientImageClient, store: ImageStore, settings: Settings):
        self.client = client
        self.store = store
        self.size = settings.image_size
        self.format = settings.image_format

    async def generate_solution_image(
        self, description: str, title: str | None = None,
    ) -> StoredImage:
        data = await self.client.generate_png(solution_prompt(description))
        filename = build_generated_filename(title, _now_ms(), self.format)
        url = await self.store.save(SOLUTION_FOLDER, filename, data)
        return StoredImage(url=url, filename=filename)

    async def generate_event_image(self, prompt: str) -> str:
        """Public URL of a generated event banner, or "" when generation fails."""
        full_prompt = (
            f"Create a professional, modern event banner image for: {prompt}. "
            "The image should be suitable for a tech event website."
        )
        try:
            data = await self.client.generate_png(full_prompt)
            return await self.store.save(
                EVENT_FOLDER, build_event_image_filename(prompt), data,
            )
        except (ImageGenerationError, OSError) as e:
            logger.warning(f"Event image generation failed: {e}")
            return ""

    async def save_upload(self, folder: str, original_name: str, data: bytes) -> StoredImage:
        filename = build_upload_filename(original_name, _now_ms())
        url = await self.store.save(folder, filename, data)
        return StoredImage(url=url, filename=filename)


@lru_cache
def get_image_service() -> ImageService:
    settings = get_settings()
    client = ResilientImageClient(
        api_key=settings.openai_api_key,
        model=settings.image_model,
        size=settings.image_size,
        quality=settings.image_quality,
        max_retries=settings.image_max_retries,
        base_delay_ms=settings.image_base_delay_ms,
        max_delay_ms=settings.image_max_delay_ms,
        timeout_seconds=settings.image_timeout_seconds,
    )
    return ImageService(client, ImageStore(settings.external_images_path), settings)
