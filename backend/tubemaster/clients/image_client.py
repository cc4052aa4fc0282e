# backend/tubemaster/clients/image_client.py

import asyncio
import base64
import logging
from typing import Any, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..config import Settings
from ..errors import ConfigurationError, MalformedOutputError, TransportError
from ..models import ImageAsset

log = logging.getLogger("tubemaster")


class ImageGenerationClient:
    """Thin async wrapper around the Gemini image model."""

    def __init__(self, api_key: Optional[str], model: str, client: Optional[Any] = None):
        if client is None:
            if not api_key:
                raise ConfigurationError("GEMINI_API_KEY is not set; thumbnail generation is unavailable.")
            client = genai.Client(api_key=api_key)
        self.client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImageGenerationClient":
        return cls(settings.require("gemini_api_key"), settings.image_model)

    def _generate_sync(self, prompt: str, aspect_ratio: str):
        try:
            return self.client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
                ),
            )
        except genai_errors.APIError as e:
            raise TransportError(f"Gemini API error: {e.message}", status=e.code) from e

    async def generate(self, prompt: str, aspect_ratio: str = "16:9") -> ImageAsset:
        resp = await asyncio.to_thread(self._generate_sync, prompt, aspect_ratio)

        candidates = getattr(resp, "candidates", None) or []
        content = getattr(candidates[0], "content", None) if candidates else None
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                data = inline.data
                if isinstance(data, bytes):
                    data = base64.b64encode(data).decode("ascii")
                return ImageAsset(mime_type=inline.mime_type or "image/png", data=data)

        log.warning("Gemini response contained no image part")
        raise MalformedOutputError("No image generated.")
