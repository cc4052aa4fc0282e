# backend/tubemaster/clients/vision_client.py

import logging

from ..models import ImageAsset
from .chat_client import ChatCompletionClient

log = logging.getLogger("tubemaster")


class VisionComparisonClient:
    """Sends a rubric plus two positioned images in a single multimodal request."""

    def __init__(self, chat_client: ChatCompletionClient):
        self.chat_client = chat_client

    @staticmethod
    def build_messages(system_prompt: str, rubric: str, image_1: ImageAsset, image_2: ImageAsset):
        return [
            {"role": "system", "content": system_prompt},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": rubric},
                    {"type": "image_url", "image_url": {"url": image_1.to_data_url()}},
                    {"type": "image_url", "image_url": {"url": image_2.to_data_url()}},
                ],
            },
        ]

    async def compare(
        self,
        rubric: str,
        image_1: ImageAsset,
        image_2: ImageAsset,
        *,
        system_prompt: str,
    ) -> str:
        messages = self.build_messages(system_prompt, rubric, image_1, image_2)
        log.info("Sending comparison to %s (%s)", self.chat_client.provider_name, self.chat_client.model)
        return await self.chat_client.complete(messages, json_mode=True)
