# backend/tubemaster/agents/thumbnail_agent.py

import logging
import time
from typing import Optional

from ..clients.chat_client import ChatCompletionClient
from ..clients.image_client import ImageGenerationClient
from ..errors import MalformedOutputError, TransportError
from ..models import GeneratedThumbnail

log = logging.getLogger("tubemaster")

OPTIMIZE_SYSTEM = "You are a Prompt Engineer."
OPTIMIZE_PROMPT = (
    'Rewrite this image prompt for high-CTR. Style: {style}. Mood: {mood}. '
    'Original: "{prompt}". Output ONLY the prompt text.'
)


async def optimize_prompt(
    prompt: str, style: str, mood: str, client: ChatCompletionClient
) -> Optional[str]:
    """Ask the text model for a punchier prompt. Returns None if that fails."""
    try:
        text = await client.complete_text(
            OPTIMIZE_SYSTEM,
            OPTIMIZE_PROMPT.format(style=style, mood=mood, prompt=prompt),
            json_mode=False,
        )
    except (TransportError, MalformedOutputError) as e:
        log.warning("Prompt optimization failed, using original: %s", e)
        return None
    return text.strip().strip('"') or None


async def run_thumbnail_agent(
    prompt: str,
    style: str,
    mood: str,
    optimize: bool,
    image_client: ImageGenerationClient,
    text_client: Optional[ChatCompletionClient] = None,
) -> GeneratedThumbnail:
    """
    Generate a 16:9 thumbnail.

    When `optimize` is set and a text client is available the prompt is
    rewritten first; that step is best effort.
    """
    prompt = (prompt or "").strip()
    if not prompt:
        raise ValueError("Prompt must not be empty.")

    optimized = prompt
    if optimize and text_client is not None:
        optimized = await optimize_prompt(prompt, style, mood, text_client) or prompt

    final_prompt = f"{optimized}, {style} style, {mood} atmosphere, 8k resolution, detailed, high quality"
    log.info("🎨 Generating thumbnail (%s / %s)", style, mood)
    image = await image_client.generate(final_prompt, aspect_ratio="16:9")

    return GeneratedThumbnail(
        imageUrl=image.to_data_url(),
        originalPrompt=prompt,
        optimizedPrompt=optimized,
        style=style,
        createdAt=int(time.time() * 1000),
    )
