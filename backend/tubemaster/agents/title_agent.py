# backend/tubemaster/agents/title_agent.py

import logging
from typing import List

from ..clients.chat_client import ChatCompletionClient
from ..errors import MalformedOutputError
from ..sanitizer import parse_json_collection

log = logging.getLogger("tubemaster")

TITLE_SYSTEM = "You are a Viral Title Expert."
TITLE_PROMPT = (
    'Generate 10 click-worthy titles for: "{topic}". '
    'Return strictly JSON object with key "titles" (array of strings).'
)

BEST_TIME_SYSTEM = "You are a YouTube Analytics Expert."
BEST_TIME_PROMPT = (
    'Best time to publish: "{title}" for "{audience}". Tags: {tags}. '
    "Explain why briefly. Return plain text."
)


async def run_title_agent(topic: str, client: ChatCompletionClient) -> List[str]:
    topic = (topic or "").strip()
    if not topic:
        raise ValueError("Topic must not be empty.")

    raw = await client.complete_text(TITLE_SYSTEM, TITLE_PROMPT.format(topic=topic))
    parsed = parse_json_collection(raw)

    titles = parsed.get("titles") if isinstance(parsed, dict) else parsed
    if not isinstance(titles, list):
        raise MalformedOutputError("Title response has no title list", raw=raw)

    cleaned = [str(t).strip() for t in titles if str(t).strip()]
    log.info("✅ Title Agent complete (%d titles)", len(cleaned))
    return cleaned


async def run_best_time_agent(
    title: str,
    audience: str,
    tags: str,
    client: ChatCompletionClient,
) -> str:
    """Publish-time advice as plain text (JSON mode off)."""
    prompt = BEST_TIME_PROMPT.format(title=title, audience=audience, tags=tags or "none")
    text = await client.complete_text(BEST_TIME_SYSTEM, prompt, json_mode=False)
    if not text:
        raise MalformedOutputError("Best-time response was empty")
    return text
