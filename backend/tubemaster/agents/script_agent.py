# backend/tubemaster/agents/script_agent.py

import logging

from pydantic import ValidationError

from ..clients.chat_client import ChatCompletionClient
from ..errors import MalformedOutputError
from ..models import VideoScript
from ..sanitizer import parse_json_object

log = logging.getLogger("tubemaster")

SCRIPT_SYSTEM = (
    "You are a professional YouTube Script Writer specializing in high-retention storytelling."
)

SCRIPT_STEPS = [
    "Hook",
    "Stakes",
    "Context",
    "Twist",
    "Value",
    "Retention Spike",
    "Emotion",
    "Re-engagement",
    "Payoff",
]

SCRIPT_PROMPT = """Write a YouTube script for "{title}" targeting "{audience}".
Logic sections: {steps}.
Return strictly JSON with keys: title, estimatedDuration, targetAudience, sections
(array of objects with title, logicStep, content, visualCue, psychologicalTrigger)."""


async def run_script_agent(title: str, audience: str, client: ChatCompletionClient) -> VideoScript:
    """Retention-oriented script, one section per storytelling step."""
    title = (title or "").strip()
    if not title:
        raise ValueError("Title must not be empty.")

    prompt = SCRIPT_PROMPT.format(
        title=title,
        audience=(audience or "general audience").strip(),
        steps=", ".join(SCRIPT_STEPS),
    )
    raw = await client.complete_text(SCRIPT_SYSTEM, prompt)
    payload = parse_json_object(raw)
    payload.setdefault("title", title)

    try:
        script = VideoScript.model_validate(payload)
    except ValidationError as e:
        raise MalformedOutputError(f"Script failed validation: {e}", raw=raw) from e

    log.info("✅ Script Agent complete (%d sections)", len(script.sections))
    return script
