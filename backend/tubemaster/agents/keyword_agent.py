# backend/tubemaster/agents/keyword_agent.py

import logging
from typing import List

from pydantic import ValidationError

from ..clients.chat_client import ChatCompletionClient
from ..errors import MalformedOutputError
from ..models import KeywordIdea
from ..sanitizer import parse_json_collection

log = logging.getLogger("tubemaster")

KEYWORD_SYSTEM = "Act as a world-class YouTube SEO Expert. Return strictly JSON."

KEYWORD_PROMPT = """Analyze the topic: "{topic}" and generate exactly 10 high-potential keywords.
For EACH keyword, apply these 10 Logic Points:
1. searchVolume: Estimate monthly searches.
2. difficulty: 0-100 score (KD).
3. opportunityScore: 0-100 score.
4. trend: Rising, Stable, Falling, Seasonal.
5. intent: Informational, Educational, Entertainment, Commercial.
6. cpc: Estimate value ($).
7. competitionDensity: Low, Medium, High.
8. topCompetitor: Name a likely channel.
9. videoAgeAvg: Fresh or Old.
10. ctrPotential: High, Avg, Low.

Return JSON Object with a key "keywords" containing an array of objects,
each with a "keyword" field plus the 10 fields above."""


async def run_keyword_agent(topic: str, client: ChatCompletionClient) -> List[KeywordIdea]:
    """
    Keyword finder: ten keyword ideas with SEO estimates for a topic.

    The model may answer {"keywords": [...]} or a bare list; both are accepted.
    """
    topic = (topic or "").strip()
    if not topic:
        raise ValueError("Topic must not be empty.")

    log.info("🔎 Keyword Agent started (topic=%r)", topic[:80])
    raw = await client.complete_text(KEYWORD_SYSTEM, KEYWORD_PROMPT.format(topic=topic))
    parsed = parse_json_collection(raw)

    items = parsed.get("keywords", parsed) if isinstance(parsed, dict) else parsed
    if not isinstance(items, list):
        raise MalformedOutputError("Keyword response has no keyword list", raw=raw)

    try:
        keywords = [KeywordIdea.model_validate(item) for item in items]
    except ValidationError as e:
        raise MalformedOutputError(f"Keyword entries failed validation: {e}", raw=raw) from e

    log.info("✅ Keyword Agent complete (%d keywords)", len(keywords))
    return keywords
