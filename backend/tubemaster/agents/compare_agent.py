# backend/tubemaster/agents/compare_agent.py

import asyncio
import logging
import random
from typing import Optional

from ..clients.vision_client import VisionComparisonClient
from ..config import Settings
from ..imaging import DECODE_TIMEOUT_SECONDS, JPEG_QUALITY, MAX_EDGE, normalize_image
from ..logging_config import inc_metric, measure
from ..models import ComparisonRequest, ComparisonResult
from ..verdict import PresentationAssignment, map_verdict, parse_raw_verdict

log = logging.getLogger("tubemaster")

COMPARE_SYSTEM = (
    "Act as a specialized YouTube Thumbnail Optimization AI. "
    "You evaluate images for CTR potential."
)

CRITERIA = [
    "Mobile Clarity",
    "Facial Dominance",
    "Text Readability",
    "Curiosity Gap",
    "Color Vibrancy",
    "Subject Isolation",
    "Rule of Thirds",
    "Emotional Impact",
    "Visual Hierarchy",
    "Lighting Quality",
]

COMPARE_RUBRIC = """
Evaluate Image 1 and Image 2 based on:
{criteria}

OUTPUT FORMAT (JSON ONLY):
{{
  "winner": "1" or "2",
  "score1": (0-10 float),
  "score2": (0-10 float),
  "reasoning": "Direct explanation.",
  "breakdown": [
    {{ "criterion": "Mobile Clarity", "winner": "1" or "2", "explanation": "..." }},
    ...
  ]
}}
""".format(criteria="\n".join(f"{i}. {name}" for i, name in enumerate(CRITERIA, start=1)))


async def run_compare_agent(
    request: ComparisonRequest,
    client: VisionComparisonClient,
    *,
    settings: Optional[Settings] = None,
    assignment: Optional[PresentationAssignment] = None,
    rng: Optional[random.Random] = None,
) -> ComparisonResult:
    """
    Thumbnail A/B comparison with position randomization.

    1. Normalize both images concurrently (fails open per image).
    2. Draw one presentation assignment, unless a fixed one is injected.
    3. One vision call with the images in presentation order, labeled only
       "Image 1" / "Image 2".
    4. Validate the positional verdict and map it back to A/B.

    TransportError and MalformedOutputError propagate to the caller.
    """
    max_edge = settings.image_max_edge if settings else MAX_EDGE
    quality = settings.image_jpeg_quality if settings else JPEG_QUALITY
    timeout = settings.image_decode_timeout_seconds if settings else DECODE_TIMEOUT_SECONDS

    image_a, image_b = await asyncio.gather(
        normalize_image(request.image_a, max_edge=max_edge, quality=quality, timeout=timeout),
        normalize_image(request.image_b, max_edge=max_edge, quality=quality, timeout=timeout),
    )

    assignment = assignment or PresentationAssignment.draw(rng)
    by_label = {"A": image_a, "B": image_b}
    image_1 = by_label[assignment.label_for(1)]
    image_2 = by_label[assignment.label_for(2)]
    log.debug("Presentation order: %s", assignment.order)

    with measure("vision_compare"):
        raw_text = await client.compare(
            COMPARE_RUBRIC, image_1, image_2, system_prompt=COMPARE_SYSTEM
        )

    verdict = parse_raw_verdict(raw_text)
    result = map_verdict(verdict, assignment)

    inc_metric("comparisons_completed")
    log.info(
        "Comparison complete: winner=%s scoreA=%s scoreB=%s",
        result.winner,
        result.score_a,
        result.score_b,
    )
    return result
