"""Presentation order and verdict mapping for thumbnail A/B comparisons.

Vision models tend to prefer whichever image they see first. Every comparison
therefore draws a `PresentationAssignment` that decides whether the caller's
A/B pair is shown as-is or swapped, and the model's positional answer
("image 1" / "image 2") is mapped back to the caller's labels afterwards.

Everything here is pure apart from `PresentationAssignment.draw`, so the
mapping can be tested with fixed assignments.
"""

import logging
import random
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import MalformedOutputError
from .logging_config import inc_metric
from .models import (
    ComparisonResult,
    CriterionResult,
    Label,
    RawCriterion,
    RawVerdict,
)
from .sanitizer import parse_json_object

log = logging.getLogger("tubemaster")


class PresentationAssignment(BaseModel):
    """Which caller label sits in which prompt position for one call."""

    model_config = ConfigDict(frozen=True)

    swapped: bool = False

    @classmethod
    def draw(cls, rng: Optional[random.Random] = None) -> "PresentationAssignment":
        rng = rng or random.SystemRandom()
        return cls(swapped=rng.random() < 0.5)

    @property
    def order(self) -> Tuple[Label, Label]:
        """Caller labels in presentation order (position 1, position 2)."""
        return ("B", "A") if self.swapped else ("A", "B")

    def label_for(self, position: int) -> Label:
        if position not in (1, 2):
            raise ValueError(f"position must be 1 or 2, got {position}")
        return self.order[position - 1]

    def position_for(self, label: Label) -> int:
        return self.order.index(label) + 1


def winner_position(token) -> Optional[int]:
    """
    Read a positional winner out of model text.

    Accepts "1"/"2" and natural-language answers containing "image 1" or
    "image 2". Returns None if neither matches.
    """
    clean = str(token).strip() if token is not None else ""
    lowered = clean.lower()
    if clean == "1" or "image 1" in lowered:
        return 1
    if clean == "2" or "image 2" in lowered:
        return 2
    return None


def map_winner(token, assignment: PresentationAssignment) -> Label:
    position = winner_position(token)
    if position is None:
        # Known bias: unreadable answers credit whoever was shown first.
        log.warning("Unrecognized winner token %r, defaulting to position 1", token)
        inc_metric("unrecognized_winner_tokens")
        position = 1
    return assignment.label_for(position)


def map_verdict(raw: RawVerdict, assignment: PresentationAssignment) -> ComparisonResult:
    """Convert a positional verdict into one keyed to the caller's labels."""
    score_by_label = {
        assignment.label_for(1): raw.score1,
        assignment.label_for(2): raw.score2,
    }
    return ComparisonResult(
        winner=map_winner(raw.winner, assignment),
        scoreA=score_by_label["A"],
        scoreB=score_by_label["B"],
        reasoning=raw.reasoning,
        breakdown=[
            CriterionResult(
                criterion=item.criterion,
                winner=map_winner(item.winner, assignment),
                explanation=item.explanation,
            )
            for item in raw.breakdown
        ],
    )


def unmap_result(result: ComparisonResult, assignment: PresentationAssignment) -> RawVerdict:
    """Inverse of map_verdict: express a labeled result in prompt positions."""
    score_by_position = {
        assignment.position_for("A"): result.score_a,
        assignment.position_for("B"): result.score_b,
    }
    return RawVerdict(
        winner=str(assignment.position_for(result.winner)),
        score1=score_by_position[1],
        score2=score_by_position[2],
        reasoning=result.reasoning,
        breakdown=[
            RawCriterion(
                criterion=item.criterion,
                winner=str(assignment.position_for(item.winner)),
                explanation=item.explanation,
            )
            for item in result.breakdown
        ],
    )


def parse_raw_verdict(text: str) -> RawVerdict:
    """Sanitize model text and validate it as a positional verdict."""
    payload = parse_json_object(text)
    try:
        return RawVerdict.model_validate(payload)
    except ValidationError as e:
        raise MalformedOutputError(f"Verdict failed validation: {e}", raw=text) from e
