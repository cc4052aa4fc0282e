import html
from typing import Optional

LABELS = ("A", "B")


def badge_label(winner) -> str:
    """Model output is untrusted; anything but A/B renders as A."""
    return winner if winner in LABELS else "A"


def score_html(result: Optional[dict], label: str) -> str:
    if not result:
        return ""
    score = html.escape(str(result.get(f"score{label}", 0)))
    css = "score winner" if result.get("winner") == label else "score"
    return f'<div class="{css}">{score}<span style="font-size:1rem;">/10</span></div>'


def breakdown_html(item: dict) -> str:
    winner = badge_label(item.get("winner"))
    criterion = html.escape(str(item.get("criterion", "")))
    return f'**{criterion}** <span class="badge badge-{winner}">{winner}</span>'
