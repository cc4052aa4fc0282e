import pytest

from components import badge_label, breakdown_html, score_html


def test_breakdown_escapes_model_text():
    item = {"criterion": "<img src=x onerror=alert(1)>", "winner": "B"}

    out = breakdown_html(item)

    assert "<img" not in out
    assert "&lt;img src=x onerror=alert(1)&gt;" in out
    assert 'class="badge badge-B"' in out


@pytest.mark.parametrize("winner", ['A" onmouseover="x', "both", None, 1])
def test_badge_only_renders_known_labels(winner):
    assert badge_label(winner) == "A"
    assert 'class="badge badge-A">A</span>' in breakdown_html({"criterion": "Clarity", "winner": winner})


def test_score_marks_winner():
    result = {"winner": "B", "scoreA": 6.5, "scoreB": 8.0}

    assert 'class="score winner">8.0' in score_html(result, "B")
    assert 'class="score">6.5' in score_html(result, "A")
    assert score_html(None, "A") == ""
