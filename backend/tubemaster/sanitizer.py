# backend/tubemaster/sanitizer.py

import json
import re
from typing import Any, Dict, List, Union

from .errors import MalformedOutputError

_FENCE = re.compile(r"```[a-zA-Z]*[ \t]*")
_REASONING_BLOCK = re.compile(
    r"<(think|thinking|reasoning)>.*?</\1>", re.IGNORECASE | re.DOTALL
)
# An opening tag the model never closed swallows the rest of the text.
_REASONING_OPEN = re.compile(r"<(?:think|thinking|reasoning)>.*", re.IGNORECASE | re.DOTALL)


def strip_reasoning(text: str) -> str:
    """Remove inline <think>/<thinking>/<reasoning> segments."""
    if not text:
        return ""
    text = _REASONING_BLOCK.sub("", text)
    return _REASONING_OPEN.sub("", text)


def clean_json(text: str) -> str:
    """
    Reduce a model completion to the substring between its outermost braces.

    Code fences and reasoning segments are dropped first. Returns "{}" when no
    object-looking slice exists. The slice is not validated here, so callers
    must still treat a json.loads failure as an error.
    """
    if not text:
        return "{}"
    clean = _FENCE.sub("", text)
    clean = strip_reasoning(clean)
    first = clean.find("{")
    last = clean.rfind("}")
    if first == -1 or last == -1 or last <= first:
        return "{}"
    return clean[first : last + 1]


def parse_json_collection(text: str) -> Union[Dict[str, Any], List[Any]]:
    """
    Like parse_json_object, but also accepts a bare top-level JSON array.
    """
    body = strip_reasoning(_FENCE.sub("", text or "")).strip()
    if not body.startswith("["):
        return parse_json_object(text)
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as e:
        raise MalformedOutputError(f"Model returned invalid JSON: {e}", raw=text) from e
    return parsed


def parse_json_object(text: str) -> Dict[str, Any]:
    """Sanitize and parse a completion that must hold a JSON object."""
    cleaned = clean_json(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedOutputError(f"Model returned invalid JSON: {e}", raw=text) from e
    if not isinstance(parsed, dict):
        raise MalformedOutputError("Model JSON is not an object", raw=text)
    return parsed
