"""
Turning a raw LLM completion into a CV document.

Two steps:

* ``normalize_completion`` isolates the JSON payload from whatever prose or
  code fence the model wrapped it in.
* ``parse_cv_document`` parses that payload and checks it is a JSON object.

The default ``heuristic`` normalizer slices on the first opening and last
closing delimiter. It is fooled by a stray ``}`` or ``]`` in trailing
commentary; that is a known limitation and is kept as-is. The ``balanced``
strategy instead returns the first complete JSON value found by decoding from
each candidate opening delimiter, and only falls back to the heuristic when
no candidate decodes.
"""
import json
import logging
import re
from typing import Any, Dict

from .errors import MalformedJson, NoJsonFound, UnexpectedShape

logger = logging.getLogger(__name__)

HEURISTIC = "heuristic"
BALANCED = "balanced"
STRATEGIES = (HEURISTIC, BALANCED)

_JSON_START = re.compile(r"[{\[]")
_FENCE_OPEN_JSON = re.compile(r"^```json\s*")
_FENCE_OPEN = re.compile(r"^```\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")

_decoder = json.JSONDecoder()


def _strip_fence(text: str) -> str:
    if text.startswith("```json"):
        return _FENCE_CLOSE.sub("", _FENCE_OPEN_JSON.sub("", text, count=1), count=1)
    if text.startswith("```"):
        return _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text, count=1), count=1)
    return text


def _normalize_heuristic(raw: str) -> str:
    text = raw.strip()

    match = _JSON_START.search(text)
    if match is None:
        raise NoJsonFound(raw)
    if match.start() > 0:
        text = text[match.start():]

    text = _strip_fence(text)

    last = max(text.rfind("}"), text.rfind("]"))
    if 0 < last < len(text) - 1:
        text = text[: last + 1]

    return text.strip()


def _normalize_balanced(raw: str) -> str:
    text = raw.strip()
    if _JSON_START.search(text) is None:
        raise NoJsonFound(raw)

    for match in _JSON_START.finditer(text):
        try:
            _, end = _decoder.raw_decode(text, match.start())
        except ValueError:
            continue
        return text[match.start():end].strip()

    # Nothing decodes; hand the heuristic slice on so the parser can report why
    return _normalize_heuristic(raw)


def normalize_completion(raw: str, strategy: str = HEURISTIC) -> str:
    """Return the isolated JSON payload of a raw completion."""
    if raw is None:
        raise NoJsonFound("")
    if strategy == HEURISTIC:
        return _normalize_heuristic(raw)
    if strategy == BALANCED:
        return _normalize_balanced(raw)
    raise ValueError(f"Unknown JSON extraction strategy: {strategy!r}")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def ensure_document(value: Any) -> Dict[str, Any]:
    """Accept an already-parsed value as a CV document if it is an object."""
    if not isinstance(value, dict):
        raise UnexpectedShape(f"CV data must be a JSON object, got {_json_type(value)}")
    return value


def parse_cv_document(payload: str) -> Dict[str, Any]:
    """Parse an isolated payload into a CV document.

    Unknown keys are kept untouched and missing keys stay missing.
    """
    try:
        value = json.loads(payload, parse_constant=_reject_constant)
    except ValueError as e:
        raise MalformedJson(str(e), raw=payload) from e
    return ensure_document(value)


def extract_cv_document(raw: str, strategy: str = HEURISTIC) -> Dict[str, Any]:
    try:
        payload = normalize_completion(raw, strategy)
        return parse_cv_document(payload)
    except (NoJsonFound, MalformedJson, UnexpectedShape) as e:
        logger.warning(f"Could not extract CV document ({e.kind}): {(raw or '')[:500]!r}")
        raise


def _json_type(value: Any) -> str:
    if isinstance(value, list):
        return "array"
    if isinstance(value, str):
        return "string"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if value is None:
        return "null"
    return type(value).__name__
