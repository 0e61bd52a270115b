"""
JSON utilities for structured-extraction model responses.

Models asked for a JSON object still occasionally wrap it in a code fence,
add a sentence of preamble, or emit slightly malformed JSON (single quotes,
trailing commas). ``parse_llm_json`` recovers the object in those cases and
uses the json-repair library as the last resort.
"""

import json
import re
from typing import Any, Dict

from json_repair import repair_json

_FENCE_PATTERN = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)


def parse_llm_json(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object from a model response.

    Args:
        text: Raw response text that should contain one JSON object

    Returns:
        The parsed object

    Raises:
        ValueError: If no JSON object can be extracted or repaired

    Example:
        >>> parse_llm_json('```json\\n{"firstName": "Ada"}\\n```')
        {'firstName': 'Ada'}
    """
    if not text or not text.strip():
        raise ValueError("Empty input: no JSON content to parse")

    candidate = _extract_json_object(_strip_code_fence(text.strip()))

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        try:
            parsed = repair_json(candidate, return_objects=True)
        except Exception as e:
            raise ValueError(f"Failed to repair JSON: {e}") from e

    return _as_object(parsed, text)


def _strip_code_fence(text: str) -> str:
    """Remove a surrounding ``` / ```json fence."""
    return _FENCE_PATTERN.sub("", text).strip()


def _extract_json_object(text: str) -> str:
    """
    Return the span from the first '{' to the last '}'.

    Raises:
        ValueError: If the text holds no object-like span
    """
    if text.startswith("{"):
        return text

    match = _OBJECT_PATTERN.search(text)
    if match:
        return match.group(0)

    raise ValueError(f"No JSON object found in text: {text[:200]}")


def _as_object(parsed: Any, original: str) -> Dict[str, Any]:
    if isinstance(parsed, dict):
        return parsed
    # A single object wrapped in a list: [{...}]
    if isinstance(parsed, list) and len(parsed) == 1 and isinstance(parsed[0], dict):
        return parsed[0]
    if isinstance(parsed, str) and parsed.strip().startswith("{"):
        return _as_object(json.loads(parsed), original)
    raise ValueError(
        f"Expected a JSON object, got {type(parsed).__name__}. "
        f"Original text (first 500 chars): {original[:500]}"
    )
