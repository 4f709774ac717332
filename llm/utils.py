import json
import re
from typing import Any, Dict, Optional

THINK_TAG_PATTERN = re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE)
CODE_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?```$", re.DOTALL | re.IGNORECASE)


def sanitize_response_text(raw: Optional[str]) -> str:
    """Remove thinking annotations and markdown code fences, trim whitespace."""
    if not raw:
        return ""
    cleaned = THINK_TAG_PATTERN.sub("", raw).strip()
    match = CODE_FENCE_PATTERN.match(cleaned)
    if match:
        cleaned = match.group(1).strip()
    return cleaned


def extract_json_object(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    """Attempt to parse a JSON object from model output.

    Tries a direct decode first, then the outermost ``{...}`` substring.
    Returns None when no JSON object can be recovered.
    """
    cleaned = sanitize_response_text(raw)
    if not cleaned:
        return None

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        data = None

    if data is None:
        start = cleaned.find("{")
        end = cleaned.rfind("}")
        if start == -1 or end <= start:
            return None
        try:
            data = json.loads(cleaned[start : end + 1])
        except json.JSONDecodeError:
            return None

    return data if isinstance(data, dict) else None
