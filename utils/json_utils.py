import json
import re
from typing import Any, Dict, Optional
from logger_manager import log_debug, log_error


def extract_json_from_text(text: str) -> Optional[Dict[str, Any]]:
    """
    Pull the first JSON object out of an LLM reply.
    Handles markdown fences and chatter before or after the object.
    """
    if not text:
        return None

    # Find JSON in the response using regex
    json_match = re.search(r'({.*})', text.replace('\n', ' '), re.DOTALL)
    if not json_match:
        log_debug("No JSON object found in LLM response")
        return None

    candidate = json_match.group(0)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass

    # Greedy match can swallow trailing braces, retry on the outermost pair
    start = text.find('{')
    end = text.rfind('}')
    if start == -1 or end <= start:
        return None
    try:
        return json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        log_error(f"JSON parsing error: {e}", e)
        return None


def to_float(value, default=None) -> Optional[float]:
    """Coerce a provider or model value to float, returning default when not numeric."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default
