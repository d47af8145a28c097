import re
import json
import logging
from typing import Dict, Any, Iterator, Optional, Tuple

from promptplanner.llm_provider.base import PlannerError

logger = logging.getLogger(__name__)


class AnalysisParseError(PlannerError):
    """Raised when no JSON object can be recovered from a model reply."""
    pass


def redact_api_key(text):
    redacted = re.sub(r"\b(Bearer|Token|x-api-key)\b(\s*[:=]\s*|\s+)[\w\-\.]+", r"\1\2<REDACTED>", text, flags=re.IGNORECASE)
    redacted = re.sub(r"\b(sk|xai|gsk)-[A-Za-z0-9\-_]{8,}", r"\1-<REDACTED>", redacted)
    redacted = re.sub(r"(\"?api[_-]?key\"?\s*[:=]\s*\"?)([^\"\s,}]+)", r"\1<REDACTED>", redacted, flags=re.IGNORECASE)
    return redacted


def mask_key(api_key):
    """Short fingerprint of an API key for log lines."""
    if not api_key:
        return "<none>"
    if len(api_key) <= 8:
        return "****"
    return f"{api_key[:4]}...{api_key[-4:]}"


def _balanced_end(text: str, start: int) -> Optional[int]:
    """Index just past the brace closing the one at `start`, or None if it never closes."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        char = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return None


def _top_level_candidates(text: str) -> Iterator[Tuple[int, int]]:
    """Yield (start, end) spans of top-level brace-balanced regions."""
    start = text.find("{")
    while start != -1:
        end = _balanced_end(text, start)
        if end is None:
            # Truncated: everything after this brace belongs to the unfinished object.
            return
        yield start, end
        start = text.find("{", end)


def extract_json_object(text: str) -> Dict[str, Any]:
    """Pull the first decodable JSON object out of a free-form model reply.

    Only top-level brace-balanced regions are tried, in order; braces inside
    string literals do not count toward nesting. A region that fails to
    decode is skipped whole, so an object nested inside a malformed analysis
    is never returned in its place.
    """
    if not text or "{" not in text:
        raise AnalysisParseError("No JSON object found in AI response")

    for start, end in _top_level_candidates(text):
        try:
            return json.loads(text[start:end])
        except json.JSONDecodeError as e:
            logger.debug(f"Skipping undecodable JSON candidate at {start}: {e}")

    raise AnalysisParseError("No valid JSON object found in AI response")
