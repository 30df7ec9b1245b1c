"""
Response Parser for Sentinel

Turns the model's free-text answer into an analysis dictionary. Models often
wrap the JSON in markdown fences and sometimes run out of output tokens
mid-object, so parsing happens in three stages:

1. strict JSON after stripping the fences;
2. structural recovery: keep the longest prefix that is valid JSON once the
   open containers are closed;
3. pattern recovery: pull the known fields out with regular expressions.

Stages 2 and 3 mark their result as degraded by appending
``TRUNCATION_NOTICE`` to the recommendations.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from .errors import ParseError

logger = logging.getLogger(__name__)

TRUNCATION_NOTICE = (
    "Analysis output was truncated by the model; the results above were partially recovered."
)

# Fields of one finding, in the order the prompt asks for them
FINDING_FIELDS = (
    "severity", "type", "location", "title",
    "description", "code_snippet", "fix", "confidence",
)

_JSON_STRING = r'"((?:[^"\\]|\\.)*)"'

SUMMARY_PATTERN = re.compile(r'"summary"\s*:\s*' + _JSON_STRING, re.S)
SCORE_PATTERN = re.compile(r'"score"\s*:\s*(-?\d+)')
# The diagram is usually the field cut off by truncation, so the closing quote is optional
DIAGRAM_PATTERN = re.compile(r'"attack_diagram"\s*:\s*"((?:[^"\\]|\\.)*)"?', re.S)
FINDING_PATTERN = re.compile(
    r"\{\s*"
    + r"\s*,\s*".join(rf'"{name}"\s*:\s*{_JSON_STRING}' for name in FINDING_FIELDS)
    + r"\s*\}",
    re.S,
)

_TOKEN = re.compile(
    r'"(?:[^"\\]|\\.)*"'
    r'|-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?'
    r'|true|false|null'
    r'|[{}\[\]:,]'
)
_WHITESPACE = re.compile(r"\s*")

# Separator of Move module paths; Mermaid cannot parse it inside node labels
MODULE_PATH_SEPARATOR = "::"
SAFE_SEPARATOR = "_"


def strip_code_fences(text: str) -> str:
    """Remove a leading ```json / ``` fence and a trailing ``` fence."""
    stripped = (text or "").strip()
    if stripped.startswith("```json"):
        stripped = stripped[7:]
    elif stripped.startswith("```"):
        stripped = stripped[3:]
    if stripped.endswith("```"):
        stripped = stripped[:-3]
    return stripped.strip()


def sanitize_attack_diagram(diagram: str) -> str:
    """Make a recovered diagram renderable: real newlines, plain quotes, no ``::``."""
    cleaned = diagram.replace("\\n", "\n").replace('\\"', '"')
    return cleaned.replace(MODULE_PATH_SEPARATOR, SAFE_SEPARATOR).strip()


def _unescape(raw: str) -> str:
    """Decode a captured JSON string body, falling back to the raw text."""
    try:
        return json.loads(f'"{raw}"', strict=False)
    except json.JSONDecodeError:
        return raw


def repair_truncated_json(text: str) -> Optional[str]:
    """Return the longest structurally complete JSON prefix of ``text``.

    Scans tokens while tracking open containers. The prefix ends at the last
    point where a value was completed (or an array was opened); the open
    containers at that point are closed in order. Returns None when no object
    or array was started.
    """
    # Each frame is [kind, state]; object states: key_or_end, key, colon, value, comma;
    # array states: value_or_end, value, comma
    stack: List[List[str]] = []
    safe: Optional[Tuple[int, List[str]]] = None
    root_done = False
    pos = 0

    def expecting_value() -> bool:
        if not stack:
            return not root_done
        return stack[-1][1] in ("value", "value_or_end")

    def complete_value(end: int) -> None:
        nonlocal safe, root_done
        if not stack:
            root_done = True
            safe = (end, [])
            return
        stack[-1][1] = "comma"
        safe = (end, [frame[0] for frame in stack])

    while pos < len(text):
        pos = _WHITESPACE.match(text, pos).end()
        if pos >= len(text) or root_done:
            break
        match = _TOKEN.match(text, pos)
        if not match:
            break
        token = match.group(0)
        end = match.end()

        if token in ("{", "["):
            if not expecting_value():
                break
            stack.append(["{", "key_or_end"] if token == "{" else ["[", "value_or_end"])
            if token == "[" or len(stack) == 1:
                safe = (end, [frame[0] for frame in stack])
        elif token in ("}", "]"):
            opener = "{" if token == "}" else "["
            if not stack or stack[-1][0] != opener or stack[-1][1] not in ("comma", "key_or_end", "value_or_end"):
                break
            stack.pop()
            complete_value(end)
        elif token == ":":
            if not stack or stack[-1][0] != "{" or stack[-1][1] != "colon":
                break
            stack[-1][1] = "value"
        elif token == ",":
            if not stack or stack[-1][1] != "comma":
                break
            stack[-1][1] = "key" if stack[-1][0] == "{" else "value"
        elif token.startswith('"') and stack and stack[-1][0] == "{" and stack[-1][1] in ("key_or_end", "key"):
            stack[-1][1] = "colon"
        elif expecting_value():
            complete_value(end)
        else:
            break
        pos = end

    if safe is None:
        return None
    cut, open_frames = safe
    closers = "".join("}" if kind == "{" else "]" for kind in reversed(open_frames))
    return text[:cut] + closers


def _finalize(data: Dict[str, Any], degraded: bool) -> Dict[str, Any]:
    vulnerabilities = data.get("vulnerabilities")
    data["vulnerabilities"] = vulnerabilities if isinstance(vulnerabilities, list) else []
    recommendations = data.get("recommendations")
    data["recommendations"] = recommendations if isinstance(recommendations, list) else []
    if degraded:
        data["recommendations"].append(TRUNCATION_NOTICE)
        diagram = data.get("attack_diagram")
        if isinstance(diagram, str):
            data["attack_diagram"] = sanitize_attack_diagram(diagram)
    return data


def _structural_recovery(text: str) -> Optional[Dict[str, Any]]:
    repaired = repair_truncated_json(text)
    if repaired is None:
        return None
    try:
        data = json.loads(repaired, strict=False)
    except json.JSONDecodeError as e:
        logger.debug(f"Structural recovery produced invalid JSON: {e}")
        return None
    if not isinstance(data, dict) or not isinstance(data.get("summary"), str):
        return None

    # A finding cut off mid-object keeps only its leading fields; drop it
    findings = data.get("vulnerabilities")
    if isinstance(findings, list):
        data["vulnerabilities"] = [
            item for item in findings
            if isinstance(item, dict) and all(name in item for name in FINDING_FIELDS)
        ]
    return data


def _pattern_recovery(text: str) -> Optional[Dict[str, Any]]:
    summary_match = SUMMARY_PATTERN.search(text)
    if not summary_match:
        return None

    data: Dict[str, Any] = {"summary": _unescape(summary_match.group(1))}

    score_match = SCORE_PATTERN.search(text)
    if score_match:
        data["score"] = int(score_match.group(1))

    data["vulnerabilities"] = [
        {name: _unescape(value) for name, value in zip(FINDING_FIELDS, match.groups())}
        for match in FINDING_PATTERN.finditer(text)
    ]

    diagram_match = DIAGRAM_PATTERN.search(text)
    if diagram_match:
        data["attack_diagram"] = diagram_match.group(1)

    return data


def parse_analysis_response(response_text: str) -> Dict[str, Any]:
    """Parse the model answer into ``summary``/``score``/``vulnerabilities``/... .

    Raises ParseError when not even a summary can be recovered.
    """
    json_text = strip_code_fences(response_text)

    try:
        data = json.loads(json_text)
    except json.JSONDecodeError as e:
        logger.warning(f"Strict JSON parse failed ({e}); attempting recovery")
    else:
        if isinstance(data, dict):
            return _finalize(data, degraded=False)
        logger.warning(f"Model returned JSON {type(data).__name__}, expected an object")

    recovered = _structural_recovery(json_text)
    if recovered is not None:
        logger.info("Recovered analysis from truncated JSON")
        return _finalize(recovered, degraded=True)

    recovered = _pattern_recovery(json_text)
    if recovered is not None:
        logger.info(f"Recovered analysis by field extraction ({len(recovered['vulnerabilities'])} findings)")
        return _finalize(recovered, degraded=True)

    logger.error("Could not recover any analysis fields from model response")
    raise ParseError()


def parse_fix_response(response_text: str) -> Dict[str, Any]:
    """Parse the JSON answer to a fix prompt."""
    try:
        data = json.loads(strip_code_fences(response_text))
    except json.JSONDecodeError as e:
        logger.error(f"Fix generation returned invalid JSON: {e}")
        raise ParseError("Failed to generate fix") from e
    if not isinstance(data, dict):
        raise ParseError("Failed to generate fix")
    return data


def extract_candidate_text(envelope: Dict[str, Any]) -> str:
    """Return the text of the first candidate in a generateContent envelope."""
    try:
        parts = envelope["candidates"][0]["content"]["parts"]
        text = "".join(part.get("text", "") for part in parts)
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        logger.error(f"Unexpected response envelope: {str(envelope)[:300]}")
        raise ParseError("Model returned no analysis text") from e
    if not text.strip():
        raise ParseError("Model returned no analysis text")
    return text
