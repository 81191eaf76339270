"""
normalizer.py: turn raw text-generation output into a ComplianceAnalysis.

Models wrap JSON in markdown fences, surround it with prose, get cut off at
the token limit and rename fields. Each repair step below handles one of
those on its own; whatever survives is coerced into the canonical schema or
rejected with MalformedResponse so the caller can fall back to the baseline.
"""

import json
import logging
import math
import re
from typing import Callable, Iterable, List, Optional

from errors import MalformedResponse
from models import RISK_LEVELS, SEVERITIES, ComplianceAnalysis, Violation

logger = logging.getLogger(__name__)

FENCE_RE      = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
OPEN_FENCE_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
OBJECT_RE     = re.compile(r"\{[\s\S]*\}")


# ─────────────────────────────────────────────────────────────────────────────
# Text repair
# ─────────────────────────────────────────────────────────────────────────────

def join_parts(parts: Iterable) -> str:
    """Concatenate content parts in order. Parts may be strings or {"text": ...}."""
    texts = []
    for p in parts or []:
        if isinstance(p, dict):
            texts.append(str(p.get("text") or ""))
        elif p is not None:
            texts.append(str(p))
    return "\n".join(texts).strip()

def strip_fence(text: str) -> str:
    m = FENCE_RE.search(text)
    if m:
        return m.group(1).strip()
    # Truncated output can lose the closing fence
    return OPEN_FENCE_RE.sub("", text, count=1).strip()

def isolate_object(text: str) -> str:
    if text.startswith("{"):
        return text
    m = OBJECT_RE.search(text)
    if m:
        return m.group(0)
    start = text.find("{")
    return text[start:] if start >= 0 else text

def close_truncated(text: str) -> str:
    """
    Append the closers a truncated object is missing: brackets first, then
    braces. Best effort; the result may still fail to parse.
    """
    if text.endswith("}"):
        return text
    missing_brackets = text.count("[") - text.count("]")
    missing_braces   = text.count("{") - text.count("}")
    repaired = text + "\n]" * max(0, missing_brackets) + "\n}" * max(0, missing_braces)
    logger.info("Closed truncated JSON with %d bracket(s) and %d brace(s)",
                max(0, missing_brackets), max(0, missing_braces))
    return repaired

def parse_object(text: str) -> dict:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedResponse(f"Response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedResponse(f"Expected a JSON object, got {type(data).__name__}")
    return data


# ─────────────────────────────────────────────────────────────────────────────
# Shape coercion
# ─────────────────────────────────────────────────────────────────────────────

# canonical field -> (accepted aliases in priority order, default)
VIOLATION_FIELDS = [
    ("clause",     ("clause", "section"),                                  "Unknown section"),
    ("issue",      ("issue", "problem", "description"),                    "Compliance issue"),
    ("regulation", ("regulation", "reference"),                            ""),
    ("severity",   ("severity",),                                          "medium"),
    ("suggestion", ("suggestion", "fix", "action", "recommendation"),      ""),
]

def _violations_array(data: dict) -> Optional[list]:
    v = data.get("violations")
    return v if isinstance(v, list) else None

def _single_violation(data: dict) -> Optional[list]:
    v = data.get("violations")
    return [v] if isinstance(v, dict) else None

def _recommendations(data: dict) -> Optional[list]:
    r = data.get("recommendations")
    return r if isinstance(r, list) else None

# Tried in order; the first adapter returning a list wins.
VIOLATION_ADAPTERS: List[Callable[[dict], Optional[list]]] = [
    _violations_array,
    _single_violation,
    _recommendations,
]

def _first_present(entry: dict, aliases, default: str) -> str:
    for key in aliases:
        value = entry.get(key)
        if value:
            return str(value).strip()
    return default

def coerce_violation(entry: dict) -> Violation:
    fields = {name: _first_present(entry, aliases, default)
              for name, aliases, default in VIOLATION_FIELDS}
    severity = fields["severity"].lower()
    fields["severity"] = severity if severity in SEVERITIES else "medium"
    return Violation(**fields)

def extract_violations(data: dict) -> List[Violation]:
    raw = []
    for adapter in VIOLATION_ADAPTERS:
        found = adapter(data)
        if found is not None:
            raw = found
            break
    return [coerce_violation(v) for v in raw if v and isinstance(v, dict)]

def coerce_score(value) -> int:
    if isinstance(value, bool):
        number = float(value)
    elif isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip() or 0)
        except ValueError:
            number = 0.0
    else:
        number = 0.0
    if math.isnan(number) or math.isinf(number):
        number = 0.0
    return max(0, min(100, int(round(number))))

def coerce_risk(value) -> str:
    risk = str(value or "").strip().lower()
    return risk if risk in RISK_LEVELS else "medium"

def coerce_skills(value, regulations) -> List[str]:
    if isinstance(value, list) and value:
        return [str(s) for s in value if s]
    return list(regulations or [])

def _is_canonical(result: ComplianceAnalysis) -> bool:
    return (isinstance(result.compliance_score, int)
            and result.risk_level in RISK_LEVELS
            and isinstance(result.violations, list))

def coerce_analysis(data: dict, regulations=None) -> ComplianceAnalysis:
    result = ComplianceAnalysis(
        compliance_score=coerce_score(data.get("complianceScore")),
        risk_level=coerce_risk(data.get("riskLevel")),
        violations=extract_violations(data),
        related_skills=coerce_skills(data.get("relatedSkills"), regulations),
        source="ai",
    )
    if not _is_canonical(result):
        raise MalformedResponse("Coerced result does not match the canonical schema")
    return result


# ─────────────────────────────────────────────────────────────────────────────
# Main entry point
# ─────────────────────────────────────────────────────────────────────────────

def normalize_response(parts, truncated: bool = False, regulations=None) -> ComplianceAnalysis:
    """
    Run the full repair + coercion pipeline over the content parts of one
    generation. Raises MalformedResponse when nothing usable remains.
    """
    text = join_parts(parts)
    if not text:
        raise MalformedResponse("Response contained no text")

    text = isolate_object(strip_fence(text))
    if truncated:
        logger.warning("Response was truncated at the token limit; attempting repair")
        text = close_truncated(text)

    return coerce_analysis(parse_object(text), regulations)
