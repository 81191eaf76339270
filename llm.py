"""
llm.py: Gemini integration for AI-assisted compliance analysis.

Talks to the Gemini REST API via requests. Every failure (no key, timeout,
HTTP error, unusable output) degrades to the rule-based baseline, so callers
always get a ComplianceAnalysis back.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

import requests

from analyzer import analyze_baseline
from catalog import citation_example, get_guidance, primary_regulation
from errors import ConfigurationAbsent, MalformedResponse, UpstreamFailure
from models import ComplianceAnalysis
from normalizer import normalize_response

logger = logging.getLogger(__name__)

# ── Config (overridable via environment variables) ────────────────────────────
GEMINI_API_KEY    = os.environ.get("GEMINI_API_KEY", "")
GEMINI_MODEL      = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_BASE_URL   = os.environ.get("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
GEMINI_TIMEOUT    = int(os.environ.get("GEMINI_TIMEOUT", "30"))       # seconds
GEMINI_ENABLED    = os.environ.get("GEMINI_ENABLED", "true").lower() != "false"
GEMINI_MAX_OUTPUT_TOKENS = int(os.environ.get("GEMINI_MAX_OUTPUT_TOKENS", "8192"))

# How many characters of the document to send to the model
MAX_DOC_CHARS = int(os.environ.get("MAX_DOC_CHARS", "60000"))

MAX_VIOLATIONS = 8
TRUNCATED_FINISH_REASONS = {"MAX_TOKENS", "LENGTH"}


# ─────────────────────────────────────────────────────────────────────────────
# Gemini client
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class Generation:
    """Raw output of one generateContent call."""
    parts:         List[str] = field(default_factory=list)
    finish_reason: str = ""

    @property
    def truncated(self) -> bool:
        return self.finish_reason.upper() in TRUNCATED_FINISH_REASONS


class GeminiClient:
    def __init__(self, api_key: str, model: str = GEMINI_MODEL,
                 base_url: str = GEMINI_BASE_URL, timeout: int = GEMINI_TIMEOUT,
                 max_output_tokens: int = GEMINI_MAX_OUTPUT_TOKENS):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_output_tokens = max_output_tokens

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def _payload(self, prompt: str) -> dict:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature":      0.1,    # near-deterministic audits
                "topK":             1,
                "topP":             1,
                "maxOutputTokens":  self.max_output_tokens,
                "responseMimeType": "application/json",
            },
        }

    def generate(self, prompt: str) -> Generation:
        """POST the prompt; raise UpstreamFailure on anything but a usable envelope."""
        try:
            resp = requests.post(
                self.endpoint,
                json=self._payload(prompt),
                headers={"x-goog-api-key": self.api_key},
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise UpstreamFailure(f"Gemini timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise UpstreamFailure(f"Gemini request failed: {e}") from e

        if not resp.ok:
            raise UpstreamFailure(f"Gemini returned HTTP {resp.status_code}: {resp.text[:300]}")

        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamFailure("Gemini returned a non-JSON envelope") from e

        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            raise UpstreamFailure("Gemini envelope has no candidates")

        candidate = candidates[0]
        content = candidate.get("content")
        if not isinstance(content, dict):
            raise UpstreamFailure("Gemini envelope has no candidate content")
        raw_parts = content.get("parts")
        parts = [p.get("text") or "" for p in (raw_parts if isinstance(raw_parts, list) else [])
                 if isinstance(p, dict)]
        return Generation(parts=parts, finish_reason=str(candidate.get("finishReason") or ""))


def default_client() -> Optional[GeminiClient]:
    """The configured client, or None when the AI capability is switched off."""
    if not GEMINI_ENABLED or not GEMINI_API_KEY:
        return None
    return GeminiClient(GEMINI_API_KEY)


# ─────────────────────────────────────────────────────────────────────────────
# Prompt
# ─────────────────────────────────────────────────────────────────────────────

def build_prompt(document_name: str, document_type: str, regulations: List[str], content: str) -> str:
    primary = primary_regulation(regulations)
    regs = ", ".join(regulations) if regulations else primary
    skills = ", ".join(f'"{r}"' for r in (regulations or [primary]))

    return f"""You are a compliance auditor specializing in {regs}. Analyze this {document_type} \
for {regs} compliance ONLY.

Document: {document_name}
Content: {str(content or "")[:MAX_DOC_CHARS]}

{get_guidance(primary)}

Return ONLY valid JSON (no markdown):
{{
  "complianceScore": 0-100,
  "riskLevel": "low"|"medium"|"high"|"critical",
  "violations": [
    {{
      "clause": "Section name or 'Missing Section'",
      "issue": "Brief {regs} compliance gap (max 100 chars)",
      "regulation": "{regs} specific citation (e.g., {citation_example(primary)})",
      "severity": "low"|"medium"|"high"|"critical",
      "suggestion": "Concise fix (max 100 chars)"
    }}
  ],
  "relatedSkills": [{skills}]
}}

IMPORTANT: Cite {regs} articles/sections ONLY. Do NOT cite another regulation's clauses \
when analyzing {primary}. Limit to top {MAX_VIOLATIONS} critical issues. Be concise."""


# ─────────────────────────────────────────────────────────────────────────────
# Main public function
# ─────────────────────────────────────────────────────────────────────────────

def analyze_with_ai(
    document_name: str,
    document_type: str,
    regulations,
    content: str,
    client=None,
) -> ComplianceAnalysis:
    """
    Ask the text-generation backend for an audit and normalize its answer.

    `client` is anything with generate(prompt) -> Generation; defaults to the
    configured Gemini client. Never raises: every failure returns the
    baseline analysis instead.
    """
    regs = [regulations] if isinstance(regulations, str) else list(regulations or [])
    try:
        client = client or default_client()
        if client is None:
            raise ConfigurationAbsent("GEMINI_API_KEY not set or GEMINI_ENABLED=false")

        logger.info("AI compliance analysis for %r (%s)", document_name, ", ".join(regs) or "GDPR")
        generation = client.generate(build_prompt(document_name, document_type, regs, content))
        result = normalize_response(generation.parts, generation.truncated, regs)
        logger.info("AI analysis accepted: score=%d risk=%s violations=%d",
                    result.compliance_score, result.risk_level, len(result.violations))
        return result

    except ConfigurationAbsent as e:
        logger.info("AI analysis unavailable (%s); using baseline", e)
    except UpstreamFailure as e:
        logger.warning("AI backend failed (%s); using baseline", e)
    except MalformedResponse as e:
        logger.warning("AI response unusable (%s); using baseline", e)
    except Exception:
        logger.exception("Unexpected error during AI analysis; using baseline")

    return analyze_baseline(content, regs)


# ─────────────────────────────────────────────────────────────────────────────
# Status helper  (used by the health endpoint)
# ─────────────────────────────────────────────────────────────────────────────

def gemini_status() -> dict:
    """Return Gemini connectivity info for the API."""
    if not GEMINI_ENABLED:
        return {"available": False, "reason": "Disabled via GEMINI_ENABLED=false", "model": GEMINI_MODEL}
    if not GEMINI_API_KEY:
        return {"available": False, "reason": "GEMINI_API_KEY not set", "model": GEMINI_MODEL}

    try:
        r = requests.get(
            f"{GEMINI_BASE_URL.rstrip('/')}/models/{GEMINI_MODEL}",
            headers={"x-goog-api-key": GEMINI_API_KEY},
            timeout=4,
        )
        if r.status_code != 200:
            return {"available": False, "reason": f"HTTP {r.status_code}", "model": GEMINI_MODEL}
        return {"available": True, "model": GEMINI_MODEL, "base_url": GEMINI_BASE_URL}
    except requests.exceptions.RequestException as e:
        return {"available": False, "reason": str(e), "model": GEMINI_MODEL}
