"""
Error taxonomy for the compliance pipeline.

Analyzer-side errors (ConfigurationAbsent, UpstreamFailure, MalformedResponse)
never leave the AI-assisted analyzer: they are logged and turned into the
baseline result. AuthorizationDenied and ValidationFailed reach the caller.
"""


class ComplianceError(Exception):
    """Base class for every error raised by this package."""
    status_code = 500


# ── Absorbed by the analyzer ──────────────────────────────────────────────────

class ConfigurationAbsent(ComplianceError):
    """No text-generation capability is configured."""


class UpstreamFailure(ComplianceError):
    """Transport or HTTP-level failure talking to the text-generation service."""


class MalformedResponse(ComplianceError):
    """Response could not be parsed or coerced into the canonical schema."""


# ── Surfaced to the caller ────────────────────────────────────────────────────

class AuthenticationRequired(ComplianceError):
    status_code = 401


class AuthorizationDenied(ComplianceError):
    status_code = 403


class DocumentNotFound(ComplianceError):
    status_code = 404


class ValidationFailed(ComplianceError):
    status_code = 400
