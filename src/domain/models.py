"""
Domain models - Values flowing through the signup pipeline.

Candidate is built per request and discarded once the pipeline finishes.
Account outlives the request; Result variants are per-attempt values.
"""

import hashlib
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class FingerPrint:
    """Client-side device identifier, supplied voluntarily by the client."""

    value: str

    @property
    def hash(self) -> str | None:
        """Short stable digest used when reporting the print elsewhere."""
        if not self.value:
            return None
        return hashlib.sha256(self.value.encode()).hexdigest()[:16]

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ApiVersion:
    """Mobile API version; its presence marks a mobile client."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class AcceptableEmail:
    """Email address that passed validation and normalization."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Candidate:
    """
    Unvalidated signup attempt as bound from the submitted form.

    The cleartext password is never persisted and is excluded from repr
    so it cannot leak into logs.
    """

    username: str
    password: str = field(repr=False)
    email: str
    fingerprint: FingerPrint | None = None
    captcha_response: str | None = None
    api_version: ApiVersion | None = None
    blind: bool = False


@dataclass(frozen=True)
class SignupRequest:
    """Per-request client context the pipeline needs from the transport."""

    ip: str
    user_agent: str | None = None


@dataclass(frozen=True)
class Account:
    """Account as returned by the user store after creation."""

    id: str
    username: str
    email: AcceptableEmail
    must_confirm_email: bool
    created_at: datetime | None = None


class Channel(str, Enum):
    """Client channel a signup attempt arrived on."""

    WEB = "web"
    MOBILE = "mobile"


class SignupStage(str, Enum):
    """
    Stages of a single signup attempt.

    Forward transitions:
        RECEIVED -> CAPTCHA_CHECKED -> RATE_LIMIT_ADMITTED -> EMAIL_VALIDATED
        -> RISK_EVALUATED -> ACCOUNT_CREATED -> CONFIRMATION_DISPATCHED
        -> COMPLETE | PENDING_CONFIRMATION

    Escapes:
        RECEIVED, CAPTCHA_CHECKED   -> REJECTED
        RATE_LIMIT_ADMITTED         -> RATE_LIMITED
        EMAIL_VALIDATED, ACCOUNT_CREATED -> FATAL

    No retries and no backward movement within an attempt.
    """

    RECEIVED = "received"
    CAPTCHA_CHECKED = "captcha_checked"
    RATE_LIMIT_ADMITTED = "rate_limit_admitted"
    EMAIL_VALIDATED = "email_validated"
    RISK_EVALUATED = "risk_evaluated"
    ACCOUNT_CREATED = "account_created"
    CONFIRMATION_DISPATCHED = "confirmation_dispatched"
    COMPLETE = "complete"
    PENDING_CONFIRMATION = "pending_confirmation"
    REJECTED = "rejected"
    RATE_LIMITED = "rate_limited"
    FATAL = "fatal"


@dataclass(frozen=True)
class Rejected:
    """Form was refused; errors and submitted values are returned for re-display."""

    errors: dict[str, list[str]]
    data: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class RateLimited:
    """Too many hashing attempts for this username or client."""


@dataclass(frozen=True)
class PendingConfirmation:
    """Account exists but must be confirmed through the emailed link."""

    account: Account
    email: AcceptableEmail


@dataclass(frozen=True)
class Complete:
    """Account exists and is usable right away."""

    account: Account
    email: AcceptableEmail


Result = Rejected | RateLimited | PendingConfirmation | Complete
