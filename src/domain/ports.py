"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.

Anything that leaves the process (database, captcha provider, reputation
lookups, email dispatch, notifications) is a coroutine. Cheap in-process
checks stay synchronous.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Protocol

from .models import (
    AcceptableEmail,
    Account,
    ApiVersion,
    Candidate,
    FingerPrint,
    SignupRequest,
)


class Admission(Enum):
    """Rate limiter decision for one hashing attempt."""

    ADMITTED = "admitted"
    REJECTED = "rejected"


class SignupForm(Protocol):
    """Port interface for binding raw submitted data into a Candidate."""

    def bind(self, data: Mapping[str, object], *, mobile: bool = False) -> Candidate:
        """
        Validate the form shape and build a Candidate.

        Args:
            data: Raw submitted fields
            mobile: Bind the reduced mobile form (no captcha, no fingerprint)

        Raises:
            FormRejected: With per-field errors when the shape is invalid
        """
        ...


class CaptchaVerifier(Protocol):
    """Port interface for captcha token verification."""

    async def verify(self, token: str, request: SignupRequest) -> bool:
        """Return True when the provider accepts the token for this client."""
        ...


class EmailValidator(Protocol):
    """Port interface for email validation and normalization."""

    def validate(self, raw: str) -> AcceptableEmail:
        """
        Validate and normalize an email address.

        Raises:
            InvalidEmail: If the address is malformed or not acceptable
        """
        ...


class PasswordHasher(Protocol):
    """Port interface for password hashing."""

    def hash(self, cleartext: str) -> str:
        """Return an opaque hash of the cleartext password."""
        ...


class RateLimiter(Protocol):
    """Port interface for the password hasher rate limit."""

    def admit(self, identity_key: str, client_key: str, enforce: bool = True) -> Admission:
        """
        Admit or reject one hashing attempt.

        With enforce=False the limiter still counts but always admits.
        """
        ...


class UserStore(Protocol):
    """Port interface for account persistence."""

    async def create(
        self,
        username: str,
        password_hash: str,
        email: AcceptableEmail,
        blind: bool,
        api_version: ApiVersion | None,
        must_confirm_email: bool,
        ip: str | None = None,
        fingerprint: FingerPrint | None = None,
    ) -> Account:
        """
        Atomically create an account.

        The account is either fully created or absent. The ip and
        fingerprint are recorded as signup history for later risk checks.

        Raises:
            CreationConflict: If the username or email is already taken
        """
        ...


class IpHistoryStore(Protocol):
    """Port interface for recent-signup history lookups (read-only)."""

    async def recent_signup_by_ip(self, ip: str) -> bool:
        """Return True if an account was recently created from this IP."""
        ...

    async def recent_signup_by_fingerprint(self, fingerprint: FingerPrint) -> bool:
        """Return True if an account was recently created with this print."""
        ...


class IpReputationService(Protocol):
    """Port interface for external IP reputation checks."""

    async def is_suspicious(self, ip: str) -> bool:
        """Return True if the IP is a known proxy, VPN, Tor exit or abuser."""
        ...


class UserAgentClassifier(Protocol):
    """Port interface for user agent heuristics."""

    def is_weird(self, user_agent: str | None) -> bool:
        """Return True if the user agent looks automated or forged."""
        ...


class EmailConfirmationService(Protocol):
    """Port interface for email confirmation dispatch and bookkeeping."""

    async def send(self, account: Account, email: AcceptableEmail) -> None:
        """Send the confirmation link to the new account's address."""
        ...

    def is_enabled(self) -> bool:
        """Return True if confirmation emails are actually required."""
        ...

    async def persist_pending_signup(
        self,
        account_id: str,
        api_version: ApiVersion | None,
        fingerprint: FingerPrint | None,
    ) -> None:
        """Record the pending signup so the confirmation link can be verified later."""
        ...


class AuditLogger(Protocol):
    """Port interface for the authentication audit trail."""

    def append(self, line: str) -> None:
        """Append one line to the audit trail."""
        ...


class AbuseNotifier(Protocol):
    """Port interface for abuse-monitoring notifications."""

    async def notify(
        self,
        account: Account,
        email: AcceptableEmail,
        ip: str,
        fingerprint_hash: str | None,
        api_version: ApiVersion | None,
        suspicious: bool,
    ) -> None:
        """Report a new signup to moderators."""
        ...


class MetricsSink(Protocol):
    """Port interface for counters."""

    def increment(self, counter_name: str, labels: Mapping[str, str]) -> None:
        """Increment a labelled counter by one."""
        ...
