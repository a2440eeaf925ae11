"""
Console email confirmation adapter - Implements EmailConfirmationService protocol.

This module provides a console-based implementation of the domain's email
confirmation port, logging confirmation links to stdout for demo purposes.
Pending-signup bookkeeping is delegated to a store.
"""

import hashlib
import hmac
import logging
from typing import Protocol

from src.domain.models import AcceptableEmail, Account, ApiVersion, FingerPrint

logger = logging.getLogger(__name__)


class PendingSignupStore(Protocol):
    """Where pending signups are recorded."""

    async def save(
        self,
        user_id: str,
        api_version: ApiVersion | None,
        fingerprint: FingerPrint | None,
    ) -> None: ...


class ConsoleEmailConfirmationService:
    """
    Implements EmailConfirmationService protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints confirmation links to stdout.
    """

    def __init__(
        self,
        pending_store: PendingSignupStore,
        base_url: str,
        secret: str,
        enabled: bool = True,
    ) -> None:
        self._pending_store = pending_store
        self._base_url = base_url.rstrip("/")
        self._secret = secret.encode()
        self._enabled = enabled

    def is_enabled(self) -> bool:
        return self._enabled

    async def send(self, account: Account, email: AcceptableEmail) -> None:
        """
        Log confirmation link to console (simulates email delivery).

        In production, this would be replaced with an SMTP adapter.
        The link is logged at INFO level to be visible in docker-compose logs.
        """
        logger.info("[CONFIRMATION] Email: %s Link: %s", email.value, self.link(account, email))

    async def persist_pending_signup(
        self,
        account_id: str,
        api_version: ApiVersion | None,
        fingerprint: FingerPrint | None,
    ) -> None:
        await self._pending_store.save(account_id, api_version, fingerprint)

    def link(self, account: Account, email: AcceptableEmail) -> str:
        """Confirmation URL carrying a token bound to the account and its email."""
        return f"{self._base_url}/{account.id}/{self.token(account.id, email)}"

    def token(self, account_id: str, email: AcceptableEmail) -> str:
        message = f"{account_id}|{email.value}".encode()
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()
