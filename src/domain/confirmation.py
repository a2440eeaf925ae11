"""
Confirmation gate - Turns a created account into the final signup result.

    must_confirm = False               -> Complete, nothing sent
    must_confirm = True, enabled       -> send link, record pending, PendingConfirmation
    must_confirm = True, disabled      -> record pending only, Complete

When confirmation is switched off the pending signup is still recorded,
so the bookkeeping stays identical across deployments.
"""

import logging
from dataclasses import dataclass

from .models import (
    AcceptableEmail,
    Account,
    ApiVersion,
    Complete,
    FingerPrint,
    PendingConfirmation,
    Result,
)
from .ports import EmailConfirmationService

logger = logging.getLogger(__name__)


@dataclass
class ConfirmationGate:
    """Decides whether a new account must go through email confirmation."""

    confirmation: EmailConfirmationService

    async def decide(
        self,
        account: Account,
        email: AcceptableEmail,
        must_confirm: bool,
        api_version: ApiVersion | None = None,
        fingerprint: FingerPrint | None = None,
    ) -> Result:
        if not must_confirm:
            return Complete(account, email)

        if self.confirmation.is_enabled():
            await self.confirmation.send(account, email)
            await self.confirmation.persist_pending_signup(account.id, api_version, fingerprint)
            return PendingConfirmation(account, email)

        logger.debug("Email confirmation disabled, %s is usable right away", account.username)
        await self.confirmation.persist_pending_signup(account.id, api_version, fingerprint)
        return Complete(account, email)
