"""
Abuse notifier adapters - Implement AbuseNotifier protocol.

WebhookAbuseNotifier posts a short JSON message to a chat webhook watched
by moderators. LoggingAbuseNotifier is used when no webhook is configured.
"""

import logging

import httpx

from src.domain.models import AcceptableEmail, Account, ApiVersion

logger = logging.getLogger(__name__)


def signup_message(
    account: Account,
    email: AcceptableEmail,
    ip: str,
    fingerprint_hash: str | None,
    api_version: ApiVersion | None,
    suspicious: bool,
) -> str:
    """One-line summary of a new signup for moderators."""
    parts = [f"New user {account.username}", f"email: {email.value}", f"ip: {ip}"]
    if fingerprint_hash:
        parts.append(f"fp: {fingerprint_hash}")
    if api_version is not None:
        parts.append(f"api: {api_version}")
    if suspicious:
        parts.append("SUSPICIOUS IP")
    return " | ".join(parts)


class WebhookAbuseNotifier:
    """Implements AbuseNotifier protocol via an incoming-webhook POST."""

    def __init__(self, client: httpx.AsyncClient, url: str) -> None:
        self._client = client
        self._url = url

    async def notify(
        self,
        account: Account,
        email: AcceptableEmail,
        ip: str,
        fingerprint_hash: str | None,
        api_version: ApiVersion | None,
        suspicious: bool,
    ) -> None:
        text = signup_message(account, email, ip, fingerprint_hash, api_version, suspicious)
        response = await self._client.post(self._url, json={"text": text})
        response.raise_for_status()


class LoggingAbuseNotifier:
    """Implements AbuseNotifier protocol by logging the summary."""

    async def notify(
        self,
        account: Account,
        email: AcceptableEmail,
        ip: str,
        fingerprint_hash: str | None,
        api_version: ApiVersion | None,
        suspicious: bool,
    ) -> None:
        text = signup_message(account, email, ip, fingerprint_hash, api_version, suspicious)
        if suspicious:
            logger.warning("[SIGNUP] %s", text)
        else:
            logger.info("[SIGNUP] %s", text)
