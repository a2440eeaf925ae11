"""
IP reputation adapter - Implements IpReputationService protocol.

An IP is suspicious if it is on the static blocklist, or if the remote
score service rates it at or above the threshold. The remote lookup is
optional; when it fails the IP is treated as not suspicious.
"""

import ipaddress
import logging
from collections.abc import Iterable

import httpx

logger = logging.getLogger(__name__)


class IpTrust:
    """Implements IpReputationService protocol."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        lookup_url: str | None = None,
        threshold: float = 0.95,
        blocklist: Iterable[str] = (),
    ) -> None:
        self._client = client
        self._lookup_url = lookup_url
        self._threshold = threshold
        self._networks = [ipaddress.ip_network(entry, strict=False) for entry in blocklist]

    async def is_suspicious(self, ip: str) -> bool:
        if self._blocked(ip):
            return True
        if self._client is None or not self._lookup_url:
            return False
        score = await self._score(ip)
        return score is not None and score >= self._threshold

    def _blocked(self, ip: str) -> bool:
        try:
            address = ipaddress.ip_address(ip)
        except ValueError:
            return False
        return any(address in network for network in self._networks)

    async def _score(self, ip: str) -> float | None:
        """Remote probability that the IP is a proxy, VPN or abuser (0..1)."""
        try:
            response = await self._client.get(self._lookup_url.format(ip=ip))
            response.raise_for_status()
            payload = response.json()
            return float(payload["score"])
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning("IP reputation lookup failed for %s: %s", ip, e)
            return None
