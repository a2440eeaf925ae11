"""
Risk evaluation - Decides whether a new account must confirm its email.

Checks run in a fixed order and stop at the first match. The order is
both the priority and the cost ranking: later checks hit slower I/O.

    1. IP seen in recent signups          -> IP_KNOWN
    2. User agent looks automated         -> SUSPICIOUS_USER_AGENT
    3. No fingerprint supplied            -> FINGERPRINT_MISSING
    4. Fingerprint seen in recent signups -> FINGERPRINT_KNOWN
    5. IP flagged by reputation service   -> IP_SUSPICIOUS
    otherwise                             -> NONE

Mobile clients cannot be fingerprinted and skip evaluation entirely;
they are always MOBILE_CLIENT.
"""

from dataclasses import dataclass
from enum import Enum

from .models import FingerPrint
from .ports import IpHistoryStore, IpReputationService, UserAgentClassifier


class RiskReason(Enum):
    """Reason code paired with whether it requires email confirmation."""

    NONE = ("none", False)
    IP_KNOWN = ("ip_known", True)
    IP_SUSPICIOUS = ("ip_suspicious", True)
    FINGERPRINT_KNOWN = ("fingerprint_known", True)
    FINGERPRINT_MISSING = ("fingerprint_missing", True)
    SUSPICIOUS_USER_AGENT = ("suspicious_user_agent", True)
    MOBILE_CLIENT = ("mobile_client", True)

    def __init__(self, code: str, must_confirm: bool) -> None:
        self.code = code
        self.must_confirm = must_confirm

    def __str__(self) -> str:
        return self.code


@dataclass
class RiskEvaluator:
    """Classifies a web signup attempt using read-only lookups."""

    history: IpHistoryStore
    reputation: IpReputationService
    user_agents: UserAgentClassifier

    async def evaluate(
        self, ip: str, fingerprint: FingerPrint | None, user_agent: str | None
    ) -> RiskReason:
        """
        Return the first matching risk reason for this attempt.

        Never mutates history; never performs a lookup past the first match.
        """
        if await self.history.recent_signup_by_ip(ip):
            return RiskReason.IP_KNOWN
        if self.user_agents.is_weird(user_agent):
            return RiskReason.SUSPICIOUS_USER_AGENT
        if fingerprint is None:
            return RiskReason.FINGERPRINT_MISSING
        if await self.history.recent_signup_by_fingerprint(fingerprint):
            return RiskReason.FINGERPRINT_KNOWN
        if await self.reputation.is_suspicious(ip):
            return RiskReason.IP_SUSPICIOUS
        return RiskReason.NONE
