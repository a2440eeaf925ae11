"""
Registration domain service - Signup pipeline.

This module contains the orchestration of a signup attempt, from the raw
submitted form to the created account and the confirmation decision.

Pipeline (one attempt, forward-only)
====================================

    RECEIVED             bind form            -> REJECTED on bad shape
    CAPTCHA_CHECKED      web only             -> REJECTED on failure
    RATE_LIMIT_ADMITTED  hasher rate limit    -> RATE_LIMITED
    EMAIL_VALIDATED      normalize email      -> FATAL (ValidationFatal)
    RISK_EVALUATED       hash, classify risk
    ACCOUNT_CREATED      atomic create        -> FATAL (CreationConflict)
    CONFIRMATION_DISPATCHED
                         COMPLETE | PENDING_CONFIRMATION

Admission always precedes hashing and account creation. The audit line and
abuse notification are side effects: their failures are logged and never
change the returned Result. The notification runs as a detached task so it
completes even if the caller goes away.
"""

import asyncio
import logging
from collections.abc import Coroutine, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from .confirmation import ConfirmationGate
from .exceptions import CreationConflict, FormRejected, InvalidEmail, ValidationFatal
from .models import (
    AcceptableEmail,
    Account,
    ApiVersion,
    Candidate,
    Channel,
    PendingConfirmation,
    RateLimited,
    Rejected,
    Result,
    SignupRequest,
    SignupStage,
)
from .ports import (
    AbuseNotifier,
    Admission,
    AuditLogger,
    CaptchaVerifier,
    EmailValidator,
    IpReputationService,
    MetricsSink,
    PasswordHasher,
    RateLimiter,
    SignupForm,
    UserStore,
)
from .risk import RiskEvaluator, RiskReason

logger = logging.getLogger(__name__)

# Form error key used when the email is well formed but refused (disposable, blocked domain).
# Forms only report it for addresses that passed their syntax check.
UNACCEPTABLE_EMAIL = "error.email_acceptable"


@dataclass
class RegistrationService:
    """
    Domain service for account signup.

    Orchestrates the signup flow for web and mobile clients: form binding,
    captcha, hasher rate limit, email normalization, password hashing,
    risk classification, account creation and the confirmation decision.
    """

    form: SignupForm
    captcha: CaptchaVerifier
    email_validator: EmailValidator
    password_hasher: PasswordHasher
    rate_limiter: RateLimiter
    risk: RiskEvaluator
    user_store: UserStore
    reputation: IpReputationService
    gate: ConfirmationGate
    audit: AuditLogger
    notifier: AbuseNotifier
    metrics: MetricsSink
    enforce_rate_limit: bool = True
    _side_effects: set[asyncio.Task] = field(default_factory=set, init=False, repr=False)

    async def register_web(self, data: Mapping[str, object], request: SignupRequest) -> Result:
        """
        Sign up from the website.

        Args:
            data: Raw submitted form fields
            request: Client IP and user agent

        Returns:
            Rejected, RateLimited, PendingConfirmation or Complete

        Raises:
            ValidationFatal: Email passed the form but failed normalization
            CreationConflict: Username or email already taken
        """
        try:
            candidate = self.form.bind(data)
        except FormRejected as e:
            self._log_form_errors(e)
            self._advance(str(e.data.get("username", "")), SignupStage.REJECTED)
            return Rejected(e.errors, _refill(e.data))

        self._advance(candidate.username, SignupStage.RECEIVED)
        if not await self.captcha.verify(candidate.captcha_response or "", request):
            self._auth_log(candidate.username, candidate.email, "Signup captcha fail")
            self._advance(candidate.username, SignupStage.REJECTED)
            return Rejected(
                {"captcha_response": ["Captcha verification failed"]},
                _refill(data),
            )
        self._advance(candidate.username, SignupStage.CAPTCHA_CHECKED)

        return await self._register(candidate, request, Channel.WEB)

    async def register_mobile(
        self, data: Mapping[str, object], request: SignupRequest, api_version: ApiVersion
    ) -> Result:
        """
        Sign up from a mobile client.

        Same pipeline as the website without captcha. Mobile clients cannot
        be fingerprinted, so the account always has to confirm its email.
        """
        try:
            candidate = self.form.bind(data, mobile=True)
        except FormRejected as e:
            self._log_form_errors(e)
            self._advance(str(e.data.get("username", "")), SignupStage.REJECTED)
            return Rejected(e.errors, _refill(e.data))

        candidate = replace(candidate, api_version=api_version, blind=False, fingerprint=None)
        self._advance(candidate.username, SignupStage.RECEIVED)
        return await self._register(candidate, request, Channel.MOBILE)

    async def drain(self) -> None:
        """Wait for detached side effects (abuse notifications) to finish."""
        while self._side_effects:
            await asyncio.gather(*list(self._side_effects), return_exceptions=True)

    async def _register(self, candidate: Candidate, request: SignupRequest, channel: Channel) -> Result:
        admission = self.rate_limiter.admit(candidate.username, request.ip, self.enforce_rate_limit)
        if admission is Admission.REJECTED:
            self._advance(candidate.username, SignupStage.RATE_LIMITED)
            return RateLimited()
        self._advance(candidate.username, SignupStage.RATE_LIMIT_ADMITTED)

        email = self._validate_email(candidate)
        self._advance(candidate.username, SignupStage.EMAIL_VALIDATED)

        password_hash = await asyncio.to_thread(self.password_hasher.hash, candidate.password)

        match channel:
            case Channel.WEB:
                reason = await self.risk.evaluate(request.ip, candidate.fingerprint, request.user_agent)
            case Channel.MOBILE:
                reason = RiskReason.MOBILE_CLIENT
        self._count_attempt(channel, candidate.api_version, reason)
        self._advance(candidate.username, SignupStage.RISK_EVALUATED)

        try:
            account = await self.user_store.create(
                candidate.username,
                password_hash,
                email,
                candidate.blind,
                candidate.api_version,
                must_confirm_email=reason.must_confirm,
                ip=request.ip,
                fingerprint=candidate.fingerprint,
            )
        except CreationConflict:
            logger.error("No account could be created for %s", candidate.username)
            self._advance(candidate.username, SignupStage.FATAL)
            raise
        self._advance(candidate.username, SignupStage.ACCOUNT_CREATED)

        self._log_signup(account, email, candidate, request, reason)

        result = await self.gate.decide(
            account,
            email,
            reason.must_confirm,
            api_version=candidate.api_version,
            fingerprint=candidate.fingerprint,
        )
        self._advance(candidate.username, SignupStage.CONFIRMATION_DISPATCHED)
        match result:
            case PendingConfirmation():
                self._advance(candidate.username, SignupStage.PENDING_CONFIRMATION)
            case _:
                self._advance(candidate.username, SignupStage.COMPLETE)
        return result

    def _validate_email(self, candidate: Candidate) -> AcceptableEmail:
        """
        Normalize the candidate email.

        The form already checked the address, so a failure here means the
        form and the validator disagree. That is escalated, never retried.
        """
        try:
            return self.email_validator.validate(candidate.email)
        except InvalidEmail as e:
            logger.error("Invalid email %s for %s: %s", candidate.email, candidate.username, e)
            self._advance(candidate.username, SignupStage.FATAL)
            raise ValidationFatal(f"Invalid email {candidate.email}") from e

    def _count_attempt(self, channel: Channel, api_version: ApiVersion | None, reason: RiskReason) -> None:
        labels = {"channel": channel.value}
        if api_version is not None:
            labels["api_version"] = str(api_version)
        self.metrics.increment("signup.attempt", labels)
        self.metrics.increment("signup.risk_reason", {"reason": reason.code})

    def _log_signup(
        self,
        account: Account,
        email: AcceptableEmail,
        candidate: Candidate,
        request: SignupRequest,
        reason: RiskReason,
    ) -> None:
        fingerprint = candidate.fingerprint
        api_version = candidate.api_version
        self._auth_log(
            account.username,
            email.value,
            f"fp: {fingerprint or ''} mustConfirm: {reason} api: {api_version or ''}",
        )
        self._detach(
            self._notify(
                account,
                email,
                request.ip,
                fingerprint.hash if fingerprint else None,
                api_version,
            )
        )

    async def _notify(
        self,
        account: Account,
        email: AcceptableEmail,
        ip: str,
        fingerprint_hash: str | None,
        api_version: ApiVersion | None,
    ) -> None:
        try:
            suspicious = await self.reputation.is_suspicious(ip)
            await self.notifier.notify(account, email, ip, fingerprint_hash, api_version, suspicious)
        except Exception:
            logger.exception("Signup notification failed for %s", account.username)

    def _detach(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._side_effects.add(task)
        task.add_done_callback(self._side_effects.discard)

    def _log_form_errors(self, rejected: FormRejected) -> None:
        username = rejected.data.get("username")
        email = rejected.data.get("email")
        if not isinstance(username, str) or not isinstance(email, str):
            return
        if UNACCEPTABLE_EMAIL in rejected.errors.get("email", []):
            self._auth_log(username, email, "Signup with unacceptable email")

    def _auth_log(self, username: str, email: str, message: str) -> None:
        try:
            self.audit.append(f"{username} {email} {message}")
        except Exception:
            logger.exception("Audit log append failed for %s", username)

    def _advance(self, username: str, stage: SignupStage) -> None:
        logger.debug("Signup %s: %s", username, stage.value)


def _refill(data: Mapping[str, object]) -> dict[str, object]:
    """Submitted values to re-display, without the password."""
    return {k: v for k, v in data.items() if k != "password"}
