"""
FastAPI dependencies - Dependency injection factories.

This module wires the domain service to its infrastructure adapters and
provides Depends() factories for routes.
"""

import httpx
from fastapi import Request
from psycopg_pool import AsyncConnectionPool

from src.adapters.audit import LoggingAuditLogger
from src.adapters.captcha.recaptcha import RecaptchaVerifier
from src.adapters.email.validator import LibraryEmailValidator
from src.adapters.hashing.bcrypt_hasher import BcryptPasswordHasher
from src.adapters.metrics import InMemoryMetricsSink
from src.adapters.notify.webhook import LoggingAbuseNotifier, WebhookAbuseNotifier
from src.adapters.repository.postgres import (
    PostgresIpHistoryStore,
    PostgresPendingSignupStore,
    PostgresUserStore,
)
from src.adapters.reputation.ip_trust import IpTrust
from src.adapters.smtp.console import ConsoleEmailConfirmationService
from src.adapters.useragent import HeuristicUserAgentClassifier
from src.api.forms import PydanticSignupForm
from src.config.settings import Settings, get_settings
from src.domain.confirmation import ConfirmationGate
from src.domain.models import SignupRequest
from src.domain.rate_limit import HasherRateLimiter
from src.domain.registration import RegistrationService
from src.domain.risk import RiskEvaluator


def build_registration_service(
    settings: Settings,
    pool: AsyncConnectionPool,
    http_client: httpx.AsyncClient,
    metrics: InMemoryMetricsSink,
) -> RegistrationService:
    """
    Create the registration service with its adapters.

    Built once per application: the rate limiter counters and the set of
    detached side-effect tasks must be shared by every request.
    """
    email_validator = LibraryEmailValidator(settings.disposable_email_domains)
    reputation = IpTrust(
        client=http_client,
        lookup_url=settings.ip_reputation_url,
        threshold=settings.ip_reputation_threshold,
        blocklist=settings.suspicious_ips,
    )
    notifier = (
        WebhookAbuseNotifier(http_client, settings.abuse_webhook_url)
        if settings.abuse_webhook_url
        else LoggingAbuseNotifier()
    )
    confirmation = ConsoleEmailConfirmationService(
        pending_store=PostgresPendingSignupStore(pool),
        base_url=settings.email_confirm_base_url,
        secret=settings.email_confirm_secret,
        enabled=settings.email_confirm_enabled,
    )

    return RegistrationService(
        form=PydanticSignupForm(email_validator),
        captcha=RecaptchaVerifier(
            http_client,
            secret=settings.recaptcha_secret,
            verify_url=settings.recaptcha_verify_url,
            enabled=settings.recaptcha_enabled,
        ),
        email_validator=email_validator,
        password_hasher=BcryptPasswordHasher(settings.bcrypt_cost),
        rate_limiter=HasherRateLimiter(
            user_credits=settings.rate_limit_user_credits,
            client_credits=settings.rate_limit_client_credits,
            window_seconds=settings.rate_limit_window_seconds,
        ),
        risk=RiskEvaluator(
            history=PostgresIpHistoryStore(pool, settings.recent_signup_window_days),
            reputation=reputation,
            user_agents=HeuristicUserAgentClassifier(),
        ),
        user_store=PostgresUserStore(pool),
        reputation=reputation,
        gate=ConfirmationGate(confirmation),
        audit=LoggingAuditLogger(),
        notifier=notifier,
        metrics=metrics,
        enforce_rate_limit=settings.rate_limit_enabled,
    )


def get_registration_service(request: Request) -> RegistrationService:
    """
    Get the registration service from app state.

    The service is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.registration_service


def client_ip(request: Request, trust_forwarded_for: bool = False) -> str:
    """
    Last remote address of the request.

    Behind a trusted proxy the last X-Forwarded-For entry is the address
    the proxy saw; otherwise the socket peer is used.
    """
    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
        if hops:
            return hops[-1]
    return request.client.host if request.client else "0.0.0.0"


def get_signup_request(request: Request) -> SignupRequest:
    """Client context (IP, user agent) for the signup pipeline."""
    settings = get_settings()
    return SignupRequest(
        ip=client_ip(request, settings.trust_forwarded_for),
        user_agent=request.headers.get("user-agent"),
    )
