"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Port doubles for the signup pipeline (Mock / AsyncMock)
- A fully wired RegistrationService
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from src.adapters.email.validator import LibraryEmailValidator
from src.adapters.metrics import InMemoryMetricsSink
from src.api.forms import PydanticSignupForm
from src.domain.confirmation import ConfirmationGate
from src.domain.models import SignupRequest
from src.domain.ports import Admission
from src.domain.registration import RegistrationService
from src.domain.risk import RiskEvaluator
from tests.helpers import BROWSER_UA, InMemoryUserStore


@pytest.fixture
def signup_request() -> SignupRequest:
    """Client context with no history and a normal browser."""
    return SignupRequest(ip="203.0.113.5", user_agent=BROWSER_UA)


@pytest.fixture
def ports() -> SimpleNamespace:
    """Port doubles for a clean attempt: nothing known, nothing suspicious."""
    captcha = Mock()
    captcha.verify = AsyncMock(return_value=True)

    rate_limiter = Mock()
    rate_limiter.admit.return_value = Admission.ADMITTED

    password_hasher = Mock()
    password_hasher.hash.return_value = "$2b$10$fakehashfakehashfakehash"

    history = Mock()
    history.recent_signup_by_ip = AsyncMock(return_value=False)
    history.recent_signup_by_fingerprint = AsyncMock(return_value=False)

    reputation = Mock()
    reputation.is_suspicious = AsyncMock(return_value=False)

    # Independent reputation check used only for the abuse notification
    notify_reputation = Mock()
    notify_reputation.is_suspicious = AsyncMock(return_value=False)

    user_agents = Mock()
    user_agents.is_weird.return_value = False

    confirmation = Mock()
    confirmation.is_enabled.return_value = True
    confirmation.send = AsyncMock()
    confirmation.persist_pending_signup = AsyncMock()

    notifier = Mock()
    notifier.notify = AsyncMock()

    email_validator = LibraryEmailValidator(["mailinator.com"])

    return SimpleNamespace(
        form=PydanticSignupForm(email_validator),
        captcha=captcha,
        email_validator=email_validator,
        password_hasher=password_hasher,
        rate_limiter=rate_limiter,
        history=history,
        reputation=reputation,
        notify_reputation=notify_reputation,
        user_agents=user_agents,
        user_store=InMemoryUserStore(),
        confirmation=confirmation,
        audit=Mock(),
        notifier=notifier,
        metrics=InMemoryMetricsSink(),
    )


@pytest.fixture
def service(ports: SimpleNamespace) -> RegistrationService:
    """RegistrationService wired to the port doubles."""
    return RegistrationService(
        form=ports.form,
        captcha=ports.captcha,
        email_validator=ports.email_validator,
        password_hasher=ports.password_hasher,
        rate_limiter=ports.rate_limiter,
        risk=RiskEvaluator(
            history=ports.history,
            reputation=ports.reputation,
            user_agents=ports.user_agents,
        ),
        user_store=ports.user_store,
        reputation=ports.notify_reputation,
        gate=ConfirmationGate(ports.confirmation),
        audit=ports.audit,
        notifier=ports.notifier,
        metrics=ports.metrics,
    )
