"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core decision logic for account signup: risk
classification, the password hasher rate limit, the confirmation gate and
the registration pipeline. It defines its own port interfaces for
infrastructure abstraction, ensuring true hexagonal architecture decoupling.
"""

from .confirmation import ConfirmationGate
from .exceptions import (
    CreationConflict,
    FormRejected,
    InvalidEmail,
    RegistrationError,
    ValidationFatal,
)
from .models import (
    AcceptableEmail,
    Account,
    ApiVersion,
    Candidate,
    Channel,
    Complete,
    FingerPrint,
    PendingConfirmation,
    RateLimited,
    Rejected,
    Result,
    SignupRequest,
    SignupStage,
)
from .ports import Admission
from .rate_limit import HasherRateLimiter
from .registration import RegistrationService
from .risk import RiskEvaluator, RiskReason

__all__ = [
    "AcceptableEmail",
    "Account",
    "Admission",
    "ApiVersion",
    "Candidate",
    "Channel",
    "Complete",
    "ConfirmationGate",
    "CreationConflict",
    "FingerPrint",
    "FormRejected",
    "HasherRateLimiter",
    "InvalidEmail",
    "PendingConfirmation",
    "RateLimited",
    "RegistrationError",
    "RegistrationService",
    "Rejected",
    "Result",
    "RiskEvaluator",
    "RiskReason",
    "SignupRequest",
    "SignupStage",
    "ValidationFatal",
]
