"""
Domain exceptions - Semantic error types for signup.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.

Only FormRejected is expected at volume. ValidationFatal and
CreationConflict indicate an upstream bug or a race and are escalated.
"""

from collections.abc import Mapping


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    pass


class FormRejected(RegistrationError):
    """Submitted signup form failed shape validation."""

    def __init__(self, errors: Mapping[str, list[str]], data: Mapping[str, object]) -> None:
        super().__init__(", ".join(sorted(errors)))
        self.errors = dict(errors)
        self.data = dict(data)


class InvalidEmail(RegistrationError):
    """Email address could not be validated or normalized."""

    pass


class ValidationFatal(RegistrationError):
    """Email passed form validation but failed normalization."""

    pass


class CreationConflict(RegistrationError):
    """Username or email already belongs to an account."""

    pass
