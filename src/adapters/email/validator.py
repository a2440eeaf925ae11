"""
Email validator adapter - Implements EmailValidator protocol.

Syntax checks and normalization come from the email-validator library
(the same one pydantic's EmailStr relies on). No DNS deliverability check
is made: signup must not block on DNS.
"""

from collections.abc import Iterable

from email_validator import EmailNotValidError, validate_email

from src.domain.exceptions import InvalidEmail
from src.domain.models import AcceptableEmail


class LibraryEmailValidator:
    """
    Implements EmailValidator protocol via email-validator.

    Normalization: strip whitespace + lowercase. Addresses on a disposable
    domain are refused.
    """

    def __init__(self, disposable_domains: Iterable[str] = ()) -> None:
        self._disposable = {d.strip().lower() for d in disposable_domains if d.strip()}

    def validate(self, raw: str) -> AcceptableEmail:
        try:
            info = validate_email(raw.strip(), check_deliverability=False)
        except EmailNotValidError as e:
            raise InvalidEmail(str(e)) from e

        normalized = info.normalized.lower()
        if self.is_disposable(normalized):
            raise InvalidEmail(f"Disposable email domain: {info.domain}")
        return AcceptableEmail(normalized)

    def is_disposable(self, email: str) -> bool:
        """Return True if the address domain is on the disposable list."""
        domain = email.rsplit("@", 1)[-1].strip().lower()
        return domain in self._disposable
