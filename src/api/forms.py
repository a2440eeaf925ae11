"""
Signup form binding - Implements the SignupForm protocol with pydantic.

Shape rules live here so the domain stays framework-free. Errors are
collected per field and raised as FormRejected for re-display.
"""

from collections.abc import Mapping

from pydantic import BaseModel, EmailStr, Field, ValidationError, ValidationInfo, field_validator

from src.adapters.hashing.bcrypt_hasher import MAX_PASSWORD_BYTES
from src.domain.exceptions import FormRejected, InvalidEmail
from src.domain.models import Candidate, FingerPrint
from src.domain.ports import EmailValidator
from src.domain.registration import UNACCEPTABLE_EMAIL

USERNAME_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_-]*$"


class MobileSignupData(BaseModel):
    """Fields submitted by mobile clients."""

    username: str = Field(..., min_length=2, max_length=20, pattern=USERNAME_PATTERN)
    password: str = Field(..., min_length=4, max_length=MAX_PASSWORD_BYTES)
    email: EmailStr

    @field_validator("password")
    @classmethod
    def password_differs_from_username(cls, value: str, info: ValidationInfo) -> str:
        username = info.data.get("username")
        if username and value.lower() == username.lower():
            raise ValueError("Password cannot be the same as the username")
        return value

    @field_validator("password")
    @classmethod
    def password_fits_hasher(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
        return value


class WebSignupData(MobileSignupData):
    """Fields submitted by the website signup form."""

    fingerprint: str | None = Field(default=None, max_length=256)
    captcha_response: str | None = None
    blind: bool = False


class PydanticSignupForm:
    """
    Implements SignupForm protocol.

    Syntax is checked by pydantic; acceptability (e.g. disposable domains)
    by the email validator, reported under the UNACCEPTABLE_EMAIL key.
    """

    def __init__(self, email_validator: EmailValidator) -> None:
        self._email_validator = email_validator

    def bind(self, data: Mapping[str, object], *, mobile: bool = False) -> Candidate:
        model = MobileSignupData if mobile else WebSignupData
        try:
            parsed = model.model_validate(dict(data))
        except ValidationError as e:
            raise FormRejected(_field_errors(e), data) from e

        try:
            self._email_validator.validate(str(parsed.email))
        except InvalidEmail as e:
            raise FormRejected({"email": [UNACCEPTABLE_EMAIL]}, data) from e

        if isinstance(parsed, WebSignupData):
            return Candidate(
                username=parsed.username,
                password=parsed.password,
                email=str(parsed.email),
                fingerprint=FingerPrint(parsed.fingerprint) if parsed.fingerprint else None,
                captcha_response=parsed.captcha_response,
                blind=parsed.blind,
            )
        return Candidate(
            username=parsed.username,
            password=parsed.password,
            email=str(parsed.email),
        )


def _field_errors(error: ValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for item in error.errors():
        field = str(item["loc"][0]) if item["loc"] else "form"
        errors.setdefault(field, []).append(item["msg"])
    return errors
