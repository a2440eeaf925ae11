"""
API v1 routes.

Defines REST endpoints for the signup API.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException, status
from fastapi.responses import JSONResponse

from src.api.dependencies import get_registration_service, get_signup_request
from src.api.models import ErrorResponse, RejectedResponse, SignupResponse
from src.domain.exceptions import CreationConflict, ValidationFatal
from src.domain.models import (
    ApiVersion,
    Complete,
    PendingConfirmation,
    RateLimited,
    Rejected,
    Result,
    SignupRequest,
)
from src.domain.registration import RegistrationService


router = APIRouter(tags=["v1"])

_responses: dict[int | str, dict[str, Any]] = {
    409: {"model": ErrorResponse, "description": "Username or email already taken"},
    422: {"model": RejectedResponse, "description": "Form rejected"},
    429: {"model": ErrorResponse, "description": "Too many signup attempts"},
    500: {"model": ErrorResponse, "description": "Registration failed"},
}


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_responses,
    summary="Sign up from the website",
    description="Submit username, password, email, device fingerprint and captcha token. "
    "Depending on the risk of the attempt the account is usable right away "
    "or must first be confirmed through an emailed link.",
)
async def signup_web(
    data: dict[str, Any] = Body(...),
    signup_request: SignupRequest = Depends(get_signup_request),
    service: RegistrationService = Depends(get_registration_service),
) -> SignupResponse | JSONResponse:
    """
    Create an account from the website signup form.

    - **username**: 2-20 characters, letters, digits, `_` and `-`
    - **password**: Password (minimum 4 characters, not the username)
    - **email**: Email address to confirm
    - **fingerprint**: Optional device fingerprint
    - **captcha_response**: Captcha token
    - **blind**: Accessibility mode
    """
    try:
        result = await service.register_web(data, signup_request)
    except (ValidationFatal, CreationConflict) as e:
        raise _hard_failure(e) from None
    return _to_response(result)


@router.post(
    "/mobile/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_responses,
    summary="Sign up from a mobile client",
    description="Submit username, password and email. Mobile accounts always "
    "confirm their email before they become usable.",
)
async def signup_mobile(
    data: dict[str, Any] = Body(...),
    x_api_version: int = Header(..., ge=1, description="Mobile API version"),
    signup_request: SignupRequest = Depends(get_signup_request),
    service: RegistrationService = Depends(get_registration_service),
) -> SignupResponse | JSONResponse:
    """Create an account from a mobile client."""
    try:
        result = await service.register_mobile(data, signup_request, ApiVersion(x_api_version))
    except (ValidationFatal, CreationConflict) as e:
        raise _hard_failure(e) from None
    return _to_response(result)


def _to_response(result: Result) -> SignupResponse | JSONResponse:
    match result:
        case Rejected(errors=errors, data=data):
            body = RejectedResponse(detail="Invalid signup form", errors=errors, data=data)
            return JSONResponse(
                status_code=422,
                content=body.model_dump(mode="json"),
            )
        case RateLimited():
            # Generic message: do not reveal whether the username or the IP tripped the limit
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Try again later.",
            )
        case PendingConfirmation(account=account, email=email):
            return SignupResponse(status="confirm_email", username=account.username, email=email.value)
        case Complete(account=account, email=email):
            return SignupResponse(status="all_set", username=account.username, email=email.value)


def _hard_failure(error: Exception) -> HTTPException:
    if isinstance(error, CreationConflict):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Registration failed")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Registration failed",
    )
