"""
API response models.

Pydantic models for FastAPI endpoint responses and OpenAPI schema generation.
Request bodies are bound by src.api.forms so the domain can report
per-field errors itself.
"""

from typing import Literal

from pydantic import BaseModel


class SignupResponse(BaseModel):
    """Response model for a created account."""

    status: Literal["confirm_email", "all_set"]
    username: str
    email: str


class RejectedResponse(BaseModel):
    """Response model for a refused signup form."""

    detail: str
    errors: dict[str, list[str]]
    data: dict[str, object]


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
