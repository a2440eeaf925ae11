"""
Test helpers shared across unit, integration and adversarial tests.
"""

from dataclasses import dataclass

import psycopg

from src.domain.exceptions import CreationConflict
from src.domain.models import AcceptableEmail, Account, ApiVersion, FingerPrint

BROWSER_UA = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)


@dataclass
class CreateCall:
    username: str
    password_hash: str
    email: AcceptableEmail
    blind: bool
    api_version: ApiVersion | None
    must_confirm_email: bool


class InMemoryUserStore:
    """UserStore double: unique usernames (case-insensitive) and emails."""

    def __init__(self) -> None:
        self.accounts: dict[str, Account] = {}
        self.calls: list[CreateCall] = []

    async def create(
        self,
        username: str,
        password_hash: str,
        email: AcceptableEmail,
        blind: bool,
        api_version: ApiVersion | None,
        must_confirm_email: bool,
        ip: str | None = None,
        fingerprint: FingerPrint | None = None,
    ) -> Account:
        self.calls.append(
            CreateCall(username, password_hash, email, blind, api_version, must_confirm_email)
        )
        user_id = username.lower()
        taken = {a.email.value for a in self.accounts.values()}
        if user_id in self.accounts or email.value in taken:
            raise CreationConflict(f"No user could be created for {username}")
        account = Account(
            id=user_id,
            username=username,
            email=email,
            must_confirm_email=must_confirm_email,
        )
        self.accounts[user_id] = account
        return account


def web_form(**overrides: object) -> dict[str, object]:
    """Valid website signup form data."""
    data: dict[str, object] = {
        "username": "alice",
        "password": "correct-horse",
        "email": "alice@example.com",
        "fingerprint": "fp123",
        "captcha_response": "captcha-token",
    }
    data.update(overrides)
    return data


def mobile_form(**overrides: object) -> dict[str, object]:
    """Valid mobile signup form data."""
    data: dict[str, object] = {
        "username": "bob",
        "password": "battery-staple",
        "email": "bob@example.com",
    }
    data.update(overrides)
    return data


def make_account(
    username: str = "alice", email: str = "alice@example.com", must_confirm: bool = False
) -> Account:
    return Account(
        id=username.lower(),
        username=username,
        email=AcceptableEmail(email),
        must_confirm_email=must_confirm,
    )


def fetch_all(database_url: str, sql: str, params: tuple = ()) -> list[tuple]:
    """Run a query on a short-lived synchronous connection."""
    with psycopg.connect(database_url) as conn, conn.cursor() as cursor:
        cursor.execute(sql, params)
        return cursor.fetchall()


def execute(database_url: str, sql: str, params: tuple = ()) -> None:
    """Run a statement on a short-lived synchronous connection."""
    with psycopg.connect(database_url) as conn:
        conn.execute(sql, params)
