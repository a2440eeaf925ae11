"""
bcrypt password hasher adapter - Implements PasswordHasher protocol.

bcrypt is deliberately slow; this is the work the signup rate limit
protects. The cost factor is never below 10.

bcrypt only reads the first 72 bytes of its input. Longer passwords are
refused here rather than truncated, and the signup form rejects them
before they reach the pipeline.
"""

import bcrypt

MAX_PASSWORD_BYTES = 72


class BcryptPasswordHasher:
    """Implements PasswordHasher protocol via bcrypt."""

    def __init__(self, cost: int = 10) -> None:
        if cost < 10:
            raise ValueError(f"bcrypt cost factor must be >= 10, got {cost}")
        self._cost = cost

    def hash(self, cleartext: str) -> str:
        """
        Hash password using bcrypt with the configured cost factor.

        Raises:
            ValueError: If the UTF-8 encoded password exceeds 72 bytes
        """
        encoded = cleartext.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password longer than {MAX_PASSWORD_BYTES} bytes cannot be hashed")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self._cost)).decode()
