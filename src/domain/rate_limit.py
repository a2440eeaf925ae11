"""
Password hasher rate limit - Caps bcrypt work per username and per client.

Hashing is the expensive step of a signup, so attempts are admitted
before any hashing happens. Two fixed-window buckets are kept: one per
username and one per client key (usually the IP). An attempt is admitted
only if both buckets still have credit; a rejected attempt consumes none.
Expired buckets are swept at most once per window, so an admission costs
the same however many usernames and clients have been seen.

Counters are shared by every concurrent attempt in the process and are
guarded by a single lock. The lock is never held across an await.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

from .ports import Admission

logger = logging.getLogger(__name__)


@dataclass
class _Bucket:
    """Credit spent in the current window."""

    window_start: float
    count: int


class HasherRateLimiter:
    """
    In-memory fixed-window limiter implementing the RateLimiter port.

    With enforce=False the limiter still counts attempts but always
    admits, which keeps counters meaningful in environments where
    limiting is switched off.
    """

    def __init__(
        self,
        user_credits: int = 10,
        client_credits: int = 40,
        window_seconds: float = 600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._user_credits = user_credits
        self._client_credits = client_credits
        self._window = window_seconds
        self._clock = clock
        self._lock = Lock()
        self._buckets: dict[tuple[str, str], _Bucket] = {}
        self._last_prune = clock()

    def admit(self, identity_key: str, client_key: str, enforce: bool = True) -> Admission:
        """
        Admit or reject one hashing attempt for (username, client).

        Args:
            identity_key: Username of the candidate (case-insensitive)
            client_key: Client-derived key, e.g. the remote IP
            enforce: False turns the limiter into a pass-through

        Returns:
            Admission.ADMITTED or Admission.REJECTED
        """
        now = self._clock()
        user_key = ("user", identity_key.lower())
        ip_key = ("client", client_key)

        with self._lock:
            if now - self._last_prune >= self._window:
                self._prune(now)
            user_bucket = self._current(user_key, now)
            ip_bucket = self._current(ip_key, now)

            over = (
                user_bucket.count >= self._user_credits
                or ip_bucket.count >= self._client_credits
            )
            if over and enforce:
                logger.info("Hasher rate limit reached for %s from %s", identity_key, client_key)
                return Admission.REJECTED

            user_bucket.count += 1
            ip_bucket.count += 1

        return Admission.ADMITTED

    def bucket_count(self) -> int:
        """Number of counters currently held."""
        with self._lock:
            return len(self._buckets)

    def _current(self, key: tuple[str, str], now: float) -> _Bucket:
        """Return the live bucket for key, opening a new window if needed. Caller holds the lock."""
        bucket = self._buckets.get(key)
        if bucket is None or (now - bucket.window_start) >= self._window:
            bucket = _Bucket(window_start=now, count=0)
            self._buckets[key] = bucket
        return bucket

    def _prune(self, now: float) -> None:
        # Caller holds the lock. Runs at most once per window.
        expired = [k for k, b in self._buckets.items() if (now - b.window_start) >= self._window]
        for key in expired:
            del self._buckets[key]
        self._last_prune = now
