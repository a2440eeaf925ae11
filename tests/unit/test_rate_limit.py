"""
Unit tests for HasherRateLimiter.

Tests verify:
- Per-username and per-client credit budgets
- Window reset
- Pass-through mode when enforcement is off
- Consistency under concurrent admission
"""

from concurrent.futures import ThreadPoolExecutor

from src.domain.ports import Admission
from src.domain.rate_limit import HasherRateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestCredits:
    """Tests for credit budgets."""

    def test_admits_up_to_user_credits(self) -> None:
        """Same username is admitted exactly user_credits times per window."""
        limiter = HasherRateLimiter(user_credits=3, client_credits=100)

        results = [limiter.admit("alice", f"198.51.100.{i}") for i in range(5)]

        assert results.count(Admission.ADMITTED) == 3
        assert results[3:] == [Admission.REJECTED, Admission.REJECTED]

    def test_username_is_case_insensitive(self) -> None:
        """ALICE and alice share one bucket."""
        limiter = HasherRateLimiter(user_credits=1, client_credits=100)

        assert limiter.admit("alice", "198.51.100.1") is Admission.ADMITTED
        assert limiter.admit("ALICE", "198.51.100.2") is Admission.REJECTED

    def test_admits_up_to_client_credits(self) -> None:
        """Same client is capped across different usernames."""
        limiter = HasherRateLimiter(user_credits=100, client_credits=2)

        assert limiter.admit("alice", "203.0.113.5") is Admission.ADMITTED
        assert limiter.admit("bob", "203.0.113.5") is Admission.ADMITTED
        assert limiter.admit("carol", "203.0.113.5") is Admission.REJECTED
        assert limiter.admit("carol", "203.0.113.6") is Admission.ADMITTED

    def test_rejection_consumes_no_credit(self) -> None:
        """A rejected attempt does not eat the other bucket's credit."""
        limiter = HasherRateLimiter(user_credits=1, client_credits=2)

        limiter.admit("alice", "203.0.113.5")
        assert limiter.admit("alice", "203.0.113.5") is Admission.REJECTED
        assert limiter.admit("bob", "203.0.113.5") is Admission.ADMITTED


class TestWindow:
    """Tests for fixed-window reset."""

    def test_credits_return_after_window(self) -> None:
        """A new window restores credit."""
        clock = FakeClock()
        limiter = HasherRateLimiter(user_credits=1, client_credits=10, window_seconds=60, clock=clock)

        assert limiter.admit("alice", "203.0.113.5") is Admission.ADMITTED
        assert limiter.admit("alice", "203.0.113.5") is Admission.REJECTED

        clock.now += 60
        assert limiter.admit("alice", "203.0.113.5") is Admission.ADMITTED

    def test_within_window_stays_rejected(self) -> None:
        """Credit does not trickle back mid-window."""
        clock = FakeClock()
        limiter = HasherRateLimiter(user_credits=1, client_credits=10, window_seconds=60, clock=clock)

        limiter.admit("alice", "203.0.113.5")
        clock.now += 59
        assert limiter.admit("alice", "203.0.113.5") is Admission.REJECTED


class TestPruning:
    """Tests for sweeping expired counters."""

    def test_expired_counters_swept_once_per_window(self) -> None:
        """Expired buckets are dropped on the first admission a full window after the last sweep."""
        clock = FakeClock()
        limiter = HasherRateLimiter(user_credits=5, client_credits=5, window_seconds=60, clock=clock)

        limiter.admit("a", "10.0.0.1")
        clock.now += 30
        limiter.admit("b", "10.0.0.2")
        assert limiter.bucket_count() == 4

        # a is expired and a sweep is due
        clock.now += 35
        limiter.admit("c", "10.0.0.3")
        assert limiter.bucket_count() == 4

        # b is expired but the last sweep was 35s ago
        clock.now += 35
        limiter.admit("d", "10.0.0.4")
        assert limiter.bucket_count() == 6

        clock.now += 25
        limiter.admit("e", "10.0.0.5")
        assert limiter.bucket_count() == 4

    def test_unswept_expired_bucket_still_resets(self) -> None:
        """An expired bucket waiting for the sweep grants fresh credit."""
        clock = FakeClock()
        limiter = HasherRateLimiter(user_credits=1, client_credits=10, window_seconds=60, clock=clock)

        clock.now += 30
        limiter.admit("alice", "203.0.113.5")

        # sweep runs here, alice still inside her window
        clock.now += 35
        assert limiter.admit("alice", "203.0.113.5") is Admission.REJECTED

        # alice expired, next sweep not due yet
        clock.now += 30
        assert limiter.admit("alice", "203.0.113.5") is Admission.ADMITTED


class TestPassThrough:
    """Tests for enforce=False."""

    def test_never_rejects_when_not_enforced(self) -> None:
        """Pass-through mode always admits."""
        limiter = HasherRateLimiter(user_credits=1, client_credits=1)

        results = [limiter.admit("alice", "203.0.113.5", enforce=False) for _ in range(10)]

        assert set(results) == {Admission.ADMITTED}

    def test_still_counts_when_not_enforced(self) -> None:
        """Attempts made in pass-through mode still spend credit."""
        limiter = HasherRateLimiter(user_credits=2, client_credits=10)

        limiter.admit("alice", "203.0.113.5", enforce=False)
        limiter.admit("alice", "203.0.113.5", enforce=False)

        assert limiter.admit("alice", "203.0.113.5") is Admission.REJECTED


class TestConcurrency:
    """Tests for shared counters under concurrent admission."""

    def test_concurrent_admissions_never_exceed_credits(self) -> None:
        """Many threads racing on one key: exactly user_credits admitted."""
        limiter = HasherRateLimiter(user_credits=10, client_credits=1000)

        with ThreadPoolExecutor(max_workers=16) as executor:
            futures = [
                executor.submit(limiter.admit, "alice", f"198.51.100.{i % 200}")
                for i in range(200)
            ]
            results = [f.result() for f in futures]

        assert results.count(Admission.ADMITTED) == 10
        assert results.count(Admission.REJECTED) == 190
