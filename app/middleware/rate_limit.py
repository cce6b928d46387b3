"""
Rate Limiting

Token bucket rate limiter protecting the OTP request endpoint from
SMS-pumping and code-spraying clients.

Features:
- Per-client limiting based on peer IP or user ID
- Automatic bucket refill, bounded client table
- FastAPI dependency factory for individual routes
"""

import time
from typing import Callable, Dict
from dataclasses import dataclass, field

from fastapi import HTTPException, Request, status

from app.core.config import settings


# ============== Token Bucket Implementation ==============

@dataclass
class TokenBucket:
    """Token bucket for rate limiting."""
    capacity: int          # Maximum tokens
    refill_rate: float     # Tokens per second
    tokens: float = field(default=0, init=False)
    last_refill: float = field(default=0, init=False)

    def __post_init__(self):
        self.tokens = float(self.capacity)
        self.last_refill = time.time()

    def consume(self, tokens: int = 1) -> bool:
        """
        Attempt to consume tokens.

        Args:
            tokens: Number of tokens to consume.

        Returns:
            True if tokens were available, False otherwise.
        """
        self._refill()

        if self.tokens >= tokens:
            self.tokens -= tokens
            return True
        return False

    def seconds_until_available(self, tokens: int = 1) -> int:
        """Whole seconds until `tokens` can be consumed."""
        self._refill()
        missing = tokens - self.tokens
        if missing <= 0:
            return 0
        return max(1, int(missing / self.refill_rate + 0.999))

    def _refill(self) -> None:
        """Refill tokens based on elapsed time."""
        now = time.time()
        elapsed = now - self.last_refill

        self.tokens = min(
            self.capacity,
            self.tokens + (elapsed * self.refill_rate)
        )
        self.last_refill = now


# ============== Rate Limiter ==============

class RateLimiter:
    """
    Per-client rate limiter using token bucket algorithm.

    Clients are keyed by the socket peer address. X-Forwarded-For is only
    honoured when trust_forwarded_for is set, i.e. behind a proxy that
    overwrites it. At most max_buckets clients are tracked.
    """

    def __init__(
        self,
        requests_per_minute: int = 60,
        burst_capacity: int = 10,
        trust_forwarded_for: bool = False,
        max_buckets: int = 10000,
    ):
        """
        Initialize rate limiter.

        Args:
            requests_per_minute: Sustained rate limit.
            burst_capacity: Maximum burst size.
            trust_forwarded_for: Key on the first X-Forwarded-For hop.
            max_buckets: Upper bound on tracked clients.
        """
        self._buckets: Dict[str, TokenBucket] = {}
        self._requests_per_minute = requests_per_minute
        self._burst_capacity = burst_capacity
        self._refill_rate = requests_per_minute / 60.0  # Per second
        self._trust_forwarded_for = trust_forwarded_for
        self._max_buckets = max_buckets

    def _get_key(self, request: Request) -> str:
        """
        Get rate limit key for a request.

        Uses user ID if authenticated, otherwise IP address.
        """
        if hasattr(request.state, "user") and request.state.user:
            return f"user:{request.state.user.id}"

        ip = request.client.host if request.client else "unknown"

        if self._trust_forwarded_for:
            forwarded = request.headers.get("X-Forwarded-For")
            if forwarded:
                ip = forwarded.split(",")[0].strip()

        return f"ip:{ip}"

    def _get_bucket(self, key: str) -> TokenBucket:
        """Get or create bucket for key."""
        if key not in self._buckets:
            if len(self._buckets) >= self._max_buckets:
                self._evict()
            self._buckets[key] = TokenBucket(
                capacity=self._burst_capacity,
                refill_rate=self._refill_rate,
            )
        return self._buckets[key]

    def _evict(self) -> None:
        # A bucket idle long enough to refill completely equals a new one
        self.cleanup(max_age=self._burst_capacity / self._refill_rate)
        if len(self._buckets) >= self._max_buckets:
            oldest = min(self._buckets, key=lambda k: self._buckets[k].last_refill)
            del self._buckets[oldest]

    def is_allowed(self, request: Request) -> bool:
        """
        Check if request is allowed.

        Args:
            request: FastAPI request object.

        Returns:
            True if allowed, False if rate limited.
        """
        key = self._get_key(request)
        bucket = self._get_bucket(key)
        return bucket.consume()

    def retry_after(self, request: Request) -> int:
        """Seconds a limited client should wait before retrying."""
        return self._get_bucket(self._get_key(request)).seconds_until_available()

    def reset(self) -> None:
        """Forget all buckets."""
        self._buckets.clear()

    def cleanup(self, max_age: float = 3600) -> int:
        """
        Remove stale buckets.

        Args:
            max_age: Maximum age in seconds for inactive buckets.

        Returns:
            Number of buckets removed.
        """
        now = time.time()
        stale_keys = [
            key for key, bucket in self._buckets.items()
            if (now - bucket.last_refill) > max_age
        ]

        for key in stale_keys:
            del self._buckets[key]

        return len(stale_keys)


# ============== Global Rate Limiters ==============

# OTP requests trigger an outbound code, keep them scarce
otp_request_limiter = RateLimiter(
    requests_per_minute=settings.OTP_REQUEST_RATE_PER_MINUTE,
    burst_capacity=settings.OTP_REQUEST_BURST,
    trust_forwarded_for=settings.RATE_LIMIT_TRUST_FORWARDED_FOR,
    max_buckets=settings.RATE_LIMIT_MAX_CLIENTS,
)


# ============== Route Dependency ==============

def rate_limit(limiter: RateLimiter) -> Callable[[Request], None]:
    """
    Build a dependency that rejects requests over the limiter's budget.

    Usage:
        @router.post("/request-otp", dependencies=[Depends(rate_limit(otp_request_limiter))])
        async def request_otp(...):
            ...
    """

    def dependency(request: Request) -> None:
        if not limiter.is_allowed(request):
            retry_after = limiter.retry_after(request)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded. Please try again later.",
                headers={"Retry-After": str(retry_after)},
            )

    return dependency
