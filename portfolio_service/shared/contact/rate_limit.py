"""In-memory sliding-window rate limiting for contact form submissions."""

import logging
import time
from threading import Lock
from typing import Dict, List, Optional

from fastapi import HTTPException, Request, status

# Rate limiting configuration
RATE_LIMIT_MAX_REQUESTS = 10  # Max 10 requests per window
RATE_LIMIT_WINDOW_SECONDS = 15 * 60  # 15 minutes
RATE_LIMIT_MAX_TRACKED_CLIENTS = 10_000


class RateLimiter:
    """
    Tracks recent request timestamps per client identifier.

    A timestamp counts while it is strictly newer than ``now - window_seconds``.
    Clients whose timestamps have all expired are dropped by sweep(), which admit()
    runs once more than ``max_tracked_clients`` identifiers are being tracked. After a
    sweep the next one waits until the map doubles past what survived, so a map
    full of active clients is not rescanned on every request.
    """

    def __init__(
        self,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
        window_seconds: float = RATE_LIMIT_WINDOW_SECONDS,
        max_tracked_clients: int = RATE_LIMIT_MAX_TRACKED_CLIENTS,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.max_tracked_clients = max_tracked_clients
        self._requests: Dict[str, List[float]] = {}
        self._sweep_threshold = max_tracked_clients
        self._lock = Lock()

    @property
    def tracked_clients(self) -> int:
        return len(self._requests)

    def admit(self, client_id: str, now: Optional[float] = None) -> bool:
        """Record the request and return True, or return False if the client is over the limit."""
        if now is None:
            now = time.time()
        window_start = now - self.window_seconds

        with self._lock:
            recent = [t for t in self._requests.get(client_id, []) if t > window_start]
            if len(recent) >= self.max_requests:
                return False

            recent.append(now)
            self._requests[client_id] = recent
            if len(self._requests) > self._sweep_threshold:
                self._sweep(window_start)
            return True

    def sweep(self, now: Optional[float] = None) -> int:
        """Forget clients with no request inside the window. Returns how many were dropped."""
        if now is None:
            now = time.time()
        with self._lock:
            return self._sweep(now - self.window_seconds)

    def _sweep(self, window_start: float) -> int:
        stale = [
            client_id for client_id, times in self._requests.items()
            if not times or max(times) <= window_start
        ]
        for client_id in stale:
            del self._requests[client_id]
        self._sweep_threshold = max(self.max_tracked_clients, 2 * len(self._requests))
        if stale:
            logging.info(f"Rate limiter dropped {len(stale)} idle clients")
        return len(stale)


def get_client_ip(request: Request, trust_proxy_headers: bool = False) -> str:
    """Get client IP address for rate limiting."""
    if trust_proxy_headers:
        # Check for forwarded IP (from proxy/load balancer)
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            # Take the first IP in the chain
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def enforce_rate_limit(request: Request) -> None:
    """Dependency that rejects the request with 429 once the client is over the limit."""
    limiter: RateLimiter = request.app.state.rate_limiter
    settings = request.app.state.settings
    client_ip = get_client_ip(request, settings.trust_proxy_headers)
    if not limiter.admit(client_ip):
        logging.warning(f"Rate limit exceeded for {client_ip}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={"error": "Too many requests. Please try again later."}
        )
