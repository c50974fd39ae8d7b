import logging
import time
from typing import Dict, List

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60

class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limit_per_minute: int = 60, login_limit_per_minute: int = 30):
        super().__init__(app)
        self.limit = limit_per_minute
        self.login_limit = login_limit_per_minute
        # In-memory, per process: IP -> [timestamp1, timestamp2, ...]
        self.requests: Dict[str, List[float]] = {}
        self._last_sweep = time.time()

    def _recent(self, client_ip: str, now: float) -> List[float]:
        recent = [t for t in self.requests.get(client_ip, ()) if now - t < WINDOW_SECONDS]
        if recent:
            self.requests[client_ip] = recent
        else:
            self.requests.pop(client_ip, None)
        return recent

    def _sweep(self, now: float) -> None:
        """Forget IPs with no request inside the window."""
        stale = [ip for ip, stamps in self.requests.items() if not stamps or now - stamps[-1] >= WINDOW_SECONDS]
        for ip in stale:
            del self.requests[ip]
        self._last_sweep = now

    async def dispatch(self, request: Request, call_next):
        client_ip = request.client.host if request.client else "unknown"
        now = time.time()

        if now - self._last_sweep >= WINDOW_SECONDS:
            self._sweep(now)
        recent = self._recent(client_ip, now)

        limit = self.limit
        if request.url.path.endswith("/auth/login") and request.method == "POST":
            limit = self.login_limit

        if len(recent) >= limit:
            logger.warning(f"Rate limit hit for {client_ip} on {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={"error": "Too many requests. Please try again later."}
            )

        self.requests.setdefault(client_ip, []).append(now)
        return await call_next(request)
