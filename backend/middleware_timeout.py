"""
Caps how long one request may run.

An expansion is only meaningful once it has finished, so the limit covers the
whole request rather than single store round-trips. When it is hit the caller
gets a 504 and nothing partial.
"""
import asyncio
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

import config

logger = logging.getLogger("wilhelm")


class TimeoutMiddleware(BaseHTTPMiddleware):
    """Answers 504 for requests that outlive config.REQUEST_TIMEOUT_SECONDS (<= 0 means no limit)."""

    async def dispatch(self, request: Request, call_next):
        limit = config.REQUEST_TIMEOUT_SECONDS
        if limit <= 0:
            return await call_next(request)
        try:
            return await asyncio.wait_for(call_next(request), timeout=limit)
        except asyncio.TimeoutError:
            logger.warning(f"Abandoned {request.method} {request.url.path} after {limit}s")
            return JSONResponse(
                status_code=504,
                content={
                    "detail": f"{request.url.path} did not complete within {limit} seconds",
                    "timeout_seconds": limit,
                },
            )
