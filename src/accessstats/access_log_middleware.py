from __future__ import annotations

import time
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


def _quote(value) -> str:
    if not value:
        return "-"
    return str(value).replace("\\", "\\\\").replace('"', '\\"')


def format_access_line(
    *,
    client: str,
    when: datetime,
    request_line: str,
    status: int,
    size,
    referer,
    user_agent,
    duration_micros: int,
) -> str:
    """One line in LOG_FORMAT: combined log format plus %D."""
    return (
        f'{client or "-"} - - [{when.strftime("%d/%b/%Y:%H:%M:%S %z")}] '
        f'"{_quote(request_line)}" {status} {size or "-"} '
        f'"{_quote(referer)}" "{_quote(user_agent)}" {duration_micros}\n'
    )


class AccessLogMiddleware(BaseHTTPMiddleware):
    """
    Appends one access log line per request, readable by LogProcessor.
    """
    def __init__(self, app, *, path: str):
        super().__init__(app)
        self.path = path

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        when = datetime.now(timezone.utc)
        status = 500
        size = None
        try:
            resp = await call_next(request)
            status = resp.status_code
            size = resp.headers.get("content-length")
            return resp
        finally:
            duration_micros = int((time.perf_counter() - start) * 1_000_000)
            target = request.url.path
            if request.url.query:
                target = f"{target}?{request.url.query}"
            version = request.scope.get("http_version", "1.1")
            line = format_access_line(
                client=request.client.host if request.client else "-",
                when=when,
                request_line=f"{request.method} {target} HTTP/{version}",
                status=status,
                size=size,
                referer=request.headers.get("referer"),
                user_agent=request.headers.get("user-agent"),
                duration_micros=duration_micros,
            )
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line)
