"""HTTP routes, request middleware and access logging."""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from flask import Flask, g, jsonify, request

from .config import Config
from .dal import DataAccessLayer

CTX_KEY_REQ_META = "req_metadata"
ACCESS_LOG_STREAM = "ACCESS_LOG_STREAM"

_RFC1123 = "%a, %d %b %Y %H:%M:%S %Z"
_STARTED = "request_started"


@dataclass(frozen=True)
class Deps:
    """Everything a server and its handlers need."""

    config: Config
    logger: logging.Logger
    dal: DataAccessLayer | None = None


@dataclass(frozen=True)
class RequestMetadata:
    """Facts about an incoming request, captured before it is handled."""

    timestamp: datetime
    client_ip: str = ""
    user_agent: str = ""
    method: str = ""
    path: str = ""
    content_length: int = 0


def _client_ip(req: Any) -> str:
    forwarded = req.headers.get("X-Forwarded-For", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    real_ip = req.headers.get("X-Real-IP", "").strip()
    if real_ip:
        return real_ip
    return req.remote_addr or ""


def _content_length(req: Any) -> int:
    if req.content_length is not None:
        return req.content_length
    if "chunked" in req.headers.get("Transfer-Encoding", "").lower():
        return -1
    return 0


def capture_request_metadata(request: Any) -> RequestMetadata:
    """Collect the metadata of a request."""
    return RequestMetadata(
        timestamp=datetime.now(timezone.utc),
        client_ip=_client_ip(request),
        user_agent=request.headers.get("User-Agent", ""),
        method=request.method,
        path=request.path,
        content_length=_content_length(request),
    )


def _fraction(value: int, unit: int) -> str:
    whole, rest = divmod(value, unit)
    if not rest:
        return str(whole)
    digits = str(rest).rjust(len(str(unit)) - 1, "0").rstrip("0")
    return f"{whole}.{digits}"


def _format_duration(latency: timedelta) -> str:
    nanos = (latency // timedelta(microseconds=1)) * 1000
    sign = "-" if nanos < 0 else ""
    nanos = abs(nanos)
    if nanos == 0:
        return "0s"
    if nanos < 1_000:
        return f"{sign}{nanos}ns"
    if nanos < 1_000_000:
        return f"{sign}{_fraction(nanos, 1_000)}µs"
    if nanos < 1_000_000_000:
        return f"{sign}{_fraction(nanos, 1_000_000)}ms"
    hours, rest = divmod(nanos, 3_600_000_000_000)
    minutes, rest = divmod(rest, 60_000_000_000)
    text = f"{_fraction(rest, 1_000_000_000)}s"
    if hours or minutes:
        text = f"{minutes}m{text}"
    if hours:
        text = f"{hours}h{text}"
    return sign + text


def format_access_log(
    client_ip: str,
    timestamp: datetime,
    method: str,
    path: str,
    protocol: str,
    status: int,
    latency: timedelta,
    user_agent: str,
    error_message: str,
) -> str:
    """Render one access-log line, newline included."""
    return (
        f"{client_ip} - [{timestamp.strftime(_RFC1123)}] "
        f'"{method} {path} {protocol} {status} {_format_duration(latency)} '
        f'"{user_agent}" {error_message}"\n'
    )


def create_app(deps: Deps, name: str = "api") -> Flask:
    """Build an application with access logging, recovery, metadata capture and /ping."""
    app = Flask(name)
    app.config["PROPAGATE_EXCEPTIONS"] = False
    app.config.setdefault(ACCESS_LOG_STREAM, None)

    @app.before_request
    def _capture() -> None:
        setattr(g, _STARTED, time.perf_counter())
        setattr(g, CTX_KEY_REQ_META, capture_request_metadata(request))

    @app.after_request
    def _access_log(response: Any) -> Any:
        started = g.get(_STARTED)
        elapsed = time.perf_counter() - started if started is not None else 0.0
        line = format_access_log(
            _client_ip(request),
            datetime.now().astimezone(),
            request.method,
            request.path,
            request.environ.get("SERVER_PROTOCOL", ""),
            response.status_code,
            timedelta(seconds=elapsed),
            request.headers.get("User-Agent", ""),
            g.get("error_message", ""),
        )
        stream = app.config[ACCESS_LOG_STREAM] or sys.stdout
        stream.write(line)
        stream.flush()
        return response

    @app.errorhandler(500)
    def _recover(error: Any) -> tuple[str, int]:
        original = getattr(error, "original_exception", None) or error
        deps.logger.error(
            "panic recovered",
            exc_info=(type(original), original, original.__traceback__),
        )
        return "", 500

    @app.get("/ping")
    def ping() -> Any:
        metadata = g.get(CTX_KEY_REQ_META)
        app_config = deps.config.app
        return jsonify(
            {
                "appName": app_config.name,
                "appVersion": app_config.version,
                "description": app_config.description,
                "auther": app_config.author,
                "clientIP": metadata.client_ip if metadata is not None else "",
            }
        )

    return app


def register_public_routes(deps: Deps) -> Flask:
    """Build the application served on the public address."""
    return create_app(deps, "public")


def register_internal_routes(deps: Deps) -> Flask:
    """Build the application served on the internal address."""
    return create_app(deps, "internal")