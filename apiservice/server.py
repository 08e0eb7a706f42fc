"""Public and internal HTTP servers with graceful shutdown."""

from __future__ import annotations

import logging
import signal
import socket
import threading
import time
from contextlib import contextmanager
from socketserver import ThreadingMixIn
from typing import Any, Iterator
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer

from .config import HttpServerConfig
from .utils import ERROR_JSON_KEY
from .web import Deps, register_internal_routes, register_public_routes

_POLL_INTERVAL = 0.1

_log = logging.getLogger(__name__)


class _QuietHandler(WSGIRequestHandler):
    def setup(self) -> None:
        self.timeout = self.server.request_timeout  # type: ignore[attr-defined]
        super().setup()

    def log_message(self, format: str, *args: Any) -> None:
        # Access lines are written by the application; keep the server's own at debug.
        _log.debug("%s - %s", self.address_string(), format % args)


class _Server(ThreadingMixIn, WSGIServer):
    daemon_threads = True
    request_timeout: float | None = None


class _Server6(_Server):
    address_family = socket.AF_INET6


def _split_address(address: str) -> tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep:
        host, port = address, ""
    host = host.strip("[]")
    if not port:
        return host, 80
    if port.isdigit():
        return host, int(port)
    return host, socket.getservbyname(port, "tcp")


def _socket_timeout(http: HttpServerConfig) -> float | None:
    limits = [
        t for t in (http.read_timeout_in_seconds, http.write_timeout_in_seconds) if t > 0
    ]
    return float(min(limits)) if limits else None


def _bind(address: str, app: Any, timeout: float | None) -> _Server:
    host, port = _split_address(address)
    server_class = _Server6 if ":" in host else _Server
    server = server_class((host, port), _QuietHandler)
    server.request_timeout = timeout
    server.set_app(app)
    return server


def _shutdown(server: _Server, timeout: float) -> None:
    waiter = threading.Thread(target=server.shutdown, daemon=True)
    waiter.start()
    waiter.join(timeout if timeout > 0 else None)
    if waiter.is_alive():
        raise TimeoutError("server shutdown timed out")
    server.server_close()


class HttpServer:
    """Runs the public and internal servers until stopped or signalled."""

    def __init__(self, deps: Deps) -> None:
        self.deps = deps
        self.ready = threading.Event()
        self._stop = threading.Event()
        self._servers: dict[str, _Server] = {}

    @property
    def public_address(self) -> tuple[str, int]:
        return self._servers["public"].server_address[:2]

    @property
    def internal_address(self) -> tuple[str, int]:
        return self._servers["internal"].server_address[:2]

    @contextmanager
    def _signals(self) -> Iterator[None]:
        if threading.current_thread() is not threading.main_thread():
            yield
            return
        previous = {
            sig: signal.signal(sig, lambda *_: self.stop())
            for sig in (signal.SIGINT, signal.SIGTERM)
        }
        try:
            yield
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)

    def _serve(self, server: _Server, failures: list[BaseException]) -> None:
        try:
            server.serve_forever(poll_interval=_POLL_INTERVAL)
        except Exception as exc:
            failures.append(exc)
            self._stop.set()

    def start(self) -> None:
        """Serve both addresses; block until stopped, then shut down gracefully."""
        http = self.deps.config.server.http
        log = self.deps.logger
        timeout = _socket_timeout(http)
        self._stop.clear()
        self.ready.clear()

        plan = [
            ("public", http.public_addr, register_public_routes(self.deps)),
            ("internal", http.internal_addr, register_internal_routes(self.deps)),
        ]
        servers: dict[str, _Server] = {}
        try:
            for label, address, app in plan:
                log.info(f"{label} http server listening on {address}")
                servers[label] = _bind(address, app, timeout)
        except BaseException:
            for server in servers.values():
                server.server_close()
            raise
        self._servers = servers

        failures: list[BaseException] = []
        threads = [
            threading.Thread(target=self._serve, args=(server, failures), daemon=True)
            for server in servers.values()
        ]
        with self._signals():
            for thread in threads:
                thread.start()
            self.ready.set()
            self._stop.wait()

        log.info("shutting down servers ...")
        deadline = time.monotonic() + http.shutdown_timeout_in_seconds
        shutdown_error: Exception | None = None
        for label, server in servers.items():
            try:
                _shutdown(server, max(deadline - time.monotonic(), 0.0))
            except Exception as exc:
                log.error(
                    f"failed to shutdown {label} server",
                    extra={ERROR_JSON_KEY: str(exc)},
                )
                shutdown_error = exc
        self.ready.clear()

        if failures:
            raise failures[0]
        if shutdown_error is not None:
            raise shutdown_error

    def stop(self) -> None:
        """Ask a running start() to shut down."""
        self._stop.set()


def start_grpc() -> None:
    """Start the gRPC server; no gRPC services are registered, so nothing listens."""
    _log.debug("grpc server has no registered services; not listening")


def start_servers(deps: Deps) -> None:
    """Run the HTTP servers until shutdown, then the gRPC server."""
    HttpServer(deps).start()
    start_grpc()