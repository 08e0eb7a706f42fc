import io
import json
import socket
import threading
import urllib.request

import pytest

from apiservice.config import AppConfig, Config, HttpServerConfig, ServerConfig
from apiservice.logger import LoggerConfig, new_logger
from apiservice.server import HttpServer, start_servers
from apiservice.web import Deps


def make_deps(public_addr, internal_addr, log_stream):
    config = Config(
        app=AppConfig(name="svc", version="0.1.0"),
        server=ServerConfig(
            http=HttpServerConfig(
                public_addr=public_addr,
                internal_addr=internal_addr,
                read_timeout_in_seconds=5,
                write_timeout_in_seconds=5,
                shutdown_timeout_in_seconds=5,
            )
        ),
    )
    return Deps(config=config, logger=new_logger(LoggerConfig(), stream=log_stream))


@pytest.fixture
def busy_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(1)
    yield sock.getsockname()[1]
    sock.close()


def run_in_thread(server):
    errors = []

    def target():
        try:
            server.start()
        except BaseException as exc:
            errors.append(exc)

    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    return thread, errors


def fetch_json(port):
    with urllib.request.urlopen(f"http://127.0.0.1:{port}/ping", timeout=5) as resp:
        return resp.status, json.loads(resp.read())


def test_serves_both_addresses_and_stops(capsys):
    logs = io.StringIO()
    server = HttpServer(make_deps("127.0.0.1:0", "127.0.0.1:0", logs))
    thread, errors = run_in_thread(server)
    assert server.ready.wait(5)

    public_status, public_body = fetch_json(server.public_address[1])
    internal_status, internal_body = fetch_json(server.internal_address[1])
    assert public_status == 200 and internal_status == 200
    assert public_body["appName"] == "svc"
    assert internal_body["appVersion"] == "0.1.0"
    assert public_body["clientIP"] == "127.0.0.1"

    server.stop()
    thread.join(10)
    assert not thread.is_alive()
    assert errors == []
    text = logs.getvalue()
    assert "public http server listening on 127.0.0.1:0" in text
    assert "internal http server listening on 127.0.0.1:0" in text
    assert "shutting down servers ..." in text


def test_busy_internal_address_raises_and_releases_public(busy_port):
    logs = io.StringIO()
    server = HttpServer(make_deps("127.0.0.1:0", f"127.0.0.1:{busy_port}", logs))
    with pytest.raises(OSError):
        server.start()
    assert f"internal http server listening on 127.0.0.1:{busy_port}" in logs.getvalue()
    assert not server.ready.is_set()


def test_start_servers_propagates_bind_failure(busy_port):
    logs = io.StringIO()
    deps = make_deps(f"127.0.0.1:{busy_port}", "127.0.0.1:0", logs)
    with pytest.raises(OSError):
        start_servers(deps)
    assert "internal http server" not in logs.getvalue()