import io
from datetime import datetime, timedelta, timezone

import pytest
from flask import request

from apiservice.config import AppConfig, Config
from apiservice.logger import LoggerConfig, new_logger
from apiservice.web import (
    ACCESS_LOG_STREAM,
    Deps,
    capture_request_metadata,
    create_app,
    format_access_log,
    register_internal_routes,
    register_public_routes,
)


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def deps(log_stream):
    config = Config(
        app=AppConfig(
            name="svc", version="1.2.3", description="demo service", author="Team"
        )
    )
    return Deps(config=config, logger=new_logger(LoggerConfig(), stream=log_stream))


def test_ping_reports_app_identity(deps):
    client = register_public_routes(deps).test_client()
    response = client.get("/ping")
    assert response.status_code == 200
    assert response.get_json() == {
        "appName": "svc",
        "appVersion": "1.2.3",
        "description": "demo service",
        "auther": "Team",
        "clientIP": "127.0.0.1",
    }


def test_ping_uses_forwarded_client_ip(deps):
    client = register_public_routes(deps).test_client()
    response = client.get(
        "/ping", headers={"X-Forwarded-For": "203.0.113.5, 10.0.0.1"}
    )
    assert response.get_json()["clientIP"] == "203.0.113.5"


def test_internal_routes_serve_ping_and_nothing_else(deps):
    client = register_internal_routes(deps).test_client()
    assert client.get("/ping").get_json()["appName"] == "svc"
    assert client.get("/missing").status_code == 404


def test_access_log_line_written(deps):
    app = create_app(deps, "public")
    stream = io.StringIO()
    app.config[ACCESS_LOG_STREAM] = stream
    app.test_client().get("/ping", headers={"User-Agent": "probe/1.0"})
    line = stream.getvalue()
    assert line.startswith("127.0.0.1 - [")
    assert '"GET /ping HTTP/1.1 200 ' in line
    assert '"probe/1.0"' in line
    assert line.endswith(' "\n')


def test_recovery_turns_exception_into_500(deps, log_stream):
    app = create_app(deps, "public")
    stream = io.StringIO()
    app.config[ACCESS_LOG_STREAM] = stream

    def boom():
        raise ZeroDivisionError("division by zero")

    app.add_url_rule("/boom", "boom", boom)
    response = app.test_client().get("/boom")
    assert response.status_code == 500
    assert response.data == b""
    assert "ZeroDivisionError" in log_stream.getvalue()
    assert '"GET /boom HTTP/1.1 500 ' in stream.getvalue()


def test_capture_request_metadata(deps):
    app = create_app(deps)
    with app.test_request_context(
        "/items?x=1",
        method="POST",
        data=b"abcd",
        headers={"User-Agent": "probe/1.0", "X-Forwarded-For": "198.51.100.7, 10.0.0.2"},
    ):
        meta = capture_request_metadata(request)
    assert meta.method == "POST"
    assert meta.path == "/items"
    assert meta.content_length == 4
    assert meta.client_ip == "198.51.100.7"
    assert meta.user_agent == "probe/1.0"
    assert meta.timestamp.utcoffset() == timedelta(0)


def test_format_access_log_layout():
    line = format_access_log(
        "192.0.2.1",
        datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        "GET",
        "/ping",
        "HTTP/1.1",
        200,
        timedelta(microseconds=1500),
        "curl/8.0",
        "",
    )
    assert line == (
        '192.0.2.1 - [Tue, 02 Jan 2024 03:04:05 UTC] '
        '"GET /ping HTTP/1.1 200 1.5ms "curl/8.0" "\n'
    )


def test_format_access_log_minutes_and_error():
    line = format_access_log(
        "192.0.2.1",
        datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        "POST",
        "/x",
        "HTTP/1.0",
        502,
        timedelta(seconds=90),
        "ua",
        "upstream failed",
    )
    assert " 502 1m30s " in line
    assert line.endswith('"ua" upstream failed"\n')