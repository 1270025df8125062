"""Shared fixtures: a fake HiLink device answering through requests.Session.request."""

import http.server
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from unittest.mock import patch
from urllib.parse import urlparse

import pytest
import requests

from hilink import HilinkAPI

URL = "http://192.168.8.1/"
TOKEN_HEADER = "__RequestVerificationToken"

SESSION_INFO = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    "<response>\n"
    "<SesInfo>SessionID=boot-session</SesInfo>\n"
    "<TokInfo>tok0</TokInfo>\n"
    "</response>\n"
)
OK = '<?xml version="1.0" encoding="UTF-8"?>\n<response>OK</response>\n'
NOT_FOUND = '<?xml version="1.0" encoding="UTF-8"?>\n<error><code>100002</code><message></message></error>\n'


def make_response(body: Any = "", status: int = 200,
                  headers: Optional[Dict[str, str]] = None,
                  cookies: Optional[Dict[str, str]] = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = body.encode("utf-8") if isinstance(body, str) else body
    response.encoding = "utf-8"
    response.headers.update(headers or {})
    for name, value in (cookies or {}).items():
        response.cookies.set(name, value)
    return response


@dataclass
class Call:
    method: str
    path: str
    data: Optional[bytes]
    headers: Dict[str, str]
    timeout: Any
    issued_token: Optional[str] = None


@dataclass
class Route:
    body: Any
    status: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    cookies: Dict[str, str] = field(default_factory=dict)


class FakeDevice:
    """
    Serves canned bodies per path.

    Every answer except the session bootstrap carries a fresh CSRF token
    (tok1, tok2, ...). A route body may be an exception instance (raised as a
    transport failure) or a callable taking the request data.
    """

    def __init__(self, delay: float = 0.0):
        self.routes: Dict[str, Route] = {}
        self.calls: List[Call] = []
        self.counter = 0
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0
        self.route("api/webserver/SesTokInfo", SESSION_INFO)

    def route(self, path: str, body: Any, status: int = 200,
              headers: Optional[Dict[str, str]] = None,
              cookies: Optional[Dict[str, str]] = None) -> None:
        self.routes[path] = Route(body, status, headers or {}, cookies or {})

    @property
    def paths(self) -> List[str]:
        return [call.path for call in self.calls]

    def __call__(self, method, url, data=None, headers=None, timeout=None):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            return self._answer(method, url, data, headers, timeout)
        finally:
            self.in_flight -= 1

    def _answer(self, method, url, data, headers, timeout):
        path = urlparse(url).path.lstrip("/")
        call = Call(method, path, data, dict(headers or {}), timeout)
        self.calls.append(call)

        route = self.routes.get(path, Route(NOT_FOUND))
        if isinstance(route.body, Exception):
            raise route.body

        body = route.body(data) if callable(route.body) else route.body
        response_headers = {}
        if path != "api/webserver/SesTokInfo":
            self.counter += 1
            call.issued_token = f"tok{self.counter}"
            response_headers[TOKEN_HEADER] = call.issued_token
        response_headers.update(route.headers)
        return make_response(body, route.status, response_headers, route.cookies)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HILINK_URL", "HILINK_USERNAME", "HILINK_PASSWORD", "HILINK_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def device():
    return FakeDevice()


@pytest.fixture
def api(device):
    """HilinkAPI without credentials, wired to the fake device"""
    client = HilinkAPI(url=URL)
    with patch.object(client.session, "request", side_effect=device):
        yield client


@pytest.fixture
def patched_sessions(device):
    """Route every requests.Session (including ones created later) to the fake device"""
    with patch.object(requests.Session, "request",
                      lambda self, *args, **kwargs: device(*args, **kwargs)):
        yield device


def wait_all(threads: List[threading.Thread]) -> None:
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()


class WebUIHandler(http.server.BaseHTTPRequestHandler):
    """Answers from server.routes: path -> (body, extra headers); records Cookie headers"""

    def do_GET(self) -> None:  # noqa: N802
        self._answer()

    def do_POST(self) -> None:  # noqa: N802
        self.rfile.read(int(self.headers.get("Content-Length", 0)))
        self._answer()

    def _answer(self) -> None:
        path = self.path.lstrip("/")
        self.server.cookies.append((path, self.headers.get_all("Cookie")))
        body, extra = self.server.routes.get(path, (NOT_FOUND, {}))
        data = body.encode("utf-8")

        self.send_response(200)
        self.send_header("Content-Type", "text/xml; charset=UTF-8")
        self.send_header("Content-Length", str(len(data)))
        for name, value in extra.items():
            self.send_header(name, value)
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, format, *args) -> None:
        pass


@pytest.fixture
def webui():
    """A local HTTP server standing in for the device, for tests that need a real cookie jar"""
    server = http.server.HTTPServer(("127.0.0.1", 0), WebUIHandler)
    server.routes = {"api/webserver/SesTokInfo": (SESSION_INFO, {})}
    server.cookies = []
    server.url = f"http://127.0.0.1:{server.server_port}/"

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()
