import io

import pytest
from rich.console import Console

from realm_users_export.api import HttpResponse
from realm_users_export.log import ExportLogger

ENV = {
    "ATLAS_USERNAME": "public-key",
    "ATLAS_API_KEY": "private-key",
    "ATLAS_GROUP_ID": "group-1",
    "ATLAS_APP_ID": "app-1",
}


class FakeHttpClient:
    """Serves canned responses, keyed by the trailing part of the URL."""

    def __init__(self, login=None, routes=None):
        self.login_response = login or HttpResponse(200, {"access_token": "token-123"})
        self.routes = {suffix: list(responses) for suffix, responses in (routes or {}).items()}
        self.calls = []
        self.closed = False

    def post(self, url, json_body=None, headers=None):
        self.calls.append(("POST", url, json_body, headers))
        return self.login_response

    def get(self, url, headers=None, params=None):
        self.calls.append(("GET", url, params, headers))
        for suffix, responses in self.routes.items():
            if url.endswith(suffix):
                return responses.pop(0)
        raise AssertionError(f"Unexpected GET {url}")

    def close(self):
        self.closed = True

    def gets(self, suffix):
        return [call for call in self.calls if call[0] == "GET" and call[1].endswith(suffix)]


def pages(*pages):
    """Responses for a paginated endpoint, terminated by an empty page."""
    return [HttpResponse(200, page) for page in pages] + [HttpResponse(200, [])]


@pytest.fixture(autouse=True)
def empty_workdir(tmp_path, monkeypatch):
    # Run from a directory without a .env so a developer's own file is never read
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def unset_atlas_env(monkeypatch):
    """Remove the ATLAS_* variables, including any a .env file sets during the test."""
    for name in ENV:
        # setenv first so teardown also deletes values loaded by python-dotenv
        monkeypatch.setenv(name, "unset")
        monkeypatch.delenv(name)


@pytest.fixture
def atlas_env(monkeypatch):
    for name, value in ENV.items():
        monkeypatch.setenv(name, value)
    return ENV


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def log(output):
    console = Console(file=output, width=200, color_system=None)
    return ExportLogger(verbose=True, console=console, error_console=console)
