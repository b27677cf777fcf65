"""
Shared fixtures: a stand-in for requests.Session so no test touches the network.
"""

import json

import pytest
import requests


class FakeResponse:
    def __init__(self, status_code=200, text=""):
        self.status_code = status_code
        self.text = text


class FakeHTTP:
    """Serves canned responses per URL and records every GET."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []
        self.headers = {}

    def get(self, url):
        self.calls.append(url)
        result = self.responses.get(url, FakeResponse(404))
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture
def fake_http():
    return FakeHTTP()


@pytest.fixture
def pattern_file(tmp_path):
    path = tmp_path / "secret.json"
    path.write_text(json.dumps([
        {"name": "AWS", "patterns": ["AKIA[0-9A-Z]{16}"]},
        {"name": "Slack", "patterns": ["xox[baprs]-[0-9a-zA-Z]{10,48}"]},
    ]))
    return path


@pytest.fixture
def connection_error():
    return requests.exceptions.ConnectionError("Name or service not known")
