import json

import pytest


class DummyResponse:
    def __init__(self, status_code=200, text=""):
        self.status_code = status_code
        self.text = text


class DummySession:
    """Stands in for requests.Session; replays queued responses and records calls."""

    def __init__(self, responses=None, exc=None):
        self._responses = list(responses or [])
        self._exc = exc
        self.calls = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if self._exc is not None:
            raise self._exc
        try:
            return self._responses.pop(0)
        except IndexError:  # pragma: no cover - a test queued too few responses
            raise AssertionError(f"No response queued for {method} {url}")

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class FakeGitHub(DummySession):
    """A remote that stores the last PUT body per URL, the way the protection endpoint replaces state."""

    def __init__(self):
        super().__init__()
        self.state = {}

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if method == "PUT":
            self.state[url] = json.loads(kwargs["data"])
            return DummyResponse(200, json.dumps(self.state[url]))
        if url in self.state:
            return DummyResponse(200, json.dumps(self.state[url]))
        return DummyResponse(404, '{"message":"Branch not protected"}')


@pytest.fixture
def policy_dict():
    return {
        "required_status_checks": {"strict": True, "contexts": ["test"]},
        "enforce_admins": True,
        "required_pull_request_reviews": {"required_approving_review_count": 1},
        "restrictions": None,
    }


@pytest.fixture
def policy_file(tmp_path, policy_dict):
    path = tmp_path / "branch-protection.json"
    path.write_text(json.dumps(policy_dict, indent=2) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def make_session():
    def _make(*responses, exc=None):
        return DummySession([DummyResponse(status, text) for status, text in responses], exc=exc)

    return _make


@pytest.fixture
def fake_github():
    return FakeGitHub()
