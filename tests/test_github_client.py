"""Tests for the GitHub REST client (HTTP is stubbed, never live)."""

import pytest
import requests

from branchguard import github_client
from branchguard.errors import DeadlineExceeded, NetworkError, ValidationError
from branchguard.github_client import GitHubClient
from branchguard.models import Target

TARGET = Target(owner="octocat", repo="hello-world", branch="main")


def test_put_branch_protection_request_shape(make_session):
    session = make_session((200, '{"url": "x"}'))
    gh = GitHubClient("tok", session=session, timeout=7)

    result = gh.put_branch_protection(TARGET, b'{"enforce_admins": true}')

    assert result.status_code == 200
    assert result.body == '{"url": "x"}'
    (call,) = session.calls
    assert call["method"] == "PUT"
    assert call["url"] == "https://api.github.com/repos/octocat/hello-world/branches/main/protection"
    assert call["data"] == b'{"enforce_admins": true}'
    assert call["timeout"] == 7
    headers = call["headers"]
    assert headers["Authorization"] == "Bearer tok"
    assert headers["Accept"] == "application/vnd.github+json"
    assert headers["Content-Type"] == "application/json"


def test_get_has_no_body(make_session):
    session = make_session((404, '{"message": "Branch not protected"}'))
    gh = GitHubClient("tok", session=session)

    result = gh.get_branch_protection(TARGET)

    assert not result.ok
    assert result.body == '{"message": "Branch not protected"}'
    assert session.calls[0]["method"] == "GET"
    assert session.calls[0]["data"] is None
    assert "Content-Type" not in session.calls[0]["headers"]


def test_branch_with_slash_is_one_path_segment():
    path = GitHubClient.protection_path(Target("octocat", "hello-world", "release/1.0"))
    assert path == "/repos/octocat/hello-world/branches/release%2F1.0/protection"


def test_api_base_trailing_slash(make_session):
    session = make_session((200, "{}"))
    gh = GitHubClient("tok", "https://ghe.example.com/api/v3/", session=session)
    gh.put_branch_protection(TARGET, b"{}")
    assert session.calls[0]["url"].startswith("https://ghe.example.com/api/v3/repos/")


def test_timeout_maps_to_deadline_exceeded(make_session):
    gh = GitHubClient("tok", session=make_session(exc=requests.ReadTimeout("slow")), timeout=0.5)
    with pytest.raises(DeadlineExceeded) as exc:
        gh.put_branch_protection(TARGET, b"{}")
    assert isinstance(exc.value, TimeoutError)
    assert isinstance(exc.value, NetworkError)
    assert "0.5s" in str(exc.value)


def test_connection_error_maps_to_network_error(make_session):
    cause = requests.ConnectionError("Name or service not known")
    gh = GitHubClient("tok", session=make_session(exc=cause))
    with pytest.raises(NetworkError) as exc:
        gh.put_branch_protection(TARGET, b"{}")
    assert not isinstance(exc.value, DeadlineExceeded)
    assert exc.value.__cause__ is cause


def test_empty_token_rejected():
    with pytest.raises(ValidationError):
        GitHubClient("   ")


def test_repr_hides_token(make_session):
    gh = GitHubClient("ghp_secret", session=make_session())
    assert "ghp_secret" not in repr(gh)


def test_client_closes_only_its_own_session(make_session, monkeypatch):
    owned = make_session()
    monkeypatch.setattr(github_client.requests, "Session", lambda: owned)
    with GitHubClient("tok"):
        pass
    assert owned.closed

    injected = make_session()
    with GitHubClient("tok", session=injected):
        pass
    assert not injected.closed
