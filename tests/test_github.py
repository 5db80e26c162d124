import pytest
import requests

from appimage_helpers.github import (
    API_URL,
    GitHubError,
    get_commit_message_for_latest_commit,
    get_commit_message_for_this_commit_on_travis,
    get_release_url,
)
from appimage_helpers.updateinformation import UpdateInformation, parse_update_information

GH_UI = "gh-releases-zsync|user|project|continuous|App*-x86_64.AppImage.zsync"


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, routes):
        self.routes = routes
        self.requested = []

    def get(self, url, headers=None, timeout=None):
        self.requested.append(url)
        if url not in self.routes:
            return FakeResponse(404, {"message": "Not Found"})
        return FakeResponse(200, self.routes[url])


class FailingSession:
    def get(self, url, headers=None, timeout=None):
        raise requests.ConnectionError("offline")


RELEASE_URL = API_URL + "/repos/user/project/releases/tags/continuous"
COMMIT_URL = API_URL + "/repos/user/project/git/commits/abc123"


def make_session():
    return FakeSession(
        {
            RELEASE_URL: {"target_commitish": "abc123", "html_url": "https://example.com/rel"},
            COMMIT_URL: {"message": "Fix the build"},
        }
    )


def test_commit_message_for_latest_commit():
    session = make_session()
    ui = parse_update_information(GH_UI)
    assert get_commit_message_for_latest_commit(ui, session) == "Fix the build"
    assert session.requested == [RELEASE_URL, COMMIT_URL]


def test_commit_message_requires_github_transport():
    ui = UpdateInformation("zsync", file_url="https://example.com/a.zsync")
    with pytest.raises(GitHubError, match="Not yet implemented"):
        get_commit_message_for_latest_commit(ui, make_session())


def test_release_url():
    ui = parse_update_information(GH_UI)
    assert get_release_url(ui, make_session()) == "https://example.com/rel"


def test_release_url_other_transport():
    ui = UpdateInformation("bintray-zsync", username="user", repository="project")
    with pytest.raises(GitHubError, match="Could not get URL"):
        get_release_url(ui, make_session())


def test_missing_release_raises():
    ui = parse_update_information(
        "gh-releases-zsync|user|project|nothere|App*-x86_64.AppImage.zsync"
    )
    with pytest.raises(GitHubError, match="404"):
        get_release_url(ui, make_session())


def test_network_error_raises():
    ui = parse_update_information(GH_UI)
    with pytest.raises(GitHubError, match="offline"):
        get_release_url(ui, FailingSession())


def test_travis_commit_message(monkeypatch):
    monkeypatch.setenv("TRAVIS_COMMIT", "abc123")
    monkeypatch.setenv("TRAVIS_REPO_SLUG", "user/project")
    session = make_session()
    assert get_commit_message_for_this_commit_on_travis(session) == "Fix the build"
    assert session.requested == [COMMIT_URL]


def test_travis_commit_missing(monkeypatch):
    monkeypatch.delenv("TRAVIS_COMMIT", raising=False)
    with pytest.raises(GitHubError, match="TRAVIS_COMMIT"):
        get_commit_message_for_this_commit_on_travis(make_session())


def test_travis_slug_missing(monkeypatch):
    monkeypatch.setenv("TRAVIS_COMMIT", "abc123")
    monkeypatch.delenv("TRAVIS_REPO_SLUG", raising=False)
    with pytest.raises(GitHubError, match="TRAVIS_REPO_SLUG"):
        get_commit_message_for_this_commit_on_travis(make_session())


def test_travis_slug_unsplittable(monkeypatch):
    monkeypatch.setenv("TRAVIS_COMMIT", "abc123")
    monkeypatch.setenv("TRAVIS_REPO_SLUG", "noslash")
    with pytest.raises(GitHubError, match="Cannot split repo_slug"):
        get_commit_message_for_this_commit_on_travis(make_session())