"""Looking up releases and commit messages through the GitHub REST API."""

from __future__ import annotations

import os
from typing import Any

import requests

from .updateinformation import UpdateInformation

API_URL = "https://api.github.com"
_TIMEOUT = 30


class GitHubError(Exception):
    """Raised when the GitHub API cannot answer a request."""


def _get_json(session: requests.Session | None, path: str) -> dict[str, Any]:
    url = API_URL + path
    http = session if session is not None else requests.Session()
    try:
        response = http.get(
            url, headers={"Accept": "application/vnd.github.v3+json"}, timeout=_TIMEOUT
        )
    except requests.RequestException as exc:
        raise GitHubError(f"GET {url}: {exc}") from exc
    if response.status_code != 200:
        raise GitHubError(f"GET {url}: {response.status_code}")
    return response.json()


def _release_by_tag(ui: UpdateInformation, session) -> dict[str, Any]:
    return _get_json(
        session, f"/repos/{ui.username}/{ui.repository}/releases/tags/{ui.release_name}"
    )


def _commit_message(session, owner: str, repository: str, sha: str) -> str:
    commit = _get_json(session, f"/repos/{owner}/{repository}/git/commits/{sha}")
    return commit.get("message", "")


def get_commit_message_for_latest_commit(
    ui: UpdateInformation, session: requests.Session | None = None
) -> str:
    """Return the message of the commit the release named by *ui* points at.

    Only ``gh-releases-zsync`` update information is supported.
    """
    if ui.transport_mechanism != "gh-releases-zsync":
        raise GitHubError("Not yet implemented for this transport mechanism")
    release = _release_by_tag(ui, session)
    commitish = release.get("target_commitish", "")
    return _commit_message(session, ui.username, ui.repository, commitish)


def get_release_url(
    ui: UpdateInformation, session: requests.Session | None = None
) -> str:
    """Return the web URL of the release named by *ui* (``gh-releases-zsync`` only)."""
    if ui.transport_mechanism != "gh-releases-zsync":
        raise GitHubError("GetReleaseURL: Could not get URL")
    return _release_by_tag(ui, session).get("html_url", "")


def get_commit_message_for_this_commit_on_travis(
    session: requests.Session | None = None,
) -> str:
    """Return the message of the commit in $TRAVIS_COMMIT of $TRAVIS_REPO_SLUG."""
    commit = os.environ.get("TRAVIS_COMMIT", "")
    if not commit:
        raise GitHubError(
            "TRAVIS_COMMIT environment variable missing. Not running on Travis CI?"
        )
    slug = os.environ.get("TRAVIS_REPO_SLUG", "")
    if not slug:
        raise GitHubError(
            "TRAVIS_REPO_SLUG environment variable missing. Not running on Travis CI?"
        )
    parts = slug.split("/")
    if len(parts) < 2:
        raise GitHubError("Cannot split repo_slug")
    return _commit_message(session, parts[0], parts[1], commit)