"""Parsing and validation of AppImage update information strings."""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import unquote

_TRANSPORT_MECHANISMS = ("zsync", "bintray-zsync", "gh-releases-zsync")
_SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*:")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class UpdateInformationError(ValueError):
    """Raised when an update information string is malformed."""


@dataclass(frozen=True)
class UpdateInformation:
    """The parts of an update information string."""

    transport_mechanism: str
    file_url: str = ""
    username: str = ""
    repository: str = ""
    release_name: str = ""
    filename: str = ""
    package_name: str = ""


def _url_path(raw: str) -> tuple[str, str]:
    """Return (scheme, unescaped path) of a URL reference, raising ValueError if invalid."""
    if any(ord(c) < 0x20 or ord(c) == 0x7F for c in raw):
        raise ValueError("invalid control character in URL")
    rest = raw.split("#", 1)[0]
    scheme = ""
    match = _SCHEME_RE.match(rest)
    if match:
        scheme = match.group()[:-1].lower()
        rest = rest[match.end():]
    elif rest.startswith(":"):
        raise ValueError("missing protocol scheme")
    rest = rest.split("?", 1)[0]
    if not rest.startswith("/"):
        if scheme:
            return scheme, ""
        if ":" in rest.split("/", 1)[0]:
            raise ValueError("first path segment in URL cannot contain colon")
    if rest.startswith("//") and (scheme or not rest.startswith("///")):
        authority = rest[2:]
        slash = authority.find("/")
        rest = "" if slash < 0 else authority[slash:]
    if _BAD_ESCAPE_RE.search(rest):
        raise ValueError("invalid URL escape")
    return scheme, unquote(rest)


def validate_update_information(text: str) -> None:
    """Raise UpdateInformationError unless *text* is acceptable update information."""
    parts = text.split("|")
    if len(parts) < 2:
        raise UpdateInformationError("Too short")

    detected = ""
    for mechanism in _TRANSPORT_MECHANISMS:
        if parts[0] != mechanism:
            detected = mechanism
    if not detected:
        raise UpdateInformationError("Invalid transport mechanism")

    # The last part may carry a query ("some.zsync?foo=bar"), so parse it as a URL.
    try:
        scheme, path = _url_path(parts[-1])
    except ValueError as exc:
        raise UpdateInformationError("Cannot parse URL") from exc
    if detected == "zsync" and not scheme:
        raise UpdateInformationError(
            "Scheme is missing, zsync needs e.,g,. http:// or https://"
        )
    if not path.endswith(".zsync"):
        raise UpdateInformationError(f"{text} does not end in .zsync")


def parse_update_information(text: str) -> UpdateInformation:
    """Validate *text* and split it into an UpdateInformation."""
    validate_update_information(text)
    parts = text.split("|")
    mechanism = parts[0]
    if mechanism == "zsync":
        return UpdateInformation(mechanism, file_url=parts[1])
    if mechanism in ("gh-releases-zsync", "bintray-zsync"):
        if len(parts) < 5:
            raise UpdateInformationError("Too short")
        if mechanism == "gh-releases-zsync":
            return UpdateInformation(
                mechanism,
                username=parts[1],
                repository=parts[2],
                release_name=parts[3],
                filename=parts[4],
            )
        return UpdateInformation(
            mechanism,
            username=parts[1],
            repository=parts[2],
            package_name=parts[3],
            filename=parts[4],
        )
    raise UpdateInformationError("This transport mechanism is not yet implemented")