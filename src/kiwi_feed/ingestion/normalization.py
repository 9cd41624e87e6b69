"""Href normalization used as the submission dedup key."""

from __future__ import annotations

import ipaddress
import re
from urllib.parse import SplitResult, parse_qsl, quote, urlencode, urlsplit, urlunsplit

from kiwi_feed.errors import InvalidMessage

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
_DUPLICATE_SLASHES_RE = re.compile(r"/{2,}")
_PERCENT_ESCAPE_RE = re.compile(r"%([0-9A-Fa-f]{2})")
_TRACKING_PARAM_RE = re.compile(r"^utm_\w+$", re.IGNORECASE)
# Forbidden host code points of the WHATWG URL standard, plus any whitespace.
_FORBIDDEN_HOST_RE = re.compile(r"[\s\x00-\x1f\x7f#%/:<>?@\[\\\]^|]")
_UNRESERVED = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~")
_PATH_SAFE = "/:@!$&'()*+,;=%~"
_FRAGMENT_SAFE = "/?:@!$&'()*+,;=%~"
_TEXT_FRAGMENT_MARKER = ":~:"
_DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_href(href: str) -> str:
    """Canonicalize a submitted URL, keeping any ``www.`` host prefix.

    The result is stable: normalizing an already normalized href returns it
    unchanged. Hrefs that cannot be parsed into a host raise ``InvalidMessage``.
    """

    value = href.strip()
    if not value:
        raise InvalidMessage("href must not be empty")
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as error:
        raise InvalidMessage(f"href is not valid text: {href!r}") from error
    if value.startswith("//"):
        value = f"http:{value}"
    elif not _SCHEME_RE.match(value):
        value = f"http://{value}"

    try:
        parsed = urlsplit(value)
    except ValueError as error:
        raise InvalidMessage(f"href is not a valid URL: {href!r} ({error})") from error
    scheme = parsed.scheme.lower()
    netloc = _normalize_netloc(scheme, parsed, original=href)
    query = _normalize_query(parsed.query)
    fragment = _normalize_fragment(parsed.fragment)

    path = _normalize_path(parsed.path)
    if path.endswith("/"):
        path = path[:-1]
    if not path and (query or fragment):
        path = "/"

    return urlunsplit((scheme, netloc, path, query, fragment))


def _normalize_netloc(scheme: str, parsed: SplitResult, *, original: str) -> str:
    host = _normalize_host((parsed.hostname or "").rstrip("."), original=original)
    try:
        port = parsed.port
    except ValueError as error:
        raise InvalidMessage(f"href has an invalid port: {original!r}") from error

    netloc = f"[{host}]" if ":" in host else host
    if port is not None and _DEFAULT_PORTS.get(scheme) != port:
        netloc = f"{netloc}:{port}"
    return netloc


def _normalize_host(host: str, *, original: str) -> str:
    if not host:
        raise InvalidMessage(f"href has no host: {original!r}")
    if ":" in host:
        try:
            return ipaddress.IPv6Address(host).compressed
        except ValueError as error:
            raise InvalidMessage(f"href has an invalid IPv6 host: {original!r}") from error
    try:
        # IDNA maps full-width forms, so the check runs on the encoded host too.
        encoded = host.encode("idna").decode("ascii").rstrip(".")
    except UnicodeError as error:
        raise InvalidMessage(f"href host is not a valid domain: {original!r}") from error
    if not encoded or _FORBIDDEN_HOST_RE.search(host) or _FORBIDDEN_HOST_RE.search(encoded):
        raise InvalidMessage(f"href host has forbidden characters: {original!r}")
    return encoded


def _normalize_path(path: str) -> str:
    collapsed = _DUPLICATE_SLASHES_RE.sub("/", path)
    return _remove_dot_segments(_encode(collapsed, safe=_PATH_SAFE))


def _remove_dot_segments(path: str) -> str:
    """Resolve ``.`` and ``..`` segments (RFC 3986, section 5.2.4)."""

    segments = path.split("/")
    output: list[str] = []
    for segment in segments:
        if segment == ".":
            continue
        if segment == "..":
            if len(output) > 1:
                output.pop()
            continue
        output.append(segment)
    if segments[-1] in (".", ".."):
        output.append("")
    return "/".join(output)


def _encode(text: str, *, safe: str) -> str:
    return _PERCENT_ESCAPE_RE.sub(_normalize_escape, quote(text, safe=safe))


def _normalize_escape(match: re.Match[str]) -> str:
    char = chr(int(match.group(1), 16))
    if char in _UNRESERVED:
        return char
    return f"%{match.group(1).upper()}"


def _normalize_query(query: str) -> str:
    pairs = [
        (key, value)
        for key, value in parse_qsl(query, keep_blank_values=True)
        if not _TRACKING_PARAM_RE.match(key)
    ]
    return urlencode(sorted(pairs, key=lambda pair: pair[0]))


def _normalize_fragment(fragment: str) -> str:
    encoded = _encode(fragment, safe=_FRAGMENT_SAFE)
    marker_at = encoded.find(_TEXT_FRAGMENT_MARKER)
    if marker_at >= 0:
        return encoded[:marker_at]
    return encoded
