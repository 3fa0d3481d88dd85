# sourcemaps/utils/urls.py
from __future__ import annotations
import ipaddress
from urllib.parse import SplitResult, urlsplit

from .. import config

__all__ = ["resolve_url", "is_data_uri", "elide_data_uri", "is_private_host"]

# Schemes whose host is a DNS name and therefore case-insensitive.
_SPECIAL_SCHEMES = {"http", "https", "ws", "wss", "ftp", "file"}


def _has_authority(url: str) -> bool:
    return url.partition(":")[2].startswith("//")


def _is_hierarchical(parts: SplitResult, authority: bool) -> bool:
    return authority or parts.path.startswith("/")


def _remove_dot_segments(path: str) -> str:
    segments = path.split("/")
    out: list = []
    for seg in segments:
        if seg == "..":
            if len(out) > 1:
                out.pop()
        elif seg != ".":
            out.append(seg)
    if segments[-1] in (".", ".."):
        out.append("")
    return "/".join(out)


def _normalise_netloc(scheme: str, netloc: str) -> str:
    if scheme not in _SPECIAL_SCHEMES:
        return netloc
    userinfo, at, host = netloc.rpartition("@")
    return f"{userinfo}{at}{host.lower()}"


def _unsplit(scheme: str, authority: bool, netloc: str, path: str, query: str, fragment: str) -> str:
    out = f"{scheme}:"
    if authority:
        out += "//" + _normalise_netloc(scheme, netloc)
        if not path and scheme in _SPECIAL_SCHEMES:
            path = "/"
    out += path
    if query:
        out += "?" + query
    if fragment:
        out += "#" + fragment
    return out


def resolve_url(reference: str, base: str) -> str:
    """
    Resolve a possibly-relative source map reference against the script URL.

    ``sourceMappingURL`` comments and ``SourceMap`` headers are copied into the
    protocol event verbatim, so "main.js.map", "/static/main.js.map" and
    "https://cdn/x.map" all show up here.

    Resolution works for any hierarchical base, not only the schemes
    ``urllib`` knows about: extension pages (``chrome-extension://id/...``)
    and bundler schemes (``webpack-internal:///./src/...``) resolve the same
    way http URLs do. Dot segments are removed and special-scheme hosts are
    lowercased, for absolute references too.

    When the pair cannot be resolved (malformed input, or a relative reference
    with no absolute, hierarchical base) the reference is returned untouched;
    the fetch that follows fails on it with a more useful message than we
    could give.
    """
    try:
        ref = urlsplit(reference)
        if ref.scheme:
            authority = _has_authority(reference)
            if not _is_hierarchical(ref, authority):
                return reference
            path = _remove_dot_segments(ref.path) if ref.path.startswith("/") else ref.path
            return _unsplit(ref.scheme, authority, ref.netloc, path, ref.query, ref.fragment)

        parts = urlsplit(base)
        authority = _has_authority(base)
        if not parts.scheme or not _is_hierarchical(parts, authority):
            raise ValueError(f"Cannot resolve {reference!r} against {base!r}")

        if reference.startswith("//"):
            return _unsplit(parts.scheme, True, ref.netloc, _remove_dot_segments(ref.path),
                            ref.query, ref.fragment)

        query = ref.query
        if not ref.path:
            path = parts.path
            query = ref.query or parts.query
        elif ref.path.startswith("/"):
            path = _remove_dot_segments(ref.path)
        else:
            if parts.netloc and not parts.path:
                directory = "/"
            else:
                directory = parts.path[: parts.path.rfind("/") + 1]
            path = _remove_dot_segments(directory + ref.path)
        return _unsplit(parts.scheme, authority, parts.netloc, path, query, ref.fragment)
    except ValueError:
        return reference


def is_data_uri(url: str) -> bool:
    return bool(url) and url[: len(config.DATA_URI_PREFIX)].lower() == config.DATA_URI_PREFIX


def elide_data_uri(url: str) -> str:
    """Shorten inline payloads so a single map cannot flood the log."""
    if is_data_uri(url):
        return url[: config.DATA_URI_ELIDE_LENGTH]
    return url


def is_private_host(host: str) -> bool:
    """
    True for ``localhost`` and for IP literals outside the public internet
    (loopback, RFC 1918, link-local, reserved, unspecified).

    Only the literal is inspected. A public name whose DNS record points at a
    private address is not caught here.
    """
    host = host.strip("[]").rstrip(".").lower()
    if host == "localhost" or host.endswith(".localhost"):
        return True
    try:
        addr = ipaddress.ip_address(host)
    except ValueError:
        return False
    if isinstance(addr, ipaddress.IPv6Address) and addr.ipv4_mapped:
        addr = addr.ipv4_mapped
    return not addr.is_global
