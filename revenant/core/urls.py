import re
from urllib.parse import urlsplit

WEB_SCHEMES = ("http", "https")

# Unreserved, reserved and percent characters of RFC 3986
_URI_CHARS = re.compile(r"[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]*")
_BAD_PERCENT = re.compile(r"%(?![0-9A-Fa-f]{2})")
_REG_NAME = re.compile(r"[A-Za-z0-9\-._~!$&'()*+,;=%]+")
_IP_LITERAL = re.compile(r"\[[0-9A-Fa-f:.]+\]")


def _host_of(netloc: str) -> str:
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        return host[: host.find("]") + 1]
    return host.partition(":")[0]


def is_web_uri(url: object) -> bool:
    """Return True for an absolute http(s) address with a host.

    Whitespace, control characters and anything else outside the RFC 3986
    character set make the address invalid.
    """
    if not isinstance(url, str) or not url:
        return False
    if not _URI_CHARS.fullmatch(url) or _BAD_PERCENT.search(url):
        return False
    try:
        parts = urlsplit(url)
        # Accessing port validates it (raises ValueError when out of range)
        parts.port
    except ValueError:
        return False
    if parts.scheme.lower() not in WEB_SCHEMES:
        return False
    host = _host_of(parts.netloc)
    return bool(_REG_NAME.fullmatch(host) or _IP_LITERAL.fullmatch(host))
