from __future__ import annotations

import re
from urllib.parse import urlparse

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
_XML_CONTENT_TYPE_RE = re.compile(r"^application/(\w+\+)?xml$")


def ensure_scheme(raw: str, default_scheme: str = "https") -> str:
    """Prefix bare host/path input with a scheme; reject input with no host."""

    url = raw.strip()
    if not url:
        raise ValueError("Empty URL")
    if not _SCHEME_RE.match(url):
        url = f"{default_scheme}://{url}"
    parsed = urlparse(url)
    if not parsed.netloc:
        raise ValueError(f"Not a valid URL: {raw!r}")
    return url


def media_type(content_type: str | None) -> str:
    """Strip parameters and lowercase, e.g. ``"text/HTML; charset=utf-8"`` -> ``"text/html"``."""

    return (content_type or "").split(";", 1)[0].strip().lower()


def is_parseable_content_type(content_type: str | None) -> bool:
    # A missing header is accepted; the parser will cope.
    mt = media_type(content_type)
    if not mt:
        return True
    return mt.startswith("text/") or bool(_XML_CONTENT_TYPE_RE.match(mt))


def split_pair(value: str, sep: str) -> tuple[str, str]:
    """Split ``"name<sep>value"`` once, trimming both sides."""

    if sep not in value:
        raise ValueError(f"Expected NAME{sep}VALUE, got {value!r}")
    key, _, val = value.partition(sep)
    key = key.strip()
    if not key:
        raise ValueError(f"Missing name in {value!r}")
    return key, val.strip()
