from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from link_preview.core.errors import MissingRequiredField


class RequestMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"

    @property
    def has_body(self) -> bool:
        return self in (RequestMethod.POST, RequestMethod.PUT, RequestMethod.DELETE, RequestMethod.PATCH)


class CachePolicy(Enum):
    """Whether a load may read from and/or write to the memory cache.

    A readable policy does not guarantee a hit, and a writable one only means
    a successfully loaded preview is stored.
    """

    ENABLED = (True, True)
    READ_ONLY = (True, False)
    WRITE_ONLY = (False, True)
    DISABLED = (False, False)

    @property
    def read_enabled(self) -> bool:
        return self.value[0]

    @property
    def write_enabled(self) -> bool:
        return self.value[1]

    @classmethod
    def parse(cls, name: str) -> CachePolicy:
        key = str(name or "").strip().upper().replace("-", "_")
        try:
            return cls[key]
        except KeyError:
            choices = ", ".join(p.name.lower() for p in cls)
            raise ValueError(f"Unknown cache policy {name!r} (expected one of: {choices})") from None


def _frozen(mapping: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class PreviewRequest:
    url: str
    method: RequestMethod = RequestMethod.GET
    headers: Mapping[str, str] = field(default_factory=lambda: _frozen({}))
    cookies: Mapping[str, str] = field(default_factory=lambda: _frozen({}))
    data: Mapping[str, str] = field(default_factory=lambda: _frozen({}))
    user_agent: str | None = None
    timeout: float | None = None  # seconds
    referrer: str | None = None
    follow_redirects: bool | None = None
    ignore_http_errors: bool | None = None
    ignore_content_type: bool | None = None
    request_body: str | None = None
    max_body_size: int | None = None  # bytes, 0 = unlimited
    proxy: str | None = None
    post_data_charset: str | None = None
    memory_cache_key: str | None = None
    memory_cache_policy: CachePolicy | None = None

    @staticmethod
    def builder() -> PreviewRequestBuilder:
        return PreviewRequestBuilder()


class PreviewRequestBuilder:
    def __init__(self) -> None:
        self._url: str | None = None
        self._method = RequestMethod.GET
        self._headers: dict[str, str] = {}
        self._cookies: dict[str, str] = {}
        self._data: dict[str, str] = {}
        self._options: dict[str, object] = {}

    def url(self, url: str) -> PreviewRequestBuilder:
        self._url = url
        return self

    def method(self, method: RequestMethod | str) -> PreviewRequestBuilder:
        self._method = RequestMethod(method.upper()) if isinstance(method, str) else method
        return self

    def header(self, key: str, value: str) -> PreviewRequestBuilder:
        self._headers[key] = value
        return self

    def headers(self, headers: Mapping[str, str]) -> PreviewRequestBuilder:
        self._headers.update(headers)
        return self

    def cookie(self, key: str, value: str) -> PreviewRequestBuilder:
        self._cookies[key] = value
        return self

    def cookies(self, cookies: Mapping[str, str]) -> PreviewRequestBuilder:
        self._cookies.update(cookies)
        return self

    def data(self, key_or_mapping: str | Mapping[str, str], value: str | None = None) -> PreviewRequestBuilder:
        if isinstance(key_or_mapping, str):
            if value is None:
                raise TypeError("data(key, value) requires a value")
            self._data[key_or_mapping] = value
        else:
            self._data.update(key_or_mapping)
        return self

    def user_agent(self, user_agent: str) -> PreviewRequestBuilder:
        self._options["user_agent"] = user_agent
        return self

    def timeout(self, seconds: float) -> PreviewRequestBuilder:
        self._options["timeout"] = float(seconds)
        return self

    def referrer(self, referrer: str) -> PreviewRequestBuilder:
        self._options["referrer"] = referrer
        return self

    def follow_redirects(self, follow: bool) -> PreviewRequestBuilder:
        self._options["follow_redirects"] = bool(follow)
        return self

    def ignore_http_errors(self, ignore: bool) -> PreviewRequestBuilder:
        self._options["ignore_http_errors"] = bool(ignore)
        return self

    def ignore_content_type(self, ignore: bool) -> PreviewRequestBuilder:
        self._options["ignore_content_type"] = bool(ignore)
        return self

    def request_body(self, body: str) -> PreviewRequestBuilder:
        self._options["request_body"] = body
        return self

    def max_body_size(self, size: int) -> PreviewRequestBuilder:
        self._options["max_body_size"] = int(size)
        return self

    def proxy(self, proxy: str) -> PreviewRequestBuilder:
        self._options["proxy"] = proxy
        return self

    def post_data_charset(self, charset: str) -> PreviewRequestBuilder:
        self._options["post_data_charset"] = charset
        return self

    def memory_cache_key(self, key: str | None) -> PreviewRequestBuilder:
        self._options["memory_cache_key"] = key
        return self

    def memory_cache_policy(self, policy: CachePolicy | None) -> PreviewRequestBuilder:
        self._options["memory_cache_policy"] = policy
        return self

    def build(self) -> PreviewRequest:
        if self._url is None or not self._url.strip():
            raise MissingRequiredField("url")
        return PreviewRequest(
            url=self._url,
            method=self._method,
            headers=_frozen(self._headers),
            cookies=_frozen(self._cookies),
            data=_frozen(self._data),
            **self._options,  # type: ignore[arg-type]
        )
