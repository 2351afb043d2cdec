from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import aiohttp
from aiolimiter import AsyncLimiter
from bs4 import BeautifulSoup
from multidict import CIMultiDict

from link_preview.core.config import PreviewSettings
from link_preview.core.errors import (
    BodyTooLargeError,
    HttpStatusError,
    TransportError,
    UnsupportedContentTypeError,
)
from link_preview.core.extractor import parse_html
from link_preview.core.request import PreviewRequest
from link_preview.core.utils import is_parseable_content_type

logger = logging.getLogger(__name__)

DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
DEFAULT_POST_CHARSET = "UTF-8"
READ_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class FetchedDocument:
    url: str
    final_url: str
    status: int
    content_type: str
    encoding: str | None
    body: bytes

    def parse(self) -> BeautifulSoup:
        return parse_html(self.body, self.encoding)


class FetchClient:
    """Performs the HTTP transaction described by a PreviewRequest.

    One attempt per call, no caching. When no session is injected a
    short-lived one is opened per fetch.
    """

    def __init__(
        self,
        *,
        session: aiohttp.ClientSession | None = None,
        settings: PreviewSettings | None = None,
    ) -> None:
        self._session = session
        self._settings = settings or PreviewSettings()
        self._limiter: AsyncLimiter | None = None
        rps = self._settings.requests_per_second
        if rps:
            # aiolimiter cannot hand out fractional tokens, so slow rates stretch the period.
            rps = max(0.1, float(rps))
            if rps >= 1.0:
                self._limiter = AsyncLimiter(max_rate=rps, time_period=1.0)
            else:
                self._limiter = AsyncLimiter(max_rate=1.0, time_period=1.0 / rps)

    @property
    def settings(self) -> PreviewSettings:
        return self._settings

    async def fetch(self, request: PreviewRequest) -> FetchedDocument:
        if self._session is not None:
            return await self._paced(self._session, request)
        async with aiohttp.ClientSession() as session:
            return await self._paced(session, request)

    async def _paced(self, session: aiohttp.ClientSession, request: PreviewRequest) -> FetchedDocument:
        if self._limiter is None:
            return await self._fetch_once(session, request)
        async with self._limiter:
            return await self._fetch_once(session, request)

    def _build_headers(self, request: PreviewRequest) -> CIMultiDict[str]:
        headers: CIMultiDict[str] = CIMultiDict()
        headers["User-Agent"] = self._settings.user_agent
        headers["Accept"] = DEFAULT_ACCEPT
        for key, value in request.headers.items():
            headers[key] = value
        if request.user_agent is not None:
            headers["User-Agent"] = request.user_agent
        if request.referrer is not None:
            headers["Referer"] = request.referrer
        return headers

    @staticmethod
    def _build_payload(
        request: PreviewRequest, headers: CIMultiDict[str]
    ) -> tuple[dict[str, str] | None, bytes | None]:
        """Return (query params, body).

        Form data goes in the body for methods that carry one, unless a raw
        body was given, in which case it moves to the query string.
        """

        charset = request.post_data_charset or DEFAULT_POST_CHARSET
        data = dict(request.data)
        if not request.method.has_body:
            return (data or None), None

        if request.request_body is not None:
            body = request.request_body.encode(charset)
            params = data or None
        elif data:
            body = urlencode(data, encoding=charset).encode("ascii")
            params = None
        else:
            return None, None

        headers.setdefault("Content-Type", f"application/x-www-form-urlencoded; charset={charset}")
        return params, body

    def _max_body_size(self, request: PreviewRequest) -> int:
        if request.max_body_size is not None:
            return max(0, int(request.max_body_size))
        return max(0, int(self._settings.max_body_size))

    @staticmethod
    async def _read_body(resp: aiohttp.ClientResponse, url: str, limit: int) -> bytes:
        if limit and resp.content_length is not None and resp.content_length > limit:
            raise BodyTooLargeError(url, limit)
        buf = bytearray()
        async for chunk in resp.content.iter_chunked(READ_CHUNK_SIZE):
            buf.extend(chunk)
            if limit and len(buf) > limit:
                raise BodyTooLargeError(url, limit)
        return bytes(buf)

    async def _fetch_once(self, session: aiohttp.ClientSession, request: PreviewRequest) -> FetchedDocument:
        url = request.url
        total = request.timeout if request.timeout is not None else self._settings.timeout_seconds
        limit = self._max_body_size(request)
        logger.info("Fetching %s %s", request.method.value, url)
        headers = self._build_headers(request)
        try:
            params, body = self._build_payload(request, headers)
        except (LookupError, UnicodeEncodeError) as e:
            raise TransportError(f"Cannot encode request body for {url}: {e}", url=url) from e
        kwargs: dict[str, object] = {
            "headers": headers,
            "timeout": aiohttp.ClientTimeout(total=total),
            "allow_redirects": True if request.follow_redirects is None else request.follow_redirects,
            "proxy": request.proxy,
        }
        if request.cookies:
            kwargs["cookies"] = dict(request.cookies)
        if params:
            kwargs["params"] = params
        if body is not None:
            kwargs["data"] = body

        try:
            async with session.request(request.method.value, url, **kwargs) as resp:
                status = int(resp.status)
                final_url = str(resp.url)
                content_type = resp.headers.get("Content-Type", "")
                if status >= 400 and not request.ignore_http_errors:
                    raise HttpStatusError(url, status)
                if not request.ignore_content_type and not is_parseable_content_type(content_type):
                    raise UnsupportedContentTypeError(url, content_type)
                payload = await self._read_body(resp, url, limit)
                encoding = resp.charset
        except TransportError:
            raise
        except asyncio.TimeoutError as e:
            raise TransportError(f"Timed out after {total}s fetching {url}", url=url) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Fetching {url} failed: {e}", url=url) from e

        logger.debug(
            "Fetched %s -> %s status=%s content_type=%r bytes=%d",
            url,
            final_url,
            status,
            content_type,
            len(payload),
        )
        return FetchedDocument(
            url=url,
            final_url=final_url,
            status=status,
            content_type=content_type,
            encoding=encoding,
            body=payload,
        )
