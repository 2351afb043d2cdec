from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from link_preview.core.cache import PreviewCache
from link_preview.core.errors import TransportError
from link_preview.core.fetcher import FetchedDocument
from link_preview.core.request import PreviewRequest


ARTICLE_HTML = """<!doctype html>
<html>
<head>
  <title>  Example
    Article </title>
  <meta charset="utf-8">
  <meta name="description" content="A short description">
  <meta property="og:title" content="OG Title">
  <meta property="og:type" content="Article">
  <meta property="og:image" content="https://cdn.example.com/a.png">
  <meta property="og:image:width" content="600">
  <meta property="og:site_name" content="Example Site">
  <meta name="twitter:card" content="summary">
  <meta name="keywords" content="">
</head>
<body><p>Hello</p></body>
</html>
"""


def page(title: str) -> str:
    return f"<html><head><title>{title}</title><meta property=\"og:title\" content=\"{title}\"></head></html>"


class StubFetchClient:
    """Serves canned HTML per URL and records every fetch."""

    def __init__(self, pages: dict[str, str]) -> None:
        self.pages = pages
        self.calls: list[str] = []

    async def fetch(self, request: PreviewRequest) -> FetchedDocument:
        self.calls.append(request.url)
        # Yield so concurrent loads actually interleave.
        await asyncio.sleep(0)
        html = self.pages.get(request.url)
        if html is None:
            raise TransportError(f"no route to {request.url}", url=request.url)
        return FetchedDocument(
            url=request.url,
            final_url=request.url,
            status=200,
            content_type="text/html; charset=utf-8",
            encoding="utf-8",
            body=html.encode("utf-8"),
        )


@pytest.fixture()
def stub_fetch() -> StubFetchClient:
    return StubFetchClient(
        {
            "https://x": page("X"),
            "https://y": page("Y"),
            "https://a": page("A"),
            "https://article": ARTICLE_HTML,
        }
    )


@pytest.fixture()
def cache() -> PreviewCache:
    return PreviewCache(max_cache_elements=10)


@pytest.fixture()
def app_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    monkeypatch.setenv("LINK_PREVIEW_HOME", str(home))
    return home


@pytest.fixture()
def article_html() -> str:
    return ARTICLE_HTML
