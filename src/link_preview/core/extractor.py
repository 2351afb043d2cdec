from __future__ import annotations

import codecs
import logging

from bs4 import BeautifulSoup

from link_preview.core.errors import ParseError
from link_preview.core.models import (
    MetaTag,
    OpenGraphDataBuilder,
    OpenGraphTag,
    Preview,
    parse_open_graph_type,
)

logger = logging.getLogger(__name__)

OG_PREFIX = "og:"


def _codec_name(encoding: str | None) -> str | None:
    # libxml2 rejects some Python aliases ("latin-1") and falls back to UTF-8.
    if not encoding:
        return None
    try:
        return codecs.lookup(encoding).name
    except LookupError:
        return None


def parse_html(markup: str | bytes, encoding: str | None = None) -> BeautifulSoup:
    from_encoding = _codec_name(encoding) if isinstance(markup, bytes) else None
    try:
        return BeautifulSoup(markup, "lxml", from_encoding=from_encoding)
    except Exception as e:
        raise ParseError(f"Could not parse document: {e}") from e


def _page_title(soup: BeautifulSoup) -> str | None:
    title = soup.find("title")
    if title is None:
        return None
    text = " ".join(title.get_text().split())
    return text or None


def _apply_open_graph(og: OpenGraphDataBuilder, key: str, content: str) -> None:
    if key == "og:title":
        og.title(content)
    elif key == "og:type":
        og.type(parse_open_graph_type(content))
    elif key == "og:image":
        og.image(content)
    elif key == "og:url":
        og.url(content)
    elif key == "og:audio":
        og.audio(content)
    elif key == "og:description":
        og.description(content)
    elif key == "og:determiner":
        og.determiner(content)
    elif key == "og:locale":
        og.locale(content)
    elif key == "og:site_name":
        og.site_name(content)
    elif key == "og:video":
        og.video(content)
    else:
        og.append_tag(OpenGraphTag.other(key, content))


def extract_preview(soup: BeautifulSoup) -> Preview:
    """Build a Preview from a parsed document.

    Meta elements are visited in document order. The key is ``name`` when
    present, otherwise ``property``; elements with an empty key or content
    are skipped. ``og:`` keys feed the OpenGraph data, everything else lands
    in ``meta_tags``.
    """

    og = OpenGraphDataBuilder()
    meta_tags: list[MetaTag] = []

    for element in soup.find_all("meta"):
        name = element.get("name") or ""
        prop = element.get("property") or ""
        content = element.get("content") or ""
        key = name or prop
        if not content or not key:
            continue
        if key.startswith(OG_PREFIX):
            _apply_open_graph(og, key, content)
        else:
            meta_tags.append(MetaTag(name=key, content=content))

    preview = Preview(
        page_title=_page_title(soup),
        open_graph=og.build(),
        meta_tags=tuple(meta_tags),
    )
    logger.debug(
        "Extracted preview: title=%r og_tags=%d meta_tags=%d",
        preview.page_title,
        len(preview.open_graph.tags),
        len(preview.meta_tags),
    )
    return preview
