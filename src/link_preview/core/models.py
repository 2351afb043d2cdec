from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class KnownOpenGraphType(str, Enum):
    WEBSITE = "website"
    ARTICLE = "article"
    BOOK = "book"
    PROFILE = "profile"
    MUSIC = "music"
    VIDEO = "video"

    @property
    def type(self) -> str:
        return self.value


@dataclass(frozen=True)
class CustomOpenGraphType:
    """Any og:type value outside the canonical set, kept verbatim."""

    type: str


OpenGraphType = Union[KnownOpenGraphType, CustomOpenGraphType]


def parse_open_graph_type(value: str) -> OpenGraphType:
    try:
        return KnownOpenGraphType(value.lower())
    except ValueError:
        return CustomOpenGraphType(value)


class OpenGraphTagKind(str, Enum):
    TITLE = "title"
    TYPE = "type"
    IMAGE = "image"
    URL = "url"
    DESCRIPTION = "description"
    DETERMINER = "determiner"
    LOCALE = "locale"
    SITE_NAME = "site_name"
    VIDEO = "video"
    AUDIO = "audio"
    OTHER = "other"


@dataclass(frozen=True)
class OpenGraphTag:
    kind: OpenGraphTagKind
    content: str
    # Only set for OTHER tags; never carries the "og:" prefix.
    tag_name: str | None = None

    @classmethod
    def other(cls, name: str, content: str) -> OpenGraphTag:
        if name.startswith("og:"):
            name = name[len("og:"):]
        return cls(kind=OpenGraphTagKind.OTHER, content=content, tag_name=name)


@dataclass(frozen=True)
class OpenGraphData:
    title: str | None = None
    type: OpenGraphType | None = None
    image: str | None = None
    url: str | None = None
    audio: str | None = None
    description: str | None = None
    determiner: str | None = None
    locale: str | None = None
    site_name: str | None = None
    video: str | None = None
    tags: tuple[OpenGraphTag, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "type": self.type.type if self.type is not None else None,
            "image": self.image,
            "url": self.url,
            "audio": self.audio,
            "description": self.description,
            "determiner": self.determiner,
            "locale": self.locale,
            "site_name": self.site_name,
            "video": self.video,
            "tags": [
                {"kind": t.kind.value, "name": t.tag_name, "content": t.content}
                for t in self.tags
            ],
        }


class OpenGraphDataBuilder:
    """Accumulates OpenGraph values.

    Every scalar setter overwrites the previous value and appends a matching
    tag, so ``build()`` exposes both the last value and the full history.
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._tags: list[OpenGraphTag] = []

    def _set(self, field: str, kind: OpenGraphTagKind, value: str | None) -> OpenGraphDataBuilder:
        self._values[field] = value
        if value is not None:
            self._tags.append(OpenGraphTag(kind=kind, content=value))
        return self

    def title(self, title: str | None) -> OpenGraphDataBuilder:
        return self._set("title", OpenGraphTagKind.TITLE, title)

    def type(self, og_type: OpenGraphType | None) -> OpenGraphDataBuilder:
        self._values["type"] = og_type
        if og_type is not None:
            self._tags.append(OpenGraphTag(kind=OpenGraphTagKind.TYPE, content=og_type.type))
        return self

    def image(self, image: str | None) -> OpenGraphDataBuilder:
        return self._set("image", OpenGraphTagKind.IMAGE, image)

    def url(self, url: str | None) -> OpenGraphDataBuilder:
        return self._set("url", OpenGraphTagKind.URL, url)

    def audio(self, audio: str | None) -> OpenGraphDataBuilder:
        return self._set("audio", OpenGraphTagKind.AUDIO, audio)

    def description(self, description: str | None) -> OpenGraphDataBuilder:
        return self._set("description", OpenGraphTagKind.DESCRIPTION, description)

    def determiner(self, determiner: str | None) -> OpenGraphDataBuilder:
        return self._set("determiner", OpenGraphTagKind.DETERMINER, determiner)

    def locale(self, locale: str | None) -> OpenGraphDataBuilder:
        return self._set("locale", OpenGraphTagKind.LOCALE, locale)

    def site_name(self, site_name: str | None) -> OpenGraphDataBuilder:
        return self._set("site_name", OpenGraphTagKind.SITE_NAME, site_name)

    def video(self, video: str | None) -> OpenGraphDataBuilder:
        return self._set("video", OpenGraphTagKind.VIDEO, video)

    def append_tag(self, tag: OpenGraphTag) -> OpenGraphDataBuilder:
        self._tags.append(tag)
        return self

    def append_tags(self, *tags: OpenGraphTag) -> OpenGraphDataBuilder:
        self._tags.extend(tags)
        return self

    def clear_tags(self) -> OpenGraphDataBuilder:
        self._tags.clear()
        return self

    def build(self) -> OpenGraphData:
        return OpenGraphData(tags=tuple(self._tags), **self._values)


@dataclass(frozen=True)
class MetaTag:
    name: str
    content: str


@dataclass(frozen=True)
class Preview:
    page_title: str | None
    open_graph: OpenGraphData
    meta_tags: tuple[MetaTag, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "page_title": self.page_title,
            "open_graph": self.open_graph.to_dict(),
            "meta_tags": [{"name": m.name, "content": m.content} for m in self.meta_tags],
        }
