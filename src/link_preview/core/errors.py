from __future__ import annotations


class LinkPreviewError(Exception):
    """Base class for errors raised by the preview pipeline."""


class MissingRequiredField(LinkPreviewError, ValueError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Required field not set: {field}")
        self.field = field


class TransportError(LinkPreviewError):
    """Fetching the document failed (network, status, content type or size)."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class HttpStatusError(TransportError):
    def __init__(self, url: str, status: int) -> None:
        super().__init__(f"HTTP {status} for {url}", url=url)
        self.status = status


class UnsupportedContentTypeError(TransportError):
    def __init__(self, url: str, content_type: str) -> None:
        super().__init__(f"Unsupported content type {content_type!r} for {url}", url=url)
        self.content_type = content_type


class BodyTooLargeError(TransportError):
    def __init__(self, url: str, limit: int) -> None:
        super().__init__(f"Response body for {url} exceeds {limit} bytes", url=url)
        self.limit = limit


class ParseError(LinkPreviewError):
    pass
