from __future__ import annotations

import logging
import threading

from link_preview.core.cache import PreviewCache, get_default_cache
from link_preview.core.extractor import extract_preview
from link_preview.core.fetcher import FetchClient
from link_preview.core.request import CachePolicy, PreviewRequest
from link_preview.core.result import PreviewError, PreviewResult, PreviewSuccess

logger = logging.getLogger(__name__)


class PreviewLoader:
    """Loads link previews, consulting the memory cache per policy.

    ``execute`` never raises for load failures: they come back as
    ``PreviewError``. Callers may run many ``execute`` calls concurrently;
    identical in-flight loads are not coalesced, so the last completed write
    for a key wins.
    """

    def __init__(
        self,
        *,
        cache: PreviewCache | None = None,
        cache_policy: CachePolicy = CachePolicy.ENABLED,
        fetch_client: FetchClient | None = None,
    ) -> None:
        self._cache = cache
        self._cache_lock = threading.Lock()
        self._cache_policy = cache_policy
        self._fetch_client = fetch_client or FetchClient()

    @staticmethod
    def builder() -> PreviewLoaderBuilder:
        return PreviewLoaderBuilder()

    @property
    def cache(self) -> PreviewCache:
        if self._cache is None:
            with self._cache_lock:
                if self._cache is None:
                    self._cache = get_default_cache()
        return self._cache

    @property
    def cache_policy(self) -> CachePolicy:
        return self._cache_policy

    @property
    def fetch_client(self) -> FetchClient:
        return self._fetch_client

    async def execute(self, request: PreviewRequest) -> PreviewResult:
        policy = request.memory_cache_policy if request.memory_cache_policy is not None else self._cache_policy
        key = request.memory_cache_key if request.memory_cache_key is not None else request.url
        try:
            if policy.read_enabled:
                cached = self.cache.get(key)
                if cached is not None:
                    logger.debug("Memory cache hit for %s", key)
                    return PreviewSuccess(preview=cached, from_memory_cache=True)

            document = await self._fetch_client.fetch(request)
            preview = extract_preview(document.parse())

            if policy.write_enabled:
                self.cache.set(key, preview)
            return PreviewSuccess(preview=preview, from_memory_cache=False)
        except Exception as e:
            logger.warning("Preview load failed for %s: %s", request.url, e)
            return PreviewError(cause=e)


class PreviewLoaderBuilder:
    def __init__(self) -> None:
        self._cache: PreviewCache | None = None
        self._cache_policy = CachePolicy.ENABLED
        self._fetch_client: FetchClient | None = None

    def cache(self, cache: PreviewCache | None) -> PreviewLoaderBuilder:
        """Use ``cache``; None falls back to the process-wide default."""

        self._cache = cache
        return self

    def cache_policy(self, policy: CachePolicy) -> PreviewLoaderBuilder:
        self._cache_policy = policy
        return self

    def fetch_client(self, client: FetchClient | None) -> PreviewLoaderBuilder:
        self._fetch_client = client
        return self

    def build(self) -> PreviewLoader:
        return PreviewLoader(
            cache=self._cache,
            cache_policy=self._cache_policy,
            fetch_client=self._fetch_client,
        )
