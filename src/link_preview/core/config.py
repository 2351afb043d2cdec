from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from link_preview.core.cache import DEFAULT_MAX_CACHE_ELEMENTS
from link_preview.core.request import CachePolicy

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36 link-preview/0.1"
)
APP_DIR_ENV = "LINK_PREVIEW_HOME"


@dataclass(frozen=True)
class AppPaths:
    app_dir: Path

    @property
    def config_path(self) -> Path:
        return self.app_dir / "config.json"

    @property
    def log_path(self) -> Path:
        return self.app_dir / "link_preview.log"

    @classmethod
    def default(cls) -> AppPaths:
        raw = os.environ.get(APP_DIR_ENV, "").strip()
        base = Path(raw).expanduser() if raw else Path.home() / ".link_preview"
        return cls(app_dir=base)


@dataclass(frozen=True)
class PreviewSettings:
    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = 30.0
    # 0 disables the limit.
    max_body_size: int = 2 * 1024 * 1024
    # None disables outbound pacing.
    requests_per_second: float | None = None
    max_cache_elements: int = DEFAULT_MAX_CACHE_ELEMENTS
    cache_policy: str = "enabled"

    def __post_init__(self) -> None:
        CachePolicy.parse(self.cache_policy)

    @property
    def policy(self) -> CachePolicy:
        return CachePolicy.parse(self.cache_policy)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> PreviewSettings:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in raw.items() if k in known})


@dataclass(frozen=True)
class AppConfig:
    paths: AppPaths = field(default_factory=AppPaths.default)
    preview: PreviewSettings = field(default_factory=PreviewSettings)

    @classmethod
    def load(cls, paths: AppPaths | None = None) -> AppConfig:
        paths = paths or AppPaths.default()
        path = paths.config_path
        if not path.exists():
            return cls(paths=paths)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable config %s (%s)", path, e)
            return cls(paths=paths)
        preview_raw = raw.get("preview") if isinstance(raw, dict) else None
        if not isinstance(preview_raw, dict):
            return cls(paths=paths)
        try:
            preview = PreviewSettings.from_dict(preview_raw)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring invalid preview settings in %s (%s)", path, e)
            return cls(paths=paths)
        return cls(paths=paths, preview=preview)

    def save(self) -> None:
        self.paths.app_dir.mkdir(parents=True, exist_ok=True)
        payload = {"preview": asdict(self.preview)}
        self.paths.config_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
