from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from link_preview.core.models import Preview


@dataclass(frozen=True)
class PreviewSuccess:
    preview: Preview
    from_memory_cache: bool

    @property
    def is_success(self) -> bool:
        return True

    @property
    def is_error(self) -> bool:
        return False


@dataclass(frozen=True)
class PreviewError:
    cause: BaseException
    # Reserved for partial results; the loader never fills it.
    preview: Preview | None = None

    @property
    def is_success(self) -> bool:
        return False

    @property
    def is_error(self) -> bool:
        return True


PreviewResult = Union[PreviewSuccess, PreviewError]
