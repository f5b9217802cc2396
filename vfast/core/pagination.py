"""
Page window for report queries.

Out-of-range requests are clamped rather than refused: a missing or
non-positive page starts at 1, and the page size falls back to the
configured default and never exceeds the configured maximum.
"""
from typing import Optional

from vfast.config.settings import Settings
from vfast.schemas.common import PaginationParams


def page_window(page: Optional[int], page_size: Optional[int], settings: Settings) -> PaginationParams:
    if page is None or page < 1:
        page = 1
    if page_size is None or page_size < 1:
        page_size = settings.DEFAULT_PAGE_SIZE
    return PaginationParams(page=page, page_size=min(page_size, settings.MAX_PAGE_SIZE))
