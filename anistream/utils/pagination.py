"""Page-number parsing and clamped pagination for the episode listing."""

import math
import re
import sys
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel, Field

from ..constants.paths import ITEMS_PER_PAGE
from ..errors import InvalidPageError

PAGE_NUMBER_PATTERN = re.compile(r"[0-9]+")


class Page(BaseModel):
    """One page of a listing."""

    items: List[Any] = Field(default_factory=list, description="Items on this page")
    page: int = Field(..., description="1-indexed page number after clamping")
    total_pages: int = Field(..., description="Number of pages, at least 1")
    total_items: int = Field(..., description="Number of items across all pages")
    per_page: int = Field(..., description="Page size")

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def first_index(self) -> int:
        """0-based index of the first item on this page within the full listing."""
        return (self.page - 1) * self.per_page


def parse_page(raw: Optional[str]) -> int:
    """
    Parse a page query parameter.

    Args:
        raw: The raw parameter value, None when absent

    Returns:
        The page number (1 when absent or empty)

    Raises:
        InvalidPageError: If the value is not a positive base-10 integer
    """
    if raw is None or raw.strip() == "":
        return 1

    value = raw.strip()
    if not PAGE_NUMBER_PATTERN.fullmatch(value):
        raise InvalidPageError(raw)

    try:
        page = int(value)
    except ValueError:
        # Too many digits to convert; any such page is past the end
        return sys.maxsize

    if page < 1:
        raise InvalidPageError(raw)
    return page


def paginate(items: Sequence[Any], page: int, per_page: int = ITEMS_PER_PAGE) -> Page:
    """Slice ``items`` into the requested page, clamping the page into range."""
    total_items = len(items)
    total_pages = max(1, math.ceil(total_items / per_page))
    current = max(1, min(page, total_pages))
    start = (current - 1) * per_page

    return Page(
        items=list(items[start:start + per_page]),
        page=current,
        total_pages=total_pages,
        total_items=total_items,
        per_page=per_page,
    )
