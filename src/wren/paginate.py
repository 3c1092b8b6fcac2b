"""Pagination helper.

Computes record offsets for a page and the page-number strip a pager
renders, with ellipses standing in for skipped runs::

    page = paginate(total_records=200, page_size=10, page_index=ctx.query.get("page", "1"))
    rows = records[page.start_index:page.end_index]
    page.ellipsis_pages   # [1, "...", 8, 9, 10, 11, 12, "...", 20]
"""

import math
import re
from dataclasses import dataclass

from wren.errors import HTTPError

ELLIPSIS = "..."

_PAGE_NUMBER = re.compile(r"[1-9]\d*")


@dataclass(frozen=True, slots=True)
class Pagination:
    """One page of a paginated listing."""

    total_records: int
    total_pages: int
    page_index: int
    ellipsis_pages: list[int | str]
    start_index: int
    end_index: int


def ellipsis_pages(total_pages: int, page_index: int, around: int = 2) -> list[int | str]:
    """Page numbers to display, with ``"..."`` for skipped runs.

    At most ``around`` pages are shown on each side of the current page,
    plus the first and last page.
    """
    # around on each side, current page, first, last, two ellipses
    base_count = around * 2 + 5
    surplus = base_count - 2
    head_limit = 1 + 2 + around + 1
    tail_limit = total_pages - 2 - around - 1

    if total_pages <= base_count:
        return list(range(1, total_pages + 1))
    if page_index < head_limit:
        return [*range(1, surplus + 1), ELLIPSIS, total_pages]
    if page_index > tail_limit:
        return [1, ELLIPSIS, *range(total_pages - surplus + 1, total_pages + 1)]
    return [
        1,
        ELLIPSIS,
        *range(page_index - around, page_index + around + 1),
        ELLIPSIS,
        total_pages,
    ]


def paginate(
    total_records: int,
    page_size: int,
    page_index: int | str = 1,
    *,
    around: int = 2,
) -> Pagination:
    """Paginate *total_records* into pages of *page_size*.

    *page_index* may come straight from a query string.

    Raises:
        ValueError: If *page_size* is not a positive integer.
        HTTPError: 400 ``Illegal page number`` for anything that is not a
            positive integer, 400 ``Page exceeded`` past the last page.
    """
    if isinstance(page_size, bool) or page_size < 1:
        msg = f"page_size must be a positive integer, got {page_size!r}"
        raise ValueError(msg)

    if isinstance(page_index, str):
        if not _PAGE_NUMBER.fullmatch(page_index):
            raise HTTPError(status=400, detail="Illegal page number")
        page_index = int(page_index)
    elif isinstance(page_index, bool) or page_index < 1:
        raise HTTPError(status=400, detail="Illegal page number")

    total_pages = math.ceil(total_records / page_size)
    if page_index > total_pages:
        raise HTTPError(status=400, detail="Page exceeded")

    return Pagination(
        total_records=total_records,
        total_pages=total_pages,
        page_index=page_index,
        ellipsis_pages=ellipsis_pages(total_pages, page_index, around),
        start_index=page_size * (page_index - 1),
        end_index=page_size * page_index,
    )
