"""Tests for wren.paginate — page offsets and the ellipsis strip."""

import pytest

from wren.errors import HTTPError
from wren.paginate import ELLIPSIS, ellipsis_pages, paginate


class TestEllipsisPages:
    def test_few_pages_listed_in_full(self) -> None:
        assert ellipsis_pages(9, 5) == list(range(1, 10))

    def test_near_start(self) -> None:
        assert ellipsis_pages(20, 1) == [1, 2, 3, 4, 5, 6, 7, ELLIPSIS, 20]
        assert ellipsis_pages(20, 5) == [1, 2, 3, 4, 5, 6, 7, ELLIPSIS, 20]

    def test_middle(self) -> None:
        assert ellipsis_pages(20, 6) == [1, ELLIPSIS, 4, 5, 6, 7, 8, ELLIPSIS, 20]
        assert ellipsis_pages(20, 10) == [1, ELLIPSIS, 8, 9, 10, 11, 12, ELLIPSIS, 20]

    def test_near_end(self) -> None:
        assert ellipsis_pages(20, 16) == [1, ELLIPSIS, 14, 15, 16, 17, 18, 19, 20]
        assert ellipsis_pages(20, 20) == [1, ELLIPSIS, 14, 15, 16, 17, 18, 19, 20]

    def test_custom_around(self) -> None:
        assert ellipsis_pages(20, 10, around=1) == [1, ELLIPSIS, 9, 10, 11, ELLIPSIS, 20]


class TestPaginate:
    def test_offsets(self) -> None:
        page = paginate(total_records=95, page_size=10, page_index=3)

        assert page.total_pages == 10
        assert page.page_index == 3
        assert page.start_index == 20
        assert page.end_index == 30

    def test_page_index_from_query_string(self) -> None:
        assert paginate(50, 10, "2").page_index == 2

    def test_default_first_page(self) -> None:
        page = paginate(5, 10)
        assert page.total_pages == 1
        assert page.ellipsis_pages == [1]

    @pytest.mark.parametrize("page_index", ["0", "-1", "abc", "01", "", "5\n", " 5", 0, -3, True])
    def test_illegal_page_number(self, page_index: object) -> None:
        with pytest.raises(HTTPError) as exc_info:
            paginate(100, 10, page_index)  # type: ignore[arg-type]
        assert exc_info.value.status == 400
        assert exc_info.value.detail == "Illegal page number"

    def test_page_exceeded(self) -> None:
        with pytest.raises(HTTPError) as exc_info:
            paginate(100, 10, 11)
        assert exc_info.value.status == 400
        assert exc_info.value.detail == "Page exceeded"

    @pytest.mark.parametrize("page_size", [0, -10, False])
    def test_invalid_page_size(self, page_size: int) -> None:
        with pytest.raises(ValueError, match="page_size"):
            paginate(100, page_size, 1)
