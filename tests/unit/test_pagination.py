"""Unit tests for pagination helpers."""

from app.utils.pagination import Pagination


class TestPagination:
    """Test page/limit translation."""

    def test_defaults(self):
        pagination = Pagination()
        assert pagination.skip == 0
        assert pagination.take == 10

    def test_third_page(self):
        """Test page 3 of 20 skips the first 40 rows."""
        pagination = Pagination(page=3, limit=20)
        assert pagination.skip == 40
        assert pagination.take == 20

    def test_total_pages_rounds_up(self):
        assert Pagination(limit=10).total_pages(21) == 3
        assert Pagination(limit=10).total_pages(20) == 2

    def test_total_pages_empty(self):
        assert Pagination(limit=10).total_pages(0) == 0
