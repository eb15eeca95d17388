"""Page/limit pagination helpers."""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Pagination:
    """1-based page number and page size translated to offset/limit."""

    page: int = 1
    limit: int = 10

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def take(self) -> int:
        return self.limit

    def total_pages(self, total: int) -> int:
        return math.ceil(total / self.limit) if self.limit else 0
