# marketplace/utils/pagination.py
import math
from dataclasses import dataclass

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass(frozen=True)
class Page:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_pagination(page: int | None, limit: int | None) -> Page:
    """Brakujace lub bledne wartosci zastepowane domyslnymi, limit przycinany do MAX_LIMIT."""
    page = page if page and page > 0 else DEFAULT_PAGE
    limit = limit if limit and limit > 0 else DEFAULT_LIMIT
    return Page(page=page, limit=min(limit, MAX_LIMIT))


def pagination_meta(page: Page, total: int) -> dict:
    return {
        "page": page.page,
        "limit": page.limit,
        "total": total,
        "pages": math.ceil(total / page.limit),
    }


def paginated(items: list, page: Page, total: int) -> dict:
    return {"items": items, "pagination": pagination_meta(page, total)}
