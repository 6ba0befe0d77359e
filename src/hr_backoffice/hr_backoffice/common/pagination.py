from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def of(cls, page: int | None, limit: int | None) -> "PageRequest":
        p = max(int(page or 1), 1)
        lim = int(limit or DEFAULT_PAGE_SIZE)
        lim = min(max(lim, 1), MAX_PAGE_SIZE)
        return cls(page=p, limit=lim)


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        if self.total <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit

    def to_dict(self, item_to_dict) -> dict:
        return {
            "items": [item_to_dict(i) for i in self.items],
            "pagination": {
                "page": self.page,
                "limit": self.limit,
                "total": self.total,
                "pages": self.pages,
            },
        }
