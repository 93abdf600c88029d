from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Sequence, TypeVar

from ..core.constants import DEFAULT_PER_PAGE, MAX_PER_PAGE

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    per_page: int = DEFAULT_PER_PAGE

    @classmethod
    def of(cls, page: Any = None, per_page: Any = None, *, default_per_page: int = DEFAULT_PER_PAGE) -> "PageRequest":
        try:
            p = int(page) if page not in (None, "") else 1
        except (TypeError, ValueError):
            p = 1
        try:
            pp = int(per_page) if per_page not in (None, "") else default_per_page
        except (TypeError, ValueError):
            pp = default_per_page
        return cls(page=max(p, 1), per_page=min(max(pp, 1), MAX_PER_PAGE))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    total: int
    page: int
    per_page: int
    extra: dict = field(default_factory=dict)

    @property
    def last_page(self) -> int:
        if self.total <= 0:
            return 1
        return (self.total + self.per_page - 1) // self.per_page

    def to_dict(self, serialize=lambda x: x) -> dict:
        return {
            "data": [serialize(item) for item in self.items],
            "current_page": self.page,
            "per_page": self.per_page,
            "total": self.total,
            "last_page": self.last_page,
        }
