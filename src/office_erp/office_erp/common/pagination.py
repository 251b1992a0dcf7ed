from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def of(cls, items: Sequence[T], *, page: int, limit: int, total: int) -> "Page[T]":
        return cls(
            items=list(items),
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit) if limit else 0,
        )


def offset_for(page: int, limit: int) -> int:
    return (page - 1) * limit
