# app/utils/pagination.py
import math
from typing import Tuple

from app.utils.settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


def normalize_paging(page: int | None, limit: int | None) -> Tuple[int, int]:
    p = page if page and page > 0 else 1
    size = limit if limit and limit > 0 else DEFAULT_PAGE_SIZE
    return p, min(size, MAX_PAGE_SIZE)


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
