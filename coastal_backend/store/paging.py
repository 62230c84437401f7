from typing import Sequence, TypeVar

from coastal_backend.schemas.coastal import Pagination

T = TypeVar("T")


def paginate(items: Sequence[T], page: int, limit: int) -> tuple[list[T], Pagination]:
    """1-based page of `items`; a page past the end is empty, not an error."""
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be positive")
    start = (page - 1) * limit
    return list(items[start:start + limit]), Pagination(page=page, limit=limit, total=len(items))


def matches_location(place: str, query: str) -> bool:
    return query.strip().lower() in place.lower()
