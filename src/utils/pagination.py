"""Pagination helpers shared by the list operations of every manager."""

import math
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Query

from config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from core.exceptions import ValidationError
from schemas.common import PageQuery, Pagination


def paginate(
    query: Query,
    model,
    params: Optional[PageQuery],
    sortable: Iterable[str],
    default_sort: str = "created_at",
) -> Tuple[List, Pagination]:
    """Apply sorting, offset and limit to ``query``.

    Args:
        query: Filtered SQLAlchemy query.
        model: Mapped class whose columns may be sorted on.
        params: Page, limit and sort parameters from the request.
        sortable: Column names the caller may sort on.
        default_sort: Column used when no sort_by is given.

    Returns:
        Tuple of the page's rows and its pagination metadata.

    Raises:
        ValidationError: If sort_by is not one of the sortable columns.
    """
    params = params or PageQuery()
    limit = min(params.limit or DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)
    sort_by = params.sort_by or default_sort
    if sort_by not in set(sortable):
        raise ValidationError(f"Cannot sort by '{sort_by}'")

    column = getattr(model, sort_by)
    ordered = column.asc() if params.sort_order == "asc" else column.desc()

    total = query.order_by(None).count()
    items = (
        query.order_by(ordered)
        .offset((params.page - 1) * limit)
        .limit(limit)
        .all()
    )
    pages = math.ceil(total / limit) if total else 0
    pagination = Pagination(
        page=params.page,
        limit=limit,
        total=total,
        pages=pages,
        has_next=params.page < pages,
        has_prev=params.page > 1,
    )
    return items, pagination
