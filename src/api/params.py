"""Query parameter dependencies shared by the list endpoints."""

from typing import Annotated, Optional

from fastapi import Depends, Query

from schemas.common import PageQuery


def page_params(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, description="Capped at MAX_PAGE_SIZE."),
    sort_by: Optional[str] = Query(None),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
) -> PageQuery:
    return PageQuery(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)


PageParams = Annotated[PageQuery, Depends(page_params)]
