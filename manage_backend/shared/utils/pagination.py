# manage_backend/shared/utils/pagination.py

from fastapi import Query
from fastapi_pagination import Params

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def pagination_params(
        page: int = Query(1, ge=1, description="Page number, starting at 1"),
        size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Users per page"),
) -> Params:
    """Query parameters shared by the paginated user listings."""
    return Params(page=page, size=size)
