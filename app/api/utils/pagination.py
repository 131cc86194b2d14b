from typing import Optional, Tuple

from app.api.core.config import settings


def normalize_pagination(
    page: Optional[int], page_size: Optional[int], max_page_size: Optional[int] = None
) -> Tuple[int, int]:
    """
    Clamp requested pagination values into a usable window.

    Out-of-range values are clamped rather than rejected: a page below 1
    becomes 1, a missing page size falls back to the default, and the page
    size is bounded to [1, max_page_size].

    Args:
        page: Requested 1-indexed page number
        page_size: Requested items per page
        max_page_size: Upper bound for page_size (defaults to settings.MAX_PAGE_SIZE)

    Returns:
        Tuple of (page, page_size)
    """
    upper = max_page_size or settings.MAX_PAGE_SIZE

    page = page if page and page > 0 else 1
    if page_size is None:
        page_size = settings.DEFAULT_PAGE_SIZE
    page_size = max(1, min(page_size, upper))

    return page, page_size


def calculate_pagination(total: int, page: int, limit: int) -> dict:
    """
    Calculate pagination metadata.

    Args:
        total: Total number of items
        page: Current page number
        limit: Items per page

    Returns:
        Dictionary with pagination metadata
    """
    total_pages = (total + limit - 1) // limit if total > 0 else 0

    return {"total": total, "page": page, "pageSize": limit, "totalPages": total_pages}
