"""Pagination Utilities - DRY Implementation for Consistent Pagination (SoC)"""
from typing import Any, Dict, List, Optional
from math import ceil

def pagination_meta(total_count: int, page: int, limit: int) -> Dict:
    total_pages = ceil(total_count / limit) if total_count > 0 else 1
    return {
        "page": page,
        "limit": limit,
        "total": total_count,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrev": page > 1
    }

def paginate_data(data: List[Any], page: int = 1, limit: int = 50) -> Dict:
    """
    Centralized pagination utility

    Args:
        data: List of items to paginate
        page: Page number (1-based)
        limit: Items per page

    Returns:
        Dict with paginated data and metadata
    """
    page = max(1, page)
    limit = max(1, min(limit, 1000))  # Cap at 1000 for performance

    start_idx = (page - 1) * limit
    return {
        "data": data[start_idx:start_idx + limit],
        "pagination": pagination_meta(len(data), page, limit)
    }

def get_pagination_params(page_param: Optional[str], limit_param: Optional[str], default_limit: int = 10) -> tuple:
    """Extract and validate pagination parameters, returns (page, limit)"""
    try:
        page = int(page_param) if page_param else 1
        page = max(1, page)
    except (ValueError, TypeError):
        page = 1

    try:
        limit = int(limit_param) if limit_param else default_limit
        limit = max(1, min(limit, 1000))  # Cap at 1000
    except (ValueError, TypeError):
        limit = default_limit

    return page, limit
