"""
Paginated list queries.

Every list endpoint follows the same contract: 1-based ``page``,
``limit`` items per page, entity-specific filters AND-ed together, and
an optional ``search`` term matched case-insensitively against a fixed
set of text fields (OR-ed).  :func:`paginate` runs the query and the
count against one collection and returns the documents together with
the pagination block.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.errors import ValidationError
from ..schemas.common import Pagination
from .store import Collection, Query

# SQLite binds LIMIT/OFFSET as signed 64-bit integers.
MAX_OFFSET = 2 ** 63 - 1


@dataclass
class ListParams:
    page: int = 1
    limit: int = 10
    search: Optional[str] = None

    def __post_init__(self) -> None:
        if self.offset > MAX_OFFSET:
            raise ValidationError.single("page", "Page number is too large")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def search_term(self) -> Optional[str]:
        if self.search is None:
            return None
        term = self.search.strip()
        return term or None


def build_query(params: ListParams, search_fields: Sequence[str], query: Optional[Query] = None) -> Query:
    """Add the free-text search group to ``query`` (a new one if omitted)."""
    query = query if query is not None else Query()
    term = params.search_term
    if term:
        query.any_icontains(search_fields, term)
    return query


def paginate(collection: Collection, query: Query, params: ListParams) -> Tuple[List[Dict[str, Any]], Pagination]:
    """Fetch one page of ``collection`` matching ``query``.

    Items are ordered newest first.  ``total_pages`` is
    ``ceil(total / limit)``, so an empty result reports zero pages.
    """
    total = collection.count(query)
    docs = collection.find(query, limit=params.limit, offset=params.offset)
    pagination = Pagination(
        current_page=params.page,
        total_pages=math.ceil(total / params.limit) if params.limit else 0,
        total_items=total,
        items_per_page=params.limit,
    )
    return docs, pagination
