from __future__ import annotations

from typing import Optional

from app.schemas.query import PageRequest, PageResult
from app.services.cosmos_store import DocumentStore, QuerySpec


def fetch_page(
    store: DocumentStore,
    query_spec: QuerySpec,
    page: PageRequest,
    container_id: str,
    partition_key: Optional[str] = None,
) -> PageResult:
    """Run one page of ``query_spec``; the continuation token is passed through untouched."""
    response = store.query_container_next(
        query_spec,
        container_id,
        page_limit=page.page_limit,
        continuation_token=page.continuation_token,
        partition_key=partition_key,
    )
    return PageResult(
        rows=list(response.get("result") or []),
        has_more_results=bool(response.get("has_more_results") or False),
        continuation_token=response.get("continuation_token") or "",
    )
