from __future__ import annotations

import logging
from typing import Sequence

from app.core.config import settings
from app.schemas.query import (
    CaseListPage,
    FieldSearchCriterion,
    FilterCriterion,
    PageRequest,
    SortCriterion,
)
from app.services.cosmos_store import DocumentStore, QuerySpec
from app.services.pagination import fetch_page
from app.services.permissions import get_active_modules
from app.services.projection import pick_properties
from app.services.query_builder import ROOT_ALIAS, ComposedQuery, compose_query

_LOG = logging.getLogger("app.cases")

DOCUMENT_TYPE_OPTIONS = [
    "Invoice",
    "Waybill",
    "Delivery Note",
    "Order Confirmation",
    "Packing List",
]
MODULE_FIELD = "module"
DEFAULT_ORDER_BY = f"ORDER BY {ROOT_ALIAS}.createdAt"


def build_case_query(customer_id: str, project_id: str, composed: ComposedQuery) -> QuerySpec:
    parts = [
        f"SELECT {composed.projection_clause} FROM {ROOT_ALIAS}",
        f"WHERE {ROOT_ALIAS}.customerId = @customerId AND {ROOT_ALIAS}.projectId = @projectId",
    ]
    if composed.where_suffix:
        parts.append(composed.where_suffix)
    parts.append(composed.sort_clause or DEFAULT_ORDER_BY)
    return {
        "query": " ".join(parts),
        "parameters": [
            {"name": "@customerId", "value": customer_id},
            {"name": "@projectId", "value": project_id},
            *composed.parameters,
        ],
    }


def list_cases(
    store: DocumentStore,
    customer_id: str,
    project_id: str,
    continuation_token: str = "",
    page_limit: int = settings.DEFAULT_PAGE_LIMIT,
    sort: Sequence[SortCriterion] = (),
    filters: Sequence[FilterCriterion] = (),
    search: Sequence[str] = (),
    search_fields: Sequence[FieldSearchCriterion] = (),
    properties: Sequence[str] = (),
) -> CaseListPage:
    permitted = get_active_modules(store, customer_id, project_id)

    # Whole documents are fetched: the permission filter reads the top-level module,
    # and Cosmos would flatten nested projected paths to their last segment.
    composed = compose_query(sort, filters, search, search_fields)
    page = fetch_page(
        store,
        build_case_query(customer_id, project_id, composed),
        PageRequest(continuation_token=continuation_token or "", page_limit=page_limit),
        settings.CASES_CONTAINER,
        partition_key=settings.CASES_PARTITION_KEY,
    )

    rows = [row for row in page.rows if str(row.get(MODULE_FIELD) or "") in permitted]
    rows = pick_properties(rows, list(properties or []))
    _LOG.info(
        "list_cases customer=%s project=%s fetched=%s permitted=%s has_more=%s",
        customer_id,
        project_id,
        len(page.rows),
        len(rows),
        page.has_more_results,
    )
    return CaseListPage(
        result=rows,
        options=list(DOCUMENT_TYPE_OPTIONS),
        has_more_results=page.has_more_results,
        continuation_token=page.continuation_token,
    )
