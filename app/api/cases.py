from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.deps import ensure_customer_access_or_403, get_current_user, get_store
from app.schemas.query import CaseListPage, CaseListQuery
from app.services.cases import list_cases
from app.services.cosmos_store import DocumentStore

router = APIRouter()


@router.post("/query", response_model=CaseListPage, response_model_by_alias=True)
def query_cases(
    payload: CaseListQuery,
    store: DocumentStore = Depends(get_store),
    user: dict = Depends(get_current_user),
):
    ensure_customer_access_or_403(user, payload.customer_id)
    return list_cases(
        store,
        payload.customer_id,
        payload.project_id,
        continuation_token=payload.continuation_token,
        page_limit=payload.page_limit,
        sort=payload.sort,
        filters=payload.filter,
        search=payload.search,
        search_fields=payload.search_fields,
        properties=payload.properties,
    )
