from __future__ import annotations

from app.core.config import settings
from app.services.cosmos_store import DocumentStore

MODULE_PERMISSION_QUERY = (
    "SELECT backend.modules FROM backend "
    "WHERE backend.customerId = @customerId AND backend.projectId = @projectId"
)


def get_active_modules(store: DocumentStore, customer_id: str, project_id: str) -> set[str]:
    rows = store.query_container(
        {
            "query": MODULE_PERMISSION_QUERY,
            "parameters": [
                {"name": "@customerId", "value": customer_id},
                {"name": "@projectId", "value": project_id},
            ],
        },
        settings.PROJECT_CONTAINER,
    )
    if not rows:
        return set()
    modules = rows[0].get("modules") or []
    return {
        str(item.get("type"))
        for item in modules
        if isinstance(item, dict) and item.get("active") is True and item.get("type")
    }
