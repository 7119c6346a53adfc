from __future__ import annotations

from app.services.cosmos_store import QueryExecutionError


class FakeDocumentStore:
    """In-memory store paging over fixed rows; continuation tokens are row offsets."""

    def __init__(self, rows=None, modules=None, fail_on=None):
        self.rows = list(rows or [])
        self.modules = modules
        self.fail_on = fail_on
        self.calls: list[tuple[str, dict]] = []

    def query_container(self, query_spec, container_id):
        self.calls.append(("query_container", {"query_spec": query_spec, "container_id": container_id}))
        if self.fail_on == "permissions":
            raise QueryExecutionError("permission lookup failed")
        if self.modules is None:
            return []
        return [{"modules": list(self.modules)}]

    def query_container_next(self, query_spec, container_id, *, page_limit, continuation_token="", partition_key=None):
        self.calls.append(
            (
                "query_container_next",
                {
                    "query_spec": query_spec,
                    "container_id": container_id,
                    "page_limit": page_limit,
                    "continuation_token": continuation_token,
                    "partition_key": partition_key,
                },
            )
        )
        if self.fail_on == "content":
            raise QueryExecutionError("content query failed")
        start = int(continuation_token or 0)
        end = start + page_limit
        more = end < len(self.rows)
        return {
            "result": self.rows[start:end],
            "has_more_results": more,
            "continuation_token": str(end) if more else "",
        }

    def paged_calls(self) -> list[dict]:
        return [payload for name, payload in self.calls if name == "query_container_next"]
