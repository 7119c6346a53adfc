from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Iterator, Optional, Protocol

from azure.core.exceptions import AzureError
from azure.cosmos import CosmosClient

from app.core.config import settings

_LOG = logging.getLogger("app.cosmos")

QuerySpec = dict[str, Any]


class QueryExecutionError(RuntimeError):
    pass


class DocumentStore(Protocol):
    def query_container(self, query_spec: QuerySpec, container_id: str) -> list[dict]:
        ...

    def query_container_next(
        self,
        query_spec: QuerySpec,
        container_id: str,
        *,
        page_limit: int,
        continuation_token: str = "",
        partition_key: Optional[str] = None,
    ) -> dict[str, Any]:
        ...


class CosmosStore:
    def __init__(self, client: CosmosClient | None = None, database_name: str | None = None):
        if client is None:
            client = CosmosClient(
                settings.COSMOS_ENDPOINT,
                credential=settings.COSMOS_KEY,
                retry_total=settings.COSMOS_RETRY_MAX_ATTEMPTS,
                retry_backoff_max=settings.COSMOS_RETRY_MAX_WAIT_SECONDS,
            )
        self.client = client
        self.database = client.get_database_client(database_name or settings.COSMOS_DB_NAME)

    def _container(self, container_id: str):
        return self.database.get_container_client(container_id)

    @staticmethod
    def _query_kwargs(query_spec: QuerySpec, partition_key: Optional[str] = None, **options: Any) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "query": query_spec["query"],
            "parameters": list(query_spec.get("parameters") or []),
        }
        if partition_key is not None:
            kwargs["partition_key"] = partition_key
        else:
            kwargs["enable_cross_partition_query"] = True
        kwargs.update(options)
        return kwargs

    def query_container(self, query_spec: QuerySpec, container_id: str) -> list[dict]:
        try:
            return list(self.get_query_iterator(query_spec, container_id))
        except AzureError as exc:
            _LOG.error("query failed container=%s error=%s", container_id, exc)
            raise QueryExecutionError(f"Query against container '{container_id}' failed") from exc

    def query_container_next(
        self,
        query_spec: QuerySpec,
        container_id: str,
        *,
        page_limit: int,
        continuation_token: str = "",
        partition_key: Optional[str] = None,
    ) -> dict[str, Any]:
        _LOG.debug(
            "paged query container=%s page_limit=%s first_page=%s",
            container_id,
            page_limit,
            not continuation_token,
        )
        try:
            items = self._container(container_id).query_items(
                **self._query_kwargs(query_spec, partition_key, max_item_count=page_limit)
            )
            pager = items.by_page(continuation_token or None)
            try:
                result = list(next(pager))
            except StopIteration:
                result = []
            next_token = pager.continuation_token
        except AzureError as exc:
            _LOG.error("paged query failed container=%s error=%s", container_id, exc)
            raise QueryExecutionError(f"Query against container '{container_id}' failed") from exc
        return {
            "result": result,
            "has_more_results": bool(next_token),
            "continuation_token": next_token or "",
        }

    def get_query_iterator(self, query_spec: QuerySpec, container_id: str, **options: Any) -> Iterator[dict]:
        partition_key = options.pop("partition_key", None)
        return self._container(container_id).query_items(**self._query_kwargs(query_spec, partition_key, **options))


@lru_cache(maxsize=1)
def get_cosmos_store() -> CosmosStore:
    return CosmosStore()
