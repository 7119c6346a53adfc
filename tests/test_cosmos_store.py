import unittest
from unittest.mock import MagicMock

from azure.cosmos.exceptions import CosmosHttpResponseError

from app.services.cosmos_store import CosmosStore, QueryExecutionError

QUERY = {
    "query": "SELECT * FROM backend WHERE backend.customerId = @customerId",
    "parameters": [{"name": "@customerId", "value": "c1"}],
}


class _FakePager:
    def __init__(self, pages, continuation_token):
        self._pages = iter(pages)
        self.continuation_token = None
        self._next_token = continuation_token

    def __iter__(self):
        return self

    def __next__(self):
        page = next(self._pages)
        self.continuation_token = self._next_token
        return iter(page)


class CosmosStoreTests(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.container = MagicMock()
        self.client.get_database_client.return_value.get_container_client.return_value = self.container
        self.store = CosmosStore(client=self.client, database_name="cases-db")

    def test_uses_configured_database_and_container(self):
        self.container.query_items.return_value = iter([])
        self.store.query_container(QUERY, "Project")
        self.client.get_database_client.assert_called_once_with("cases-db")
        self.client.get_database_client.return_value.get_container_client.assert_called_with("Project")

    def test_query_container_fetches_all_rows_cross_partition(self):
        self.container.query_items.return_value = iter([{"id": "1"}, {"id": "2"}])
        rows = self.store.query_container(QUERY, "Project")
        self.assertEqual(rows, [{"id": "1"}, {"id": "2"}])
        kwargs = self.container.query_items.call_args.kwargs
        self.assertEqual(kwargs["query"], QUERY["query"])
        self.assertEqual(kwargs["parameters"], QUERY["parameters"])
        self.assertTrue(kwargs["enable_cross_partition_query"])

    def test_first_page_starts_without_token(self):
        iterator = MagicMock()
        iterator.by_page.return_value = _FakePager([[{"id": "1"}, {"id": "2"}]], "opaque-token")
        self.container.query_items.return_value = iterator

        response = self.store.query_container_next(QUERY, "testing", page_limit=2)

        iterator.by_page.assert_called_once_with(None)
        kwargs = self.container.query_items.call_args.kwargs
        self.assertEqual(kwargs["max_item_count"], 2)
        self.assertTrue(kwargs["enable_cross_partition_query"])
        self.assertNotIn("partition_key", kwargs)
        self.assertEqual(
            response,
            {"result": [{"id": "1"}, {"id": "2"}], "has_more_results": True, "continuation_token": "opaque-token"},
        )

    def test_continuation_token_and_partition_are_passed_verbatim(self):
        iterator = MagicMock()
        iterator.by_page.return_value = _FakePager([[{"id": "3"}]], None)
        self.container.query_items.return_value = iterator

        response = self.store.query_container_next(
            QUERY, "testing", page_limit=2, continuation_token="opaque-token", partition_key="2026-01"
        )

        iterator.by_page.assert_called_once_with("opaque-token")
        kwargs = self.container.query_items.call_args.kwargs
        self.assertEqual(kwargs["partition_key"], "2026-01")
        self.assertNotIn("enable_cross_partition_query", kwargs)
        self.assertEqual(response, {"result": [{"id": "3"}], "has_more_results": False, "continuation_token": ""})

    def test_exhausted_pager_yields_empty_page(self):
        iterator = MagicMock()
        iterator.by_page.return_value = _FakePager([], None)
        self.container.query_items.return_value = iterator
        response = self.store.query_container_next(QUERY, "testing", page_limit=5)
        self.assertEqual(response, {"result": [], "has_more_results": False, "continuation_token": ""})

    def test_client_errors_become_query_execution_errors(self):
        error = CosmosHttpResponseError(status_code=429, message="Request rate is large")
        self.container.query_items.side_effect = error

        with self.assertRaises(QueryExecutionError) as ctx:
            self.store.query_container_next(QUERY, "testing", page_limit=5)
        self.assertIs(ctx.exception.__cause__, error)

        with self.assertRaises(QueryExecutionError):
            self.store.query_container(QUERY, "Project")

    def test_query_iterator_forwards_options(self):
        self.store.get_query_iterator(QUERY, "testing", max_item_count=50, partition_key="pk")
        kwargs = self.container.query_items.call_args.kwargs
        self.assertEqual(kwargs["max_item_count"], 50)
        self.assertEqual(kwargs["partition_key"], "pk")


if __name__ == "__main__":
    unittest.main()
