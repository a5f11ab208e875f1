"""
End-to-end tests against a running coordinator.

Set TRINO_SERVER (and optionally TRINO_USER, TRINO_CATALOG, TRINO_SCHEMA) to run them.
"""

import logging
import os
from contextlib import contextmanager

import pytest

import trino_sql_client
from trino_sql_client import QueryFailed, QueryState

log = logging.getLogger(__name__)

pytestmark = pytest.mark.skipif(
    not os.getenv("TRINO_SERVER"), reason="TRINO_SERVER is not set"
)


class TestTrinoDriver:
    @pytest.fixture(autouse=True)
    def get_details(self, connection_details):
        self.arguments = connection_details.copy()

    @contextmanager
    def client(self, extra_params=()):
        params = {**self.arguments, **dict(extra_params)}
        log.info("Connecting with args: %s", params)
        yield trino_sql_client.connect(**params)

    def test_select_literal(self):
        with self.client() as client:
            row = client.execute_query("SELECT 1 AS one, 'a' AS letter")

        assert row.get_value("ONE", int) == 1
        assert row.get_value("letter", str) == "a"

    def test_multi_page_result(self):
        with self.client() as client:
            sql = "SELECT * FROM nation ORDER BY nationkey"
            with client.execute(sql) as result_set:
                rows = result_set.fetchall()
                assert result_set.state() is QueryState.FINISHED
                assert [c.name for c in result_set.columns()][0] == "nationkey"

        assert len(rows) == 25
        assert rows[0].get_value("nationkey") == 0

    def test_empty_result(self):
        with self.client() as client:
            with client.execute("SELECT * FROM nation WHERE false") as result_set:
                assert not result_set.advance()
                assert len(result_set.columns()) > 0

    def test_incorrect_query_raises(self):
        with self.client() as client:
            with pytest.raises(QueryFailed) as exc_info:
                client.execute_query("SELECT * FROM table_that_does_not_exist")

        assert exc_info.value.error_name is not None

    def test_session_properties(self):
        params = {"session_properties": {"query_max_run_time": "1h"}}
        with self.client(params) as client:
            row = client.execute_query("SHOW SESSION LIKE 'query_max_run_time'")

        assert row.get_value(1) == "1h"

    def test_stats_available_after_drain(self):
        with self.client() as client:
            with client.execute("SELECT count(*) FROM region") as result_set:
                assert [r.get_value(0) for r in result_set] == [5]
                assert result_set.stats() is not None
                assert result_set.query_id is not None
