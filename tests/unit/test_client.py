import json
from unittest.mock import patch

import pytest

import trino_sql_client
from trino_sql_client.client import Client, build_client
from trino_sql_client.common.http import HttpResponse
from trino_sql_client.common.http_client import HttpClient, HttpClientConfig
from trino_sql_client.exc import QueryFailed
from trino_sql_client.session import ClientSession


def _page(**fields):
    return HttpResponse(status=200, reason="OK", data=json.dumps(fields).encode())


COLUMNS = [{"name": "n", "type": "bigint"}]


class TestClient:
    @pytest.fixture
    def mock_http_client(self):
        with patch(
            "trino_sql_client.backend.statement_client.HttpClient", spec=HttpClient
        ) as mock_class:
            yield mock_class.return_value

    @pytest.fixture
    def client(self):
        return Client(ClientSession(server="http://localhost:8080", user="alice"))

    def test_default_user_agent(self, client):
        assert client.http_client_config.user_agent == "trino-sql-client/{}".format(
            trino_sql_client.__version__
        )

    def test_execute_is_lazy(self, client, mock_http_client):
        result_set = client.execute("SELECT 1")

        mock_http_client.request.assert_not_called()
        result_set.close()
        mock_http_client.close.assert_called_once()

    def test_execute_query_returns_first_row(self, client, mock_http_client):
        mock_http_client.request.side_effect = [
            _page(id="q1", nextUri="http://localhost:8080/v1/statement/q1/1"),
            _page(id="q1", columns=COLUMNS, data=[[1], [2]]),
        ]

        row = client.execute_query("SELECT n FROM t")

        assert row.get_value("n", int) == 1
        assert mock_http_client.request.call_count == 2
        mock_http_client.close.assert_called_once()

    def test_execute_query_without_rows(self, client, mock_http_client):
        mock_http_client.request.side_effect = [_page(id="q1", columns=COLUMNS)]

        assert client.execute_query("SELECT n FROM t WHERE false") is None

    def test_execute_update_drains_all_pages(self, client, mock_http_client):
        mock_http_client.request.side_effect = [
            _page(id="q1", nextUri="http://localhost:8080/v1/statement/q1/1"),
            _page(
                id="q1",
                nextUri="http://localhost:8080/v1/statement/q1/2",
                columns=[{"name": "rows", "type": "bigint"}],
                data=[[3]],
            ),
            _page(id="q1", updateType="INSERT", updateCount=3),
        ]

        assert client.execute_update("INSERT INTO t VALUES 1, 2, 3") == 3
        assert mock_http_client.request.call_count == 3
        mock_http_client.close.assert_called_once()

    def test_failure_releases_transport(self, client, mock_http_client):
        mock_http_client.request.side_effect = [
            _page(
                id="q1",
                error={"message": "boom", "errorName": "GENERIC_INTERNAL_ERROR"},
            )
        ]

        with pytest.raises(QueryFailed):
            client.execute_update("DROP TABLE t")
        mock_http_client.close.assert_called_once()


class TestBuildClient:
    def test_session_from_kwargs(self):
        client = build_client(
            server="http://localhost:8080",
            user="alice",
            catalog="hive",
            schema="web",
            client_tags=["etl"],
            session_properties={"query_max_run_time": "1h"},
            extra_credentials={"token": "secret"},
            time_zone="UTC",
            locale="en_US",
            compression_disabled=True,
        )

        session = client.session
        assert session.user == "alice"
        assert session.catalog == "hive"
        assert session.schema == "web"
        assert session.client_tags == frozenset({"etl"})
        assert dict(session.properties) == {"query_max_run_time": "1h"}
        assert dict(session.credentials) == {"token": "secret"}
        assert session.time_zone == "UTC"
        assert session.locale == "en_US"
        assert session.compression_disabled is True

    def test_transport_kwargs(self):
        client = build_client(
            server="https://trino.example.com",
            user="alice",
            _socket_timeout=5,
            _tls_no_verify=True,
            user_agent_entry="my-app",
            some_unknown_option=1,
        )

        config = client.http_client_config
        assert isinstance(config, HttpClientConfig)
        assert config.socket_timeout == 5
        assert config.ssl_options.tls_verify is False
        assert config.user_agent == "trino-sql-client/{} (my-app)".format(
            trino_sql_client.__version__
        )

    def test_connect(self):
        with patch("trino_sql_client.client.build_client") as mock_build:
            client = trino_sql_client.connect(
                server="http://localhost:8080", user="bob"
            )

        assert client is mock_build.return_value
        mock_build.assert_called_once_with(server="http://localhost:8080", user="bob")

    def test_invalid_server(self):
        with pytest.raises(ValueError):
            build_client(server="localhost", user="alice")
