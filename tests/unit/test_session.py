import dataclasses

import pytest

from trino_sql_client.backend.headers import ProtocolHeader, build_protocol_headers
from trino_sql_client.session import DEFAULT_SOURCE, ClientSession


class TestClientSession:
    def test_defaults(self):
        session = ClientSession(server="http://localhost:8080", user="alice")

        assert session.source == DEFAULT_SOURCE
        assert session.catalog is None
        assert session.schema is None
        assert session.client_tags == frozenset()
        assert dict(session.properties) == {}
        assert dict(session.credentials) == {}
        assert session.statement_uri == "http://localhost:8080/v1/statement"

    def test_trailing_slash_is_stripped(self):
        session = ClientSession(server="https://trino.example.com/", user="alice")
        assert session.statement_uri == "https://trino.example.com/v1/statement"

    @pytest.mark.parametrize(
        "server_url", ["", "localhost:8080", "ftp://localhost", "http://", "not a url"]
    )
    def test_invalid_server(self, server_url):
        with pytest.raises(ValueError, match="Invalid server URL"):
            ClientSession(server=server_url, user="alice")

    def test_user_is_required(self):
        with pytest.raises(ValueError, match="user is required"):
            ClientSession(server="http://localhost:8080", user="")

    def test_session_is_immutable(self):
        session = ClientSession(
            server="http://localhost:8080", user="alice", properties={"a": "1"}
        )

        with pytest.raises(dataclasses.FrozenInstanceError):
            session.user = "bob"
        with pytest.raises(TypeError):
            session.properties["b"] = "2"

    def test_caller_mapping_is_copied(self):
        properties = {"a": "1"}
        session = ClientSession(
            server="http://localhost:8080", user="alice", properties=properties
        )
        properties["b"] = "2"

        assert dict(session.properties) == {"a": "1"}

    def test_equal_sessions_hash_equal(self):
        first = ClientSession(
            server="http://localhost:8080",
            user="alice",
            client_tags={"x", "y"},
            properties={"a": "1"},
        )
        second = ClientSession(
            server="http://localhost:8080/",
            user="alice",
            client_tags=["y", "x"],
            properties={"a": "1"},
        )

        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second}) == 1

    def test_hash_ignores_mapping_order(self):
        first = ClientSession(
            server="http://localhost:8080",
            user="alice",
            properties={"a": "1", "b": "2"},
            credentials={"x": "1", "y": "2"},
        )
        second = ClientSession(
            server="http://localhost:8080",
            user="alice",
            properties={"b": "2", "a": "1"},
            credentials={"y": "2", "x": "1"},
        )

        assert first == second
        assert hash(first) == hash(second)
        assert {first: "cached"}[second] == "cached"

    def test_with_methods_return_new_sessions(self):
        session = ClientSession(server="http://localhost:8080", user="alice")

        derived = (
            session.with_property("query_max_run_time", "1h")
            .with_credential("token", "secret")
            .with_client_tag("etl")
            .with_client_tags(["nightly", "etl"])
        )

        assert dict(derived.properties) == {"query_max_run_time": "1h"}
        assert dict(derived.credentials) == {"token": "secret"}
        assert derived.client_tags == frozenset({"etl", "nightly"})
        assert dict(session.properties) == {}
        assert session.client_tags == frozenset()
        assert derived.user == "alice"


class TestProtocolHeaders:
    def test_minimal_session(self):
        session = ClientSession(server="http://localhost:8080", user="alice")

        assert build_protocol_headers(session) == [
            ("X-Trino-User", "alice"),
            ("X-Trino-Source", DEFAULT_SOURCE),
        ]

    def test_full_session(self):
        session = ClientSession(
            server="http://localhost:8080",
            user="alice",
            source="etl-job",
            catalog="hive",
            schema="web",
            client_tags={"b", "a"},
            properties={
                "query_max_run_time": "1h",
                "join_distribution_type": "BROADCAST",
            },
            credentials={"token": "secret"},
            time_zone="UTC",
            locale="en_US",
            compression_disabled=True,
        )

        headers = build_protocol_headers(session)

        assert headers == [
            (ProtocolHeader.USER.value, "alice"),
            (ProtocolHeader.SOURCE.value, "etl-job"),
            (ProtocolHeader.CATALOG.value, "hive"),
            (ProtocolHeader.SCHEMA.value, "web"),
            (ProtocolHeader.CLIENT_TAGS.value, "a,b"),
            (ProtocolHeader.TIME_ZONE.value, "UTC"),
            (ProtocolHeader.LANGUAGE.value, "en_US"),
            ("X-Trino-Session", "query_max_run_time=1h"),
            ("X-Trino-Session", "join_distribution_type=BROADCAST"),
            ("X-Trino-Extra-Credential", "token=secret"),
            ("Accept-Encoding", "identity"),
        ]

    def test_compression_left_to_transport_by_default(self):
        session = ClientSession(
            server="http://localhost:8080", user="alice", compression_disabled=False
        )

        names = [name for name, _ in build_protocol_headers(session)]
        assert "Accept-Encoding" not in names
