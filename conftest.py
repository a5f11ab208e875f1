import os
import pytest


@pytest.fixture(scope="session")
def server():
    return os.getenv("TRINO_SERVER")


@pytest.fixture(scope="session")
def user():
    return os.getenv("TRINO_USER", "test")


@pytest.fixture(scope="session")
def catalog():
    return os.getenv("TRINO_CATALOG", "tpch")


@pytest.fixture(scope="session")
def schema():
    return os.getenv("TRINO_SCHEMA", "tiny")


@pytest.fixture(scope="session", autouse=True)
def connection_details(server, user, catalog, schema):
    return {
        "server": server,
        "user": user,
        "catalog": catalog,
        "schema": schema,
    }
