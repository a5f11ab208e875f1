from trino_sql_client.exc import *

__version__ = "0.1.0"
USER_AGENT_NAME = "trino-sql-client"

from trino_sql_client.backend.types import QueryState
from trino_sql_client.session import ClientSession
from trino_sql_client.types import Row


def connect(**kwargs):
    from .client import build_client

    return build_client(**kwargs)
