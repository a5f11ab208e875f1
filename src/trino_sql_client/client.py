import logging
from typing import Any, Iterable, Mapping, Optional

from trino_sql_client import USER_AGENT_NAME, __version__
from trino_sql_client.backend.statement_client import StatementClient
from trino_sql_client.common.http_client import HttpClientConfig
from trino_sql_client.result_set import ResultSet
from trino_sql_client.session import DEFAULT_SOURCE, ClientSession
from trino_sql_client.types import Row

logger = logging.getLogger(__name__)


class Client:
    def __init__(
        self,
        session: ClientSession,
        http_client_config: Optional[HttpClientConfig] = None,
    ) -> None:
        """
        Executes statements against a Trino coordinator.

        Each statement gets its own ``StatementClient`` with its own HTTP connection
        pool, released when the returned ``ResultSet`` is closed.
        """
        self.session = session
        self.http_client_config = http_client_config or HttpClientConfig(
            user_agent="{}/{}".format(USER_AGENT_NAME, __version__)
        )

    def execute(self, sql: str) -> ResultSet:
        """
        Prepare ``sql`` for execution and return its result set.

        Nothing is sent to the server until the result set is first used. The
        result set must be closed after use.
        """
        statement_client = StatementClient(
            self.session, sql, http_client_config=self.http_client_config
        )
        return ResultSet(statement_client)

    def execute_query(self, sql: str) -> Optional[Row]:
        """Execute ``sql`` and return its first row, or ``None`` without rows."""
        with self.execute(sql) as result_set:
            return result_set.fetchone()

    def execute_update(self, sql: str) -> Optional[int]:
        """
        Execute a statement that returns no rows of interest (INSERT, CREATE, ...).

        Every page is consumed so that the statement runs to completion.

        Returns:
            The number of affected rows reported by the server, if any
        """
        with self.execute(sql) as result_set:
            for _ in result_set:
                pass
            logger.debug(
                "Statement %s finished: %s", result_set.query_id, result_set.update_type
            )
            return result_set.update_count


def build_client(
    server: str,
    user: str,
    source: str = DEFAULT_SOURCE,
    catalog: Optional[str] = None,
    schema: Optional[str] = None,
    client_tags: Optional[Iterable[str]] = None,
    session_properties: Optional[Mapping[str, str]] = None,
    extra_credentials: Optional[Mapping[str, str]] = None,
    time_zone: Optional[str] = None,
    locale: Optional[str] = None,
    compression_disabled: Optional[bool] = None,
    **kwargs: Any,
) -> Client:
    """
    Build a Client from keyword arguments.

    Parameters:
        :param server: Base URL of the coordinator, e.g. ``http://localhost:8080``
        :param user: User the queries run as
        :param source: Client source tag
        :param catalog: Default catalog
        :param schema: Default schema
        :param client_tags: Tags used for resource group selection
        :param session_properties: Session properties, one header per entry
        :param extra_credentials: Extra credentials, one header per entry
        :param time_zone: Session time zone
        :param locale: Session language
        :param compression_disabled: Ask the server not to compress responses

    Transport settings are read from underscore-prefixed kwargs:
        :param _socket_timeout: Connect and read timeout in seconds (default 900)
        :param _tls_no_verify: Disable certificate verification
        :param _tls_verify_hostname: Verify the certificate hostname (default True)
        :param _tls_trusted_ca_file: CA bundle used to verify the server
        :param _tls_client_cert_file: Client certificate for mutual TLS
        :param _tls_client_cert_key_file: Key of the client certificate
        :param _tls_client_cert_key_password: Password of the client certificate key
        :param _pool_maxsize: Connections kept per host
        :param _proxy_auth_method: Proxy authentication, only ``basic`` is supported
        :param user_agent_entry: Appended to the User-Agent header
    """
    session = ClientSession(
        server=server,
        user=user,
        source=source,
        catalog=catalog,
        schema=schema,
        client_tags=frozenset(client_tags or ()),
        properties=dict(session_properties or {}),
        credentials=dict(extra_credentials or {}),
        time_zone=time_zone,
        locale=locale,
        compression_disabled=compression_disabled,
    )

    user_agent_entry = kwargs.get("user_agent_entry")
    if user_agent_entry:
        user_agent = "{}/{} ({})".format(USER_AGENT_NAME, __version__, user_agent_entry)
    else:
        user_agent = "{}/{}".format(USER_AGENT_NAME, __version__)

    return Client(
        session, HttpClientConfig.from_kwargs(user_agent=user_agent, **kwargs)
    )
