from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from trino_sql_client.backend.headers import build_protocol_headers
from trino_sql_client.backend.models import StatementResponse, decode_statement_response
from trino_sql_client.backend.types import QueryState
from trino_sql_client.common.http import HttpHeader, HttpMethod, HttpResponse
from trino_sql_client.common.http_client import HttpClient, HttpClientConfig
from trino_sql_client.exc import (
    ClientError,
    QueryCancelled,
    QueryFailed,
    TransportError,
)
from trino_sql_client.session import ClientSession

logger = logging.getLogger(__name__)

USER_CANCELED_ERROR_NAME = "USER_CANCELED"
FAILED_STATS_STATE = "FAILED"


class StatementClient:
    """
    Drives one statement through the submit / poll protocol.

    ``submit()`` POSTs the statement text and ``fetch_next()`` follows the
    ``nextUri`` of the current page. After every decoded page the query state is
    updated from the page contents:

    1. an error payload sets CLIENT_ABORTED (error name USER_CANCELED, raising
       ``QueryCancelled``) or FINISHED (any other error, raising ``QueryFailed``)
    2. otherwise a stats phase of FAILED sets FINISHED without raising
    3. otherwise a page without ``nextUri`` sets FINISHED
    4. otherwise the state is RUNNING

    Exchanges that cannot be completed set CLIENT_ERROR and raise
    ``TransportError``. The state is always updated before an error is raised.

    The client owns its ``HttpClient`` (created from ``http_client_config`` unless
    one is passed in) and releases it in ``close()``.
    """

    def __init__(
        self,
        session: ClientSession,
        statement: str,
        http_client: Optional[HttpClient] = None,
        http_client_config: Optional[HttpClientConfig] = None,
    ):
        self.session = session
        self.statement = statement
        self._http_client = (
            http_client if http_client is not None else HttpClient(http_client_config)
        )
        self._headers: List[Tuple[str, str]] = build_protocol_headers(session)
        self._state = QueryState.RUNNING
        self._current_response: Optional[StatementResponse] = None
        self._submitted = False
        self._closed = False

    @property
    def state(self) -> QueryState:
        return self._state

    @property
    def current_response(self) -> Optional[StatementResponse]:
        return self._current_response

    @property
    def closed(self) -> bool:
        return self._closed

    def _set_state(self, state: QueryState) -> None:
        if state is not self._state:
            logger.debug("Query state %s -> %s", self._state.value, state.value)
        self._state = state

    def _check_not_closed(self) -> None:
        if self._closed:
            raise ClientError("Client is closed")

    def submit(self) -> StatementResponse:
        """
        Submit the statement and return the first page.

        Raises:
            ClientError: If the client is closed or the statement was already submitted
            TransportError: If the exchange could not be completed
            QueryCancelled: If the server reports the query as cancelled
            QueryFailed: If the server reports any other error
        """
        self._check_not_closed()
        if self._submitted:
            raise ClientError("Statement has already been submitted")
        self._submitted = True

        logger.debug("StatementClient.submit(server=%s)", self.session.server)
        headers = self._headers + [
            (HttpHeader.CONTENT_TYPE.value, "text/plain; charset=utf-8")
        ]
        return self._exchange(
            HttpMethod.POST,
            self.session.statement_uri,
            headers,
            body=self.statement.encode("utf-8"),
        )

    def fetch_next(self) -> StatementResponse:
        """
        Fetch the page behind the current page's ``nextUri``.

        When the current page is the last one, the state becomes FINISHED and the
        current page is returned without any exchange. Otherwise, when the query
        is no longer RUNNING, the current page is returned unchanged.

        Raises:
            ClientError: If the client is closed or ``submit()`` was not called
            TransportError: If the exchange could not be completed
            QueryCancelled: If the server reports the query as cancelled
            QueryFailed: If the server reports any other error
        """
        self._check_not_closed()
        current = self._current_response
        if current is None:
            raise ClientError("No current response. Call submit() first.")

        if current.next_uri is None:
            self._set_state(QueryState.FINISHED)
            return current

        if self._state.is_terminal:
            return current

        logger.debug("StatementClient.fetch_next(query_id=%s)", current.id)
        return self._exchange(HttpMethod.GET, current.next_uri, self._headers)

    def _exchange(
        self,
        method: HttpMethod,
        url: str,
        headers: List[Tuple[str, str]],
        body: Optional[bytes] = None,
    ) -> StatementResponse:
        try:
            http_response = self._http_client.request(
                method, url, headers=headers, body=body
            )
            if http_response.is_error:
                response = self._decode_error_response(method, http_response)
            else:
                response = decode_statement_response(http_response.data)
        except TransportError:
            self._set_state(QueryState.CLIENT_ERROR)
            raise

        self._current_response = response
        self._update_state(response)
        return response

    def _decode_error_response(
        self, method: HttpMethod, http_response: HttpResponse
    ) -> StatementResponse:
        """
        Servers report structured errors even on error status codes, so the body is
        decoded first. Without an error payload the status line is all there is.
        """
        context = {
            "method": method.value,
            "http-code": http_response.status,
            "reason": http_response.reason,
        }
        try:
            response = decode_statement_response(http_response.data)
        except TransportError as e:
            response = None
            context["original-exception"] = e.context.get("original-exception")

        if response is None or response.error is None:
            message = "HTTP error: {} {}".format(
                http_response.status, http_response.reason
            ).rstrip()
            logger.error(message)
            raise TransportError(message, context)
        return response

    def _update_state(self, response: StatementResponse) -> None:
        error = response.error
        if error is not None:
            if error.error_name == USER_CANCELED_ERROR_NAME:
                self._set_state(QueryState.CLIENT_ABORTED)
                raise QueryCancelled(response.id)
            self._set_state(QueryState.FINISHED)
            raise QueryFailed(response.id, error)

        stats = response.stats
        if stats is not None and stats.state == FAILED_STATS_STATE:
            self._set_state(QueryState.FINISHED)
        elif response.is_last_page:
            self._set_state(QueryState.FINISHED)
        else:
            self._set_state(QueryState.RUNNING)

    def close(self) -> None:
        """Release the HTTP client. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._http_client.close()
        except Exception as e:
            logger.warning("Error closing HTTP client: %s", e)

    def __enter__(self) -> "StatementClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
