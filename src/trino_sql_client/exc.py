from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from trino_sql_client.backend.models.base import QueryError

logger = logging.getLogger(__name__)


### PEP-249 style tiers ###
# https://peps.python.org/pep-0249/#exceptions
class Error(Exception):
    """Base class for all trino_sql_client exceptions.
    `message`: An optional user-friendly error message. It should be short and stable
    `context`: Optional extra context about the error. MUST be JSON serializable
    """

    def __init__(self, message=None, context=None, *args, **kwargs):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.context = context or {}

    def __str__(self):
        return str(self.message)

    def message_with_context(self):
        return str(self.message) + ": " + json.dumps(self.context, default=str)


class Warning(Exception):
    pass


class InterfaceError(Error):
    pass


class DatabaseError(Error):
    pass


class OperationalError(DatabaseError):
    pass


class ProgrammingError(DatabaseError):
    pass


class DataError(DatabaseError):
    pass


### Statement protocol errors ###
class ClientError(InterfaceError):
    """Thrown on local misuse of the statement protocol, for example operating on
    a closed client, submitting twice or fetching before submitting."""

    pass


class IllegalStateError(ClientError):
    """Thrown when a row is requested while the cursor is not positioned on one."""

    pass


class TransportError(ClientError, OperationalError):
    """Thrown if an HTTP exchange with the server could not be completed.
    Its context will have the following keys (when known):
    "method": The HTTP method of the failed request
    "http-code": HTTP response code
    "reason": HTTP reason phrase
    "original-exception": The Python level original exception
    """

    pass


class QueryCancelled(DatabaseError):
    """Thrown if the server reports that the query was cancelled (USER_CANCELED)."""

    def __init__(self, query_id: Optional[str], context=None):
        super().__init__(
            "Query was cancelled: {}".format(query_id),
            {"query-id": query_id, **(context or {})},
        )
        self.query_id = query_id


class QueryFailed(DatabaseError):
    """Thrown if the server reports an error for the query, for example a syntax error.
    Its context will have the following keys:
    "query-id": The server-side query id
    "error-code", "error-name", "error-type": The server error classification
    """

    def __init__(self, query_id: Optional[str], error: Optional[QueryError]):
        super().__init__(
            "Query failed: {} (Error: {})".format(
                query_id, error.message if error is not None else "Unknown"
            ),
            {
                "query-id": query_id,
                "error-code": error.error_code if error is not None else None,
                "error-name": error.error_name if error is not None else None,
                "error-type": error.error_type if error is not None else None,
            },
        )
        self.query_id = query_id
        self.error = error

    @property
    def error_code(self) -> Optional[int]:
        return self.error.error_code if self.error is not None else None

    @property
    def error_name(self) -> Optional[str]:
        return self.error.error_name if self.error is not None else None

    @property
    def error_type(self) -> Optional[str]:
        return self.error.error_type if self.error is not None else None


### Row accessor errors ###
class OutOfRange(ProgrammingError, IndexError):
    """Thrown if a row is accessed with a column index outside its bounds"""

    pass


class NotFound(ProgrammingError, KeyError):
    """Thrown if a row is accessed with a column name it does not have"""

    def __str__(self):
        return str(self.message)


class TypeMismatch(DataError, TypeError):
    """Thrown if a typed row access finds a value of a different type"""

    pass
