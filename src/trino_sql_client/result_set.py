from __future__ import annotations

import logging
from typing import Any, Iterator, List, Optional, Tuple

from trino_sql_client.backend.models import Column, StatementResponse, StatementStats
from trino_sql_client.backend.statement_client import StatementClient
from trino_sql_client.backend.types import QueryState
from trino_sql_client.exc import IllegalStateError
from trino_sql_client.types import Row

logger = logging.getLogger(__name__)


class ResultSet:
    """
    Forward-only cursor over every row of every page of one statement.

    The statement is submitted lazily, on the first ``advance()`` or ``columns()``
    call. When the rows of the current page are used up, ``advance()`` fetches the
    next page. A fetched page without rows makes that ``advance()`` call return
    False even though more pages may follow; call ``advance()`` again (or iterate
    the result set, which does this for you) to continue. Once the query reaches
    a terminal state and no rows remain, ``advance()`` keeps returning False
    without contacting the server.

    The result set must be closed after use to free resources:

        with client.execute("SELECT * FROM nation") as result_set:
            while result_set.advance():
                row = result_set.current_row()
    """

    def __init__(self, statement_client: StatementClient):
        self.statement_client = statement_client
        self._columns: List[Column] = []
        self._rows: List[List[Any]] = []
        self._position = -1
        self._has_more_pages = False
        self._initialized = False

    def _initialize(self) -> None:
        # marked first so that a failed submit is reported once, not on every call
        self._initialized = True
        response = self.statement_client.submit()

        self._columns = response.columns or []
        self._rows = response.data or []
        self._position = -1
        self._has_more_pages = not response.is_last_page
        logger.debug(
            "Initialized result set for query %s with %d rows on first page",
            response.id,
            len(self._rows),
        )

    def advance(self) -> bool:
        """
        Move to the next row.

        Returns:
            True if a row is available through ``current_row()``, False otherwise
        """
        if not self._initialized:
            self._initialize()

        self._position = min(self._position + 1, len(self._rows))
        if self._position < len(self._rows):
            return True

        if not self._has_more_pages or self.state() is not QueryState.RUNNING:
            return False

        response = self.statement_client.fetch_next()
        self._rows = response.data or []
        self._has_more_pages = (
            not response.is_last_page and self.state() is QueryState.RUNNING
        )
        if not self._columns and response.columns:
            self._columns = response.columns

        if not self._rows:
            logger.debug("Fetched empty page for query %s", response.id)
            self._position = -1
            return False

        self._position = 0
        return True

    def _has_current_row(self) -> bool:
        return 0 <= self._position < len(self._rows)

    def current_row(self) -> Row:
        """
        Return the row the cursor is positioned on.

        Raises:
            IllegalStateError: If ``advance()`` has not returned True for the
                current position
        """
        if not self._has_current_row():
            raise IllegalStateError("No current row. Call advance() first.")
        return Row(self._columns, self._rows[self._position])

    def columns(self) -> List[Column]:
        """Column metadata of the query. Submits the statement if needed."""
        if not self._initialized:
            self._initialize()
        return self._columns

    def stats(self) -> Optional[StatementStats]:
        response = self.statement_client.current_response
        return response.stats if response is not None else None

    def state(self) -> QueryState:
        return self.statement_client.state

    @property
    def _current_response(self) -> Optional[StatementResponse]:
        return self.statement_client.current_response

    @property
    def query_id(self) -> Optional[str]:
        response = self._current_response
        return response.id if response is not None else None

    @property
    def info_uri(self) -> Optional[str]:
        response = self._current_response
        return response.info_uri if response is not None else None

    @property
    def warnings(self) -> List[str]:
        response = self._current_response
        return list(response.warnings or []) if response is not None else []

    @property
    def update_type(self) -> Optional[str]:
        response = self._current_response
        return response.update_type if response is not None else None

    @property
    def update_count(self) -> Optional[int]:
        response = self._current_response
        return response.update_count if response is not None else None

    @property
    def description(self) -> Optional[List[Tuple]]:
        """
        PEP-249 style description: one 7-item tuple per column holding name,
        type_code and five ``None`` placeholders. ``None`` until the first page is in.
        """
        if not self._initialized:
            return None
        return [
            (column.name, column.type, None, None, None, None, None)
            for column in self._columns
        ]

    def __iter__(self) -> Iterator[Row]:
        while True:
            if self.advance():
                yield self.current_row()
            elif not self._has_more_pages or self.state() is not QueryState.RUNNING:
                break

    def fetchone(self) -> Optional[Row]:
        """Fetch the next row, or ``None`` when the result set is exhausted."""
        return next(iter(self), None)

    def fetchall(self) -> List[Row]:
        """Fetch all remaining rows."""
        return list(self)

    def close(self) -> None:
        self.statement_client.close()

    def __enter__(self) -> "ResultSet":
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
