"""
Response models for the statement protocol.

A ``StatementResponse`` is one decoded page: the answer to the initial POST or to
a GET of the previous page's ``nextUri``.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from trino_sql_client.backend.models.base import Column, QueryError, StatementStats
from trino_sql_client.exc import TransportError

logger = logging.getLogger(__name__)


def _parse_warnings(data: Dict[str, Any]) -> Optional[List[str]]:
    """Warnings are plain strings or {"warningCode": ..., "message": ...} objects."""
    warnings = data.get("warnings")
    if warnings is None:
        return None
    return [
        warning.get("message", "") if isinstance(warning, dict) else str(warning)
        for warning in warnings
    ]


@dataclass
class StatementResponse:
    """Representation of one page of a statement's results."""

    id: Optional[str] = None
    info_uri: Optional[str] = None
    next_uri: Optional[str] = None
    columns: Optional[List[Column]] = None
    data: Optional[List[List[Any]]] = None
    stats: Optional[StatementStats] = None
    error: Optional[QueryError] = None
    warnings: Optional[List[str]] = None
    update_type: Optional[str] = None
    update_count: Optional[int] = None

    @property
    def is_last_page(self) -> bool:
        return self.next_uri is None

    @property
    def has_data(self) -> bool:
        return bool(self.data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatementResponse":
        """Create a StatementResponse from a decoded JSON object."""
        columns = data.get("columns")
        rows = data.get("data")
        stats = data.get("stats")
        error = data.get("error")
        next_uri = data.get("nextUri")

        if next_uri is not None and not isinstance(next_uri, str):
            raise TypeError("nextUri must be a string, got {!r}".format(next_uri))
        if rows is not None and not (
            isinstance(rows, list) and all(isinstance(row, list) for row in rows)
        ):
            raise TypeError("data must be a list of rows")

        return cls(
            id=data.get("id"),
            info_uri=data.get("infoUri"),
            next_uri=next_uri,
            columns=(
                [Column.from_dict(c) for c in columns] if columns is not None else None
            ),
            data=rows,
            stats=StatementStats.from_dict(stats) if stats else None,
            error=QueryError.from_dict(error) if error else None,
            warnings=_parse_warnings(data),
            update_type=data.get("updateType"),
            update_count=data.get("updateCount"),
        )


def decode_statement_response(body: bytes) -> StatementResponse:
    """
    Decode a raw response body into a StatementResponse.

    Raises:
        TransportError: If the body is not a JSON object of the expected shape
    """
    try:
        payload = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        logger.error("Failed to parse statement response: %s", e)
        raise TransportError(
            "Failed to parse response", {"original-exception": repr(e)}
        ) from e

    if not isinstance(payload, dict):
        raise TransportError(
            "Failed to parse response: expected a JSON object, got {}".format(
                type(payload).__name__
            )
        )

    try:
        return StatementResponse.from_dict(payload)
    except (AttributeError, TypeError, ValueError) as e:
        logger.error("Unexpected statement response shape: %s", e)
        raise TransportError(
            "Failed to parse response", {"original-exception": repr(e)}
        ) from e
