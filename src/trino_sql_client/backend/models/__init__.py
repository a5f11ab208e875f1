"""
Models for the statement protocol.

This package contains data models for statement responses and their nested
column, error and statistics structures.
"""

from trino_sql_client.backend.models.base import (
    ClientTypeSignature,
    Column,
    ErrorLocation,
    FailureInfo,
    NamedTypeSignature,
    QueryError,
    StatementStats,
    TypeArgument,
)
from trino_sql_client.backend.models.responses import (
    StatementResponse,
    decode_statement_response,
)

__all__ = [
    # Base models
    "ClientTypeSignature",
    "Column",
    "ErrorLocation",
    "FailureInfo",
    "NamedTypeSignature",
    "QueryError",
    "StatementStats",
    "TypeArgument",
    # Response models
    "StatementResponse",
    "decode_statement_response",
]
