"""
Base models for the statement protocol.

These models define the structures nested inside a statement response: column
metadata with its type signature tree, error payloads and execution statistics.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class NamedTypeSignature:
    """A row field: optional field name plus the field's type signature."""

    type_signature: "ClientTypeSignature"
    field_name: Optional[str] = None


@dataclass
class TypeArgument:
    """
    One argument of a parameterized type.

    ``kind`` is the wire discriminator. ``value`` is a nested ``ClientTypeSignature``
    for ``TYPE``, a ``NamedTypeSignature`` for ``NAMED_TYPE``, an ``int`` for ``LONG``
    and a ``str`` for ``VARIABLE``.
    """

    kind: str
    value: Union["ClientTypeSignature", NamedTypeSignature, int, str, None]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TypeArgument":
        kind = data.get("kind", "")
        raw_value = data.get("value")

        if raw_value is None and "typeSignature" in data:
            value: Any = ClientTypeSignature.from_dict(data["typeSignature"])
        elif kind == "TYPE" and isinstance(raw_value, dict):
            value = ClientTypeSignature.from_dict(raw_value)
        elif kind == "NAMED_TYPE" and isinstance(raw_value, dict):
            field_name = raw_value.get("fieldName")
            if isinstance(field_name, dict):
                field_name = field_name.get("name")
            value = NamedTypeSignature(
                type_signature=ClientTypeSignature.from_dict(
                    raw_value.get("typeSignature", {})
                ),
                field_name=field_name,
            )
        else:
            value = raw_value

        return cls(kind=kind, value=value)


@dataclass
class ClientTypeSignature:
    """Recursive type signature: raw type name plus ordered type arguments."""

    raw_type: str
    arguments: List[TypeArgument] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClientTypeSignature":
        return cls(
            raw_type=data.get("rawType", ""),
            arguments=[
                TypeArgument.from_dict(argument)
                for argument in data.get("arguments") or []
            ],
        )


@dataclass
class Column:
    """Column metadata: name, declared type and optional type signature."""

    name: str
    type: str
    type_signature: Optional[ClientTypeSignature] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Column":
        type_signature = data.get("typeSignature")
        return cls(
            name=data.get("name", ""),
            type=data.get("type", ""),
            type_signature=(
                ClientTypeSignature.from_dict(type_signature)
                if type_signature
                else None
            ),
        )


@dataclass
class ErrorLocation:
    """Position of an error in the submitted statement."""

    line_number: Optional[int] = None
    column_number: Optional[int] = None


@dataclass
class FailureInfo:
    """Nested failure detail: exception type and message."""

    type: Optional[str] = None
    message: Optional[str] = None


@dataclass
class QueryError:
    """Error information returned by the server for a failed or cancelled query."""

    message: Optional[str] = None
    error_code: Optional[int] = None
    error_name: Optional[str] = None
    error_type: Optional[str] = None
    error_location: Optional[ErrorLocation] = None
    failure_info: Optional[FailureInfo] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueryError":
        location = data.get("errorLocation")
        failure = data.get("failureInfo")
        return cls(
            message=data.get("message"),
            error_code=data.get("errorCode"),
            error_name=data.get("errorName"),
            error_type=data.get("errorType"),
            error_location=(
                ErrorLocation(
                    line_number=location.get("lineNumber"),
                    column_number=location.get("columnNumber"),
                )
                if location
                else None
            ),
            failure_info=(
                FailureInfo(type=failure.get("type"), message=failure.get("message"))
                if failure
                else None
            ),
        )


@dataclass
class StatementStats:
    """Point-in-time progress metrics of a query. Purely observational."""

    state: Optional[str] = None
    queued: Optional[bool] = None
    scheduled: Optional[bool] = None
    nodes: Optional[int] = None
    total_splits: Optional[int] = None
    queued_splits: Optional[int] = None
    running_splits: Optional[int] = None
    completed_splits: Optional[int] = None
    bytes_processed: Optional[int] = None
    rows_processed: Optional[int] = None
    elapsed_time_millis: Optional[int] = None
    queued_time_millis: Optional[int] = None
    cumulative_user_memory: Optional[float] = None
    total_cpu_time_millis: Optional[int] = None
    query_wall_time_millis: Optional[int] = None
    progress_percentage: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatementStats":
        return cls(
            state=data.get("state"),
            queued=data.get("queued"),
            scheduled=data.get("scheduled"),
            nodes=data.get("nodes"),
            total_splits=data.get("totalSplits"),
            queued_splits=data.get("queuedSplits"),
            running_splits=data.get("runningSplits"),
            completed_splits=data.get("completedSplits"),
            bytes_processed=data.get("processedBytes", data.get("bytesProcessed")),
            rows_processed=data.get("processedRows", data.get("rowsProcessed")),
            elapsed_time_millis=data.get("elapsedTimeMillis"),
            queued_time_millis=data.get("queuedTimeMillis"),
            cumulative_user_memory=data.get("cumulativeUserMemory"),
            total_cpu_time_millis=data.get(
                "cpuTimeMillis", data.get("totalCpuTimeMillis")
            ),
            query_wall_time_millis=data.get(
                "wallTimeMillis", data.get("queryWallTimeMillis")
            ),
            progress_percentage=data.get("progressPercentage"),
        )
