from __future__ import annotations

import logging
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Iterator,
    Optional,
    Sequence,
    Type,
    TypeVar,
    Union,
    overload,
)

from trino_sql_client.exc import NotFound, OutOfRange, TypeMismatch

if TYPE_CHECKING:
    from trino_sql_client.backend.models.base import Column

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_instance(value: Any, expected_type: type) -> bool:
    # bool subclasses int, but a boolean cell is never a number
    if isinstance(value, bool) and issubclass(expected_type, int):
        return expected_type is bool
    return isinstance(value, expected_type)


class SSLOptions:
    tls_verify: bool
    tls_verify_hostname: bool
    tls_trusted_ca_file: Optional[str]
    tls_client_cert_file: Optional[str]
    tls_client_cert_key_file: Optional[str]
    tls_client_cert_key_password: Optional[str]

    def __init__(
        self,
        tls_verify: bool = True,
        tls_verify_hostname: bool = True,
        tls_trusted_ca_file: Optional[str] = None,
        tls_client_cert_file: Optional[str] = None,
        tls_client_cert_key_file: Optional[str] = None,
        tls_client_cert_key_password: Optional[str] = None,
    ):
        self.tls_verify = tls_verify
        self.tls_verify_hostname = tls_verify_hostname
        self.tls_trusted_ca_file = tls_trusted_ca_file
        self.tls_client_cert_file = tls_client_cert_file
        self.tls_client_cert_key_file = tls_client_cert_key_file
        self.tls_client_cert_key_password = tls_client_cert_key_password


class Row:
    """
    A single row of a query result, paired with the column metadata of the query.

    Values can be read by 0-based position or by column name. Name lookup is
    case-insensitive. Typed access via ``get_value(key, expected_type)`` is a checked
    narrowing: the stored value is returned unchanged when it already is an instance
    of ``expected_type`` and ``TypeMismatch`` is raised otherwise. ``None`` passes
    any type check.

    Example:
        >>> row.get_value("ID")
        1
        >>> row.get_value("id", int)
        1
        >>> row["name"]
        'Alice'
    """

    __slots__ = ("_columns", "_values", "_column_index")

    def __init__(self, columns: Sequence[Column], values: Sequence[Any]):
        self._columns = columns
        self._values = values
        # on duplicate names the last column wins
        self._column_index: Dict[str, int] = {
            column.name.lower(): i for i, column in enumerate(columns)
        }

    @overload
    def get_value(self, key: Union[int, str]) -> Any:
        ...

    @overload
    def get_value(self, key: Union[int, str], expected_type: Type[T]) -> Optional[T]:
        ...

    def get_value(self, key, expected_type=None):
        if isinstance(key, str):
            value = self._values[self._index_of(key)]
        else:
            value = self._value_at(key)

        if expected_type is None or value is None:
            return value
        if _is_instance(value, expected_type):
            return value
        raise TypeMismatch(
            "Cannot cast {} to {}".format(
                type(value).__name__, expected_type.__name__
            ),
            {"column": key, "value-type": type(value).__name__},
        )

    def _value_at(self, index: int) -> Any:
        # bool is an int subclass but never a valid position
        if isinstance(index, bool) or not isinstance(index, int):
            raise OutOfRange("Column index must be an integer: {!r}".format(index))
        if index < 0 or index >= len(self._values):
            raise OutOfRange("Column index out of bounds: {}".format(index))
        return self._values[index]

    def _index_of(self, column_name: str) -> int:
        index = self._column_index.get(column_name.lower())
        if index is None or index >= len(self._values):
            raise NotFound("Column not found: {}".format(column_name))
        return index

    @property
    def values(self) -> Sequence[Any]:
        return self._values

    @property
    def columns(self) -> Sequence[Column]:
        return self._columns

    @property
    def column_count(self) -> int:
        return len(self._values)

    def as_dict(self) -> Dict[str, Any]:
        return {
            column.name: value for column, value in zip(self._columns, self._values)
        }

    def __getitem__(self, key: Union[int, str]) -> Any:
        return self.get_value(key)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __eq__(self, other) -> bool:
        if isinstance(other, Row):
            return list(self._values) == list(other._values)
        return NotImplemented

    def __repr__(self) -> str:
        fields = ", ".join(
            "{}={!r}".format(column.name, value)
            for column, value in zip(self._columns, self._values)
        )
        return "Row({})".format(fields)
