import dataclasses
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, FrozenSet
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "trino-python-client"
STATEMENT_PATH = "/v1/statement"


def _freeze_mapping(value: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return MappingProxyType(dict(value or {}))


@dataclass(frozen=True)
class ClientSession:
    """
    Immutable connection and query context shared by every request of a statement.

    Instances are plain values: two sessions with the same fields are equal. Use
    ``with_property``, ``with_credential`` and ``with_client_tag`` (or
    ``dataclasses.replace``) to derive a modified copy.

    Args:
        server: Base URL of the coordinator, e.g. ``http://localhost:8080``
        user: User the queries run as (sent on every request)
        source: Client source tag (sent on every request)
        catalog: Default catalog
        schema: Default schema
        client_tags: Tags used for resource group selection
        properties: Session properties, sent one header per entry, in order
        credentials: Extra credentials, sent one header per entry
        time_zone: Session time zone, e.g. ``UTC``
        locale: Session language, e.g. ``en_US``
        compression_disabled: When True, ask the server not to compress responses
    """

    server: str
    user: str
    source: str = DEFAULT_SOURCE
    catalog: Optional[str] = None
    schema: Optional[str] = None
    client_tags: FrozenSet[str] = field(default_factory=frozenset)
    properties: Mapping[str, str] = field(default_factory=dict)
    credentials: Mapping[str, str] = field(default_factory=dict)
    time_zone: Optional[str] = None
    locale: Optional[str] = None
    compression_disabled: Optional[bool] = None

    def __post_init__(self):
        parsed = urlparse(self.server or "")
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(
                "Invalid server URL {!r}: expected http(s)://host[:port]".format(
                    self.server
                )
            )
        if not self.user:
            raise ValueError("user is required")

        # frozen dataclass, so normalise through object.__setattr__
        object.__setattr__(self, "server", self.server.rstrip("/"))
        object.__setattr__(self, "client_tags", frozenset(self.client_tags or ()))
        object.__setattr__(self, "properties", _freeze_mapping(self.properties))
        object.__setattr__(self, "credentials", _freeze_mapping(self.credentials))

    def __hash__(self):
        return hash(
            (
                self.server,
                self.user,
                self.source,
                self.catalog,
                self.schema,
                self.client_tags,
                frozenset(self.properties.items()),
                frozenset(self.credentials.items()),
                self.time_zone,
                self.locale,
                self.compression_disabled,
            )
        )

    @property
    def statement_uri(self) -> str:
        return self.server + STATEMENT_PATH

    def with_property(self, key: str, value: str) -> "ClientSession":
        return dataclasses.replace(self, properties={**self.properties, key: value})

    def with_credential(self, key: str, value: str) -> "ClientSession":
        return dataclasses.replace(self, credentials={**self.credentials, key: value})

    def with_client_tag(self, tag: str) -> "ClientSession":
        return dataclasses.replace(self, client_tags=self.client_tags | {tag})

    def with_client_tags(self, tags: Iterable[str]) -> "ClientSession":
        return dataclasses.replace(self, client_tags=self.client_tags | set(tags))
