"""
Protocol request headers derived from a ``ClientSession``.
"""

from enum import Enum
from typing import List, Tuple

from trino_sql_client.session import ClientSession


class ProtocolHeader(str, Enum):
    USER = "X-Trino-User"
    SOURCE = "X-Trino-Source"
    CATALOG = "X-Trino-Catalog"
    SCHEMA = "X-Trino-Schema"
    CLIENT_TAGS = "X-Trino-Client-Tags"
    TIME_ZONE = "X-Trino-Time-Zone"
    LANGUAGE = "X-Trino-Language"
    SESSION = "X-Trino-Session"
    EXTRA_CREDENTIAL = "X-Trino-Extra-Credential"


def build_protocol_headers(session: ClientSession) -> List[Tuple[str, str]]:
    """
    Build the protocol headers sent with every request of a statement.

    Headers are returned as an ordered list of (name, value) pairs because
    session properties and extra credentials repeat their header name once per
    entry. Optional headers are left out when the session field is empty.
    """

    headers: List[Tuple[str, str]] = [
        (ProtocolHeader.USER.value, session.user),
        (ProtocolHeader.SOURCE.value, session.source),
    ]

    if session.catalog:
        headers.append((ProtocolHeader.CATALOG.value, session.catalog))
    if session.schema:
        headers.append((ProtocolHeader.SCHEMA.value, session.schema))
    if session.client_tags:
        headers.append(
            (ProtocolHeader.CLIENT_TAGS.value, ",".join(sorted(session.client_tags)))
        )
    if session.time_zone:
        headers.append((ProtocolHeader.TIME_ZONE.value, session.time_zone))
    if session.locale:
        headers.append((ProtocolHeader.LANGUAGE.value, session.locale))

    for key, value in session.properties.items():
        headers.append((ProtocolHeader.SESSION.value, f"{key}={value}"))
    for key, value in session.credentials.items():
        headers.append((ProtocolHeader.EXTRA_CREDENTIAL.value, f"{key}={value}"))

    if session.compression_disabled:
        headers.append(("Accept-Encoding", "identity"))

    return headers
