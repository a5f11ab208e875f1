from dataclasses import dataclass
from enum import Enum
import logging

logger = logging.getLogger(__name__)


# Enums for HTTP Methods
class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"


# HTTP request headers
class HttpHeader(str, Enum):
    CONTENT_TYPE = "Content-Type"
    USER_AGENT = "User-Agent"
    ACCEPT_ENCODING = "Accept-Encoding"


@dataclass
class HttpResponse:
    """Status line and fully read body of one HTTP exchange."""

    status: int
    reason: str
    data: bytes

    @property
    def is_error(self) -> bool:
        return self.status >= 400
