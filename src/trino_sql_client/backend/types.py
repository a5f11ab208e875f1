from enum import Enum
import logging

logger = logging.getLogger(__name__)


class QueryState(Enum):
    """
    Enum representing the client-side lifecycle of a submitted statement.

    Attributes:
        RUNNING: The query is still executing or more pages remain to be fetched
        FINISHED: The server signalled completion (successful or failed), or the
            last page has been consumed
        CLIENT_ABORTED: The server reported that the query was cancelled by the client
        CLIENT_ERROR: An HTTP exchange could not be completed locally

    Only RUNNING permits further polling. The other three states are terminal.
    """

    RUNNING = "RUNNING"
    FINISHED = "FINISHED"
    CLIENT_ABORTED = "CLIENT_ABORTED"
    CLIENT_ERROR = "CLIENT_ERROR"

    @property
    def is_terminal(self) -> bool:
        return self is not QueryState.RUNNING
