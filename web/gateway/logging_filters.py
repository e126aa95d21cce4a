"""Logging filters for enriching log records with request context.

Adding ``RequestIdFilter`` to a handler makes ``%(request_id)s`` available
to formatters without touching individual log statements.
"""

from logging import Filter, LogRecord
from .middleware import REQUEST_ID_CTX


class RequestIdFilter(Filter):
    """Attach a ``request_id`` attribute to log records.

    The value comes from ``REQUEST_ID_CTX``; outside a request it is a
    hyphen ("-"). A ``request_id`` passed explicitly via ``extra`` wins.
    """

    def filter(self, record: LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = REQUEST_ID_CTX.get()
        return True
