"""Middleware that assigns and propagates a request identifier.

Every incoming HTTP request receives a request id, read from the
``X-Request-ID`` header when the client provides one and generated
(UUIDv4) otherwise. The id is stored on the request object and in a
context variable so that log filters and outgoing HTTP clients can pick it
up without passing it explicitly. Responses echo it back in the
``X-Request-ID`` header.
"""

import uuid
import contextvars

from django.utils.deprecation import MiddlewareMixin

REQUEST_ID_CTX = contextvars.ContextVar("request_id", default="-")


class RequestIdMiddleware(MiddlewareMixin):
    """Django middleware that sets and returns a per-request identifier.

    Attributes:
        HEADER (str): The incoming header name in ``request.META`` casing.
        RESPONSE_HEADER (str): The header returned on responses.
    """

    HEADER = "HTTP_X_REQUEST_ID"
    RESPONSE_HEADER = "X-Request-ID"

    def process_request(self, request):
        rid = request.META.get(self.HEADER)
        if not rid:
            rid = str(uuid.uuid4())
        request.request_id = rid
        request._request_id_token = REQUEST_ID_CTX.set(rid)

    def process_response(self, request, response):
        """Add the request id header to the response and reset the context.

        Prefers the id attached to the request and falls back to the
        ContextVar value (e.g. when an earlier middleware short-circuited).
        """
        rid = getattr(request, "request_id", REQUEST_ID_CTX.get())
        response[self.RESPONSE_HEADER] = rid
        token = getattr(request, "_request_id_token", None)
        if token is not None:
            REQUEST_ID_CTX.reset(token)
        return response
