import uuid
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware:
    """Binds a correlation ID to every log line emitted during a request.

    The ID comes from the ``X-Request-ID`` header or, when absent, a fresh
    UUID4.  It lives in structlog's context vars for the duration of the
    request and is echoed back in the ``X-Request-ID`` response header.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)

        logger.info("request_started", method=request.method, path=request.path)
        try:
            response = self.get_response(request)
            logger.info(
                "request_finished",
                method=request.method,
                path=request.path,
                status_code=response.status_code,
            )
            response[REQUEST_ID_HEADER] = cid
            return response
        finally:
            structlog.contextvars.clear_contextvars()
