import itertools
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from relay.rpc.request_context import RequestContext

# Assigns an id to every request, so that all log lines of a request can be correlated.
# A client (or a proxy in front of the relay) can choose the id by setting the header itself.

logger = logging.getLogger(__name__)

REQ_ID_HEADER = "logger-req-id"

class RequestIdMiddleware(BaseHTTPMiddleware):
    def __init__(self, app):
        super().__init__(app)
        self._counter = itertools.count(1)

    async def dispatch(self, request:Request, call_next):
        request_id = request.headers.get(REQ_ID_HEADER)
        if(request_id is None or len(request_id) == 0):
            request_id = str(next(self._counter))
        context = RequestContext(request_id, _client_address(request))
        request.state.context = context

        log = context.bind(logger)
        user_agent = request.headers.get("user-agent", "")
        log.info(f"-> {context.client or ''} {request.method} {request.url.path} {user_agent}")
        response = await call_next(request)
        response.headers[REQ_ID_HEADER] = request_id
        log.info(f"<- {response.status_code}")
        return response

def _client_address(request:Request) -> str|None:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for
    if request.client is not None:
        return request.client.host
    return None
