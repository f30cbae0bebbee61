import logging
from dataclasses import dataclass

# Per request values that only matter for logging. 
# The context is created by the transport and handed down explicitly, there is no global request state.

@dataclass(frozen=True)
class RequestContext:
    request_id:str
    client:str|None = None

    def bind(self, logger:logging.Logger) -> "RequestLogger":
        return RequestLogger(logger, self)

class RequestLogger(logging.LoggerAdapter):
    """Prefixes every message with the id of the request, and adds the id to the log record as 'req_id'."""
    def __init__(self, logger:logging.Logger, context:RequestContext):
        super().__init__(logger, {"req_id": context.request_id})
        self.context = context

    def process(self, msg, kwargs):
        extra = kwargs.get("extra") or {}
        kwargs["extra"] = {**extra, **self.extra}
        return f"[{self.context.request_id}] {msg}", kwargs

NO_CONTEXT = RequestContext("-")
