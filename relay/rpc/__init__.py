from . errors import *
from . params import *
from . request_context import RequestContext, RequestLogger, NO_CONTEXT
from . relay_service import RelayService
from . dispatcher import MethodDispatcher, RpcCall, parse_call, result_response, error_response, JSONRPC_VERSION
