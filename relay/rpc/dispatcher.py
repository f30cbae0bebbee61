import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, NamedTuple
from relay.blobs import StagedBlob
from relay.rpc.errors import *
from relay.rpc.params import *
from relay.rpc.relay_service import RelayService
from relay.rpc.request_context import RequestContext, NO_CONTEXT

# JSON-RPC 2.0 method table of the relay.
# Turns a decoded request object into exactly one response object (or none for a notification).
# Every error is answered here, nothing but the response leaves the dispatcher.

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"

@dataclass
class RpcCall:
    method:str
    params:Params
    id:Any = None
    is_notification:bool = False
    #the uploaded file, already staged in the blob store, if there is one
    upload:StagedBlob|None = None
    #whether the params came from multipart form fields (where every value is a string)
    from_form:bool = False

class MethodEntry(NamedTuple):
    parser:ParamsParser
    handler:Callable[..., Awaitable[Any]]
    takes_upload:bool

def parse_call(payload:Any, upload:StagedBlob|None=None, from_form:bool=False) -> RpcCall:
    '''Validates the JSON-RPC envelope of a single request. Raises InvalidRequest.'''
    if not isinstance(payload, dict):
        raise InvalidRequest()
    if payload.get("jsonrpc") != JSONRPC_VERSION:
        raise InvalidRequest()
    method = payload.get("method")
    if not isinstance(method, str) or len(method) == 0:
        raise InvalidRequest()
    is_notification = "id" not in payload
    request_id = payload.get("id")
    if request_id is not None and (isinstance(request_id, bool) or not isinstance(request_id, (str, int, float))):
        raise InvalidRequest()
    return RpcCall(
        method=method,
        params=payload.get("params"),
        id=request_id,
        is_notification=is_notification,
        upload=upload,
        from_form=from_form)

def result_response(request_id:Any, result:Any) -> dict:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}

def error_response(request_id:Any, error:RpcError) -> dict:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error.to_dict()}

class MethodDispatcher:
    def __init__(self, service:RelayService):
        self.service = service
        self._methods = {
            "server.info": MethodEntry(parse_no_args, service.server_info, False),
            "consignment.get": MethodEntry(parse_recipient_args, service.get_consignment, False),
            "consignment.post": MethodEntry(parse_consignment_post_args, service.post_consignment, True),
            "media.get": MethodEntry(parse_attachment_args, service.get_media, False),
            "media.post": MethodEntry(parse_attachment_args, service.post_media, True),
            "ack.get": MethodEntry(parse_recipient_args, service.get_ack, False),
            "ack.post": MethodEntry(parse_ack_post_args, service.post_ack, False),
        }

    async def handle(self, payload:Any, context:RequestContext=NO_CONTEXT, 
                     upload:StagedBlob|None=None, from_form:bool=False) -> dict | list[dict] | None:
        '''Handles a decoded request body, which is a single request or a batch. 
        
        Returns the response body, or None if nothing must be sent back.'''
        if isinstance(payload, list):
            if upload is not None:
                upload.discard()
            if len(payload) == 0:
                return error_response(None, InvalidRequest())
            responses = []
            for item in payload:
                response = await self.handle_one(item, context)
                if response is not None:
                    responses.append(response)
            return responses if len(responses) > 0 else None
        return await self.handle_one(payload, context, upload, from_form)

    async def handle_one(self, payload:Any, context:RequestContext=NO_CONTEXT,
                         upload:StagedBlob|None=None, from_form:bool=False) -> dict | None:
        try:
            call = parse_call(payload, upload, from_form)
        except InvalidRequest as e:
            if upload is not None:
                upload.discard()
            context.bind(logger).info(f"Invalid request: {e.message}")
            return error_response(None, e)
        return await self.dispatch(call, context)

    async def dispatch(self, call:RpcCall, context:RequestContext=NO_CONTEXT) -> dict | None:
        log = context.bind(logger)
        try:
            result = await self._invoke(call)
            response = result_response(call.id, result)
            log.debug(f"{call.method} -> {result!r}"[:200])
        except RpcError as e:
            log.info(f"{call.method} failed: {e.code} {e.message}")
            response = error_response(call.id, e)
        except Exception:
            #storage faults are not the caller's fault, they are fatal for this request only
            log.exception(f"{call.method} failed with an internal error")
            response = error_response(call.id, InternalError())
        finally:
            #the staged upload is either committed by now, or garbage
            if call.upload is not None:
                call.upload.discard()
        if call.is_notification:
            return None
        return response

    async def _invoke(self, call:RpcCall) -> Any:
        entry = self._methods.get(call.method)
        if entry is None:
            raise MethodNotFound({"method": call.method})
        params = call.params if call.params is not None else {}
        if not isinstance(params, dict):
            raise InvalidParams()
        args = entry.parser(params, call.from_form)
        if entry.takes_upload:
            if call.upload is None:
                raise MissingFile(params)
            return await entry.handler(args, call.upload)
        return await entry.handler(args)
