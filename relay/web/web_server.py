import json
import logging
import re
import uvicorn
from starlette.applications import Starlette
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import Response, PlainTextResponse, JSONResponse
from starlette.routing import Route
from relay.blobs import BlobStore, StagedBlob
from relay.rpc import MethodDispatcher, ParseError, InternalError, error_response, NO_CONTEXT
from .request_id import RequestIdMiddleware, REQ_ID_HEADER

# HTTP transport of the relay's JSON-RPC API.
# It utilizes the Starlette framework (https://www.starlette.io/).
#
# There is a single endpoint, 'POST /json-rpc', which accepts two kinds of bodies:
# 1) 'application/json' with a JSON-RPC request object or a batch
# 2) 'multipart/form-data' (or a urlencoded form) for uploads, with the fields 'jsonrpc', 'id', 'method', 
#    the params as 'params[<name>]' fields (or one 'params' field with a JSON object), and the upload in 'file'
#
# The upload is staged in the blob store before the call is dispatched, and is always
# discarded after the response is produced, unless the call committed it.

logger = logging.getLogger(__name__)

class WebServer:
    __FILE_FIELD = "file"
    __PARAMS_FIELD = "params"
    __PARAMS_ITEM_FIELD = re.compile(r"params\[([^\[\]]+)\]")

    def __init__(self, dispatcher:MethodDispatcher, blob_store:BlobStore):
        self.dispatcher = dispatcher
        self.blob_store = blob_store
        self.server = None

    def app(self) -> Starlette:
        routes = [
            Route('/', self.get_root),
            Route('/json-rpc', self.post_json_rpc, methods=['POST']),
        ]
        middleware = [
            Middleware(CORSMiddleware, allow_origins=['*'], allow_methods=['*'], allow_headers=['*'], expose_headers=[REQ_ID_HEADER]),
            Middleware(RequestIdMiddleware),
        ]
        return Starlette(routes=routes, middleware=middleware)

    async def run(self, host:str="0.0.0.0", port:int=3000, log_level:str="info"):
        #requests are logged by the RequestIdMiddleware, so uvicorn's access log would just duplicate them
        config = uvicorn.Config(app=self.app(), loop="asyncio", host=host, port=port, log_level=log_level.lower(), access_log=False)
        self.server = uvicorn.Server(config)
        await self.server.serve()

    def stop(self):
        if(self.server is not None):
            self.server.should_exit = True

    #=========================
    # Route handlers
    #=========================
    async def get_root(self, request:Request):
        return PlainTextResponse('Relay JSON-RPC API, POST to /json-rpc')

    async def post_json_rpc(self, request:Request):
        assert request.method == "POST"
        context = getattr(request.state, "context", NO_CONTEXT)
        upload:StagedBlob|None = None
        from_form = _is_form(request)
        try:
            if(from_form):
                payload, upload = await self.__read_form(request)
            else:
                payload = await self.__read_json(request)
        except ParseError as e:
            context.bind(logger).info("Request body could not be parsed")
            return JSONResponse(error_response(None, e))
        except Exception:
            context.bind(logger).exception("Request body could not be read or staged")
            return JSONResponse(error_response(None, InternalError()))

        try:
            response = await self.dispatcher.handle(payload, context, upload, from_form)
        finally:
            if(upload is not None):
                upload.discard()
        #only notifications, so nothing to send back
        if(response is None):
            return Response(status_code=204)
        return JSONResponse(response)

    async def __read_json(self, request:Request):
        body = await request.body()
        try:
            return json.loads(body)
        except ValueError:
            raise ParseError() from None

    async def __read_form(self, request:Request) -> tuple[dict, StagedBlob|None]:
        payload = {}
        params = None
        upload = None
        try:
            async with request.form() as form:
                for key, value in form.multi_items():
                    if(isinstance(value, UploadFile)):
                        continue
                    item_match = self.__PARAMS_ITEM_FIELD.fullmatch(key)
                    if(item_match is not None):
                        params = params if params is not None else {}
                        params[item_match.group(1)] = value
                    elif(key == self.__PARAMS_FIELD):
                        params = {**self.__parse_params_field(value), **(params or {})}
                    else:
                        payload[key] = value
                file = form.get(self.__FILE_FIELD)
                #browsers send an empty, nameless part if no file was picked
                if(isinstance(file, UploadFile) and (file.filename or file.size)):
                    data = await file.read()
                    upload = await self.blob_store.stage(data)
        except (HTTPException, MultiPartException):
            #starlette rejects malformed multipart bodies with its own 400
            raise ParseError() from None
        except BaseException:
            #the call is never dispatched, so nothing else discards the upload
            if(upload is not None):
                upload.discard()
            raise
        if(params is not None):
            payload[self.__PARAMS_FIELD] = params
        return payload, upload

    def __parse_params_field(self, value:str) -> dict:
        try:
            params = json.loads(value)
        except ValueError:
            raise ParseError() from None
        if(not isinstance(params, dict)):
            raise ParseError()
        return params

def _is_form(request:Request) -> bool:
    content_type = request.headers.get("content-type", "")
    return content_type.startswith("multipart/form-data") or content_type.startswith("application/x-www-form-urlencoded")
