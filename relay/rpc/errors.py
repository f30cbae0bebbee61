# Error taxonomy of the relay's JSON-RPC API.
# The codes and messages are part of the protocol, clients match on them, so never renumber.
# Domain errors are never retried, they are reported to the caller as JSON-RPC error objects.

class RpcError(Exception):
    code:int = -32603
    message:str = "Internal error"

    def __init__(self, data:dict|None=None):
        super().__init__(self.message)
        self.data = data

    def to_dict(self) -> dict:
        error = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code}, {self.message!r})"

#=========================================================
# JSON-RPC 2.0 protocol errors
#=========================================================
class ParseError(RpcError):
    code = -32700
    message = "Parse error"

class InvalidRequest(RpcError):
    code = -32600
    message = "Invalid Request"

class MethodNotFound(RpcError):
    code = -32601
    message = "Method not found"

class InvalidParams(RpcError):
    code = -32602
    message = "Invalid params"

class InternalError(RpcError):
    code = -32603
    message = "Internal error"

#=========================================================
# Conflicts
#=========================================================
class CannotChangeAck(RpcError):
    code = -100
    message = "Cannot change ACK"

class CannotChangeUploadedFile(RpcError):
    code = -101
    message = "Cannot change uploaded file"

#=========================================================
# Invalid parameters
#=========================================================
class InvalidAck(RpcError):
    code = -200
    message = "Invalid ACK"

class InvalidAttachmentID(RpcError):
    code = -201
    message = "Invalid attachment ID"

class InvalidRecipientID(RpcError):
    code = -202
    message = "Invalid recipient ID"

class InvalidTxid(RpcError):
    code = -203
    message = "Invalid TXID"

class InvalidVout(RpcError):
    code = -204
    message = "Invalid vout"

#=========================================================
# Missing parameters
#=========================================================
class MissingAck(RpcError):
    code = -300
    message = "Missing ACK"

class MissingAttachmentID(RpcError):
    code = -301
    message = "Missing attachment ID"

class MissingRecipientID(RpcError):
    code = -302
    message = "Missing recipient ID"

class MissingFile(RpcError):
    code = -303
    message = "Missing file"

class MissingTxid(RpcError):
    code = -304
    message = "Missing TXID"

#=========================================================
# Not found
#=========================================================
class NotFoundConsignment(RpcError):
    code = -400
    message = "Consignment file not found"

class NotFoundMedia(RpcError):
    code = -401
    message = "Media file not found"
