from dataclasses import dataclass
from typing import Any, Callable
from relay.rpc.errors import *

# Parsing of the untyped JSON-RPC params object into one typed argument struct per method.
# All params are parsed before any storage access. 
# A missing field and a field of the wrong type are different errors.
#
# Multipart form fields are always strings, so calls that arrive as forms ('from_form') 
# also accept the canonical text form of integers and booleans.

Params = dict[str, Any]

@dataclass(frozen=True)
class NoArgs:
    pass

@dataclass(frozen=True)
class RecipientArgs:
    recipient_id:str

@dataclass(frozen=True)
class AttachmentArgs:
    attachment_id:str

@dataclass(frozen=True)
class ConsignmentPostArgs:
    recipient_id:str
    txid:str
    vout:int|None = None

@dataclass(frozen=True)
class AckPostArgs:
    recipient_id:str
    ack:bool

Args = NoArgs | RecipientArgs | AttachmentArgs | ConsignmentPostArgs | AckPostArgs

ParamsParser = Callable[[Params, bool], Args]

def parse_no_args(params:Params, from_form:bool=False) -> NoArgs:
    return NoArgs()

def parse_recipient_args(params:Params, from_form:bool=False) -> RecipientArgs:
    return RecipientArgs(_required_str(params, "recipient_id", MissingRecipientID, InvalidRecipientID))

def parse_attachment_args(params:Params, from_form:bool=False) -> AttachmentArgs:
    return AttachmentArgs(_required_str(params, "attachment_id", MissingAttachmentID, InvalidAttachmentID))

def parse_consignment_post_args(params:Params, from_form:bool=False) -> ConsignmentPostArgs:
    recipient_id = _required_str(params, "recipient_id", MissingRecipientID, InvalidRecipientID)
    txid = _required_str(params, "txid", MissingTxid, InvalidTxid)
    vout = _optional_vout(params, from_form)
    return ConsignmentPostArgs(recipient_id, txid, vout)

def parse_ack_post_args(params:Params, from_form:bool=False) -> AckPostArgs:
    recipient_id = _required_str(params, "recipient_id", MissingRecipientID, InvalidRecipientID)
    ack = _required_ack(params, from_form)
    return AckPostArgs(recipient_id, ack)

def _is_absent(value:Any) -> bool:
    return value is None or (isinstance(value, str) and len(value) == 0)

def _required_str(params:Params, name:str, missing:type[RpcError], invalid:type[RpcError]) -> str:
    value = params.get(name)
    if _is_absent(value):
        raise missing(params)
    if not isinstance(value, str):
        raise invalid(params)
    return value

def _optional_vout(params:Params, from_form:bool) -> int|None:
    value = params.get("vout")
    if _is_absent(value):
        return None
    #bool is a subclass of int, but 'true' is not an output index
    if isinstance(value, bool):
        raise InvalidVout(params)
    if isinstance(value, int):
        if value < 0:
            raise InvalidVout(params)
        return value
    if from_form and isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    raise InvalidVout(params)

def _required_ack(params:Params, from_form:bool) -> bool:
    value = params.get("ack")
    #'false' is a valid value here, so only a truly absent field is missing
    if value is None or value == "":
        raise MissingAck(params)
    if isinstance(value, bool):
        return value
    if from_form and value in ("true", "false"):
        return value == "true"
    raise InvalidAck(params)
