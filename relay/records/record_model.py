import hashlib
import json
from enum import Enum
from typing import NamedTuple
from relay.blobs.blob_model import BlobId

# Records of the relay. A record points at a blob in the content-addressed store and is never replaced.
# Consignments are keyed by recipient id, media by attachment id.

class Namespace(str, Enum):
    CONSIGNMENTS = "consignments"
    MEDIA = "media"

ConsignmentRecord = NamedTuple("ConsignmentRecord",
    [('recipient_id', str),
     ('digest', BlobId),
     ('txid', str),
     ('vout', int | None),
     ('ack', bool | None)]) #None until the recipient acks or nacks

MediaRecord = NamedTuple("MediaRecord",
    [('attachment_id', str),
     ('digest', BlobId)])

Record = ConsignmentRecord | MediaRecord

_STR_ENCODING = 'utf-8'

def new_consignment(recipient_id:str, digest:BlobId, txid:str, vout:int|None=None) -> ConsignmentRecord:
    return ConsignmentRecord(recipient_id, digest, txid, vout, None)

def new_media(attachment_id:str, digest:BlobId) -> MediaRecord:
    return MediaRecord(attachment_id, digest)

def record_key(record:Record) -> str:
    if isinstance(record, ConsignmentRecord):
        return record.recipient_id
    elif isinstance(record, MediaRecord):
        return record.attachment_id
    else:
        raise TypeError(f"Unknown record type '{type(record)}'.")

def record_namespace(record:Record) -> Namespace:
    if isinstance(record, ConsignmentRecord):
        return Namespace.CONSIGNMENTS
    elif isinstance(record, MediaRecord):
        return Namespace.MEDIA
    else:
        raise TypeError(f"Unknown record type '{type(record)}'.")

def key_to_bytes(key:str) -> bytes:
    # ids are caller supplied and can be of any length, lmdb keys can't
    return hashlib.sha256(key.encode(_STR_ENCODING)).digest()

def record_to_bytes(record:Record) -> bytes:
    return json.dumps(record._asdict(), separators=(',', ':'), sort_keys=True).encode(_STR_ENCODING)

def bytes_to_record(namespace:Namespace, data:bytes) -> Record:
    fields = json.loads(data.decode(_STR_ENCODING))
    if namespace == Namespace.CONSIGNMENTS:
        return ConsignmentRecord(
            fields['recipient_id'],
            fields['digest'],
            fields['txid'],
            fields.get('vout'),
            fields.get('ack'))
    elif namespace == Namespace.MEDIA:
        return MediaRecord(fields['attachment_id'], fields['digest'])
    else:
        raise ValueError(f"Unknown namespace '{namespace}'.")
