import hashlib
import string

# Type aliases and helpers for the content-addressed blob store.
# A blob is just bytes; its id is the lowercase sha256 hex digest of those bytes.

BlobId = str #64 hex chars, sha256 of the blob bytes

_ID_STR_LEN = 64

def get_blob_id(data:bytes | bytearray) -> BlobId:
    return hashlib.sha256(data).hexdigest()

def is_blob_id(blob_id:BlobId) -> bool:
    return (isinstance(blob_id, str) and len(blob_id) == _ID_STR_LEN 
        and all(c in string.hexdigits for c in blob_id) and blob_id == blob_id.lower())
