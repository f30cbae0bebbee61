from . blob_model import *
from . blob_store import BlobLoader, BlobStore, StagedBlob, BlobStoreError, BlobNotFound, BlobCorrupted
