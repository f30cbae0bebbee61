from . memory_blob_store import MemoryBlobStore
__all__ = ['MemoryBlobStore']
