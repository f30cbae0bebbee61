from abc import ABC, abstractmethod
from relay.blobs.blob_model import BlobId

class BlobStoreError(Exception):
    """Base class for failures of the underlying blob storage."""
    pass

class BlobNotFound(BlobStoreError):
    def __init__(self, blob_id:BlobId):
        super().__init__(f"Blob ({blob_id}) not found.")
        self.blob_id = blob_id

class BlobCorrupted(BlobStoreError):
    def __init__(self, blob_id:BlobId, actual_id:BlobId):
        super().__init__(f"Blob ({blob_id}) is corrupted, its content hashes to ({actual_id}).")
        self.blob_id = blob_id
        self.actual_id = actual_id

class StagedBlob(ABC):
    """Bytes that have been written to temporary storage and hashed, but are not yet visible under their blob id.
    
    A staged blob is either committed to the store, or discarded. Discarding is idempotent, 
    and discarding after a commit is a no-op."""
    blob_id:BlobId
    size:int

    def __init__(self, blob_id:BlobId, size:int):
        self.blob_id = blob_id
        self.size = size

    @abstractmethod
    def discard(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.blob_id}, {self.size} bytes)"

class BlobLoader(ABC):
    """Interface for loading blobs from the content-addressed store."""
    @abstractmethod
    async def load(self, blob_id:BlobId) -> bytes:
        pass

    @abstractmethod
    def load_sync(self, blob_id:BlobId) -> bytes:
        pass

    @abstractmethod
    async def exists(self, blob_id:BlobId) -> bool:
        pass

    @abstractmethod
    def exists_sync(self, blob_id:BlobId) -> bool:
        pass

class BlobStore(BlobLoader, ABC):
    """Interface for persisting blobs in the content-addressed store.

    Storing is idempotent: if a blob with the same id already exists, the new bytes are discarded 
    and the existing id is returned."""
    @abstractmethod
    async def stage(self, data:bytes) -> StagedBlob:
        pass

    @abstractmethod
    def stage_sync(self, data:bytes) -> StagedBlob:
        pass

    @abstractmethod
    async def commit(self, staged:StagedBlob) -> BlobId:
        pass

    @abstractmethod
    def commit_sync(self, staged:StagedBlob) -> BlobId:
        pass

    async def store(self, data:bytes) -> BlobId:
        staged = await self.stage(data)
        try:
            return await self.commit(staged)
        finally:
            staged.discard()

    def store_sync(self, data:bytes) -> BlobId:
        staged = self.stage_sync(data)
        try:
            return self.commit_sync(staged)
        finally:
            staged.discard()
