from relay.blobs.blob_model import *
from relay.blobs.blob_store import BlobStore, StagedBlob, BlobStoreError, BlobNotFound

class MemoryStagedBlob(StagedBlob):
    def __init__(self, blob_id:BlobId, data:bytes):
        super().__init__(blob_id, len(data))
        self.data = data

    def discard(self) -> None:
        self.data = None

class MemoryBlobStore(BlobStore):
    #no locking needed here, because all the dict operations used here are atomic
    _store:dict[BlobId, bytes]

    def __init__(self):
        super().__init__()
        self._store = {}

    async def stage(self, data:bytes) -> StagedBlob:
        return self.stage_sync(data)

    async def commit(self, staged:StagedBlob) -> BlobId:
        return self.commit_sync(staged)

    async def load(self, blob_id:BlobId) -> bytes:
        return self.load_sync(blob_id)

    async def exists(self, blob_id:BlobId) -> bool:
        return self.exists_sync(blob_id)

    def stage_sync(self, data:bytes) -> StagedBlob:
        return MemoryStagedBlob(get_blob_id(data), bytes(data))

    def commit_sync(self, staged:StagedBlob) -> BlobId:
        if(not isinstance(staged, MemoryStagedBlob)):
            raise TypeError(f"staged must be of type MemoryStagedBlob, not '{type(staged)}'.")
        if(staged.data is None):
            raise BlobStoreError(f"Staged blob ({staged.blob_id}) was already committed or discarded.")
        self._store.setdefault(staged.blob_id, staged.data)
        staged.discard()
        return staged.blob_id

    def load_sync(self, blob_id:BlobId) -> bytes:
        data = self._store.get(blob_id)
        if data is None:
            raise BlobNotFound(blob_id)
        return data

    def exists_sync(self, blob_id:BlobId) -> bool:
        return blob_id in self._store

    def count_sync(self) -> int:
        return len(self._store)
