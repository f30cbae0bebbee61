import os
import asyncio
import logging
import tempfile
import threading
import aiofiles
from functools import lru_cache
from async_lru import alru_cache
from relay.blobs.blob_model import *
from relay.blobs.blob_store import BlobStore, StagedBlob, BlobStoreError, BlobNotFound, BlobCorrupted

logger = logging.getLogger(__name__)

_STAGING_PREFIX = "upload-"
_STAGING_SUFFIX = ".tmp"

class FileStagedBlob(StagedBlob):
    def __init__(self, blob_id:BlobId, size:int, path:str):
        super().__init__(blob_id, size)
        self.path = path

    def is_discarded(self) -> bool:
        return self.path is None

    def discard(self) -> None:
        if(self.path is None):
            return
        path = self.path
        self.path = None
        try:
            os.remove(path)
        except FileNotFoundError:
            pass

    def _consume(self) -> str:
        path = self.path
        self.path = None
        return path

class FileBlobStore(BlobStore):
    # blobs are immutable, so reads never need the locks, only the placement of a staged file does
    # to share the store between sync and async code, a retrant lock is needed
    # the event loop, when executing coroutines, can re-enter, but other threads can't
    _thread_lock:threading.RLock
    # however, to coordinate the async coroutines, also a async lock is needed
    _async_lock:asyncio.Lock

    def __init__(self, store_path:str):
        super().__init__()
        self._thread_lock = threading.RLock()
        self._async_lock = asyncio.Lock()
        self.store_path = store_path
        self.blobs_path = os.path.join(store_path, 'blobs')
        self.staging_path = os.path.join(store_path, 'staging')
        #ensure that the paths exists
        os.makedirs(self.blobs_path, exist_ok=True)
        os.makedirs(self.staging_path, exist_ok=True)

    #=========================================================
    # Staging
    #=========================================================
    async def stage(self, data:bytes) -> FileStagedBlob:
        path = self._new_staging_path()
        try:
            async with aiofiles.open(path, 'wb') as f:
                await f.write(data)
                await f.flush()
                os.fsync(f.fileno())
        except BaseException:
            _remove_quietly(path)
            raise
        return FileStagedBlob(get_blob_id(data), len(data), path)

    def stage_sync(self, data:bytes) -> FileStagedBlob:
        path = self._new_staging_path()
        try:
            with open(path, 'wb') as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
        except BaseException:
            _remove_quietly(path)
            raise
        return FileStagedBlob(get_blob_id(data), len(data), path)

    def _new_staging_path(self) -> str:
        fd, path = tempfile.mkstemp(prefix=_STAGING_PREFIX, suffix=_STAGING_SUFFIX, dir=self.staging_path)
        os.close(fd)
        return path

    def staged_files(self) -> list[str]:
        """Lists staging files that were never committed or discarded, e.g. because the process was killed mid-upload."""
        return sorted(
            os.path.join(self.staging_path, name) for name in os.listdir(self.staging_path)
            if name.startswith(_STAGING_PREFIX) and name.endswith(_STAGING_SUFFIX))

    def sweep_staging(self) -> int:
        """Deletes leftover staging files. Must not be called while the server is accepting uploads."""
        count = 0
        for path in self.staged_files():
            _remove_quietly(path)
            count += 1
        if(count > 0):
            logger.info(f"Removed {count} leftover staging file(s) from {self.staging_path}")
        return count

    #=========================================================
    # Commit
    #=========================================================
    async def commit(self, staged:StagedBlob) -> BlobId:
        staged = self._validate_staged(staged)
        with self._thread_lock:
            async with self._async_lock:
                return self._place(staged)

    def commit_sync(self, staged:StagedBlob) -> BlobId:
        staged = self._validate_staged(staged)
        with self._thread_lock:
            return self._place(staged)

    def _validate_staged(self, staged:StagedBlob) -> FileStagedBlob:
        if(not isinstance(staged, FileStagedBlob)):
            raise TypeError(f"staged must be of type FileStagedBlob, not '{type(staged)}'.")
        if(staged.is_discarded()):
            raise BlobStoreError(f"Staged blob ({staged.blob_id}) was already committed or discarded.")
        return staged

    def _place(self, staged:FileStagedBlob) -> BlobId:
        blob_path = self._to_path(staged.blob_id)
        #the blob is already there, the staged bytes are identical, so just drop them
        if os.path.exists(blob_path):
            staged.discard()
            return staged.blob_id
        os.replace(staged._consume(), blob_path)
        #the rename is only durable once the directory entry is synced too
        _fsync_dir(self.blobs_path)
        logger.debug(f"Stored blob {staged.blob_id} ({staged.size} bytes)")
        return staged.blob_id

    #=========================================================
    # Load
    #=========================================================
    @alru_cache(maxsize=256)
    async def load(self, blob_id:BlobId) -> bytes:
        blob_path = self._to_path(blob_id)
        try:
            async with aiofiles.open(blob_path, 'rb') as f:
                data = await f.read()
        except FileNotFoundError:
            raise BlobNotFound(blob_id) from None
        return _verify(blob_id, data)

    @lru_cache(maxsize=256)  # noqa: B019
    def load_sync(self, blob_id:BlobId) -> bytes:
        blob_path = self._to_path(blob_id)
        try:
            with open(blob_path, 'rb') as f:
                data = f.read()
        except FileNotFoundError:
            raise BlobNotFound(blob_id) from None
        return _verify(blob_id, data)

    async def exists(self, blob_id:BlobId) -> bool:
        return self.exists_sync(blob_id)

    def exists_sync(self, blob_id:BlobId) -> bool:
        return os.path.exists(self._to_path(blob_id))

    def count_sync(self) -> int:
        return sum(1 for name in os.listdir(self.blobs_path) if is_blob_id(name))

    def _to_path(self, blob_id:BlobId) -> str:
        if(not is_blob_id(blob_id)):
            raise ValueError(f"blob_id is not a sha256 hex digest: '{blob_id}'.")
        return os.path.join(self.blobs_path, blob_id)

def _verify(blob_id:BlobId, data:bytes) -> bytes:
    actual_id = get_blob_id(data)
    if(actual_id != blob_id):
        raise BlobCorrupted(blob_id, actual_id)
    return data

def _remove_quietly(path:str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass

def _fsync_dir(path:str) -> None:
    fd = os.open(path, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)
