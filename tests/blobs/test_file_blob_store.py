import os
import stat
import pytest
from relay.blobs import *
from relay.blobs.stores.file import FileBlobStore

async def test_store_and_load(tmp_path):
    blob_store = FileBlobStore(str(tmp_path))
    data = os.urandom(1024)

    blob_id = await blob_store.store(data)
    assert blob_id == get_blob_id(data)
    assert os.path.exists(os.path.join(blob_store.blobs_path, blob_id))
    assert await blob_store.exists(blob_id)
    assert await blob_store.load(blob_id) == data
    assert blob_store.load_sync(blob_id) == data

async def test_store_is_idempotent(tmp_path):
    blob_store = FileBlobStore(str(tmp_path))
    data = b"the same bytes"

    blob_id_1 = await blob_store.store(data)
    blob_id_2 = await blob_store.store(data)
    blob_id_3 = blob_store.store_sync(data)
    assert blob_id_1 == blob_id_2 == blob_id_3
    assert blob_store.count_sync() == 1
    assert blob_store.staged_files() == []

async def test_stage_is_not_visible_until_commit(tmp_path):
    blob_store = FileBlobStore(str(tmp_path))
    data = b"staged bytes"

    staged = await blob_store.stage(data)
    assert staged.blob_id == get_blob_id(data)
    assert staged.size == len(data)
    assert not await blob_store.exists(staged.blob_id)
    assert blob_store.staged_files() == [staged.path]

    blob_id = await blob_store.commit(staged)
    assert await blob_store.exists(blob_id)
    assert blob_store.staged_files() == []
    #discarding after a commit is a no-op
    staged.discard()
    assert await blob_store.load(blob_id) == data

async def test_discard_removes_staging_file(tmp_path):
    blob_store = FileBlobStore(str(tmp_path))

    staged = blob_store.stage_sync(b"never committed")
    path = staged.path
    assert os.path.exists(path)
    staged.discard()
    staged.discard()
    assert not os.path.exists(path)
    assert not blob_store.exists_sync(get_blob_id(b"never committed"))
    with pytest.raises(BlobStoreError):
        await blob_store.commit(staged)

async def test_commit_of_existing_blob_drops_staged_bytes(tmp_path):
    blob_store = FileBlobStore(str(tmp_path))
    blob_id = await blob_store.store(b"abc")

    staged = await blob_store.stage(b"abc")
    assert await blob_store.commit(staged) == blob_id
    assert blob_store.staged_files() == []
    assert blob_store.count_sync() == 1

async def test_load_unknown_blob(tmp_path):
    blob_store = FileBlobStore(str(tmp_path))
    with pytest.raises(BlobNotFound):
        await blob_store.load(get_blob_id(b"nothing"))
    with pytest.raises(BlobNotFound):
        blob_store.load_sync(get_blob_id(b"nothing"))
    with pytest.raises(ValueError):
        blob_store.load_sync("not-a-digest")

async def test_load_detects_corruption(tmp_path):
    blob_store = FileBlobStore(str(tmp_path))
    blob_id = blob_store.store_sync(b"original")
    with open(os.path.join(blob_store.blobs_path, blob_id), 'wb') as f:
        f.write(b"tampered")

    with pytest.raises(BlobCorrupted) as exc_info:
        await blob_store.load(blob_id)
    assert exc_info.value.actual_id == get_blob_id(b"tampered")

async def test_read_after_reopen(tmp_path):
    blob_store = FileBlobStore(str(tmp_path))
    blob_id = await blob_store.store(b"persisted")
    del blob_store

    blob_store = FileBlobStore(str(tmp_path))
    assert await blob_store.load(blob_id) == b"persisted"

async def test_sweep_staging(tmp_path):
    blob_store = FileBlobStore(str(tmp_path))
    #simulates uploads that were interrupted before they were committed or discarded
    await blob_store.stage(b"one")
    blob_store.stage_sync(b"two")
    blob_id = await blob_store.store(b"three")
    assert len(blob_store.staged_files()) == 2

    assert blob_store.sweep_staging() == 2
    assert blob_store.staged_files() == []
    assert await blob_store.load(blob_id) == b"three"

async def test_commit_syncs_the_blob_directory(tmp_path, monkeypatch):
    blob_store = FileBlobStore(str(tmp_path))
    synced_dirs = []
    fsync = os.fsync
    def recording_fsync(fd):
        if stat.S_ISDIR(os.fstat(fd).st_mode):
            synced_dirs.append(fd)
        fsync(fd)
    monkeypatch.setattr(os, "fsync", recording_fsync)

    await blob_store.store(b"durable bytes")
    assert len(synced_dirs) == 1
    #nothing is renamed for content that is already there
    await blob_store.store(b"durable bytes")
    assert len(synced_dirs) == 1
