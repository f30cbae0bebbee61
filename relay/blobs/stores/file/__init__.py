from . file_blob_store import FileBlobStore, FileStagedBlob
__all__ = ['FileBlobStore', 'FileStagedBlob']
