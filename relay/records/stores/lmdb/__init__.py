from . shared_env import SharedEnvironment
from . lmdb_record_index import LmdbRecordIndex
__all__ = ['SharedEnvironment', 'LmdbRecordIndex']
