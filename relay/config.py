import os
from dataclasses import dataclass, replace
from dotenv import load_dotenv
from relay.blobs import BlobStore
from relay.blobs.stores.file import FileBlobStore
from relay.blobs.stores.memory import MemoryBlobStore
from relay.records import RecordIndex
from relay.records.stores.lmdb import SharedEnvironment, LmdbRecordIndex
from relay.records.stores.memory import MemoryRecordIndex

# Configuration of the relay server.
# Values come from the environment (a '.env' file in the working directory is loaded first),
# and the CLI overrides them with its options.

DEFAULT_PORT = 3000
DEFAULT_APP_DIR = os.path.join(os.path.expanduser("~"), ".rgb-proxy-server")
DEFAULT_LOG_LEVEL = "INFO"
STORE_TYPES = ("lmdb", "memory")

@dataclass(frozen=True)
class RelayConfig:
    port:int = DEFAULT_PORT
    app_dir:str = DEFAULT_APP_DIR
    log_level:str = DEFAULT_LOG_LEVEL
    store_type:str = "lmdb"

    @classmethod
    def from_env(cls, load_dotenv_file:bool=True) -> "RelayConfig":
        if(load_dotenv_file):
            load_dotenv()
        port_str = os.environ.get("PORT")
        try:
            port = int(port_str) if port_str else DEFAULT_PORT
        except ValueError:
            raise ValueError(f"PORT must be an integer, not '{port_str}'.") from None
        store_type = os.environ.get("STORE_TYPE", "lmdb").lower()
        if(store_type not in STORE_TYPES):
            raise ValueError(f"STORE_TYPE must be one of {STORE_TYPES}, not '{store_type}'.")
        return cls(
            port=port,
            app_dir=os.path.expanduser(os.environ.get("APP_DIR") or DEFAULT_APP_DIR),
            log_level=(os.environ.get("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
            store_type=store_type)

    def override(self, **values) -> "RelayConfig":
        '''Returns a copy with all values replaced that are not None.'''
        return replace(self, **{k: v for k, v in values.items() if v is not None})

    @property
    def lmdb_dir(self) -> str:
        return os.path.join(self.app_dir, "lmdb")

    def init_stores(self) -> tuple[BlobStore, RecordIndex]:
        if(self.store_type == "lmdb"):
            os.makedirs(self.app_dir, exist_ok=True)
            lmdb_env = SharedEnvironment(self.lmdb_dir)
            return FileBlobStore(self.app_dir), LmdbRecordIndex(lmdb_env)
        elif(self.store_type == "memory"):
            return MemoryBlobStore(), MemoryRecordIndex()
        else:
            raise Exception(f"Unknown store type '{self.store_type}'.")
