import logging
import lmdb
from relay.records.record_model import *
from relay.records.record_index import RecordIndex, RecordExists, RecordNotFound
from relay.records.ack import ack_transition
from . shared_env import SharedEnvironment

logger = logging.getLogger(__name__)

class LmdbRecordIndex(RecordIndex):
    # lmdb allows only one write transaction at a time (across threads and processes),
    # which is what makes the unique insert and the ack update atomic per key
    def __init__(self, shared_env:SharedEnvironment):
        super().__init__()
        if(not isinstance(shared_env, SharedEnvironment)):
            raise Exception(f"shared_env must be of type SharedEnvironment, not '{type(shared_env)}'.")
        self._shared_env = shared_env

    async def find(self, namespace:Namespace, key:str) -> Record | None:
        return self.find_sync(namespace, key)

    async def insert(self, record:Record) -> None:
        self.insert_sync(record)

    async def set_ack(self, recipient_id:str, ack:bool) -> bool:
        return self.set_ack_sync(recipient_id, ack)

    def find_sync(self, namespace:Namespace, key:str) -> Record | None:
        if(key is None):
            raise ValueError("key must not be None.")
        with self._shared_env.begin_txn(namespace, write=False) as txn:
            data = txn.get(key_to_bytes(key), default=None)
        if data is None:
            return None
        return bytes_to_record(namespace, data)

    def insert_sync(self, record:Record) -> None:
        if(record is None):
            raise ValueError("record must not be None.")
        namespace = record_namespace(record)
        key_bytes = key_to_bytes(record_key(record))
        record_bytes = record_to_bytes(record)

        def insert():
            with self._shared_env.begin_txn(namespace) as txn:
                if not txn.put(key_bytes, record_bytes, overwrite=False):
                    raise RecordExists(bytes_to_record(namespace, txn.get(key_bytes)))
        self._write(insert, f"insert of '{record_key(record)}' in '{namespace.value}'")

    def set_ack_sync(self, recipient_id:str, ack:bool) -> bool:
        if(recipient_id is None):
            raise ValueError("recipient_id must not be None.")
        key_bytes = key_to_bytes(recipient_id)

        def update() -> bool:
            with self._shared_env.begin_txn(Namespace.CONSIGNMENTS) as txn:
                data = txn.get(key_bytes, default=None)
                if data is None:
                    raise RecordNotFound(Namespace.CONSIGNMENTS, recipient_id)
                updated = ack_transition(bytes_to_record(Namespace.CONSIGNMENTS, data), ack)
                if updated is None:
                    return False
                txn.put(key_bytes, record_to_bytes(updated), overwrite=True)
                return True
        return self._write(update, f"ack of '{recipient_id}'")

    def count_sync(self, namespace:Namespace) -> int:
        with self._shared_env.begin_txn(namespace, write=False) as txn:
            return txn.stat(self._shared_env.get_db(namespace))['entries']

    def _write(self, write_fn, description:str):
        try:
            return write_fn()
        except lmdb.MapFullError:
            logger.warning(f"===> Resizing LMDB map... in record index, ({description}) <===")
            self._shared_env._resize()
            #try again
            return write_fn()
