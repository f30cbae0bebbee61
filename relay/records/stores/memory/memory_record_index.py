import threading
from relay.records.record_model import *
from relay.records.record_index import RecordIndex, RecordExists, RecordNotFound
from relay.records.ack import ack_transition

class MemoryRecordIndex(RecordIndex):
    # a lookup followed by a write is not atomic on a dict, so the writes take a lock
    _lock:threading.RLock
    _records:dict[Namespace, dict[str, Record]]

    def __init__(self):
        super().__init__()
        self._lock = threading.RLock()
        self._records = {namespace: {} for namespace in Namespace}

    async def find(self, namespace:Namespace, key:str) -> Record | None:
        return self.find_sync(namespace, key)

    async def insert(self, record:Record) -> None:
        self.insert_sync(record)

    async def set_ack(self, recipient_id:str, ack:bool) -> bool:
        return self.set_ack_sync(recipient_id, ack)

    def find_sync(self, namespace:Namespace, key:str) -> Record | None:
        return self._records[namespace].get(key, None)

    def insert_sync(self, record:Record) -> None:
        records = self._records[record_namespace(record)]
        key = record_key(record)
        with self._lock:
            existing = records.get(key)
            if existing is not None:
                raise RecordExists(existing)
            records[key] = record

    def set_ack_sync(self, recipient_id:str, ack:bool) -> bool:
        records = self._records[Namespace.CONSIGNMENTS]
        with self._lock:
            record = records.get(recipient_id)
            if record is None:
                raise RecordNotFound(Namespace.CONSIGNMENTS, recipient_id)
            updated = ack_transition(record, ack)
            if updated is None:
                return False
            records[recipient_id] = updated
            return True

    def count_sync(self, namespace:Namespace) -> int:
        return len(self._records[namespace])
