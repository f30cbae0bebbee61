from abc import ABC, abstractmethod
from relay.records.record_model import *

class RecordExists(Exception):
    """Raised by an insert if a record already exists for the key. Records are never overwritten."""
    def __init__(self, existing:Record):
        super().__init__(f"A record for '{record_key(existing)}' already exists in '{record_namespace(existing).value}'.")
        self.existing = existing

class RecordNotFound(Exception):
    def __init__(self, namespace:Namespace, key:str):
        super().__init__(f"No record for '{key}' in '{namespace.value}'.")
        self.namespace = namespace
        self.key = key

class RecordIndex(ABC):
    """Interface for the persistent key to record mapping.

    There are only two write operations, and both must be atomic per key:
    a unique insert, which never overwrites, and the ack update of a consignment."""
    @abstractmethod
    async def find(self, namespace:Namespace, key:str) -> Record | None:
        pass

    @abstractmethod
    def find_sync(self, namespace:Namespace, key:str) -> Record | None:
        pass

    @abstractmethod
    async def insert(self, record:Record) -> None:
        pass

    @abstractmethod
    def insert_sync(self, record:Record) -> None:
        pass

    @abstractmethod
    async def set_ack(self, recipient_id:str, ack:bool) -> bool:
        """Records the ack of a consignment. Returns False if the same ack was already recorded."""
        pass

    @abstractmethod
    def set_ack_sync(self, recipient_id:str, ack:bool) -> bool:
        pass

    @abstractmethod
    def count_sync(self, namespace:Namespace) -> int:
        pass
