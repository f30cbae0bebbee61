import logging
import os
import lmdb
from relay.records.record_model import Namespace

logger = logging.getLogger(__name__)

class SharedEnvironment:
    def __init__(self, store_path:str, writemap:bool=False):
        self.store_path = store_path
        os.makedirs(self.store_path, exist_ok=True)
        self.env = lmdb.Environment(
            store_path, 
            max_dbs=len(Namespace), 
            # writemap=True makes lmdb a lot faster, 
            # BUT it makes the DB file as big as the mapsize (at least on some file systems). 
            # Plus, it comes with fewer safety guarantees.
            # See: https://lmdb.readthedocs.io/en/release/#writemap-mode
            writemap=writemap, 
            # the meta page is synced with every commit
            metasync=True, 
            # 10 MB, is ignored if it's bigger already
            map_size=1024*1024*10, 
            )
        self._dbs = {namespace: self.env.open_db(namespace.value.encode('utf-8')) for namespace in Namespace}

    def get_db(self, namespace:Namespace):
        return self._dbs[namespace]

    def begin_txn(self, namespace:Namespace, write=True, buffers=False) -> lmdb.Transaction:
        return self.env.begin(db=self.get_db(namespace), write=write, buffers=buffers)

    def close(self) -> None:
        self.env.close()

    def _resize(self) -> int:
        current_size = self.env.info()['map_size']
        if current_size > 1024*1024*1024*10: # 10 GB
            multiplier = 1.2
        elif current_size > 1024*1024*1024: # 1 GB
            multiplier = 1.5
        else: # under 1 GB
            multiplier = 3.0
        # must be rounded to next int, lmdb segfaults later otherwise
        new_size = round(current_size * multiplier) 
        logger.info(f"Resizing LMDB map from {current_size/1024/1024} MB to {new_size/1024/1024} MB")
        self.env.set_mapsize(new_size)
        return new_size
