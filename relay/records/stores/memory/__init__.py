from . memory_record_index import MemoryRecordIndex
__all__ = ['MemoryRecordIndex']
