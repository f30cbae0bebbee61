from enum import Enum
from relay.records.record_model import ConsignmentRecord

# The ack of a consignment is a one-time decision of the recipient.
# UNSET -> ACKED or UNSET -> NACKED, both terminal.

class AckState(str, Enum):
    UNSET = "unset"
    ACKED = "acked"
    NACKED = "nacked"

class AckConflict(Exception):
    def __init__(self, recipient_id:str, current:bool, requested:bool):
        super().__init__(f"Ack of '{recipient_id}' is already {current}, cannot change it to {requested}.")
        self.recipient_id = recipient_id
        self.current = current
        self.requested = requested

def ack_state(ack:bool|None) -> AckState:
    if ack is None:
        return AckState.UNSET
    return AckState.ACKED if ack else AckState.NACKED

def ack_transition(record:ConsignmentRecord, ack:bool) -> ConsignmentRecord | None:
    '''Applies an ack decision to a record. 
    
    Returns the updated record, or None if the same decision was already recorded.
    Raises AckConflict if a different decision was already recorded.'''
    if(not isinstance(ack, bool)):
        raise TypeError(f"ack must be of type bool, not '{type(ack)}'.")
    if ack_state(record.ack) == AckState.UNSET:
        return record._replace(ack=ack)
    if record.ack == ack:
        return None
    raise AckConflict(record.recipient_id, record.ack, ack)
