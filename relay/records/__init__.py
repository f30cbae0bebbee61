from . record_model import *
from . record_index import RecordIndex, RecordExists, RecordNotFound
from . ack import AckState, AckConflict, ack_state, ack_transition
