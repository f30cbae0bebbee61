import pytest
from relay.records import *
import helpers_records as helpers

def test_ack_state():
    assert ack_state(None) == AckState.UNSET
    assert ack_state(True) == AckState.ACKED
    assert ack_state(False) == AckState.NACKED

def test_transition_from_unset():
    record = helpers.consignment("recipient_1")
    assert ack_transition(record, True) == record._replace(ack=True)
    assert ack_transition(record, False) == record._replace(ack=False)

def test_same_decision_is_a_no_op():
    record = helpers.consignment("recipient_1")._replace(ack=True)
    assert ack_transition(record, True) is None

def test_decision_is_final():
    record = helpers.consignment("recipient_1")._replace(ack=False)
    with pytest.raises(AckConflict) as exc_info:
        ack_transition(record, True)
    assert exc_info.value.current is False
    assert exc_info.value.requested is True

def test_ack_must_be_bool():
    with pytest.raises(TypeError):
        ack_transition(helpers.consignment("recipient_1"), "true")

def test_record_encoding():
    record = helpers.consignment("recipient_1", vout=3)._replace(ack=True)
    assert bytes_to_record(Namespace.CONSIGNMENTS, record_to_bytes(record)) == record
    assert record_namespace(record) == Namespace.CONSIGNMENTS
    assert record_key(helpers.media("attachment_1")) == "attachment_1"
