import pytest
from relay.rpc import *

def test_recipient_args():
    assert parse_recipient_args({"recipient_id": "r1"}) == RecipientArgs("r1")
    with pytest.raises(MissingRecipientID):
        parse_recipient_args({})
    with pytest.raises(MissingRecipientID):
        parse_recipient_args({"recipient_id": ""})
    with pytest.raises(InvalidRecipientID):
        parse_recipient_args({"recipient_id": 42})

def test_attachment_args():
    assert parse_attachment_args({"attachment_id": "a1"}) == AttachmentArgs("a1")
    with pytest.raises(MissingAttachmentID):
        parse_attachment_args({"recipient_id": "a1"})
    with pytest.raises(InvalidAttachmentID):
        parse_attachment_args({"attachment_id": ["a1"]})

def test_consignment_post_args():
    assert parse_consignment_post_args({"recipient_id": "r1", "txid": "t1"}) == ConsignmentPostArgs("r1", "t1", None)
    assert parse_consignment_post_args({"recipient_id": "r1", "txid": "t1", "vout": 0}) == ConsignmentPostArgs("r1", "t1", 0)
    with pytest.raises(MissingTxid):
        parse_consignment_post_args({"recipient_id": "r1"})
    with pytest.raises(InvalidTxid):
        parse_consignment_post_args({"recipient_id": "r1", "txid": 1})
    #the recipient id is checked first
    with pytest.raises(MissingRecipientID):
        parse_consignment_post_args({"txid": 1})

@pytest.mark.parametrize("vout", [-1, 1.5, "1", True, [1], {"vout": 1}])
def test_invalid_vout(vout):
    with pytest.raises(InvalidVout) as exc_info:
        parse_consignment_post_args({"recipient_id": "r1", "txid": "t1", "vout": vout})
    assert exc_info.value.data["vout"] == vout

def test_vout_from_form():
    assert parse_consignment_post_args({"recipient_id": "r1", "txid": "t1", "vout": "7"}, True).vout == 7
    assert parse_consignment_post_args({"recipient_id": "r1", "txid": "t1", "vout": ""}, True).vout is None
    with pytest.raises(InvalidVout):
        parse_consignment_post_args({"recipient_id": "r1", "txid": "t1", "vout": "-7"}, True)
    with pytest.raises(InvalidVout):
        parse_consignment_post_args({"recipient_id": "r1", "txid": "t1", "vout": "seven"}, True)

def test_ack_post_args():
    assert parse_ack_post_args({"recipient_id": "r1", "ack": True}) == AckPostArgs("r1", True)
    #false is a decision, not a missing value
    assert parse_ack_post_args({"recipient_id": "r1", "ack": False}) == AckPostArgs("r1", False)
    with pytest.raises(MissingAck):
        parse_ack_post_args({"recipient_id": "r1"})
    with pytest.raises(InvalidAck):
        parse_ack_post_args({"recipient_id": "r1", "ack": "true"})
    with pytest.raises(InvalidAck):
        parse_ack_post_args({"recipient_id": "r1", "ack": 1})

def test_ack_from_form():
    assert parse_ack_post_args({"recipient_id": "r1", "ack": "true"}, True).ack is True
    assert parse_ack_post_args({"recipient_id": "r1", "ack": "false"}, True).ack is False
    with pytest.raises(InvalidAck):
        parse_ack_post_args({"recipient_id": "r1", "ack": "yes"}, True)

def test_error_codes_are_distinct():
    error_types = [
        CannotChangeAck, CannotChangeUploadedFile, 
        InvalidAck, InvalidAttachmentID, InvalidRecipientID, InvalidTxid, InvalidVout,
        MissingAck, MissingAttachmentID, MissingRecipientID, MissingFile, MissingTxid,
        NotFoundConsignment, NotFoundMedia]
    codes = [error_type.code for error_type in error_types]
    assert len(set(codes)) == len(codes)
    assert all(code < 0 for code in codes)
    assert MissingTxid({"recipient_id": "r1"}).to_dict() == {
        "code": -304, "message": "Missing TXID", "data": {"recipient_id": "r1"}}
