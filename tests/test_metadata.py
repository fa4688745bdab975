import pytest

from authsome_otp.errors import MetadataEncodingError
from authsome_otp.metadata import decode_metadata, encode_metadata


def test_absent_envelope_stays_absent():
    assert encode_metadata(None) is None
    assert decode_metadata(None) is None
    assert decode_metadata("") is None


def test_empty_envelope_stays_empty():
    assert decode_metadata(encode_metadata({})) == {}


def test_envelope_round_trip():
    metadata = {
        "tenant_username": "test_user_signup",
        "identity_type": "EMAIL",
        "identity_source": "user@example.com",
    }

    assert decode_metadata(encode_metadata(metadata)) == metadata


def test_decode_accepts_bytes():
    assert decode_metadata(b'{"a":"b"}') == {"a": "b"}


def test_non_string_keys_rejected():
    with pytest.raises(MetadataEncodingError):
        encode_metadata({1: "one"})


def test_unserializable_values_rejected():
    with pytest.raises(MetadataEncodingError):
        encode_metadata({"when": object()})


def test_non_mapping_rejected():
    with pytest.raises(MetadataEncodingError):
        encode_metadata(["not", "a", "mapping"])


def test_stored_non_object_rejected():
    with pytest.raises(MetadataEncodingError):
        decode_metadata("[1, 2]")
