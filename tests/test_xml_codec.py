"""Tests for XML request encoding and response decoding."""

import pytest

from hilink import (
    DataEnvelope,
    ErrorEnvelope,
    InvalidErrorShapeError,
    MalformedDocumentError,
    MissingRootElementError,
    PreconditionViolated,
    UnexpectedShapeError,
)
from hilink.xml_codec import decode, encode_request, request_xml


def test_encode_keeps_order_and_duplicates():
    """Test that fields are written exactly in the given order, duplicates included."""
    body = encode_request([("B", "2"), ("A", "1"), ("B", "3")])

    assert body == (
        b'<?xml version="1.0" encoding="UTF-8"?>\n'
        b"<request>\n"
        b"  <B>2</B>\n"
        b"  <A>1</A>\n"
        b"  <B>3</B>\n"
        b"</request>\n"
    )


def test_encode_nested_pairs():
    """Test that a sequence value becomes nested, indented elements."""
    body = encode_request([
        ("Index", "-1"),
        ("Phones", [("Phone", "+100"), ("Phone", "+200")]),
        ("Sca", ""),
    ]).decode("utf-8")

    assert body.splitlines()[1:] == [
        "<request>",
        "  <Index>-1</Index>",
        "  <Phones>",
        "    <Phone>+100</Phone>",
        "    <Phone>+200</Phone>",
        "  </Phones>",
        "  <Sca></Sca>",
        "</request>",
    ]


def test_encode_escapes_text():
    body = encode_request([("Content", "a < b & c > d")])

    assert b"<Content>a &lt; b &amp; c &gt; d</Content>" in body


def test_encode_passes_raw_bytes_through():
    raw = b"<request><Control>1</Control></request>"

    assert encode_request(raw) is not None
    assert encode_request(raw) == raw
    assert encode_request(bytearray(raw)) == raw


def test_encode_utf8():
    body = encode_request([("Content", "héllo ✓")])

    assert "<Content>héllo ✓</Content>".encode("utf-8") in body


def test_request_xml_builds_pairs():
    assert request_xml("Index", "40001", "Index", "40002") == encode_request(
        [("Index", "40001"), ("Index", "40002")])


def test_request_xml_rejects_odd_length():
    with pytest.raises(PreconditionViolated):
        request_xml("Index", "40001", "Orphan")


@pytest.mark.parametrize("fields", [
    [("Index",)],
    [("", "1")],
    [("bad name", "1")],
    [("Index", 1)],
    ["Index"],
])
def test_encode_rejects_malformed_fields(fields):
    with pytest.raises(PreconditionViolated):
        encode_request(fields)


def test_decode_single_element():
    """Test that the root element is unwrapped into a DataEnvelope."""
    body = (
        b'<?xml version="1.0" encoding="UTF-8"?>\n'
        b"<response>\n"
        b"<DeviceName>B525s-23a</DeviceName>\n"
        b"<Imei>861234567890123</Imei>\n"
        b"<Classify></Classify>\n"
        b"</response>\n"
    )

    result = decode(body, True)

    assert isinstance(result, DataEnvelope)
    assert result.root_name == "response"
    assert result.fields == {"DeviceName": "B525s-23a", "Imei": "861234567890123", "Classify": ""}
    assert list(result.fields) == ["DeviceName", "Imei", "Classify"]


def test_decode_repeated_and_nested_elements():
    """Test that repeated names become lists and nested elements become dicts."""
    body = (
        b"<response>"
        b"<Count>2</Count>"
        b"<Messages>"
        b"<Message><Index>40001</Index><Content>one</Content></Message>"
        b"<Message><Index>40002</Index><Content>two</Content></Message>"
        b"</Messages>"
        b"</response>"
    )

    result = decode(body, True)

    assert result.fields["Count"] == "2"
    messages = result.fields["Messages"]["Message"]
    assert [m["Index"] for m in messages] == ["40001", "40002"]
    assert messages[1]["Content"] == "two"


def test_decode_round_trip_preserves_sequence():
    """Test that an echoed request decodes to the same pairs, in order."""
    fields = [("Phone", "+1"), ("Content", "hi"), ("Phone", "+2"), ("Phone", "+3")]

    result = decode(encode_request(fields), True)

    assert result.root_name == "request"
    assert result.pairs == fields
    assert result.fields == {"Phone": ["+1", "+2", "+3"], "Content": "hi"}


def test_decode_whole_tree():
    result = decode(b"<response>OK</response>", False)

    assert result == {"response": "OK"}


def test_decode_error_with_message():
    body = b"<error><code>100003</code><message>no way</message></error>"

    assert decode(body, True) == ErrorEnvelope(code="100003", message="no way")


def test_decode_error_falls_back_to_code_table():
    """Test that a missing message is looked up from the error code table."""
    body = b'<?xml version="1.0" encoding="UTF-8"?>\n<error><code>108002</code></error>'

    assert decode(body, True) == ErrorEnvelope(code="108002", message="invalid password")
    assert decode(body, False).message == "invalid password"


def test_decode_error_unknown_code_uses_generic_message():
    body = b"<error><code>999999</code><message></message></error>"

    assert decode(body, True).message == "system not available"


def test_decode_error_checked_before_root_count():
    body = b"<error><code>125001</code></error><response>OK</response>"

    assert decode(body, False) == ErrorEnvelope(code="125001", message="invalid token")


def test_decode_scalar_error_is_invalid():
    with pytest.raises(InvalidErrorShapeError):
        decode(b"<error>boom</error>", True)


def test_decode_two_roots_is_not_first_pick():
    """Test that two top-level elements fail instead of silently using the first."""
    with pytest.raises(MissingRootElementError):
        decode(b"<response><A>1</A></response><other><B>2</B></other>", True)


def test_decode_empty_body_has_no_root():
    with pytest.raises(MissingRootElementError):
        decode(b"", True)


@pytest.mark.parametrize("body", [
    b"<response><A>1</response>",
    b"not xml at all <",
    b"\xff\xfe<response/>",
    b"garbage<response>OK</response>",
    b"<response>OK</response>trailing junk",
    b"Service Unavailable",
])
def test_decode_malformed(body):
    with pytest.raises(MalformedDocumentError):
        decode(body, True)


def test_decode_scalar_root_is_unexpected_shape():
    with pytest.raises(UnexpectedShapeError):
        decode(b"<response>OK</response>", True)
