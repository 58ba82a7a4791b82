"""Tests for custom exception hierarchy."""

import pytest

from pcap_dissect.exceptions import (
    EKParseError,
    FieldDecodeError,
    JSONParseError,
    PacketParsingError,
    ParserNotAvailable,
    PcapDissectError,
    SessionKeyError,
    SniffTimeUnavailableError,
    XMLParseError,
)


def test_exceptions_can_be_caught():
    """Each custom exception should be catchable via the base class."""
    with pytest.raises(PcapDissectError):
        raise PcapDissectError()
    for exc_cls in [
        PacketParsingError,
        JSONParseError,
        XMLParseError,
        EKParseError,
        FieldDecodeError,
        SniffTimeUnavailableError,
        SessionKeyError,
        ParserNotAvailable,
    ]:
        with pytest.raises(PcapDissectError):
            raise exc_cls()


@pytest.mark.parametrize(
    "exc_cls,fmt", [(JSONParseError, "JSON"), (XMLParseError, "XML"), (EKParseError, "EK")]
)
def test_format_errors_are_parsing_errors(exc_cls, fmt):
    assert issubclass(exc_cls, PacketParsingError)
    err = exc_cls("bad packet", context="packet 3")
    assert err.format == fmt
    assert err.context == "packet 3"
    assert err.parsed_packets == []


def test_context_and_suggestion():
    err = ParserNotAvailable("no parser", suggestion="use json")
    assert str(err) == "no parser"
    assert err.suggestion == "use json"
    assert err.context is None
