"""Custom exceptions for the :mod:`pcap_dissect` package."""


class PcapDissectError(Exception):
    """Base class for all custom ``pcap_dissect`` exceptions.

    Parameters
    ----------
    message:
        Short description of the failure.
    context:
        Optional additional information about where/why the error occurred.
    suggestion:
        Optional hint that may help recover from the error.
    """

    def __init__(
        self,
        message: str = "",
        *,
        context: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(message)
        self.context = context
        self.suggestion = suggestion


class PacketParsingError(PcapDissectError):
    """Raised when a unit of dissection output cannot be decoded.

    ``parsed_packets`` holds the packets decoded before the failing unit when
    the error escapes a whole-input parse.
    """

    format: str = ""

    def __init__(self, message: str = "", **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.parsed_packets: list = []


class JSONParseError(PacketParsingError):
    """Raised when tshark JSON output is malformed."""

    format = "JSON"


class XMLParseError(PacketParsingError):
    """Raised when PDML output is malformed."""

    format = "XML"


class EKParseError(PacketParsingError):
    """Raised when an EK document line is malformed."""

    format = "EK"


class FieldDecodeError(PcapDissectError):
    """Raised when a field value cannot be converted to the requested type."""


class SniffTimeUnavailableError(PcapDissectError):
    """Raised when a packet carries no usable capture timestamp."""


class SessionKeyError(PcapDissectError):
    """Raised when a packet lacks the data needed to build a session key."""


class ParserNotAvailable(PcapDissectError):
    """Raised when no parser is registered for the requested format."""
