import io
import json

import pytest

from pcap_dissect.exceptions import EKParseError
from pcap_dissect.packet.layers import EkLayer
from pcap_dissect.parsers import EkParser


def test_index_and_blank_lines_are_skipped(factory):
    doc = factory.ek_document([factory.ek_packet(1), factory.ek_packet(2)])
    doc = "\n" + doc.replace("\n", "\n\n", 1)
    packets = EkParser().parse_packets(doc)
    assert [p.number for p in packets] == ["1", "2"]
    assert all(isinstance(layer, EkLayer) for layer in packets[0])


def test_frame_metadata(factory):
    packet = EkParser().parse_single_packet(factory.ek_document([factory.ek_packet(4)]))
    assert packet.number == "4"
    assert packet.length == "60"
    assert packet.captured_length == "60"
    assert packet.frame_time_epoch == "1700000000.000000000"
    assert [layer.layer_name for layer in packet.layers] == ["frame", "ip", "tcp"]
    assert packet.get_layer("ip").get_field("src") == "10.0.0.1"


def test_epoch_falls_back_to_millisecond_timestamp(factory):
    packet = EkParser().parse_single_packet(json.dumps(factory.ek_packet(epoch=None)))
    assert packet.frame_time_epoch == "1700000000.000000"
    assert packet.frame_time == "2023-11-14T22:13:20+00:00"
    assert packet.sniff_timestamp == 1700000000.0


def test_epoch_from_rfc3339_timestamp(factory):
    document = factory.ek_packet(epoch=None, timestamp="2023-11-14T22:13:20.5Z")
    packet = EkParser().parse_single_packet(json.dumps(document))
    assert packet.frame_time_epoch == "1700000000.500000"


def test_rfc3339_time_epoch_field_is_normalized(factory):
    document = factory.ek_packet(epoch="2023-11-14T22:13:20Z")
    packet = EkParser().parse_single_packet(json.dumps(document))
    assert packet.frame_time_epoch == "1700000000.000000"


def test_source_wrapped_document_and_index():
    document = {
        "_index": "packets-2023-11-14",
        "_source": {"layers": {"frame": {"frame_frame_number": "3"}, "udp": {"udp_udp_srcport": "53"}}},
    }
    packet = EkParser().parse_single_packet(json.dumps(document))
    assert packet.number == "3"
    assert packet.index == {"index": "packets-2023-11-14"}
    assert packet.transport_layer == "udp"


def test_frame_raw_is_decoded():
    document = {"layers": {"frame_raw": "deadbeef", "frame": {"frame_frame_number": "1"}}}
    packet = EkParser().parse_single_packet(json.dumps(document))
    assert packet.get_raw_packet() == b"\xde\xad\xbe\xef"
    assert not packet.has_layer("frame_raw")


def test_malformed_line_reports_line_number(factory):
    doc = factory.ek_document([factory.ek_packet(1)]) + "{not json\n"
    produced = []
    with pytest.raises(EKParseError) as excinfo:
        for packet in EkParser().iter_packets(doc):
            produced.append(packet)
    assert len(produced) == 1
    assert "line 3" in str(excinfo.value)

    with pytest.raises(EKParseError) as excinfo:
        EkParser().parse_packets(doc)
    assert len(excinfo.value.parsed_packets) == 1


def test_non_object_line_is_an_error():
    with pytest.raises(EKParseError):
        EkParser().parse_packets("[1, 2]\n")


def test_document_without_layers_is_an_error():
    with pytest.raises(EKParseError):
        EkParser().parse_packets('{"timestamp": "1700000000000"}\n')


def test_cast_values_leaves_metadata_textual(factory):
    packet = EkParser(cast_values=True).parse_single_packet(json.dumps(factory.ek_packet(sport=443)))
    assert packet.get_layer("tcp").get_field("srcport") == 443
    assert packet.number == "1"
    assert packet.length == "60"


def test_file_objects_are_read_line_by_line(factory):
    doc = factory.ek_document([factory.ek_packet(1), factory.ek_packet(2)])
    assert len(EkParser().parse_packets(io.StringIO(doc))) == 2
    assert len(EkParser().parse_packets(io.BytesIO(doc.encode()))) == 2
    assert len(EkParser().parse_packets(doc.encode())) == 2
