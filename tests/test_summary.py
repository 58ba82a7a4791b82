from datetime import datetime, timezone

from pcap_dissect.packet import JsonLayer, Packet, PacketSummary, summaries_to_dataframe
from pcap_dissect.parsers import JsonParser


def _packet(*layers, epoch="1700000000.0"):
    return Packet(layers=layers, number="7", length="74", frame_time_epoch=epoch)


def test_tcp_summary(handshake_json):
    packet = JsonParser().parse_packets(handshake_json)[0]
    summary = PacketSummary.from_packet(packet)
    assert summary.number == 1
    assert summary.time == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
    assert summary.source_ip == "192.168.1.1"
    assert summary.destination_ip == "192.168.1.2"
    assert summary.protocol == "tcp"
    assert summary.length == 60
    assert summary.info == "Port 1234 → 80"


def test_http_request_and_response():
    ip = JsonLayer("ip", {"ip.src": "10.0.0.1", "ip.dst": "10.0.0.2"})
    request = _packet(ip, JsonLayer("http", {"http.request.method": "GET", "http.request.uri": "/index.html"}))
    assert PacketSummary.from_packet(request).info == "GET /index.html"

    response = _packet(ip, JsonLayer("http", {"http.response.code": "200", "http.response.phrase": "OK"}))
    assert PacketSummary.from_packet(response).info == "200 OK"


def test_dns_query():
    packet = _packet(
        JsonLayer("ip", {"ip.src": "10.0.0.1", "ip.dst": "10.0.0.53"}),
        JsonLayer("dns", {"dns.qry.name": "example.com", "dns.qry.type": "1"}),
    )
    assert PacketSummary.from_packet(packet).info == "Query: example.com (1)"


def test_icmp_and_unknown_protocols():
    ip = JsonLayer("ip", {"ip.src": "10.0.0.1", "ip.dst": "10.0.0.2"})
    icmp = _packet(ip, JsonLayer("icmp", {"icmp.type": "8", "icmp.code": "0"}))
    assert PacketSummary.from_packet(icmp).info == "Type: 8, Code: 0"

    other = _packet(ip, JsonLayer("igmp", {}))
    assert PacketSummary.from_packet(other).info == ""


def test_summary_without_time_or_ip():
    summary = PacketSummary.from_packet(_packet(JsonLayer("arp", {}), epoch=""))
    assert summary.time is None
    assert summary.source_ip == ""
    assert str(summary).startswith("#7 --:--:--")


def test_summary_with_unusable_epoch():
    ip = JsonLayer("ip", {"ip.src": "10.0.0.1", "ip.dst": "10.0.0.2"})
    for epoch in ("1e20", "nan"):
        summary = PacketSummary.from_packet(_packet(ip, JsonLayer("udp", {}), epoch=epoch))
        assert summary.time is None
        assert summary.source_ip == "10.0.0.1"


def test_string_forms():
    summary = PacketSummary(number=3, source_ip="a", destination_ip="b", protocol="udp", length=42, info="Port 1 → 2")
    assert summary.description == "udp a → b Port 1 → 2"
    assert str(summary) == "#3 --:--:-- a → b [udp] 42 bytes: Port 1 → 2"


def test_summaries_to_dataframe(handshake_json):
    df = summaries_to_dataframe(JsonParser().parse_packets(handshake_json))
    assert list(df.columns) == [
        "number",
        "time",
        "source_ip",
        "destination_ip",
        "protocol",
        "length",
        "info",
    ]
    assert list(df["number"]) == [1, 2, 3, 4]
    assert df.loc[1, "source_ip"] == "192.168.1.2"
    assert summaries_to_dataframe([]).empty
