from __future__ import annotations

import json
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import quoteattr


class DissectionFactory:
    """Utility factory for building tshark JSON, PDML and EK documents."""

    # ----- JSON (-T json) -----
    @staticmethod
    def json_frame(
        number: int = 1,
        length: int = 60,
        epoch: str = "1700000000.000000000",
        protocols: str = "eth:ethertype:ip:tcp",
    ) -> Dict[str, Any]:
        return {
            "frame.time": "Nov 14, 2023 22:13:20.000000000 UTC",
            "frame.time_epoch": epoch,
            "frame.number": str(number),
            "frame.len": str(length),
            "frame.cap_len": str(length),
            "frame.protocols": protocols,
        }

    @staticmethod
    def json_ip(src: str, dst: str) -> Dict[str, Any]:
        return {
            "ip.version": "4",
            "ip.ttl": "64",
            "ip.proto": "6",
            "ip.src": src,
            "ip.dst": dst,
            "ip.flags": "0x02",
            "ip.flags_tree": {"ip.flags.df": "1", "ip.flags.mf": "0"},
        }

    @staticmethod
    def json_tcp(sport: int, dport: int, flags: str = "0x0002") -> Dict[str, Any]:
        return {
            "tcp.srcport": str(sport),
            "tcp.dstport": str(dport),
            "tcp.stream": "0",
            "tcp.flags": flags,
            "tcp.flags_tree": {
                "tcp.flags.syn": "1" if int(flags, 16) & 0x02 else "0",
                "tcp.flags.ack": "1" if int(flags, 16) & 0x10 else "0",
            },
        }

    @classmethod
    def json_packet(
        cls,
        number: int = 1,
        src: str = "192.168.1.1",
        dst: str = "192.168.1.2",
        sport: int = 1234,
        dport: int = 80,
        flags: str = "0x0002",
        epoch: str = "1700000000.000000000",
        extra_layers: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        layers: Dict[str, Any] = {
            "frame": cls.json_frame(number=number, epoch=epoch),
            "eth": {"eth.dst": "00:00:00:00:00:02", "eth.src": "00:00:00:00:00:01", "eth.type": "0x0800"},
            "ip": cls.json_ip(src, dst),
            "tcp": cls.json_tcp(sport, dport, flags),
        }
        layers.update(extra_layers or {})
        return {"_index": "packets-2023-11-14", "_type": "doc", "_score": None, "_source": {"layers": layers}}

    @staticmethod
    def json_document(packets: List[Dict[str, Any]]) -> str:
        return json.dumps(packets, indent=2)

    # ----- PDML (-T pdml) -----
    @staticmethod
    def pdml_field(name: str, show: str = "", value: str = "", showname: str = "", pos: int = 0, size: int = 0, children: str = "") -> str:
        attrs = f"name={quoteattr(name)} showname={quoteattr(showname or f'{name}: {show}')} size=\"{size}\" pos=\"{pos}\" show={quoteattr(show)}"
        if value:
            attrs += f" value={quoteattr(value)}"
        if children:
            return f"<field {attrs}>{children}</field>"
        return f"<field {attrs}/>"

    @classmethod
    def pdml_packet(
        cls,
        number: int = 1,
        src: str = "10.0.0.1",
        dst: str = "10.0.0.2",
        sport: int = 1234,
        dport: int = 80,
        flags: str = "0x0002",
        epoch: str = "1700000000.000000000",
    ) -> str:
        f = cls.pdml_field
        geninfo = (
            '<proto name="geninfo" pos="0" showname="General information" size="54">'
            + f("num", show=str(number), value=format(number, "x"), size=54)
            + f("len", show="54", value="36", size=54)
            + f("caplen", show="54", value="36", size=54)
            + f("timestamp", show="Nov 14, 2023 22:13:20.000000000 UTC", value=epoch, size=54)
            + "</proto>"
        )
        frame = (
            '<proto name="frame" showname="Frame 1" size="54" pos="0">'
            + f("frame.time_epoch", show=epoch, size=0)
            + f("frame.number", show=str(number), size=0)
            + f("frame.len", show="54", size=0)
            + f("frame.cap_len", show="54", size=0)
            + "</proto>"
        )
        ip = (
            '<proto name="ip" showname="Internet Protocol Version 4" size="20" pos="14">'
            + f("ip.version", show="4", value="45", pos=14, size=1)
            + f(
                "ip.flags",
                show="0x02",
                value="40",
                pos=20,
                size=1,
                children=f("ip.flags.df", show="1", value="1", pos=20, size=1)
                + f("ip.flags.mf", show="0", value="0", pos=20, size=1),
            )
            + f("ip.src", show=src, value="0a000001", pos=26, size=4)
            + f("ip.dst", show=dst, value="0a000002", pos=30, size=4)
            + f("ip.addr", show=src, value="0a000001", pos=26, size=4)
            + f("ip.addr", show=dst, value="0a000002", pos=30, size=4)
            + "</proto>"
        )
        tcp = (
            '<proto name="tcp" showname="Transmission Control Protocol" size="20" pos="34">'
            + f("tcp.srcport", show=str(sport), value=format(sport, "04x"), pos=34, size=2)
            + f("tcp.dstport", show=str(dport), value=format(dport, "04x"), pos=36, size=2)
            + f("tcp.flags", show=flags, value=flags[2:], pos=46, size=2)
            + "</proto>"
        )
        return f'<packet num="{number}">{geninfo}{frame}{ip}{tcp}</packet>'

    @staticmethod
    def pdml_document(packets: List[str]) -> str:
        body = "\n".join(packets)
        return (
            '<?xml version="1.0" encoding="utf-8"?>\n'
            '<?xml-stylesheet type="text/xsl" href="pdml2html.xsl"?>\n'
            f'<pdml version="0" creator="wireshark/4.0.0">\n{body}\n</pdml>\n'
        )

    # ----- EK (-T ek) -----
    @staticmethod
    def ek_packet(
        number: int = 1,
        src: str = "10.0.0.1",
        dst: str = "10.0.0.2",
        sport: int = 1234,
        dport: int = 80,
        flags: str = "0x0002",
        timestamp: Any = "1700000000000",
        epoch: Optional[str] = "1700000000.000000000",
    ) -> Dict[str, Any]:
        frame: Dict[str, Any] = {
            "frame_frame_number": str(number),
            "frame_frame_len": "60",
            "frame_frame_cap_len": "60",
        }
        if epoch is not None:
            frame["frame_frame_time_epoch"] = epoch
        return {
            "timestamp": timestamp,
            "layers": {
                "frame": frame,
                "ip": {"ip_ip_src": src, "ip_ip_dst": dst, "ip_ip_ttl": "64", "ip_ip_flags_df": True},
                "tcp": {
                    "tcp_tcp_srcport": str(sport),
                    "tcp_tcp_dstport": str(dport),
                    "tcp_tcp_flags": flags,
                    "tcp_tcp_flags_syn": bool(int(flags, 16) & 0x02),
                    "tcp_tcp_flags_ack": bool(int(flags, 16) & 0x10),
                },
            },
        }

    @staticmethod
    def ek_document(packets: List[Dict[str, Any]], with_index_lines: bool = True) -> str:
        lines = []
        for packet in packets:
            if with_index_lines:
                lines.append(json.dumps({"index": {"_index": "packets-2023-11-14", "_type": "doc"}}))
            lines.append(json.dumps(packet))
        return "\n".join(lines) + "\n"
