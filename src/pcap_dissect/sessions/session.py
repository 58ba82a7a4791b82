"""Group packets into bidirectional sessions and follow the TCP lifecycle."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set

import pandas as pd

from ..core.constants import IP_LAYERS
from ..exceptions import SessionKeyError, SniffTimeUnavailableError
from ..logging import get_logger
from ..packet import BaseLayer, Packet, TcpView, field_text
from ..utils import ReadWriteLock

logger = get_logger(__name__)

_NORMALIZED_PROTOCOLS = ("tcp", "udp")


class SessionState(str, Enum):
    NEW = "new"
    SYN_SENT = "syn_sent"
    SYN_RECEIVED = "syn_received"
    ESTABLISHED = "established"
    FIN_WAIT_1 = "fin_wait_1"
    # Never produced: telling FIN_WAIT_1 from FIN_WAIT_2 needs sequence tracking.
    FIN_WAIT_2 = "fin_wait_2"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass(frozen=True)
class SessionKey:
    """Endpoint tuple identifying a conversation."""

    protocol: str
    src_ip: str
    dst_ip: str
    src_port: str = ""
    dst_port: str = ""

    def swapped(self) -> "SessionKey":
        return SessionKey(self.protocol, self.dst_ip, self.src_ip, self.dst_port, self.src_port)

    def normalized(self) -> "SessionKey":
        """Return the key with the lexicographically smaller endpoint as source.

        Only TCP and UDP keys are reordered; IPs are compared first and ports
        break ties. Applying it twice gives the same key.
        """
        if self.protocol not in _NORMALIZED_PROTOCOLS:
            return self
        if self.src_ip > self.dst_ip:
            return self.swapped()
        if self.src_ip == self.dst_ip and self.src_port > self.dst_port:
            return self.swapped()
        return self

    def __str__(self) -> str:
        return f"{self.protocol}:{self.src_ip}:{self.src_port}-{self.dst_ip}:{self.dst_port}"


def read_tcp_flags(tcp_layer: BaseLayer) -> Set[str]:
    """Collect the flag names set on ``tcp_layer``.

    ``flags`` may be symbolic (``"SYN,ACK"``) or a bitmask (``"0x0012"``);
    the per-flag boolean fields are honoured as well.
    """
    return TcpView(tcp_layer).flags


def next_tcp_state(state: SessionState, flags: Set[str]) -> SessionState:
    if "RST" in flags:
        return SessionState.CLOSED
    if "SYN" in flags:
        return SessionState.SYN_RECEIVED if "ACK" in flags else SessionState.SYN_SENT
    if "FIN" in flags:
        if state in (SessionState.FIN_WAIT_1, SessionState.FIN_WAIT_2):
            return SessionState.CLOSING
        return SessionState.FIN_WAIT_1
    if "ACK" in flags and state is SessionState.SYN_RECEIVED:
        return SessionState.ESTABLISHED
    return state


class Session:
    """Packets of one conversation plus its timing and TCP state.

    :meth:`add_packet` is the only mutator and takes the write lock; readers
    take the read lock.
    """

    def __init__(self, key: SessionKey) -> None:
        self.key = key.normalized()
        self._packets: List[Packet] = []
        self._started: Optional[float] = None
        self._ended: Optional[float] = None
        self._state = SessionState.NEW
        self._lock = ReadWriteLock()

    def add_packet(self, packet: Packet) -> None:
        try:
            timestamp: Optional[float] = packet.sniff_timestamp
        except SniffTimeUnavailableError:
            timestamp = None
        tcp_layer = packet.get_layer("tcp")
        flags = read_tcp_flags(tcp_layer) if tcp_layer is not None else None

        with self._lock.write_locked():
            self._packets.append(packet)
            if timestamp is not None:
                if self._started is None or timestamp < self._started:
                    self._started = timestamp
                if self._ended is None or timestamp > self._ended:
                    self._ended = timestamp
            if flags is not None:
                self._state = next_tcp_state(self._state, flags)

    @property
    def packets(self) -> List[Packet]:
        with self._lock.read_locked():
            return list(self._packets)

    @property
    def packet_count(self) -> int:
        with self._lock.read_locked():
            return len(self._packets)

    @property
    def started(self) -> Optional[float]:
        with self._lock.read_locked():
            return self._started

    @property
    def ended(self) -> Optional[float]:
        with self._lock.read_locked():
            return self._ended

    @property
    def state(self) -> SessionState:
        with self._lock.read_locked():
            return self._state

    @property
    def duration(self) -> float:
        """Seconds between the first and last timestamped packet."""
        with self._lock.read_locked():
            if self._started is None or self._ended is None:
                return 0.0
            return self._ended - self._started

    def to_dict(self) -> Dict[str, Any]:
        with self._lock.read_locked():
            started, ended = self._started, self._ended
            row = {
                "session": str(self.key),
                "protocol": self.key.protocol,
                "src_ip": self.key.src_ip,
                "src_port": self.key.src_port,
                "dst_ip": self.key.dst_ip,
                "dst_port": self.key.dst_port,
                "state": self._state.value,
                "packet_count": len(self._packets),
                "started": started,
                "ended": ended,
            }
        row["duration"] = (ended - started) if started is not None and ended is not None else 0.0
        return row

    def __repr__(self) -> str:
        return f"<Session {self.key} {self.state.value} packets={self.packet_count}>"


def _required_text(layer: BaseLayer, name: str) -> str:
    value = layer.get_field(name)
    text = field_text(value)
    if not text:
        raise SessionKeyError(
            f"missing {layer.layer_name}.{name}",
            context=f"got {type(value).__name__}",
        )
    return text


def extract_session_key(packet: Packet) -> SessionKey:
    """Build the (unnormalized) session key of ``packet``.

    Raises :class:`SessionKeyError` when the packet has no IP layer or no
    usable addresses.
    """
    transport = packet.transport_layer
    protocol = transport or packet.highest_layer.lower()

    ip_layer = next(
        (layer for layer in (packet.get_layer(name) for name in IP_LAYERS) if layer is not None),
        None,
    )
    if ip_layer is None:
        raise SessionKeyError("no IP layer found in packet", context=f"packet {packet.number or '?'}")
    src_ip = _required_text(ip_layer, "src")
    dst_ip = _required_text(ip_layer, "dst")

    src_port = dst_port = ""
    if transport:
        transport_layer = packet.get_layer(transport)
        src = field_text(transport_layer.get_field("srcport"))
        dst = field_text(transport_layer.get_field("dstport"))
        if src and dst:
            src_port, dst_port = src, dst

    return SessionKey(protocol, src_ip, dst_ip, src_port, dst_port)


class SessionTracker:
    """Map of normalized session keys to :class:`Session` objects.

    The map only grows; callers own the tracker and drop it when done.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}
        self._lock = ReadWriteLock()

    def add_packet(self, packet: Packet) -> Optional[Session]:
        """Add ``packet`` to its session; returns ``None`` for untrackable packets."""
        try:
            key = extract_session_key(packet).normalized()
        except SessionKeyError as exc:
            logger.debug("Skipping packet %s: %s", packet.number or "?", exc)
            return None

        key_str = str(key)
        with self._lock.read_locked():
            session = self._sessions.get(key_str)
        if session is None:
            with self._lock.write_locked():
                session = self._sessions.get(key_str)
                if session is None:
                    session = Session(key)
                    self._sessions[key_str] = session
                    logger.debug("New session %s", key_str)
        session.add_packet(packet)
        return session

    def add_packets(self, packets: Iterable[Packet]) -> int:
        """Add every packet; returns how many were tracked."""
        return sum(1 for packet in packets if self.add_packet(packet) is not None)

    def get_session(self, key: SessionKey) -> Optional[Session]:
        with self._lock.read_locked():
            return self._sessions.get(str(key.normalized()))

    @property
    def sessions(self) -> List[Session]:
        with self._lock.read_locked():
            return list(self._sessions.values())

    @property
    def session_count(self) -> int:
        with self._lock.read_locked():
            return len(self._sessions)

    def __len__(self) -> int:
        return self.session_count

    def to_dataframe(self) -> pd.DataFrame:
        """Return one row per session, ordered by first packet time."""
        rows = [session.to_dict() for session in self.sessions]
        df = pd.DataFrame(rows, columns=_SESSION_COLUMNS)
        if not df.empty:
            df = df.sort_values("started", na_position="last", kind="stable").reset_index(drop=True)
        return df


_SESSION_COLUMNS = [
    "session",
    "protocol",
    "src_ip",
    "src_port",
    "dst_ip",
    "dst_port",
    "state",
    "packet_count",
    "started",
    "ended",
    "duration",
]
