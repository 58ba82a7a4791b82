import sys
from pathlib import Path

# Ensure the src directory is on sys.path for test imports
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
for path in (SRC_PATH, PROJECT_ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))


import pytest

from tests.fixtures.dissection_factory import DissectionFactory


@pytest.fixture
def factory() -> type[DissectionFactory]:
    """Return the document factory used to build tshark output."""
    return DissectionFactory


@pytest.fixture
def handshake_json(factory) -> str:
    """Three-way handshake followed by a FIN, as ``tshark -T json`` output."""
    packets = [
        factory.json_packet(1, "192.168.1.1", "192.168.1.2", 1234, 80, "0x0002", "1700000000.0"),
        factory.json_packet(2, "192.168.1.2", "192.168.1.1", 80, 1234, "0x0012", "1700000000.5"),
        factory.json_packet(3, "192.168.1.1", "192.168.1.2", 1234, 80, "0x0010", "1700000001.0"),
        factory.json_packet(4, "192.168.1.1", "192.168.1.2", 1234, 80, "0x0011", "1700000002.0"),
    ]
    return factory.json_document(packets)
