import json

from hypothesis import given, strategies as st

from pcap_dissect.packet import FieldOffset, LayerField
from pcap_dissect.parsers.json_parser import iter_array_elements
from pcap_dissect.sessions import SessionKey

ips = st.ip_addresses(v=4).map(str)
ports = st.integers(min_value=1, max_value=65535).map(str)


@given(st.sampled_from(["tcp", "udp"]), ips, ips, ports, ports)
def test_normalization_is_direction_independent(protocol, src, dst, sport, dport):
    key = SessionKey(protocol, src, dst, sport, dport)
    assert key.normalized() == key.swapped().normalized()
    assert key.normalized().normalized() == key.normalized()


@given(st.text(), st.text(), st.text())
def test_default_value_precedence(show, value, showname):
    field = LayerField(name="x", show=show, raw_value=value, showname=showname)
    expected = show or value or showname
    assert field.default_value == expected


@given(
    st.integers(min_value=-5, max_value=40),
    st.integers(min_value=0, max_value=40),
    st.binary(max_size=32),
)
def test_field_offset_slices_stay_in_bounds(start, length, raw):
    sliced = FieldOffset(start, length).slice(raw)
    if sliced is None:
        assert start < 0 or length <= 0 or start + length > len(raw)
    else:
        assert sliced == raw[start:start + length]
        assert len(sliced) == length


@given(st.lists(st.dictionaries(st.text(max_size=5), st.text(max_size=5), max_size=3), max_size=5))
def test_array_elements_come_back_in_order(elements):
    decoded = [element for _, element in iter_array_elements(json.dumps(elements))]
    assert decoded == elements
