import pytest

from pcap_dissect.exceptions import FieldDecodeError
from pcap_dissect.packet.fields import LayerField, LayerFieldsContainer, field_text


def test_default_value_precedence():
    assert LayerField(show="a", raw_value="b", showname="c").default_value == "a"
    assert LayerField(raw_value="b", showname="c").default_value == "b"
    assert LayerField(showname="c").default_value == "c"
    assert LayerField().default_value == ""


def test_showname_split():
    field = LayerField(showname="Source Address: 10.0.0.1")
    assert field.showname_key == "Source Address"
    assert field.showname_value == "10.0.0.1"
    assert LayerField(showname="no separator").showname_value == ""


def test_from_attributes_parses_hide_and_positions():
    field = LayerField.from_attributes(
        name="ip.src", show="10.0.0.1", value="0a000001", hide="yes", pos="26", size="4"
    )
    assert field.hide is True
    assert field.pos == 26
    assert field.size == 4
    assert field.raw_value == "0a000001"
    assert LayerField.from_attributes(name="x").pos is None


def test_typed_accessors():
    assert LayerField(raw_value="abc").binary_value == b"\x0a\xbc"
    assert LayerField(raw_value="0050").binary_value == b"\x00\x50"
    assert LayerField(raw_value="80").int_value == 80
    assert LayerField(raw_value="0x1f").hex_value == 31
    assert LayerField(raw_value="ff").hex_value == 255


@pytest.mark.parametrize("accessor", ["binary_value", "int_value", "hex_value"])
def test_malformed_values_raise_field_decode_error(accessor):
    with pytest.raises(FieldDecodeError):
        getattr(LayerField(name="bad", raw_value="zz"), accessor)


def test_container_main_field_and_order():
    first = LayerField(name="ip.addr", show="10.0.0.1")
    second = LayerField(name="ip.addr", show="10.0.0.2")
    container = LayerFieldsContainer.of(first)
    container.add_field(second)
    assert container.main_field is first
    assert container.all_fields == [first, second]
    assert container.default_value == "10.0.0.1"
    assert str(container) == "10.0.0.1"
    assert [f.show for f in container] == ["10.0.0.1", "10.0.0.2"]


def test_empty_container():
    container = LayerFieldsContainer()
    assert container.default_value == ""
    assert container.main_field is None
    with pytest.raises(FieldDecodeError):
        container.int_value


def test_field_text_handles_lookup_results():
    assert field_text(None) == ""
    assert field_text(["a", "b"]) == "a"
    assert field_text(LayerFieldsContainer.of(LayerField(show="x"))) == "x"
    assert field_text(443) == "443"
