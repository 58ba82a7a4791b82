"""Field records shared by every layer implementation."""

from __future__ import annotations

import binascii
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional

from ..exceptions import FieldDecodeError
from ..utils import _safe_int


@dataclass
class LayerField:
    """One named value of a layer together with its display metadata."""

    name: str = ""
    showname: str = ""
    raw_value: str = ""
    show: str = ""
    hide: bool = False
    pos: Optional[int] = None
    size: Optional[int] = None
    unmasked_value: str = ""

    @classmethod
    def from_attributes(
        cls,
        name: Any = "",
        showname: Any = "",
        value: Any = "",
        show: Any = "",
        hide: Any = "",
        pos: Any = None,
        size: Any = None,
        unmaskedvalue: Any = "",
    ) -> "LayerField":
        """Build a field from the textual attributes tshark emits.

        ``hide`` is ``"yes"`` for hidden fields; ``pos``/``size`` are decimal
        strings and become ``None`` when missing or malformed.
        """
        return cls(
            name=name or "",
            showname=showname or "",
            raw_value=value or "",
            show=show or "",
            hide=str(hide).lower() in {"yes", "true", "1"},
            pos=_safe_int(pos) if pos not in (None, "") else None,
            size=_safe_int(size) if size not in (None, "") else None,
            unmasked_value=unmaskedvalue or "",
        )

    @property
    def default_value(self) -> str:
        """Return the best 'value' string this field has."""
        if self.show:
            return self.show
        if self.raw_value:
            return self.raw_value
        if self.showname:
            return self.showname
        return ""

    @property
    def showname_value(self) -> str:
        """The "pretty value" as displayed by Wireshark (after ``": "``)."""
        if self.showname and ": " in self.showname:
            return self.showname.split(": ", 1)[1]
        return ""

    @property
    def showname_key(self) -> str:
        """The "pretty name" as displayed by Wireshark (before ``": "``)."""
        if self.showname and ": " in self.showname:
            return self.showname.split(": ", 1)[0]
        return ""

    @property
    def binary_value(self) -> bytes:
        raw = self.raw_value
        if len(raw) % 2 == 1:
            raw = "0" + raw
        try:
            return binascii.unhexlify(raw)
        except (binascii.Error, ValueError) as exc:
            raise FieldDecodeError(
                f"Field {self.name!r} is not a hex string", context=self.raw_value
            ) from exc

    @property
    def int_value(self) -> int:
        try:
            return int(self.raw_value, 10)
        except (TypeError, ValueError) as exc:
            raise FieldDecodeError(
                f"Field {self.name!r} is not a decimal integer", context=self.raw_value
            ) from exc

    @property
    def hex_value(self) -> int:
        raw = self.raw_value
        if raw.startswith(("0x", "0X")):
            raw = raw[2:]
        try:
            return int(raw, 16)
        except (TypeError, ValueError) as exc:
            raise FieldDecodeError(
                f"Field {self.name!r} is not a hexadecimal integer", context=self.raw_value
            ) from exc

    def __str__(self) -> str:
        return self.default_value


@dataclass
class LayerFieldsContainer:
    """One or more fields sharing a name, kept in encounter order.

    The first field is the main field; the convenience accessors delegate to
    it.
    """

    fields: List[LayerField] = field(default_factory=list)

    @classmethod
    def of(cls, main_field: LayerField) -> "LayerFieldsContainer":
        return cls(fields=[main_field])

    def add_field(self, layer_field: LayerField) -> None:
        self.fields.append(layer_field)

    @property
    def main_field(self) -> Optional[LayerField]:
        return self.fields[0] if self.fields else None

    @property
    def all_fields(self) -> List[LayerField]:
        return self.fields

    def _require_main(self) -> LayerField:
        main = self.main_field
        if main is None:
            raise FieldDecodeError("no fields in container")
        return main

    @property
    def default_value(self) -> str:
        main = self.main_field
        return main.default_value if main is not None else ""

    @property
    def binary_value(self) -> bytes:
        return self._require_main().binary_value

    @property
    def int_value(self) -> int:
        return self._require_main().int_value

    @property
    def hex_value(self) -> int:
        return self._require_main().hex_value

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self) -> Iterator[LayerField]:
        return iter(self.fields)

    def __getitem__(self, index: int) -> LayerField:
        return self.fields[index]

    def __str__(self) -> str:
        return self.default_value


def field_text(value: Any) -> str:
    """Render any layer lookup result as the string tshark would display."""
    if value is None:
        return ""
    if isinstance(value, (LayerField, LayerFieldsContainer)):
        return value.default_value
    if isinstance(value, list):
        return field_text(value[0]) if value else ""
    if hasattr(value, "get_field"):
        # nested JSON layer or EK multi-field
        return field_text(getattr(value, "value", None))
    return str(value)


__all__ = ["LayerField", "LayerFieldsContainer", "field_text"]
