from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import Any, List, Optional, TextIO

from ...core.constants import DATA_LAYER_NAME, GENINFO_LAYER_NAME
from ...utils import _safe_int, _safe_str_to_bool
from ..fields import field_text


def get_field_prefix(layer_name: str) -> str:
    """Return the dotted prefix tshark puts in front of a layer's field names."""
    if layer_name == GENINFO_LAYER_NAME:
        return ""
    return layer_name + "."


def sanitize_field_name(field_name: str, prefix: str = "") -> str:
    """Strip ``prefix`` (any case) and replace dots and dashes with underscores."""
    if prefix and field_name.lower().startswith(prefix.lower()):
        field_name = field_name[len(prefix):]
    return field_name.replace(".", "_").replace("-", "_")


class BaseLayer(ABC):
    """Capability set shared by every layer variant.

    Subclasses provide :meth:`get_field` and :attr:`field_names`; the other
    operations are derived from those two. Fields are also reachable as
    attributes (``layer.src``) when the name does not clash with a method.
    """

    def __init__(self, layer_name: str) -> None:
        self._layer_name = layer_name

    @property
    def layer_name(self) -> str:
        return self._layer_name

    @abstractmethod
    def get_field(self, name: str) -> Any:
        """Return the value stored under ``name`` or ``None`` if absent."""

    @property
    @abstractmethod
    def field_names(self) -> List[str]:
        """Ordered, de-duplicated names of the fields in this layer."""

    def has_field(self, name: str) -> bool:
        lowered = name.lower()
        if any(field_name.lower() == lowered for field_name in self.field_names):
            return True
        return self.get_field(name) is not None

    def get(self, name: str, default: Any = None) -> Any:
        """Return the field ``name`` or ``default`` when it is absent."""
        value = self.get_field(name)
        return default if value is None else value

    def get_str(self, name: str, default: str = "") -> str:
        text = field_text(self.get_field(name))
        return text if text else default

    def get_int(self, name: str, default: int = 0) -> int:
        """Return the field as an int; ``default`` when absent or not numeric."""
        value = self.get_field(name)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        parsed = _safe_int(field_text(value)) if value is not None else None
        return default if parsed is None else parsed

    def get_bool(self, name: str, default: bool = False) -> bool:
        value = self.get_field(name)
        if value is None:
            return default
        parsed = _safe_str_to_bool(value if isinstance(value, bool) else field_text(value))
        return default if parsed is None else parsed

    def __getattr__(self, item: str) -> Any:
        # Private names never resolve to fields; also guards half-built objects.
        if item.startswith("_"):
            raise AttributeError(item)
        value = self.get_field(item)
        if value is None:
            raise AttributeError(f"No attribute named {item}")
        return value

    def __dir__(self) -> List[str]:
        return sorted(set(dir(type(self))) | set(self.__dict__) | set(self.field_names))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_field(name)

    def pretty_print(self, writer: Optional[TextIO] = None) -> None:
        writer = writer or sys.stdout
        if self.layer_name == DATA_LAYER_NAME:
            writer.write("DATA\n")
            return
        writer.write(f"Layer {self.layer_name.upper()}:\n")
        for line in self._field_lines():
            writer.write(line)

    def _field_lines(self) -> List[str]:
        lines = []
        for field_name in self.field_names:
            value = self.get_field(field_name)
            if value is not None:
                lines.append(f"\t{field_name}: {value}\n")
        return lines

    def __repr__(self) -> str:
        return f"<{self.layer_name.upper()} Layer>"
