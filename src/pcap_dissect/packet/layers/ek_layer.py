from __future__ import annotations

from typing import Any, Dict, List, Optional

from ...core.config import settings
from ...core.constants import EK_LAYER_PREFIX_ALIASES
from .base import BaseLayer
from .ek_field_mapping import cast_field_value


class EkLayer(BaseLayer):
    """Layer over the flat, underscore-joined mapping of ``tshark -T ek``.

    EK output turns ``ip.flags.df`` into ``ip_flags_df`` (or ``ip_ip_flags_df``
    in newer releases), so lookups rebuild the hierarchy by trying each known
    prefix of the layer in turn. A name that only exists as the start of longer
    keys resolves to an :class:`EkMultiField`.
    """

    def __init__(
        self, layer_name: str, fields_dict: Dict[str, Any], cast_values: Optional[bool] = None
    ) -> None:
        super().__init__(layer_name)
        self._fields_dict = fields_dict
        self.cast_values = settings.ek_cast_values if cast_values is None else cast_values

    @property
    def fields_dict(self) -> Dict[str, Any]:
        return self._fields_dict

    def _possible_prefixes(self) -> List[str]:
        name = self._layer_name
        return [name, f"{name}_{name}", *EK_LAYER_PREFIX_ALIASES.get(name, ())]

    def _stripping_prefixes(self) -> List[str]:
        # Longest first so "ip_ip_src" loses "ip_ip_" rather than "ip_".
        name = self._layer_name
        return [f"{name}_{name}_", f"{name}_"]

    def get_field(self, name: str) -> Any:
        name = name.replace(".", "_")
        if name in self._fields_dict:
            return self._get_field_value(name)
        for prefix in self._possible_prefixes():
            nested = self._resolve_key(f"{prefix}_{name}")
            if nested is not None:
                return nested
        return None

    def _resolve_key(self, ek_name: str) -> Any:
        has_subfields = self._has_subfields(ek_name)
        if ek_name in self._fields_dict:
            value = self._get_field_value(ek_name)
            return EkMultiField(self, ek_name, value) if has_subfields else value
        if has_subfields:
            return EkMultiField(self, ek_name)
        return None

    def _has_subfields(self, ek_name: str) -> bool:
        prefix = ek_name + "_"
        return any(key.startswith(prefix) for key in self._fields_dict)

    def _get_field_value(self, ek_name: str) -> Any:
        value = self._fields_dict[ek_name]
        if self.cast_values:
            return cast_field_value(self._layer_name, ek_name, value)
        return value

    def all_field_names(self) -> List[str]:
        """Every key with the layer prefix removed, subfields included."""
        names: List[str] = []
        for key in self._fields_dict:
            short = key
            for prefix in self._stripping_prefixes():
                if key.startswith(prefix):
                    short = key[len(prefix):]
                    break
            if short not in names:
                names.append(short)
        return names

    @property
    def field_names(self) -> List[str]:
        names: List[str] = []
        for short in self.all_field_names():
            head = short.split("_", 1)[0]
            if head not in names:
                names.append(head)
        return names

    def has_field(self, name: str) -> bool:
        return self.get_field(name) is not None

    def get_field_as_list(self, name: str) -> List[Any]:
        """Return the field's values as a list; empty when the field is absent."""
        value = self.get_field(name)
        if value is None:
            return []
        if isinstance(value, list):
            return value
        return [value]

    def _field_lines(self) -> List[str]:
        return [f"\t{key}: {value}\n" for key, value in self._fields_dict.items()]


class EkMultiField:
    """A partial EK name whose value (if any) has further subfields."""

    def __init__(self, containing_layer: EkLayer, full_name: str, value: Any = None) -> None:
        self.containing_layer = containing_layer
        self.full_name = full_name
        self.value = value

    def get_field(self, field_name: str) -> Any:
        return self.containing_layer._resolve_key(f"{self.full_name}_{field_name.replace('.', '_')}")

    def has_field(self, field_name: str) -> bool:
        return self.get_field(field_name) is not None

    @property
    def subfields(self) -> List[str]:
        prefix = self.full_name + "_"
        names: List[str] = []
        for key in self.containing_layer.fields_dict:
            if key.startswith(prefix):
                head = key[len(prefix):].split("_", 1)[0]
                if head and head not in names:
                    names.append(head)
        return names

    def __getattr__(self, item: str) -> Any:
        if item.startswith("_"):
            raise AttributeError(item)
        value = self.get_field(item)
        if value is None:
            raise AttributeError(f"No subfield named {item}")
        return value

    def __dir__(self) -> List[str]:
        return sorted(set(dir(type(self))) | set(self.__dict__) | set(self.subfields))

    def __str__(self) -> str:
        if self.value is not None:
            return str(self.value)
        return f"<EkMultiField {self.full_name}>"

    def __repr__(self) -> str:
        return f"<EkMultiField {self.full_name}: {self.value!r}>"
