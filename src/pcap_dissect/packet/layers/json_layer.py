from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from ...core.constants import RAW_SUFFIX
from .base import BaseLayer, sanitize_field_name

_TREE_SUFFIX = "_tree"


class JsonLayer(BaseLayer):
    """Layer backed by one blob of tshark ``-T json`` output.

    ``layer_data`` is either a mapping of dotted field names, a scalar (the
    layer then only has a :attr:`value`), or a list of such blobs. A list
    models repeated occurrences of the same layer: the first element becomes
    this layer's fields and the rest become :attr:`duplicate_layers`, which
    ordinary field lookup never consults.
    """

    def __init__(
        self,
        layer_name: str,
        layer_data: Any,
        full_name: Optional[str] = None,
        is_intermediate: bool = False,
    ) -> None:
        super().__init__(layer_name)
        self._full_name = full_name or layer_name
        self._is_intermediate = is_intermediate
        self._wrapped_fields: Dict[str, Any] = {}
        self.duplicate_layers: List[JsonLayer] = []
        self.value: Any = None

        primary = layer_data
        if isinstance(layer_data, list):
            primary = layer_data[0] if layer_data else {}
            self.duplicate_layers = [
                JsonLayer(layer_name, item, full_name=self._full_name, is_intermediate=is_intermediate)
                for item in layer_data[1:]
            ]
        if isinstance(primary, dict):
            self._all_fields: Dict[str, Any] = primary
        else:
            self._all_fields = {}
            self.value = primary

    @property
    def full_name(self) -> str:
        return self._full_name

    @property
    def is_intermediate(self) -> bool:
        """``True`` for path segments that only exist because deeper fields do."""
        return self._is_intermediate

    @property
    def values(self) -> List[Any]:
        """Scalar value of this layer followed by those of its duplicates."""
        return [layer.value for layer in [self, *self.duplicate_layers] if layer.value is not None]

    @property
    def _prefix(self) -> str:
        return self._full_name + "."

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_field(self, name: str) -> Any:
        if name in self._wrapped_fields:
            return self._wrapped_fields[name]

        key, field = self._get_internal_field_by_name(name)
        if field is None:
            fake_prefix = self._fake_field_prefix(name)
            if fake_prefix is None:
                return self._walk_dotted(name) if "." in name else None
            wrapped = self._make_fake_field(name, fake_prefix)
        else:
            wrapped = self._make_wrapped_field(name, key, field)
        self._wrapped_fields[name] = wrapped
        return wrapped

    def _get_internal_field_by_name(self, name: str) -> Tuple[Optional[str], Any]:
        fields = self._all_fields
        if fields.get(name) is not None:
            return name, fields[name]
        full_name = self._prefix + name
        if fields.get(full_name) is not None:
            return full_name, fields[full_name]

        wanted = sanitize_field_name(name, self._prefix).lower()
        for key, value in fields.items():
            if value is not None and sanitize_field_name(key, self._prefix).lower() == wanted:
                return key, value
        return None, None

    def _fake_field_prefix(self, name: str) -> Optional[str]:
        """Return the key prefix that makes ``name`` an intermediate segment."""
        for prefix in (f"{self._prefix}{name}.", f"{name}."):
            if any(key.startswith(prefix) for key in self._all_fields):
                return prefix
        return None

    def _make_fake_field(self, name: str, prefix: str) -> "JsonLayer":
        subfields = {key: value for key, value in self._all_fields.items() if key.startswith(prefix)}
        return JsonLayer(name, subfields, full_name=prefix[:-1], is_intermediate=True)

    def _nested_full_name(self, key: str) -> str:
        # "tcp.flags_tree" holds the "tcp.flags.*" fields
        if key.endswith(_TREE_SUFFIX):
            key = key[: -len(_TREE_SUFFIX)]
        if key.startswith(self._prefix) or "." in key:
            return key
        return self._prefix + key

    def _make_wrapped_field(self, name: str, key: str, field: Any) -> Any:
        if isinstance(field, (dict, list)):
            return JsonLayer(name, field, full_name=self._nested_full_name(key))
        return field

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def field_names(self) -> List[str]:
        names: List[str] = []
        seen = set()
        for key in self._all_fields:
            if key.endswith(RAW_SUFFIX):
                continue
            if key.startswith(self._prefix):
                candidate = sanitize_field_name(key, self._prefix)
            elif "." in key:
                candidate = sanitize_field_name(key.rsplit(".", 1)[1])
            else:
                candidate = sanitize_field_name(key)
            if candidate and candidate not in seen:
                seen.add(candidate)
                names.append(candidate)
        return names

    def _walk_dotted(self, name: str) -> Any:
        """Resolve ``flags.syn`` through nested and intermediate layers."""
        if name.lower().startswith(self._prefix.lower()):
            name = name[len(self._prefix):]
        parts = name.split(".")
        current: Any = self
        for i, part in enumerate(parts):
            if not isinstance(current, JsonLayer) or not part:
                return None
            value = current.get_field(part)
            if i < len(parts) - 1 and not isinstance(value, JsonLayer):
                # "flags" holds the value, "flags_tree" the children
                value = current.get_field(part + _TREE_SUFFIX)
            if value is None:
                return None
            current = value
        return current

    def _field_lines(self) -> List[str]:
        lines: List[str] = []
        for key, value in self._all_fields.items():
            if not key.endswith(RAW_SUFFIX):
                lines.extend(_field_repr(key, value, "\t"))
        for duplicate in self.duplicate_layers:
            lines.extend(duplicate._field_lines())
        return lines

    def __str__(self) -> str:
        if self.value is not None:
            return str(self.value)
        return repr(self)


def _field_repr(key: str, value: Any, indent: str) -> List[str]:
    if isinstance(value, dict):
        lines = [f"{indent}{key}:\n"]
        for sub_key, sub_value in value.items():
            lines.extend(_field_repr(sub_key, sub_value, indent + "\t"))
        return lines
    if isinstance(value, list):
        lines = []
        for item in value:
            lines.extend(_field_repr(key, item, indent))
        return lines
    return [f"{indent}{key}: {value}\n"]
