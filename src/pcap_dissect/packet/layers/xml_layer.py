from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Union
from xml.etree.ElementTree import Element

from ...core.constants import DATA_LAYER_NAME, FAKE_FIELD_WRAPPER
from ...utils import _safe_int
from ..fields import LayerField, LayerFieldsContainer
from .base import BaseLayer, get_field_prefix, sanitize_field_name

_FIELD_ATTRIBUTES = ("name", "showname", "value", "show", "hide", "pos", "size", "unmaskedvalue")
_POSITION_ATTRIBUTES = ("pos", "size")

FieldLookup = Union[LayerFieldsContainer, str]


class XmlLayer(BaseLayer):
    """Layer built from one PDML ``<proto>`` element.

    Fields are stored under their full tshark name (``ip.src``); repeated
    names accumulate in one :class:`LayerFieldsContainer`. Nested ``<field>``
    elements are flattened into the layer and also remembered under their
    parent so :meth:`get_subfields` can return them.

    In ``raw_mode`` lookups return the field's default string instead of the
    container.
    """

    def __init__(
        self,
        layer_name: str,
        raw_mode: bool = False,
        pos: Optional[int] = None,
        size: Optional[int] = None,
    ) -> None:
        super().__init__(layer_name)
        self.raw_mode = raw_mode
        self.pos = pos
        self.size = size
        self._all_fields: Dict[str, LayerFieldsContainer] = {}
        self._subfields: Dict[str, List[str]] = {}

    @classmethod
    def from_element(
        cls, element: Element, raw_mode: bool = False, include_positions: bool = False
    ) -> "XmlLayer":
        pos = size = None
        if include_positions:
            pos = _safe_int(element.get("pos")) if element.get("pos") else None
            size = _safe_int(element.get("size")) if element.get("size") else None
        layer = cls(element.get("name", ""), raw_mode=raw_mode, pos=pos, size=size)
        layer._add_element_fields(element, None, include_positions)
        return layer

    def _add_element_fields(
        self, element: Element, parent: Optional[str], include_positions: bool
    ) -> None:
        for field_element in element.findall("field"):
            name = field_element.get("name", "")
            child_parent = parent
            # Unnamed fields are text-only tree nodes; their children still count.
            if name:
                attributes = {
                    key: value
                    for key, value in field_element.attrib.items()
                    if key in _FIELD_ATTRIBUTES
                    and (include_positions or key not in _POSITION_ATTRIBUTES)
                }
                self.add_field(LayerField.from_attributes(**attributes), parent=parent)
                child_parent = name
            self._add_element_fields(field_element, child_parent, include_positions)

    @property
    def layer_name(self) -> str:
        if self._layer_name == FAKE_FIELD_WRAPPER:
            return DATA_LAYER_NAME
        return self._layer_name

    @property
    def all_fields(self) -> Dict[str, LayerFieldsContainer]:
        return self._all_fields

    def add_field(self, layer_field: LayerField, parent: Optional[str] = None) -> None:
        container = self._all_fields.get(layer_field.name)
        if container is None:
            self._all_fields[layer_field.name] = LayerFieldsContainer.of(layer_field)
        else:
            container.add_field(layer_field)
        if parent is not None:
            children = self._subfields.setdefault(parent, [])
            if layer_field.name not in children:
                children.append(layer_field.name)

    def _sanitize(self, field_name: str) -> str:
        return sanitize_field_name(field_name, get_field_prefix(self._layer_name))

    def _find_key(self, name: str) -> Optional[str]:
        if name in self._all_fields:
            return name
        wanted = self._sanitize(name).lower()
        for key in self._all_fields:
            if self._sanitize(key).lower() == wanted:
                return key
        return None

    def _present(self, container: LayerFieldsContainer) -> FieldLookup:
        return container.default_value if self.raw_mode else container

    def get_field(self, name: str) -> Optional[FieldLookup]:
        key = self._find_key(name)
        if key is None:
            return None
        return self._present(self._all_fields[key])

    def get_field_value(self, name: str, raw: bool = False) -> Any:
        """Return the field, or with ``raw`` the main field's raw hex value."""
        field = self.get_field(name)
        if field is None or not raw:
            return field
        if isinstance(field, LayerFieldsContainer):
            main = field.main_field
            return main.raw_value if main is not None else None
        return field

    def get_subfields(self, parent: str) -> Dict[str, FieldLookup]:
        """Return the direct children of ``parent`` keyed by sanitized name."""
        key = self._find_key(parent)
        if key is None:
            return {}
        return {
            self._sanitize(child): self._present(self._all_fields[child])
            for child in self._subfields.get(key, [])
        }

    @property
    def field_names(self) -> List[str]:
        names: List[str] = []
        for key in self._all_fields:
            sanitized = self._sanitize(key)
            if sanitized not in names:
                names.append(sanitized)
        return names

    def iter_positioned_fields(self) -> Iterator[LayerField]:
        """Yield the main field of every container that carries ``pos``/``size``."""
        for container in self._all_fields.values():
            main = container.main_field
            if main is not None and main.pos is not None and main.size:
                yield main

    def _field_lines(self) -> List[str]:
        lines = []
        for container in self._all_fields.values():
            for layer_field in container.all_fields:
                label = layer_field.showname or f"{layer_field.name}: {layer_field.default_value}"
                lines.append(f"\t{label}\n")
        return lines
