"""Type table for EK field values.

``tshark -T ek`` renders every value as a string. When casting is enabled the
EK layer converts the fields listed here to native Python types.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple

from ...core.cache import PacketCache
from ...utils import _safe_str_to_bool, parse_timestamp

DEFAULT_FIELD_TYPES: Dict[Tuple[str, str], str] = {
    ("frame", "frame_time_epoch"): "timestamp",
    ("frame", "frame_time_relative"): "float",
    ("frame", "frame_len"): "int",
    ("frame", "frame_cap_len"): "int",
    ("frame", "frame_marked"): "bool",
    ("frame", "frame_ignored"): "bool",
    ("ip", "ip_version"): "int",
    ("ip", "ip_hdr_len"): "int",
    ("ip", "ip_dsfield_dscp"): "int",
    ("ip", "ip_len"): "int",
    ("ip", "ip_id"): "int",
    ("ip", "ip_flags"): "int",
    ("ip", "ip_ttl"): "int",
    ("ip", "ip_proto"): "int",
    ("ip", "ip_checksum"): "int",
    ("tcp", "tcp_srcport"): "int",
    ("tcp", "tcp_dstport"): "int",
    ("tcp", "tcp_seq"): "int",
    ("tcp", "tcp_ack"): "int",
    ("tcp", "tcp_hdr_len"): "int",
    ("tcp", "tcp_flags"): "int",
    ("tcp", "tcp_window_size"): "int",
    ("tcp", "tcp_checksum"): "int",
    ("tcp", "tcp_urgent_pointer"): "int",
    ("udp", "udp_srcport"): "int",
    ("udp", "udp_dstport"): "int",
    ("udp", "udp_length"): "int",
    ("udp", "udp_checksum"): "int",
    ("dns", "dns_id"): "int",
    ("dns", "dns_flags"): "int",
    ("dns", "dns_count_queries"): "int",
    ("dns", "dns_count_answers"): "int",
    ("dns", "dns_count_auth_rr"): "int",
    ("dns", "dns_count_add_rr"): "int",
    ("http", "http_response_code"): "int",
    ("http", "http_content_length"): "int",
}

_field_types: Dict[Tuple[str, str], str] = dict(DEFAULT_FIELD_TYPES)
_cache = PacketCache()


def _lookup_type(layer_name: str, field_name: str) -> Optional[str]:
    layer_name = layer_name.lower()
    field_name = field_name.lower()
    # Newer tshark releases emit "ip_ip_ttl" for "ip.ttl".
    doubled = f"{layer_name}_{layer_name}_"
    if field_name.startswith(doubled):
        field_name = field_name[len(layer_name) + 1:]
    exact = _field_types.get((layer_name, field_name))
    if exact is not None:
        return exact
    for (_, mapped_field), target_type in _field_types.items():
        if mapped_field == field_name:
            return target_type
    return None


get_field_type = _cache.memoize(_lookup_type)


def add_mapping(layer_name: str, field_name: str, target_type: str) -> None:
    """Register (or override) the target type of one EK field."""
    if target_type not in _CASTERS:
        raise ValueError(f"Unknown target type {target_type!r}")
    _field_types[(layer_name.lower(), field_name.lower())] = target_type
    _cache.clear()


def reset_mappings() -> None:
    _field_types.clear()
    _field_types.update(DEFAULT_FIELD_TYPES)
    _cache.clear()


def _cast_int(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text, 10)
        except ValueError:
            pass
        if text.lower().startswith("0x"):
            try:
                return int(text[2:], 16)
            except ValueError:
                pass
    return value


def _cast_float(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            pass
    return value


def _cast_bool(value: Any) -> Any:
    if isinstance(value, (int, float)):
        return bool(value)
    parsed = _safe_str_to_bool(value)
    return value if parsed is None else parsed


def _cast_timestamp(value: Any) -> Any:
    parsed = parse_timestamp(value)
    return value if parsed is None else parsed


_CASTERS: Dict[str, Callable[[Any], Any]] = {
    "int": _cast_int,
    "float": _cast_float,
    "bool": _cast_bool,
    "timestamp": _cast_timestamp,
}


def cast_field_value(layer_name: str, field_name: str, value: Any) -> Any:
    """Cast ``value`` according to the table; unmapped or unparsable values pass through.

    Lists are cast element by element.
    """
    target_type = get_field_type(layer_name, field_name)
    if target_type is None:
        return value
    caster = _CASTERS[target_type]
    if isinstance(value, list):
        return [caster(item) for item in value]
    return caster(value)


__all__ = [
    "DEFAULT_FIELD_TYPES",
    "add_mapping",
    "cast_field_value",
    "get_field_type",
    "reset_mappings",
]
