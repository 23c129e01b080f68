"""
Literal formatting and entity key rendering for OData URLs.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Union
from urllib.parse import quote

from ..constants import (
    BIG_NUMBER_STRING,
    BINARY_STRING,
    COLLECTION_PATTERN,
    DATE_TIME_OFFSET_STRING,
    DATE_TIME_STRING,
    GUID_STRING,
    ODataVersions,
    TIME_OF_DAY_STRING,
)
from ..models import DataTypes

# V2 literals of these kinds carry a type prefix, e.g. guid'...'
V2_LITERAL_PREFIXES = {
    GUID_STRING: "guid",
    DATE_TIME_STRING: "datetime",
    DATE_TIME_OFFSET_STRING: "datetimeoffset",
    TIME_OF_DAY_STRING: "time",
    BINARY_STRING: "binary",
}

UNQUOTED_TYPES = {"int", "float", BIG_NUMBER_STRING}


@dataclass(frozen=True)
class KeyLiteral:
    """The plain value of a single key property."""
    value: Any


@dataclass(frozen=True)
class KeyStructured:
    """Key property values by OData name or generated name."""
    values: Mapping[str, Any]


Key = Union[KeyLiteral, KeyStructured]


def as_key(value: Any) -> Key:
    """Convert a caller supplied key into the tagged form; mappings are structured keys."""
    if isinstance(value, (KeyLiteral, KeyStructured)):
        return value
    if isinstance(value, Mapping):
        return KeyStructured(dict(value))
    return KeyLiteral(value)


def _quote(value: Any) -> str:
    # Escape single quotes by doubling them, then URL encode
    return quote(str(value).replace("'", "''"), safe='')


def format_literal(value: Any, type_name: str, version: ODataVersions,
                   data_type: DataTypes = DataTypes.PRIMITIVE, odata_type: Optional[str] = None) -> str:
    """Format a value as OData URL literal according to its resolved type.

    Numbers and booleans are unquoted, everything string-like is quoted; V2 adds
    type prefixes for guid and date/time kinds, V4 qualifies enum members.
    """
    if value is None:
        return "null"
    if isinstance(value, Enum):
        value = value.value

    if data_type == DataTypes.ENUM:
        if version == ODataVersions.V4 and odata_type:
            match = re.match(COLLECTION_PATTERN, odata_type)
            return f"{match.group(1) if match else odata_type}'{_quote(value)}'"
        return f"'{_quote(value)}'"

    if type_name == "bool" or isinstance(value, bool):
        return "true" if value else "false"
    if type_name in UNQUOTED_TYPES:
        return str(value)

    prefix = V2_LITERAL_PREFIXES.get(type_name, "") if version == ODataVersions.V2 else ""
    return f"{prefix}'{_quote(value)}'"


def _lookup(values: Mapping[str, Any], prop) -> Any:
    if prop.odata_name in values:
        return values[prop.odata_name]
    return values.get(prop.name)


def render_key(key: Key, key_spec: Sequence, version: ODataVersions) -> str:
    """Render the key segment, e.g. `('x')` or `(Id=1,Name='x')`.

    A single-property key renders identically whether given as literal or as
    structured key; composite keys follow the declared key order.

    Args:
        key: literal or structured key
        key_spec: key property declarations (name, odata_name, type) in declared order
        version: OData version of the service
    """
    if not key_spec:
        raise ValueError("Entity type declares no key properties, cannot address a single entity")

    if isinstance(key, KeyLiteral):
        if len(key_spec) != 1:
            names = ', '.join(p.odata_name for p in key_spec)
            raise ValueError(f"Composite key ({names}) requires a structured key")
        if key.value is None:
            raise ValueError(f"Missing value for key property: {key_spec[0].odata_name}")
        return f"({format_literal(key.value, key_spec[0].type, version)})"

    missing = [p.odata_name for p in key_spec if _lookup(key.values, p) is None]
    if missing:
        raise ValueError(f"Missing value(s) for key properties: {', '.join(missing)}")

    parts = [(p.odata_name, format_literal(_lookup(key.values, p), p.type, version)) for p in key_spec]
    if len(parts) == 1:
        return f"({parts[0][1]})"
    return f"({','.join(f'{name}={value}' for name, value in parts)})"
