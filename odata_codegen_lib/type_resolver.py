"""
Resolution of raw OData type tokens into primitive, model or enum types.
"""

import re
from typing import Callable, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .constants import (
    BIG_NUMBER_STRING,
    BIG_NUMBER_TYPES,
    COLLECTION_PATTERN,
    DEFAULT_PRIMITIVE_TYPE,
    EDM_PREFIX,
    ODATA_PRIMITIVE_TYPES,
    WRAPPER_TYPES,
)
from .errors import SchemaError
from .models import DataTypes


class ResolvedType(BaseModel):
    model_config = ConfigDict(frozen=True)

    data_type: DataTypes
    is_collection: bool
    type: str
    imports: Tuple[str, ...] = ()


class TypeResolver:
    """Classifies type tokens for one digestion run.

    Args:
        namespaces: namespaces and aliases of the service's own schemas
        lookup_enum: returns the generated enum name for an unqualified name, or None
        model_name: transform from an unqualified type name to the generated model name
        big_number_as_string: route Edm.Int64 / Edm.Decimal to the string wrapper type
    """

    def __init__(self, namespaces: Iterable[str], lookup_enum: Callable[[str], Optional[str]],
                 model_name: Callable[[str], str], big_number_as_string: bool = False):
        self.prefixes = sorted({f"{ns}." for ns in namespaces if ns}, key=lambda p: (-len(p), p))
        self.lookup_enum = lookup_enum
        self.model_name = model_name
        self.big_number_as_string = big_number_as_string
        self._imports: List[str] = []

    @property
    def imports(self) -> List[str]:
        """Wrapper types needed so far, deduplicated in first-seen order."""
        return list(self._imports)

    def _strip_service_prefix(self, token: str) -> Optional[str]:
        for prefix in self.prefixes:
            if token.startswith(prefix):
                return token[len(prefix):]
        return None

    def map_primitive(self, odata_type: str) -> str:
        """Map an Edm type to its Python target; unknown Edm kinds fall back to str."""
        if self.big_number_as_string and odata_type in BIG_NUMBER_TYPES:
            result = BIG_NUMBER_STRING
        else:
            result = ODATA_PRIMITIVE_TYPES.get(odata_type, DEFAULT_PRIMITIVE_TYPE)
        if result in WRAPPER_TYPES and result not in self._imports:
            self._imports.append(result)
        return result

    def resolve(self, type_token: str) -> ResolvedType:
        match = re.match(COLLECTION_PATTERN, type_token.strip())
        is_collection = match is not None
        data_type = match.group(1).strip() if match else type_token.strip()

        # domain object known from service, e.g. EntityType, EnumType, ...
        stripped = self._strip_service_prefix(data_type)
        if stripped is not None:
            enum_name = self.lookup_enum(stripped)
            if enum_name is not None:
                return ResolvedType(data_type=DataTypes.ENUM, is_collection=is_collection, type=enum_name)
            return ResolvedType(data_type=DataTypes.MODEL, is_collection=is_collection,
                                type=self.model_name(stripped))

        # OData built-in data types
        if data_type.startswith(EDM_PREFIX):
            result = self.map_primitive(data_type)
            imports = (result,) if result in WRAPPER_TYPES else ()
            return ResolvedType(data_type=DataTypes.PRIMITIVE, is_collection=is_collection,
                                type=result, imports=imports)

        namespaces = ", ".join(f"'{p}*'" for p in self.prefixes) or "'<namespace>.*'"
        raise SchemaError(
            f"Unknown type [{data_type}]: Not 'Collection(...)', not {namespaces}, not OData type 'Edm.*'",
            identifier=type_token, expected="Collection(...), namespaced type or Edm primitive")
