"""
Runtime support for generated artifacts: query objects, key rendering and services.
"""

from .client import ODataClient
from .keys import KeyLiteral, KeyStructured, as_key, format_literal, render_key
from .query_objects import (
    QEntityCollectionPath,
    QEntityPath,
    QEnumCollectionPath,
    QEnumPath,
    QPrimitiveCollectionPath,
    QPrimitivePath,
    QueryObject,
    QueryObjectRegistry,
    QueryOperation,
)
from .services import (
    CollectionPropertyService,
    CollectionService,
    EntityService,
    MainService,
    ModelService,
    PrimitivePropertyService,
    bind_service,
)

__all__ = [
    "ODataClient",
    "KeyLiteral",
    "KeyStructured",
    "as_key",
    "format_literal",
    "render_key",
    "QEntityCollectionPath",
    "QEntityPath",
    "QEnumCollectionPath",
    "QEnumPath",
    "QPrimitiveCollectionPath",
    "QPrimitivePath",
    "QueryObject",
    "QueryObjectRegistry",
    "QueryOperation",
    "CollectionPropertyService",
    "CollectionService",
    "EntityService",
    "MainService",
    "ModelService",
    "PrimitivePropertyService",
    "bind_service",
]
