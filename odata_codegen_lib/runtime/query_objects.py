"""
Runtime query objects built from the query object artifacts of a generation run.

Nested nodes of model-typed properties are built on first access and cached,
so self-referencing types (Person.BestFriend: Person) can be traversed to any
depth without constructing the graph up front.
"""

import json
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote

from ..constants import ODataVersions
from ..errors import ReferenceLookupError
from ..generator.artifacts import (
    FieldDeclaration,
    GenerationResult,
    OperationReference,
    QueryObjectArtifact,
    QueryOperationArtifact,
    QueryPropDeclaration,
)
from ..models import DataTypes, OperationKinds
from .keys import format_literal


def is_internal_lookup(obj: Any, name: str, state: str) -> bool:
    """Dunder lookups and lookups before `state` is set never resolve to generated members."""
    return name.startswith("__") or state not in obj.__dict__


class QPath:
    """A property path relative to the service root or an entity.

    Node state is private and exposed through `get_*` methods, so that the
    members of nested query objects are never shadowed by it.
    """

    def __init__(self, path: str, declaration: QueryPropDeclaration, version: ODataVersions):
        self._path = path
        self._declaration = declaration
        self._version = version

    def get_path(self) -> str:
        return self._path

    def get_declaration(self) -> QueryPropDeclaration:
        return self._declaration

    def get_path_type(self) -> str:
        return self._declaration.path_type

    def __repr__(self):
        return f"{self._declaration.path_type}({self._path!r})"


class QPrimitivePath(QPath):
    """Leaf path of a primitive property; comparisons render filter expressions."""

    def _compare(self, operator: str, value: Any) -> str:
        literal = format_literal(value, self._declaration.type, self._version, self._declaration.data_type,
                                 self._declaration.odata_type)
        return f"{self._path} {operator} {literal}"

    def eq(self, value):
        return self._compare("eq", value)

    def ne(self, value):
        return self._compare("ne", value)

    def gt(self, value):
        return self._compare("gt", value)

    def ge(self, value):
        return self._compare("ge", value)

    def lt(self, value):
        return self._compare("lt", value)

    def le(self, value):
        return self._compare("le", value)


class QEnumPath(QPrimitivePath):
    pass


class QPrimitiveCollectionPath(QPath):
    pass


class QEnumCollectionPath(QPath):
    pass


class QEntityPath(QPath):
    """Path of a model-typed property; the nested query object is built lazily, once."""

    def __init__(self, path: str, declaration: QueryPropDeclaration, version: ODataVersions,
                 factory: Callable[[], "QueryObject"]):
        super().__init__(path, declaration, version)
        self._factory = factory
        self._object: Optional[QueryObject] = None

    def is_built(self) -> bool:
        return self._object is not None

    def get_object(self) -> "QueryObject":
        if self._object is None:
            self._object = self._factory()
        return self._object

    def __getattr__(self, name: str):
        if is_internal_lookup(self, name, "_factory"):
            raise AttributeError(name)
        return getattr(self.get_object(), name)


class QEntityCollectionPath(QEntityPath):
    """Collection variant of `QEntityPath`, sharing the same nested query object shape."""


_PATH_CLASSES = {
    "QEntityPath": QEntityPath,
    "QEntityCollectionPath": QEntityCollectionPath,
    "QEnumPath": QEnumPath,
    "QEnumCollectionPath": QEnumCollectionPath,
    "QPrimitiveCollectionPath": QPrimitiveCollectionPath,
}


class QueryOperation:
    """URL and payload construction of one function or action."""

    def __init__(self, artifact: QueryOperationArtifact, version: ODataVersions):
        self.artifact = artifact
        self.version = version

    @property
    def name(self) -> str:
        return self.artifact.name

    @property
    def is_action(self) -> bool:
        return self.artifact.operation_kind == OperationKinds.ACTION

    def _values(self, params: Optional[Mapping[str, Any]], kwargs: Dict[str, Any]) -> List[Tuple[FieldDeclaration, Any]]:
        given = dict(params or {})
        given.update(kwargs)
        known = {}
        for p in self.artifact.parameters:
            known[p.name] = p
            known[p.odata_name] = p
        unknown = [k for k in given if k not in known]
        if unknown:
            raise ValueError(f"Unknown parameter(s) for {self.artifact.odata_name}: {', '.join(unknown)}")

        values = []
        for p in self.artifact.parameters:
            value = given.get(p.odata_name, given.get(p.name))
            if value is None and p.required:
                raise ValueError(f"Missing value for required parameter {p.odata_name} of {self.artifact.odata_name}")
            values.append((p, value))
        return values

    def _format(self, param: FieldDeclaration, value: Any) -> str:
        if param.is_collection:
            return quote(json.dumps(list(value), separators=(',', ':')), safe='')
        return format_literal(value, param.type, self.version, param.data_type, param.odata_type)

    def build_url(self, params: Optional[Mapping[str, Any]] = None, name: Optional[str] = None, **kwargs) -> str:
        """Relative URL of the call.

        Bound operations are addressed by their qualified name, unbound ones by the
        import name (`name`) or their own name.
        """
        operation_name = self.artifact.qualified_name if self.artifact.is_bound else (name or self.artifact.odata_name)
        values = [(p, v) for p, v in self._values(params, kwargs) if v is not None]

        if self.version == ODataVersions.V2:
            if not values:
                return operation_name
            return f"{operation_name}?" + "&".join(f"{p.odata_name}={self._format(p, v)}" for p, v in values)
        if self.is_action:
            return operation_name
        return f"{operation_name}(" + ",".join(f"{p.odata_name}={self._format(p, v)}" for p, v in values) + ")"

    def build_body(self, params: Optional[Mapping[str, Any]] = None, **kwargs) -> Dict[str, Any]:
        """Action payload: named parameters, entries without value are omitted."""
        return {p.odata_name: v for p, v in self._values(params, kwargs) if v is not None}

    def __call__(self, params: Optional[Mapping[str, Any]] = None, **kwargs) -> str:
        return self.build_url(params, **kwargs)

    def __repr__(self):
        return f"QueryOperation({self.artifact.name!r})"


class QueryObject:
    """Path nodes of one model type, prefixed with the path they are reached by."""

    def __init__(self, registry: "QueryObjectRegistry", artifact: QueryObjectArtifact, prefix: Optional[str] = None):
        self._registry = registry
        self._artifact = artifact
        self._prefix = prefix
        self._members = registry.members_of(artifact)
        self._cache: Dict[str, Any] = {}

    def get_artifact(self) -> QueryObjectArtifact:
        return self._artifact

    def get_prefix(self) -> Optional[str]:
        return self._prefix

    def with_prefix(self, odata_name: str) -> str:
        return f"{self._prefix}/{odata_name}" if self._prefix else odata_name

    def get_members(self) -> List[str]:
        return list(self._members)

    def __getattr__(self, name: str):
        if is_internal_lookup(self, name, "_members"):
            raise AttributeError(name)
        if name not in self._cache:
            declaration = self._members.get(name)
            if declaration is None:
                raise AttributeError(f"'{self._artifact.name}' has no member '{name}'")
            if isinstance(declaration, OperationReference):
                self._cache[name] = self._registry.get_operation(declaration.query_operation)
            else:
                self._cache[name] = self._registry.create_path(declaration, self.with_prefix(declaration.odata_name))
        return self._cache[name]

    def __dir__(self):
        return sorted(set(super().__dir__()) | set(self._members))

    def __repr__(self):
        return f"{self._artifact.name}({self._prefix!r})"


class QueryObjectRegistry:
    """Creates query objects and operations from the query object family of a `GenerationResult`."""

    def __init__(self, result: GenerationResult):
        self.version = result.version
        self.query_objects = result.by_kind("query_object")
        self.operations = result.by_kind("query_operation")
        self._members: Dict[str, Dict[str, Any]] = {}

    def _get(self, registry: Dict[str, Any], kind: str, name: str):
        artifact = registry.get(name)
        if artifact is None:
            raise ReferenceLookupError(f"Unknown {kind} [{name}]", identifier=name, expected=kind)
        return artifact

    def members_of(self, artifact: QueryObjectArtifact) -> Dict[str, Any]:
        """Properties and bound operations of the type including its base types, base first."""
        if artifact.name not in self._members:
            members: Dict[str, Any] = {}
            if artifact.base_class:
                members.update(self.members_of(self._get(self.query_objects, "query object", artifact.base_class)))
            members.update((p.name, p) for p in artifact.props)
            members.update((o.name, o) for o in artifact.operations)
            self._members[artifact.name] = members
        return self._members[artifact.name]

    def create(self, name: str, prefix: Optional[str] = None) -> QueryObject:
        return QueryObject(self, self._get(self.query_objects, "query object", name), prefix)

    def create_path(self, declaration: QueryPropDeclaration, path: str) -> QPath:
        if declaration.data_type == DataTypes.MODEL:
            cls = _PATH_CLASSES[declaration.path_type]
            return cls(path, declaration, self.version, lambda: self.create(declaration.type, path))
        cls = _PATH_CLASSES.get(declaration.path_type, QPrimitivePath)
        return cls(path, declaration, self.version)

    def get_operation(self, name: str) -> QueryOperation:
        return QueryOperation(self._get(self.operations, "query operation", name), self.version)
