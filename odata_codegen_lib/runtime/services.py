"""
Runtime service façades bound from the service artifacts of a generation run.

Services only build paths and payloads; every request is delegated to the
injected `ODataClient` and its return value (possibly an awaitable) is handed
back unchanged.
"""

from typing import Any, Dict, Mapping, Optional, Sequence

from ..constants import ODataVersions
from ..errors import ReferenceLookupError
from ..generator.artifacts import (
    CollectionServiceArtifact,
    EntityServiceArtifact,
    GenerationResult,
    MainServiceArtifact,
    OperationImportDeclaration,
    OperationReference,
    ServicePropDeclaration,
)
from .client import ODataClient
from .keys import as_key, render_key
from .query_objects import QueryObject, QueryObjectRegistry, QueryOperation, is_internal_lookup


class ServiceBinding:
    """Service and query object artifacts of one generation run, by name."""

    def __init__(self, result: GenerationResult):
        self.version = result.version
        self.query_objects = QueryObjectRegistry(result)
        self.entity_services = result.by_kind("entity_service")
        self.collection_services = result.by_kind("collection_service")

    def entity_service(self, name: str) -> EntityServiceArtifact:
        if name not in self.entity_services:
            raise ReferenceLookupError(f"Unknown service [{name}]", identifier=name, expected="entity service")
        return self.entity_services[name]

    def collection_service(self, name: str) -> CollectionServiceArtifact:
        if name not in self.collection_services:
            raise ReferenceLookupError(f"Unknown collection service [{name}]", identifier=name,
                                       expected="collection service")
        return self.collection_services[name]


def invoke_operation(client: ODataClient, path: str, operation: QueryOperation,
                     params: Optional[Mapping[str, Any]] = None, name: Optional[str] = None, **kwargs):
    """Functions are read requests, actions post their named parameters."""
    if operation.version == ODataVersions.V2:
        url = f"{path}/{operation.build_url(params, name=name, **kwargs)}"
        return client.post(url) if operation.is_action else client.get(url)
    if operation.is_action:
        url = f"{path}/{operation.build_url(params, name=name, **kwargs)}"
        return client.post(url, operation.build_body(params, **kwargs))
    return client.get(f"{path}/{operation.build_url(params, name=name, **kwargs)}")


class ODataService:
    """Base of all services: a client and the path the service is reached by."""

    def __init__(self, client: ODataClient, path: str, binding: ServiceBinding):
        if client is None:
            raise ValueError("[client] must be supplied to ODataService!")
        if not path or not path.strip():
            raise ValueError("[path] must be supplied to ODataService!")
        self._client = client
        self._path = path
        self._binding = binding

    def get_path(self) -> str:
        return self._path

    def __repr__(self):
        return f"{type(self).__name__}({self._path!r})"


class PrimitivePropertyService(ODataService):
    """Single primitive or enum valued property."""

    def query(self, params: Optional[Dict[str, Any]] = None):
        return self._client.get(self._path, params)

    def update(self, value: Any):
        return self._client.put(self._path, value)


class CollectionPropertyService(ODataService):
    """Collection valued property of complex, enum or primitive type."""

    def __init__(self, client: ODataClient, path: str, binding: ServiceBinding, query_object: Optional[str] = None):
        super().__init__(client, path, binding)
        self._query_object = query_object

    def get_query_object(self) -> Optional[QueryObject]:
        if self._query_object is None:
            return None
        return self._binding.query_objects.create(self._query_object)

    def query(self, params: Optional[Dict[str, Any]] = None):
        return self._client.get(self._path, params)

    def add(self, model: Any):
        return self._client.post(self._path, model)

    def update(self, models: Sequence[Any]):
        return self._client.put(self._path, models)

    def delete(self):
        return self._client.delete(self._path)


class ModelService(ODataService):
    """Single complex valued property: query and replace, plus nested property services."""

    def __init__(self, client: ODataClient, path: str, binding: ServiceBinding, artifact: EntityServiceArtifact):
        super().__init__(client, path, binding)
        self._artifact = artifact
        self._members: Dict[str, Any] = {p.name: p for p in artifact.props}
        self._fields: Dict[str, ODataService] = {}

    def get_query_object(self) -> QueryObject:
        return self._binding.query_objects.create(self._artifact.query_object)

    def query(self, params: Optional[Dict[str, Any]] = None):
        return self._client.get(self._path, params)

    def update(self, model: Any):
        return self._client.put(self._path, model)

    def _create_property_service(self, declaration: ServicePropDeclaration) -> ODataService:
        path = f"{self._path}/{declaration.odata_name}"
        kind = declaration.service_kind
        if kind == "entity":
            return EntityService(self._client, path, self._binding, self._binding.entity_service(declaration.service))
        if kind == "model":
            return ModelService(self._client, path, self._binding, self._binding.entity_service(declaration.service))
        if kind == "entity_collection":
            return CollectionService(self._client, path, self._binding,
                                     self._binding.collection_service(declaration.service))
        if kind in ("model_collection", "enum_collection", "primitive_collection"):
            return CollectionPropertyService(self._client, path, self._binding, declaration.query_object)
        return PrimitivePropertyService(self._client, path, self._binding)

    def _get_property_service(self, declaration: ServicePropDeclaration) -> ODataService:
        """Property services are built once and kept under the backing field name of the property."""
        if declaration.field_name not in self._fields:
            self._fields[declaration.field_name] = self._create_property_service(declaration)
        return self._fields[declaration.field_name]

    def _create_member(self, declaration):
        return self._get_property_service(declaration)

    def __getattr__(self, name: str):
        if is_internal_lookup(self, name, "_members"):
            raise AttributeError(name)
        declaration = self._members.get(name)
        if declaration is None:
            raise AttributeError(f"'{self._artifact.name}' has no member '{name}'")
        return self._create_member(declaration)

    def __dir__(self):
        return sorted(set(super().__dir__()) | set(self._members))


class EntityService(ModelService):
    """Single entity: CRUD on its path, navigation and bound operations."""

    def __init__(self, client: ODataClient, path: str, binding: ServiceBinding, artifact: EntityServiceArtifact):
        super().__init__(client, path, binding, artifact)
        self._members.update((o.name, o) for o in artifact.operations)

    def get_key_spec(self):
        return self._artifact.keys

    def patch(self, model: Any):
        if self._binding.version == ODataVersions.V2:
            return self._client.merge(self._path, model)
        return self._client.patch(self._path, model)

    def delete(self):
        return self._client.delete(self._path)

    def _create_member(self, declaration):
        if isinstance(declaration, OperationReference):
            operation = self._binding.query_objects.get_operation(declaration.query_operation)
            return lambda params=None, **kwargs: invoke_operation(self._client, self._path, operation, params,
                                                                  **kwargs)
        return self._get_property_service(declaration)


class CollectionService(ODataService):
    """Entity set or collection valued navigation: create, address by key, collection-bound operations."""

    def __init__(self, client: ODataClient, path: str, binding: ServiceBinding, artifact: CollectionServiceArtifact):
        super().__init__(client, path, binding)
        self._artifact = artifact
        self._operations = {o.name: o for o in artifact.operations}

    def get_query_object(self) -> QueryObject:
        return self._binding.query_objects.create(self._artifact.query_object)

    def get_key_spec(self):
        return self._artifact.keys

    def query(self, params: Optional[Dict[str, Any]] = None):
        return self._client.get(self._path, params)

    def create(self, model: Any):
        return self._client.post(self._path, model)

    def get(self, key: Any) -> EntityService:
        """The entity service addressed by key; a single value or a mapping of key properties."""
        segment = render_key(as_key(key), self._artifact.keys, self._binding.version)
        artifact = self._binding.entity_service(self._artifact.entity_service)
        return EntityService(self._client, f"{self._path}{segment}", self._binding, artifact)

    def update(self, key: Any, model: Any):
        return self.get(key).update(model)

    def patch(self, key: Any, model: Any):
        return self.get(key).patch(model)

    def delete(self, key: Any):
        return self.get(key).delete()

    def __getattr__(self, name: str):
        if is_internal_lookup(self, name, "_operations"):
            raise AttributeError(name)
        reference = self._operations.get(name)
        if reference is None:
            raise AttributeError(f"'{self._artifact.name}' has no member '{name}'")
        operation = self._binding.query_objects.get_operation(reference.query_operation)
        return lambda params=None, **kwargs: invoke_operation(self._client, self._path, operation, params, **kwargs)


class MainService(ODataService):
    """Service root: entity sets, singletons and unbound operations."""

    def __init__(self, client: ODataClient, path: str, binding: ServiceBinding, artifact: MainServiceArtifact):
        super().__init__(client, path, binding)
        self._artifact = artifact
        self._entry_points = {e.name: e for e in artifact.entry_points}
        self._operations: Dict[str, OperationImportDeclaration] = {o.name: o for o in artifact.operations}
        self._cache: Dict[str, ODataService] = {}

    def _create_entry_point(self, name: str) -> ODataService:
        entry = self._entry_points[name]
        path = f"{self._path}/{entry.odata_name}"
        if entry.entry_kind == "entity_set":
            return CollectionService(self._client, path, self._binding,
                                     self._binding.collection_service(entry.service))
        return EntityService(self._client, path, self._binding, self._binding.entity_service(entry.service))

    def _invoke(self, declaration: OperationImportDeclaration, params=None, **kwargs):
        operation = self._binding.query_objects.get_operation(declaration.query_operation)
        return invoke_operation(self._client, self._path, operation, params, name=declaration.odata_name, **kwargs)

    def __getattr__(self, name: str):
        if is_internal_lookup(self, name, "_entry_points"):
            raise AttributeError(name)
        if name in self._entry_points:
            if name not in self._cache:
                self._cache[name] = self._create_entry_point(name)
            return self._cache[name]
        declaration = self._operations.get(name)
        if declaration is None:
            raise AttributeError(f"'{self._artifact.name}' has no member '{name}'")
        return lambda params=None, **kwargs: self._invoke(declaration, params, **kwargs)

    def __dir__(self):
        return sorted(set(super().__dir__()) | set(self._entry_points) | set(self._operations))


def bind_service(result: GenerationResult, client: ODataClient, base_path: str) -> MainService:
    """Bind the main service of a generation run to a client and base path."""
    main_services = list(result.by_kind("main_service").values())
    if len(main_services) != 1:
        raise ReferenceLookupError(f"Expected exactly one main service, found {len(main_services)}",
                                   expected="main service artifact")
    return MainService(client, base_path.rstrip("/"), ServiceBinding(result), main_services[0])
