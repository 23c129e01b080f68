"""
Data models for the digested OData metadata (the intermediate representation).

A `DataModel` is produced by exactly one digestion run and is immutable afterwards:
models are frozen, ordered collections are tuples, registries are read-only mappings
and lookups hand out copies.
"""

from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator

from .constants import ODataVersions, ROOT_OPERATION
from .errors import ReferenceLookupError, SchemaError


class DataTypes(str, Enum):
    PRIMITIVE = "PrimitiveType"
    MODEL = "ModelType"
    ENUM = "EnumType"


class OperationKinds(str, Enum):
    FUNCTION = "Function"
    ACTION = "Action"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, protected_namespaces=())


class PropertyModel(_Frozen):
    odata_name: str
    name: str
    odata_type: str
    type: str
    data_type: DataTypes
    is_collection: bool = False
    required: bool = False
    is_navigation: bool = False


class ModelType(_Frozen):
    """Merged representation of EntityType and ComplexType."""
    odata_name: str
    name: str
    qualified_name: str
    base_class: Optional[str] = None
    props: Tuple[PropertyModel, ...] = ()
    keys: Tuple[str, ...] = ()
    is_entity: bool = True
    is_abstract: bool = False
    is_open: bool = False

    def get_prop(self, odata_name: str) -> Optional[PropertyModel]:
        return next((p for p in self.props if p.odata_name == odata_name), None)


class EnumType(_Frozen):
    odata_name: str
    name: str
    members: Tuple[str, ...] = ()
    is_flags: bool = False


class OperationType(_Frozen):
    odata_name: str
    name: str
    qualified_name: str
    kind: OperationKinds
    parameters: Tuple[PropertyModel, ...] = ()
    return_type: Optional[PropertyModel] = None
    binding: str = ROOT_OPERATION
    is_bound: bool = False
    entity_set_path: Optional[str] = None
    http_method: Optional[str] = None

    @property
    def is_collection_bound(self) -> bool:
        return self.is_bound and self.parameters[0].is_collection


class NavigationBinding(_Frozen):
    path: str
    target: str


class EntitySetModel(_Frozen):
    name: str
    odata_name: str
    entity_type: str
    navigation_bindings: Tuple[NavigationBinding, ...] = ()


class SingletonModel(_Frozen):
    name: str
    odata_name: str
    type: str
    navigation_bindings: Tuple[NavigationBinding, ...] = ()


class OperationImportModel(_Frozen):
    name: str
    odata_name: str
    operation: str
    entity_set: Optional[str] = None


def _read_only(value):
    return MappingProxyType(dict(value))


class EntityContainerModel(_Frozen):
    model_config = ConfigDict(frozen=True, protected_namespaces=(), validate_default=True)

    name: str = "Container"
    entity_sets: Mapping[str, EntitySetModel] = {}
    singletons: Mapping[str, SingletonModel] = {}
    functions: Mapping[str, OperationImportModel] = {}
    actions: Mapping[str, OperationImportModel] = {}

    @field_validator("entity_sets", "singletons", "functions", "actions")
    @classmethod
    def freeze_registry(cls, value):
        return _read_only(value)

    @field_serializer("entity_sets", "singletons", "functions", "actions")
    def serialize_registry(self, value):
        return dict(value)


class DataModel(_Frozen):
    """The digested service: types, operations and container of one metadata document."""
    model_config = ConfigDict(frozen=True, protected_namespaces=(), validate_default=True)

    version: ODataVersions
    service_name: str
    namespaces: Tuple[str, ...] = ()
    model_types: Mapping[str, ModelType] = {}
    enum_types: Mapping[str, EnumType] = {}
    operation_types: Mapping[str, Tuple[OperationType, ...]] = {}
    container: EntityContainerModel = EntityContainerModel()
    primitive_type_imports: Tuple[str, ...] = ()

    @field_validator("model_types", "enum_types", "operation_types")
    @classmethod
    def freeze_registry(cls, value):
        return _read_only(value)

    @field_serializer("model_types", "enum_types", "operation_types")
    def serialize_registry(self, value):
        return dict(value)

    def get_model(self, name: str) -> ModelType:
        """Get a model by its generated name."""
        model = self.model_types.get(name)
        if model is None:
            raise ReferenceLookupError(f"Unknown model type [{name}]", identifier=name,
                                       expected="declared EntityType or ComplexType")
        return model

    def get_models(self) -> List[ModelType]:
        return list(self.model_types.values())

    def get_enum(self, name: str) -> EnumType:
        enum_type = self.enum_types.get(name)
        if enum_type is None:
            raise ReferenceLookupError(f"Unknown enum type [{name}]", identifier=name,
                                       expected="declared EnumType")
        return enum_type

    def get_enums(self) -> List[EnumType]:
        return list(self.enum_types.values())

    def get_primitive_type_imports(self) -> List[str]:
        return list(self.primitive_type_imports)

    def get_operation_bindings(self) -> List[str]:
        return list(self.operation_types)

    def get_operations_by_binding(self, binding: str) -> List[OperationType]:
        return list(self.operation_types.get(binding, ()))

    def get_root_operation_type(self, name: str, kind: Optional[OperationKinds] = None) -> OperationType:
        """Get the unbound operation with the given generated name; it must be unique."""
        matches = [op for op in self.operation_types.get(ROOT_OPERATION, ())
                   if op.name == name and (kind is None or op.kind == kind)]
        if not matches:
            raise ReferenceLookupError(f"Couldn't find root operation with name [{name}]",
                                       identifier=name, expected="unbound Function or Action")
        if len(matches) > 1:
            raise ReferenceLookupError(f"Root operation name [{name}] is ambiguous ({len(matches)} overloads)",
                                       identifier=name, expected="exactly one unbound Function or Action")
        return matches[0]

    def get_entity_container(self) -> EntityContainerModel:
        return self.container

    def get_base_chain(self, model: ModelType) -> List[ModelType]:
        """The model followed by its base types, nearest first."""
        chain = [model]
        seen = {model.name}
        current = model
        while current.base_class:
            current = self.get_model(current.base_class)
            if current.name in seen:
                raise SchemaError(f"Cyclic inheritance involving [{model.odata_name}]",
                                  identifier=model.odata_name, expected="acyclic BaseType chain")
            seen.add(current.name)
            chain.append(current)
        return chain

    def get_all_props(self, model: ModelType) -> List[PropertyModel]:
        """Flattened view: inherited properties first, then the model's own."""
        props = []
        for m in reversed(self.get_base_chain(model)):
            props.extend(m.props)
        return props

    def get_keys(self, model: ModelType) -> List[str]:
        """Key property names, inherited from the nearest base type declaring them."""
        for m in self.get_base_chain(model):
            if m.keys:
                return list(m.keys)
        return []

    def get_key_props(self, model: ModelType) -> List[PropertyModel]:
        props = {p.odata_name: p for p in self.get_all_props(model)}
        result = []
        for key in self.get_keys(model):
            if key not in props:
                raise ReferenceLookupError(
                    f"Key [{key}] of [{model.odata_name}] is not a declared property",
                    identifier=key, expected="Property of the entity type")
            result.append(props[key])
        return result

    def resolve_binding_target(self, target: str) -> Tuple[str, str]:
        """Resolve a navigation property binding target to ("entity_set" | "singleton", entry name).

        Targets are either a simple entry name or qualified by the container
        ("Namespace.Container/People").
        """
        simple = target.split("/")[-1]
        for entry in self.container.entity_sets.values():
            if entry.odata_name == simple:
                return "entity_set", entry.name
        for entry in self.container.singletons.values():
            if entry.odata_name == simple:
                return "singleton", entry.name
        raise ReferenceLookupError(f"Navigation binding target [{target}] is not part of the container",
                                   identifier=target, expected="EntitySet or Singleton")
