"""
Version independent digestion of EDMX schemas into the data model.
"""

import sys
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

from ..constants import ODataVersions, ROOT_OPERATION
from ..edmx_models import EdmxEntityContainer, EdmxParameter, EdmxSchema, EdmxStructuredType
from ..errors import IllegalStateError, ReferenceLookupError, SchemaError
from ..models import (
    DataModel,
    DataTypes,
    EntityContainerModel,
    EntitySetModel,
    EnumType,
    ModelType,
    NavigationBinding,
    OperationImportModel,
    OperationKinds,
    OperationType,
    PropertyModel,
    SingletonModel,
)
from ..naming_helper import NamingHelper, SymbolTable
from ..options import GenerationOptions
from ..type_resolver import TypeResolver


def _main_namespace(schemas: List[EdmxSchema]) -> str:
    """Namespace of the first schema declaring types; the service name of the run."""
    for schema in schemas:
        if schema.entity_types or schema.complex_types or schema.enum_types:
            return schema.namespace
    return schemas[0].namespace


class Digester(ABC):
    """Digests one ordered set of schemas into a `DataModel`.

    The digestion sequence is fixed: enums, then entity and complex types, then
    operations and finally the entity container, so that everything the container
    references already exists. A digester instance is used for exactly one run.
    """

    version: ODataVersions

    def __init__(self, schemas: List[EdmxSchema], options: Optional[GenerationOptions] = None,
                 naming_helper: Optional[NamingHelper] = None):
        if not schemas:
            raise SchemaError("No schema to digest", expected="at least one Schema element")
        self.schemas = list(schemas)
        self.options = options or GenerationOptions()
        self.options.check(self.version)
        self.verbose = self.options.verbose

        self.service_name = _main_namespace(self.schemas)
        namespaces = []
        for schema in self.schemas:
            namespaces.append(schema.namespace)
            if schema.alias:
                namespaces.append(schema.alias)
        self.namespaces = tuple(namespaces)
        self.naming = naming_helper or NamingHelper(self.options, self.service_name, self.namespaces)

        self.model_types: Dict[str, ModelType] = {}
        self.enum_types: Dict[str, EnumType] = {}
        self.operation_types: Dict[str, List[OperationType]] = {}
        self.container = {"entity_sets": {}, "singletons": {}, "functions": {}, "actions": {}}
        self.container_name = "Container"

        self._enums_by_odata_name: Dict[str, str] = {}
        self._type_symbols = SymbolTable("model and enum types")
        self._container_symbols = SymbolTable("entity container")
        self._operation_symbols: Dict[str, SymbolTable] = {}

        self.resolver = TypeResolver(self.namespaces, self._enums_by_odata_name.get, self.naming.get_model_name,
                                     big_number_as_string=self.options.big_number_as_string)

    def _log_verbose(self, message: str):
        """Prints message to stderr only if verbose mode is enabled."""
        if self.verbose:
            timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
            print(f"[{timestamp} Digester VERBOSE] {message}", file=sys.stderr)

    def digest(self) -> DataModel:
        self._log_verbose(f"Digesting {len(self.schemas)} schema(s) of service {self.service_name} "
                          f"(OData V{self.version.value})...")
        for schema in self.schemas:
            self._digest_enums(schema)
        for schema in self.schemas:
            self._digest_models(schema)
        for schema in self.schemas:
            self._digest_operations(schema)
        for schema in self.schemas:
            if schema.entity_container is not None:
                self._digest_entity_container(schema, schema.entity_container)

        data_model = DataModel(
            version=self.version,
            service_name=self.service_name,
            namespaces=self.namespaces,
            model_types=dict(self.model_types),
            enum_types=dict(self.enum_types),
            operation_types={binding: tuple(ops) for binding, ops in self.operation_types.items()},
            container=EntityContainerModel(name=self.container_name, **self.container),
            primitive_type_imports=tuple(self.resolver.imports),
        )
        self._check_closed(data_model)
        self._log_verbose(f"Digestion complete. Found {len(self.model_types)} models, {len(self.enum_types)} enums, "
                          f"{sum(len(ops) for ops in self.operation_types.values())} operations.")
        return data_model

    # --- types ---

    def _digest_enums(self, schema: EdmxSchema):
        for et in schema.enum_types:
            name = self.naming.get_enum_name(et.name)
            self._type_symbols.register(name, f"{schema.namespace}.{et.name}", "enum")
            members = SymbolTable(f"enum {et.name}")
            for m in et.members:
                members.register(self.naming.get_enum_member_name(m.name), m.name, "enum member")
            self.enum_types[name] = EnumType(
                odata_name=et.name,
                name=name,
                members=tuple(m.name for m in et.members),
                is_flags=et.is_flags,
            )
            self._enums_by_odata_name[et.name] = name

    def _digest_models(self, schema: EdmxSchema):
        models = [(m, True) for m in schema.entity_types] + [(m, False) for m in schema.complex_types]
        for model, is_entity in models:
            name = self.naming.get_model_name(model.name)
            self._type_symbols.register(name, f"{schema.namespace}.{model.name}", "model")

            props = [self.map_property(p.name, p.type, p.nullable) for p in model.properties]
            props.extend(self.map_navigation_property(schema, model, nav) for nav in model.navigation_properties)

            prop_symbols = SymbolTable(f"model {model.name}")
            for p in props:
                prop_symbols.register(p.name, p.odata_name, "property")

            self.model_types[name] = ModelType(
                odata_name=model.name,
                name=name,
                qualified_name=f"{schema.namespace}.{model.name}",
                # only the name is resolved here, existence is checked after digestion
                base_class=self.naming.get_model_name(model.base_type) if model.base_type else None,
                props=tuple(props),
                keys=tuple(model.keys),
                is_entity=is_entity,
                is_abstract=model.abstract,
                is_open=model.open_type,
            )

    def map_property(self, odata_name: str, odata_type: str, nullable: bool = True,
                     is_navigation: bool = False) -> PropertyModel:
        resolved = self.resolver.resolve(odata_type)
        return PropertyModel(
            odata_name=odata_name,
            name=self.naming.get_model_prop_name(odata_name),
            odata_type=odata_type,
            type=resolved.type,
            data_type=resolved.data_type,
            is_collection=resolved.is_collection,
            required=not nullable,
            is_navigation=is_navigation,
        )

    @abstractmethod
    def map_navigation_property(self, schema: EdmxSchema, model: EdmxStructuredType, nav) -> PropertyModel:
        """Version specific: determine type and multiplicity of a navigation property."""

    # --- operations ---

    @abstractmethod
    def _digest_operations(self, schema: EdmxSchema):
        """Version specific: collect functions and actions of the schema."""

    def add_operation(self, schema: EdmxSchema, odata_name: str, kind: OperationKinds,
                      parameters: List[EdmxParameter], return_type: Optional[str] = None,
                      is_bound: bool = False, entity_set_path: Optional[str] = None,
                      http_method: Optional[str] = None) -> OperationType:
        params = [self.map_property(p.name, p.type, p.nullable) for p in parameters]
        returns = self.map_property("ReturnType", return_type) if return_type else None

        if is_bound and not params:
            raise IllegalStateError(f"IllegalState: Operation '{odata_name}' is bound, but has no parameters!",
                                    identifier=odata_name, expected="binding parameter")

        binding = params[0].type if is_bound else ROOT_OPERATION
        name = self.naming.get_operation_name(odata_name, kind.value)
        symbols = self._operation_symbols.setdefault(binding, SymbolTable(f"operations bound to {binding}"))
        symbols.register(name, odata_name, "operation")

        operation = OperationType(
            odata_name=odata_name,
            name=name,
            qualified_name=f"{schema.namespace}.{odata_name}",
            kind=kind,
            parameters=tuple(params),
            return_type=returns,
            binding=binding,
            is_bound=is_bound,
            entity_set_path=entity_set_path,
            http_method=http_method,
        )
        self.operation_types.setdefault(binding, []).append(operation)
        return operation

    def get_root_operation(self, name: str, kind: OperationKinds) -> OperationType:
        matches = [op for op in self.operation_types.get(ROOT_OPERATION, [])
                   if op.name == name and op.kind == kind]
        if len(matches) != 1:
            problem = "Couldn't find" if not matches else "Ambiguous"
            raise ReferenceLookupError(f"{problem} root operation with name [{name}]", identifier=name,
                                       expected=f"exactly one unbound {kind.value}")
        return matches[0]

    # --- entity container ---

    def _register_entry(self, name: str, odata_name: str, kind: str) -> str:
        return self._container_symbols.register(name, odata_name, kind)

    def _get_entry_type(self, odata_type: str, entry: str) -> ModelType:
        name = self.naming.get_model_name(odata_type)
        model = self.model_types.get(name)
        if model is None:
            raise ReferenceLookupError(f"Type [{odata_type}] of container entry [{entry}] is not declared",
                                       identifier=odata_type, expected="EntityType of the service")
        return model

    def _strip_binding_path(self, path: str) -> str:
        return "/".join(self.naming.strip_namespace(segment) for segment in path.split("/"))

    def _digest_entity_container(self, schema: EdmxSchema, container: EdmxEntityContainer):
        self.container_name = container.name
        self._digest_operation_imports(schema, container)

        for singleton in container.singletons:
            name = self._register_entry(self.naming.get_entry_point_name(singleton.name), singleton.name,
                                        "singleton")
            self.container["singletons"][name] = SingletonModel(
                name=name,
                odata_name=singleton.name,
                type=self._get_entry_type(singleton.type, singleton.name).name,
                navigation_bindings=tuple(
                    NavigationBinding(path=self._strip_binding_path(b.path), target=b.target)
                    for b in singleton.navigation_property_bindings),
            )

        for entity_set in container.entity_sets:
            name = self._register_entry(self.naming.get_entry_point_name(entity_set.name), entity_set.name,
                                        "entity set")
            self.container["entity_sets"][name] = EntitySetModel(
                name=name,
                odata_name=entity_set.name,
                entity_type=self._get_entry_type(entity_set.entity_type, entity_set.name).name,
                # targets are resolved by the generators which need them
                navigation_bindings=tuple(
                    NavigationBinding(path=self._strip_binding_path(b.path), target=b.target)
                    for b in entity_set.navigation_property_bindings),
            )

    @abstractmethod
    def _digest_operation_imports(self, schema: EdmxSchema, container: EdmxEntityContainer):
        """Version specific: register function and action imports."""

    def add_operation_import(self, odata_name: str, operation_name: str, kind: OperationKinds,
                             entity_set: Optional[str] = None):
        name = self._register_entry(self.naming.get_operation_name(odata_name, kind.value), odata_name,
                                    f"{kind.value.lower()} import")
        operation = self.get_root_operation(self.naming.get_operation_name(operation_name, kind.value), kind)
        target = self.container["functions"] if kind == OperationKinds.FUNCTION else self.container["actions"]
        target[name] = OperationImportModel(
            name=name,
            odata_name=odata_name,
            operation=operation.name,
            entity_set=entity_set,
        )

    # --- closedness ---

    def _check_type_reference(self, prop: PropertyModel, owner: str):
        if prop.data_type == DataTypes.MODEL and prop.type not in self.model_types:
            raise ReferenceLookupError(
                f"Type [{prop.odata_type}] of [{owner}.{prop.odata_name}] is not declared",
                identifier=prop.odata_type, expected="EntityType or ComplexType of the service")

    def _check_closed(self, data_model: DataModel):
        for model in data_model.get_models():
            if model.base_class and model.base_class not in self.model_types:
                raise ReferenceLookupError(
                    f"Base type [{model.base_class}] of [{model.odata_name}] is not declared",
                    identifier=model.base_class, expected="EntityType or ComplexType of the service")
            for prop in model.props:
                self._check_type_reference(prop, model.odata_name)
        for model in data_model.get_models():
            # raises on inheritance cycles and on keys without property
            data_model.get_base_chain(model)
            if model.is_entity:
                data_model.get_key_props(model)
        for binding in data_model.get_operation_bindings():
            for op in data_model.get_operations_by_binding(binding):
                for prop in op.parameters:
                    self._check_type_reference(prop, op.odata_name)
                if op.return_type:
                    self._check_type_reference(op.return_type, op.odata_name)
