"""
Service generator: entity / collection services per model type and the main service.
"""

from typing import List, Optional

from ..errors import ReferenceLookupError
from ..models import DataTypes, ModelType, OperationKinds, PropertyModel
from ..naming_helper import SymbolTable
from .artifacts import (
    CollectionServiceArtifact,
    EntityServiceArtifact,
    EntryPointDeclaration,
    KeyPropDeclaration,
    MainServiceArtifact,
    OperationImportDeclaration,
    ResolvedNavigationBinding,
    ServicePropDeclaration,
)
from .base import BaseGenerator


class ServiceGenerator(BaseGenerator):
    component = "ServiceGenerator"

    def generate(self) -> list:
        artifacts = []
        for model in self.data_model.get_models():
            artifacts.append(self._generate_entity_service(model))
            if self._has_collection_service(model):
                artifacts.append(self._generate_collection_service(model))
        artifacts.append(self._generate_main_service())
        self._log_verbose(f"Generated {len(artifacts)} service artifacts.")
        return artifacts

    def _has_collection_service(self, model: ModelType) -> bool:
        return model.is_entity and bool(self.data_model.get_keys(model))

    def _key_spec(self, model: ModelType):
        return tuple(
            KeyPropDeclaration(name=p.name, odata_name=p.odata_name, type=p.type, odata_type=p.odata_type)
            for p in self.data_model.get_key_props(model)
        )

    def _map_prop(self, prop: PropertyModel) -> Optional[ServicePropDeclaration]:
        accessor = self.naming.get_navigation_accessor_name(prop.odata_name)
        field_name = self.naming.get_private_field_name(prop.odata_name)
        if prop.data_type == DataTypes.MODEL:
            target = self.data_model.get_model(prop.type)
            query_object = self.naming.get_query_object_name(target.odata_name)
            if prop.is_collection and self._has_collection_service(target):
                kind, service = "entity_collection", self.naming.get_collection_service_name(target.odata_name)
            elif prop.is_collection:
                kind, service = "model_collection", self.naming.get_service_name(target.odata_name)
            else:
                kind = "entity" if target.is_entity else "model"
                service = self.naming.get_service_name(target.odata_name)
            return ServicePropDeclaration(name=accessor, field_name=field_name, odata_name=prop.odata_name,
                                          service_kind=kind, type=prop.type, service=service,
                                          query_object=query_object)

        if not self.options.enable_primitive_property_services:
            return None
        if prop.data_type == DataTypes.ENUM:
            kind = "enum_collection" if prop.is_collection else "enum"
        else:
            kind = "primitive_collection" if prop.is_collection else "primitive"
        return ServicePropDeclaration(name=accessor, field_name=field_name, odata_name=prop.odata_name,
                                      service_kind=kind, type=prop.type)

    def _generate_entity_service(self, model: ModelType) -> EntityServiceArtifact:
        name = self.symbols.register(self.naming.get_service_name(model.odata_name),
                                     f"service of {model.qualified_name}", "service")
        members = SymbolTable(f"service {name}")
        fields = SymbolTable(f"fields of service {name}")
        props = []
        for prop in self.data_model.get_all_props(model):
            declaration = self._map_prop(prop)
            if declaration is not None:
                members.register(declaration.name, prop.odata_name, "property accessor")
                fields.register(declaration.field_name, prop.odata_name, "private field")
                props.append(declaration)

        operations = []
        for op in self.bound_operations(model):
            if not op.is_collection_bound:
                members.register(op.name, op.odata_name, "bound operation")
                operations.append(self.operation_reference(op))

        return EntityServiceArtifact(
            name=name,
            odata_name=model.odata_name,
            model=model.name,
            editable_model=self.naming.get_editable_model_name(model.odata_name),
            query_object=self.naming.get_query_object_name(model.odata_name),
            is_entity=model.is_entity,
            keys=self._key_spec(model) if model.is_entity else (),
            props=tuple(props),
            operations=tuple(operations),
        )

    def _generate_collection_service(self, model: ModelType) -> CollectionServiceArtifact:
        name = self.symbols.register(self.naming.get_collection_service_name(model.odata_name),
                                     f"collection service of {model.qualified_name}", "collection service")
        members = SymbolTable(f"collection service {name}")
        operations = []
        for op in self.bound_operations(model):
            if op.is_collection_bound:
                members.register(op.name, op.odata_name, "bound operation")
                operations.append(self.operation_reference(op))

        return CollectionServiceArtifact(
            name=name,
            odata_name=model.odata_name,
            model=model.name,
            editable_model=self.naming.get_editable_model_name(model.odata_name),
            query_object=self.naming.get_query_object_name(model.odata_name),
            entity_service=self.naming.get_service_name(model.odata_name),
            keys=self._key_spec(model),
            operations=tuple(operations),
        )

    def _resolve_bindings(self, bindings) -> tuple:
        resolved = []
        for binding in bindings:
            target_kind, target_entry = self.data_model.resolve_binding_target(binding.target)
            resolved.append(ResolvedNavigationBinding(path=binding.path, target=binding.target,
                                                      target_kind=target_kind, target_entry=target_entry))
        return tuple(resolved)

    def _generate_main_service(self) -> MainServiceArtifact:
        name = self.symbols.register(self.naming.get_main_service_name(), self.data_model.service_name,
                                     "main service")
        container = self.data_model.get_entity_container()
        members = SymbolTable(f"main service {name}")

        entry_points: List[EntryPointDeclaration] = []
        for entity_set in container.entity_sets.values():
            model = self.data_model.get_model(entity_set.entity_type)
            if not self._has_collection_service(model):
                raise ReferenceLookupError(
                    f"EntitySet [{entity_set.odata_name}] references [{model.odata_name}] which declares no key",
                    identifier=entity_set.odata_name, expected="EntityType with Key")
            members.register(entity_set.name, entity_set.odata_name, "entry point")
            entry_points.append(EntryPointDeclaration(
                name=entity_set.name,
                odata_name=entity_set.odata_name,
                entry_kind="entity_set",
                model=model.name,
                service=self.naming.get_collection_service_name(model.odata_name),
                navigation_bindings=self._resolve_bindings(entity_set.navigation_bindings),
            ))
        for singleton in container.singletons.values():
            model = self.data_model.get_model(singleton.type)
            members.register(singleton.name, singleton.odata_name, "entry point")
            entry_points.append(EntryPointDeclaration(
                name=singleton.name,
                odata_name=singleton.odata_name,
                entry_kind="singleton",
                model=model.name,
                service=self.naming.get_service_name(model.odata_name),
                navigation_bindings=self._resolve_bindings(singleton.navigation_bindings),
            ))

        operations: List[OperationImportDeclaration] = []
        imports = [(i, OperationKinds.FUNCTION) for i in container.functions.values()]
        imports += [(i, OperationKinds.ACTION) for i in container.actions.values()]
        for operation_import, kind in imports:
            op = self.data_model.get_root_operation_type(operation_import.operation, kind)
            members.register(operation_import.name, operation_import.odata_name, "operation")
            operations.append(OperationImportDeclaration(
                name=operation_import.name,
                odata_name=operation_import.odata_name,
                operation=op.name,
                query_operation=self.get_query_operation_name(op),
                operation_kind=kind,
                entity_set=operation_import.entity_set,
            ))

        return MainServiceArtifact(
            name=name,
            version=self.data_model.version,
            service_name=self.data_model.service_name,
            entry_points=tuple(entry_points),
            operations=tuple(operations),
        )


def generate_services(data_model, naming_helper=None, options=None) -> list:
    """Service family artifacts: entity and collection services per model, then the main service."""
    return ServiceGenerator(data_model, naming_helper, options).generate()
