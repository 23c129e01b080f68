#!/usr/bin/env python3
"""
Fluent builder for raw EDMX schemas, used by the tests to describe small
services without writing XML.

Usage:
    builder = ODataSchemaBuilder("Tester")
    builder.add_entity_type("Person", fn=lambda t: t
                            .add_key_prop("UserName", "Edm.String")
                            .add_prop("Age", "Edm.Int32"))
    builder.add_entity_set("People", "Tester.Person")
    schemas = builder.get_schemas()
"""

from typing import Callable, Iterable, List, Optional, Tuple

from odata_codegen_lib.edmx_models import (
    EdmxActionImport,
    EdmxAssociation,
    EdmxAssociationEnd,
    EdmxEntityContainer,
    EdmxEntitySet,
    EdmxEnumMember,
    EdmxEnumType,
    EdmxFunctionImport,
    EdmxNavigationProperty,
    EdmxNavigationPropertyBinding,
    EdmxOperation,
    EdmxParameter,
    EdmxProperty,
    EdmxReturnType,
    EdmxSchema,
    EdmxSingleton,
    EdmxStructuredType,
)


class StructuredTypeBuilder:
    def __init__(self, model: EdmxStructuredType):
        self.model = model

    def add_key_prop(self, name: str, type_name: str):
        self.model.keys.append(name)
        return self.add_prop(name, type_name, nullable=False)

    def add_prop(self, name: str, type_name: str, nullable: bool = True):
        self.model.properties.append(EdmxProperty(name=name, type=type_name, nullable=nullable))
        return self

    def add_nav_prop(self, name: str, type_name: str, nullable: bool = True):
        """V4 navigation property."""
        self.model.navigation_properties.append(EdmxNavigationProperty(name=name, type=type_name, nullable=nullable))
        return self

    def add_association_nav_prop(self, name: str, relationship: str, from_role: str, to_role: str):
        """V2 navigation property, typed through an association."""
        self.model.navigation_properties.append(EdmxNavigationProperty(
            name=name, relationship=relationship, from_role=from_role, to_role=to_role))
        return self


class OperationBuilder:
    def __init__(self, parameters: List[EdmxParameter]):
        self.parameters = parameters

    def add_param(self, name: str, type_name: str, nullable: bool = True, mode: str = "In"):
        self.parameters.append(EdmxParameter(name=name, type=type_name, nullable=nullable, mode=mode))
        return self


def _bindings(bindings: Optional[Iterable[Tuple[str, str]]]) -> List[EdmxNavigationPropertyBinding]:
    return [EdmxNavigationPropertyBinding(path=path, target=target) for path, target in (bindings or [])]


class ODataSchemaBuilder:
    """Builds one `EdmxSchema`; every `add_*` method returns the builder."""

    def __init__(self, namespace: str = "Tester", alias: Optional[str] = None, container_name: str = "Container"):
        self.schema = EdmxSchema(namespace=namespace, alias=alias)
        self.container_name = container_name

    @property
    def namespace(self) -> str:
        return self.schema.namespace

    def qualify(self, name: str) -> str:
        return f"{self.schema.namespace}.{name}"

    def _container(self) -> EdmxEntityContainer:
        if self.schema.entity_container is None:
            self.schema.entity_container = EdmxEntityContainer(name=self.container_name)
        return self.schema.entity_container

    def _structured(self, target: list, name: str, base_type: Optional[str], fn: Optional[Callable],
                    abstract: bool, open_type: bool):
        model = EdmxStructuredType(name=name, base_type=base_type, abstract=abstract, open_type=open_type)
        if fn:
            fn(StructuredTypeBuilder(model))
        target.append(model)
        return self

    def add_entity_type(self, name: str, base_type: Optional[str] = None, fn: Optional[Callable] = None,
                        abstract: bool = False, open_type: bool = False):
        return self._structured(self.schema.entity_types, name, base_type, fn, abstract, open_type)

    def add_complex_type(self, name: str, base_type: Optional[str] = None, fn: Optional[Callable] = None,
                         abstract: bool = False, open_type: bool = False):
        return self._structured(self.schema.complex_types, name, base_type, fn, abstract, open_type)

    def add_enum_type(self, name: str, members: Iterable[str], is_flags: bool = False):
        self.schema.enum_types.append(EdmxEnumType(
            name=name, is_flags=is_flags,
            members=[EdmxEnumMember(name=m, value=str(i)) for i, m in enumerate(members)]))
        return self

    def _operation(self, target: list, name: str, return_type: Optional[str], bound: bool, fn: Optional[Callable]):
        operation = EdmxOperation(
            name=name,
            is_bound=bound,
            return_type=EdmxReturnType(type=return_type) if return_type else None,
        )
        if fn:
            fn(OperationBuilder(operation.parameters))
        target.append(operation)
        return self

    def add_function(self, name: str, return_type: Optional[str] = None, bound: bool = False,
                     fn: Optional[Callable] = None):
        return self._operation(self.schema.functions, name, return_type, bound, fn)

    def add_action(self, name: str, return_type: Optional[str] = None, bound: bool = False,
                   fn: Optional[Callable] = None):
        return self._operation(self.schema.actions, name, return_type, bound, fn)

    def add_association(self, name: str, *ends: Tuple[str, str, str]):
        """V2 association; each end is (role, type, multiplicity)."""
        self.schema.associations.append(EdmxAssociation(
            name=name,
            ends=[EdmxAssociationEnd(role=role, type=type_name, multiplicity=multiplicity)
                  for role, type_name, multiplicity in ends]))
        return self

    def add_entity_set(self, name: str, entity_type: str, bindings: Optional[Iterable[Tuple[str, str]]] = None):
        self._container().entity_sets.append(
            EdmxEntitySet(name=name, entity_type=entity_type, navigation_property_bindings=_bindings(bindings)))
        return self

    def add_singleton(self, name: str, type_name: str, bindings: Optional[Iterable[Tuple[str, str]]] = None):
        self._container().singletons.append(
            EdmxSingleton(name=name, type=type_name, navigation_property_bindings=_bindings(bindings)))
        return self

    def add_function_import(self, name: str, function: Optional[str] = None, entity_set: Optional[str] = None,
                            http_method: Optional[str] = None, return_type: Optional[str] = None,
                            fn: Optional[Callable] = None):
        """V4 import referencing `function`, or a self-contained V2 import with `http_method`."""
        function_import = EdmxFunctionImport(name=name, function=function, entity_set=entity_set,
                                             http_method=http_method, return_type=return_type)
        if fn:
            fn(OperationBuilder(function_import.parameters))
        self._container().function_imports.append(function_import)
        return self

    def add_action_import(self, name: str, action: str, entity_set: Optional[str] = None):
        self._container().action_imports.append(EdmxActionImport(name=name, action=action, entity_set=entity_set))
        return self

    def build(self) -> EdmxSchema:
        return self.schema

    def get_schemas(self) -> List[EdmxSchema]:
        return [self.schema]
