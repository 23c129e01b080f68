"""
Query object generator: composable path nodes per model type, enum and operation.
"""

from ..constants import (
    BIG_NUMBER_STRING,
    BINARY_STRING,
    DATE_STRING,
    DATE_TIME_OFFSET_STRING,
    DATE_TIME_STRING,
    GUID_STRING,
    ROOT_OPERATION,
    TIME_OF_DAY_STRING,
)
from ..models import DataTypes, EnumType, ModelType, OperationType, PropertyModel
from ..naming_helper import SymbolTable
from .artifacts import (
    QueryEnumArtifact,
    QueryObjectArtifact,
    QueryObjectModuleArtifact,
    QueryOperationArtifact,
    QueryPropDeclaration,
)
from .base import BaseGenerator, to_field

# Leaf path node per primitive target type
PRIMITIVE_PATH_TYPES = {
    "bool": "QBooleanPath",
    "int": "QNumberPath",
    "float": "QNumberPath",
    "str": "QStringPath",
    BIG_NUMBER_STRING: "QBigNumberPath",
    DATE_STRING: "QDatePath",
    TIME_OF_DAY_STRING: "QTimeOfDayPath",
    DATE_TIME_STRING: "QDateTimePath",
    DATE_TIME_OFFSET_STRING: "QDateTimeOffsetPath",
    BINARY_STRING: "QBinaryPath",
    GUID_STRING: "QGuidPath",
}

ENTITY_PATH = "QEntityPath"
ENTITY_COLLECTION_PATH = "QEntityCollectionPath"
ENUM_PATH = "QEnumPath"
ENUM_COLLECTION_PATH = "QEnumCollectionPath"
PRIMITIVE_COLLECTION_PATH = "QPrimitiveCollectionPath"


class QueryObjectGenerator(BaseGenerator):
    component = "QueryObjectGenerator"

    def generate(self) -> list:
        artifacts = []
        for model in self.data_model.get_models():
            artifacts.append(self._generate_query_object(model))
        for enum_type in self.data_model.get_enums():
            artifacts.append(self._generate_query_enum(enum_type))

        unbound = []
        for binding in self.data_model.get_operation_bindings():
            for op in self.data_model.get_operations_by_binding(binding):
                artifact = self._generate_query_operation(op)
                artifacts.append(artifact)
                if binding == ROOT_OPERATION:
                    unbound.append(artifact.name)

        artifacts.append(QueryObjectModuleArtifact(
            name=self.data_model.service_name,
            version=self.data_model.version,
            symbols=tuple(self.symbols.symbols()),
            operations=tuple(unbound),
        ))
        self._log_verbose(f"Generated {len(artifacts)} query object artifacts.")
        return artifacts

    def _map_prop(self, prop: PropertyModel) -> QueryPropDeclaration:
        if prop.data_type == DataTypes.MODEL:
            path_type = ENTITY_COLLECTION_PATH if prop.is_collection else ENTITY_PATH
            # referenced by name only: the runtime builds nested nodes lazily
            type_name = self.naming.get_query_object_name(self.data_model.get_model(prop.type).odata_name)
        elif prop.data_type == DataTypes.ENUM:
            path_type = ENUM_COLLECTION_PATH if prop.is_collection else ENUM_PATH
            type_name = prop.type
        else:
            path_type = PRIMITIVE_COLLECTION_PATH if prop.is_collection else PRIMITIVE_PATH_TYPES.get(
                prop.type, "QStringPath")
            type_name = prop.type
        return QueryPropDeclaration(
            name=prop.name,
            odata_name=prop.odata_name,
            odata_type=prop.odata_type,
            path_type=path_type,
            type=type_name,
            data_type=prop.data_type,
            is_collection=prop.is_collection,
            is_navigation=prop.is_navigation,
        )

    def _generate_query_object(self, model: ModelType) -> QueryObjectArtifact:
        name = self.symbols.register(self.naming.get_query_object_name(model.odata_name),
                                     f"query object of {model.qualified_name}", "query object")
        members = SymbolTable(f"query object {name}")
        props = []
        for prop in model.props:
            members.register(prop.name, prop.odata_name, "property")
            props.append(self._map_prop(prop))

        operations = []
        for op in self.data_model.get_operations_by_binding(model.name):
            if op.is_collection_bound:
                continue
            members.register(op.name, op.odata_name, "bound operation")
            operations.append(self.operation_reference(op))

        base_class = None
        if model.base_class:
            base_class = self.naming.get_query_object_name(self.data_model.get_model(model.base_class).odata_name)
        return QueryObjectArtifact(
            name=name,
            odata_name=model.odata_name,
            model=model.name,
            base_class=base_class,
            props=tuple(props),
            operations=tuple(operations),
        )

    def _generate_query_enum(self, enum_type: EnumType) -> QueryEnumArtifact:
        name = self.symbols.register(self.naming.get_query_object_name(enum_type.odata_name),
                                     f"query object of enum {enum_type.odata_name}", "query object")
        return QueryEnumArtifact(name=name, odata_name=enum_type.odata_name, enum=enum_type.name,
                                 members=enum_type.members)

    def _generate_query_operation(self, op: OperationType) -> QueryOperationArtifact:
        name = self.symbols.register(self.get_query_operation_name(op), self.operation_signature(op),
                                     "query operation")
        params = self.operation_params(op)
        return QueryOperationArtifact(
            name=name,
            odata_name=op.odata_name,
            qualified_name=op.qualified_name,
            operation=op.name,
            operation_kind=op.kind,
            binding=op.binding,
            is_bound=op.is_bound,
            is_collection_bound=op.is_collection_bound,
            parameters=tuple(to_field(p) for p in params),
            return_type=to_field(op.return_type) if op.return_type else None,
            params_model=self.get_params_model_name(op) if params else None,
            http_method=op.http_method,
        )


def generate_query_objects(data_model, naming_helper=None, options=None) -> list:
    """Query object family artifacts: query objects, query enums, query operations, then the module."""
    return QueryObjectGenerator(data_model, naming_helper, options).generate()
