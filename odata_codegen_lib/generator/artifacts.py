"""
Artifact declarations emitted by the generators.

Artifacts are declarations, not source text: each one names the symbols an
external renderer prints and the cross references between them. All of them are
frozen, so a `GenerationResult` can be shared between renderers.
"""

from typing import Annotated, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from ..constants import ODataVersions, RUNTIME_TYPES_MODULE
from ..errors import ReferenceLookupError
from ..models import DataTypes, OperationKinds
from ..options import ConverterDeclaration


class _Declaration(BaseModel):
    model_config = ConfigDict(frozen=True, protected_namespaces=())


class FieldDeclaration(_Declaration):
    """A typed field; `odata_name` is the alias used on the wire."""
    name: str
    odata_name: str
    odata_type: str
    type: str
    data_type: DataTypes
    is_collection: bool = False
    required: bool = False
    is_navigation: bool = False


# --- model family ---

class EnumMemberDeclaration(_Declaration):
    name: str
    odata_name: str


class EnumArtifact(_Declaration):
    kind: Literal["enum"] = "enum"
    name: str
    odata_name: str
    members: Tuple[EnumMemberDeclaration, ...] = ()
    is_flags: bool = False


class EditableShape(_Declaration):
    name: str
    base_class: Optional[str] = None
    fields: Tuple[FieldDeclaration, ...] = ()


class ModelArtifact(_Declaration):
    kind: Literal["model"] = "model"
    name: str
    odata_name: str
    qualified_name: str
    base_class: Optional[str] = None
    fields: Tuple[FieldDeclaration, ...] = ()
    keys: Tuple[str, ...] = ()
    is_entity: bool = True
    is_abstract: bool = False
    is_open: bool = False
    editable: EditableShape


class ParamsShape(_Declaration):
    name: str
    operation: str
    odata_name: str
    fields: Tuple[FieldDeclaration, ...] = ()


class OperationParamsArtifact(_Declaration):
    kind: Literal["operation_params"] = "operation_params"
    name: str
    binding: str
    shapes: Tuple[ParamsShape, ...] = ()


class ModelModuleArtifact(_Declaration):
    kind: Literal["model_module"] = "model_module"
    name: str
    symbols: Tuple[str, ...] = ()
    primitive_imports: Tuple[str, ...] = ()
    imports_module: str = RUNTIME_TYPES_MODULE


# --- query object family ---

class QueryPropDeclaration(_Declaration):
    """A path node of a query object.

    `type` is the primitive target for leaves, the enum name for enum paths and
    the query object name for entity paths.
    """
    name: str
    odata_name: str
    odata_type: str
    path_type: str
    type: str
    data_type: DataTypes
    is_collection: bool = False
    is_navigation: bool = False


class OperationReference(_Declaration):
    name: str
    query_operation: str
    odata_name: str


class QueryObjectArtifact(_Declaration):
    kind: Literal["query_object"] = "query_object"
    name: str
    odata_name: str
    model: str
    base_class: Optional[str] = None
    props: Tuple[QueryPropDeclaration, ...] = ()
    operations: Tuple[OperationReference, ...] = ()


class QueryEnumArtifact(_Declaration):
    kind: Literal["query_enum"] = "query_enum"
    name: str
    odata_name: str
    enum: str
    members: Tuple[str, ...] = ()


class QueryOperationArtifact(_Declaration):
    kind: Literal["query_operation"] = "query_operation"
    name: str
    odata_name: str
    qualified_name: str
    operation: str
    operation_kind: OperationKinds
    binding: str
    is_bound: bool = False
    is_collection_bound: bool = False
    parameters: Tuple[FieldDeclaration, ...] = ()
    return_type: Optional[FieldDeclaration] = None
    params_model: Optional[str] = None
    http_method: Optional[str] = None


class QueryObjectModuleArtifact(_Declaration):
    kind: Literal["query_module"] = "query_module"
    name: str
    version: ODataVersions
    symbols: Tuple[str, ...] = ()
    operations: Tuple[str, ...] = ()


# --- service family ---

ServicePropKinds = Literal["entity", "entity_collection", "model", "model_collection",
                           "enum", "enum_collection", "primitive", "primitive_collection"]


class KeyPropDeclaration(_Declaration):
    name: str
    odata_name: str
    type: str
    odata_type: str


class ServicePropDeclaration(_Declaration):
    name: str
    field_name: str
    odata_name: str
    service_kind: ServicePropKinds
    type: str
    service: Optional[str] = None
    query_object: Optional[str] = None


class EntityServiceArtifact(_Declaration):
    kind: Literal["entity_service"] = "entity_service"
    name: str
    odata_name: str
    model: str
    editable_model: str
    query_object: str
    is_entity: bool = True
    keys: Tuple[KeyPropDeclaration, ...] = ()
    props: Tuple[ServicePropDeclaration, ...] = ()
    operations: Tuple[OperationReference, ...] = ()


class CollectionServiceArtifact(_Declaration):
    kind: Literal["collection_service"] = "collection_service"
    name: str
    odata_name: str
    model: str
    editable_model: str
    query_object: str
    entity_service: str
    keys: Tuple[KeyPropDeclaration, ...] = ()
    operations: Tuple[OperationReference, ...] = ()


class ResolvedNavigationBinding(_Declaration):
    path: str
    target: str
    target_kind: Literal["entity_set", "singleton"]
    target_entry: str


class EntryPointDeclaration(_Declaration):
    name: str
    odata_name: str
    entry_kind: Literal["entity_set", "singleton"]
    model: str
    service: str
    navigation_bindings: Tuple[ResolvedNavigationBinding, ...] = ()


class OperationImportDeclaration(_Declaration):
    name: str
    odata_name: str
    operation: str
    query_operation: str
    operation_kind: OperationKinds
    entity_set: Optional[str] = None


class MainServiceArtifact(_Declaration):
    kind: Literal["main_service"] = "main_service"
    name: str
    version: ODataVersions
    service_name: str
    entry_points: Tuple[EntryPointDeclaration, ...] = ()
    operations: Tuple[OperationImportDeclaration, ...] = ()


ModelFamilyArtifact = Annotated[
    Union[EnumArtifact, ModelArtifact, OperationParamsArtifact, ModelModuleArtifact],
    Field(discriminator="kind")]
QueryFamilyArtifact = Annotated[
    Union[QueryObjectArtifact, QueryEnumArtifact, QueryOperationArtifact, QueryObjectModuleArtifact],
    Field(discriminator="kind")]
ServiceFamilyArtifact = Annotated[
    Union[EntityServiceArtifact, CollectionServiceArtifact, MainServiceArtifact],
    Field(discriminator="kind")]


class GenerationResult(_Declaration):
    """Ordered artifacts of one generation run, grouped by family."""
    version: ODataVersions
    service_name: str
    models: Tuple[ModelFamilyArtifact, ...] = ()
    query_objects: Tuple[QueryFamilyArtifact, ...] = ()
    services: Tuple[ServiceFamilyArtifact, ...] = ()
    primitive_imports: Tuple[str, ...] = ()
    converters: Tuple[ConverterDeclaration, ...] = ()

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)

    def artifacts(self) -> List[_Declaration]:
        return [*self.models, *self.query_objects, *self.services]

    def by_kind(self, kind: str) -> Dict[str, _Declaration]:
        """Artifacts of one kind keyed by name, e.g. `by_kind("entity_service")`."""
        return {a.name: a for a in self.artifacts() if a.kind == kind}

    def get(self, kind: str, name: str) -> _Declaration:
        artifact = self.by_kind(kind).get(name)
        if artifact is None:
            raise ReferenceLookupError(f"No {kind} artifact named [{name}]", identifier=name,
                                       expected=f"{kind} artifact")
        return artifact
