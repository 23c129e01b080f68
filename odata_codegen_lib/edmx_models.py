"""
Raw metadata shapes as they appear in EDMX documents.

These models mirror the element/attribute layout of CSDL (V2 and V4) without
interpreting it; digestion turns them into the data model in `models.py`.
"""

from typing import List, Optional
from pydantic import BaseModel


class EdmxProperty(BaseModel):
    name: str
    type: str
    nullable: bool = True
    max_length: Optional[str] = None


class EdmxNavigationProperty(BaseModel):
    name: str
    # V4
    type: Optional[str] = None
    nullable: bool = True
    partner: Optional[str] = None
    # V2
    relationship: Optional[str] = None
    from_role: Optional[str] = None
    to_role: Optional[str] = None


class EdmxStructuredType(BaseModel):
    """EntityType or ComplexType."""
    name: str
    base_type: Optional[str] = None
    abstract: bool = False
    open_type: bool = False
    keys: List[str] = []
    properties: List[EdmxProperty] = []
    navigation_properties: List[EdmxNavigationProperty] = []


class EdmxEnumMember(BaseModel):
    name: str
    value: Optional[str] = None


class EdmxEnumType(BaseModel):
    name: str
    is_flags: bool = False
    members: List[EdmxEnumMember] = []


class EdmxParameter(BaseModel):
    name: str
    type: str
    nullable: bool = True
    mode: str = "In"


class EdmxReturnType(BaseModel):
    type: str
    nullable: bool = True


class EdmxOperation(BaseModel):
    """V4 Function or Action element."""
    name: str
    is_bound: bool = False
    is_composable: bool = False
    entity_set_path: Optional[str] = None
    parameters: List[EdmxParameter] = []
    return_type: Optional[EdmxReturnType] = None


class EdmxAssociationEnd(BaseModel):
    role: str
    type: str
    multiplicity: str = "1"


class EdmxAssociation(BaseModel):
    """V2 Association element."""
    name: str
    ends: List[EdmxAssociationEnd] = []


class EdmxNavigationPropertyBinding(BaseModel):
    path: str
    target: str


class EdmxEntitySet(BaseModel):
    name: str
    entity_type: str
    navigation_property_bindings: List[EdmxNavigationPropertyBinding] = []


class EdmxSingleton(BaseModel):
    name: str
    type: str
    navigation_property_bindings: List[EdmxNavigationPropertyBinding] = []


class EdmxFunctionImport(BaseModel):
    name: str
    # V4: reference to a Function element
    function: Optional[str] = None
    entity_set: Optional[str] = None
    # V2: the import is the operation itself
    http_method: Optional[str] = None
    return_type: Optional[str] = None
    parameters: List[EdmxParameter] = []


class EdmxActionImport(BaseModel):
    name: str
    action: str
    entity_set: Optional[str] = None


class EdmxEntityContainer(BaseModel):
    name: str = "Container"
    entity_sets: List[EdmxEntitySet] = []
    singletons: List[EdmxSingleton] = []
    function_imports: List[EdmxFunctionImport] = []
    action_imports: List[EdmxActionImport] = []


class EdmxSchema(BaseModel):
    namespace: str
    alias: Optional[str] = None
    entity_types: List[EdmxStructuredType] = []
    complex_types: List[EdmxStructuredType] = []
    enum_types: List[EdmxEnumType] = []
    functions: List[EdmxOperation] = []
    actions: List[EdmxOperation] = []
    associations: List[EdmxAssociation] = []
    entity_container: Optional[EdmxEntityContainer] = None
