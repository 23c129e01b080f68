"""
OData metadata parser: EDMX documents (V2, V3 and V4) to raw schema shapes.
"""

import sys
from datetime import datetime
from typing import List, Optional, Tuple

import requests
from lxml import etree
from pydantic import BaseModel

from .constants import EDMX_VERSIONS, ODataVersions
from .edmx_models import (
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
from .errors import MetadataParseError


class ParsedMetadata(BaseModel):
    version: ODataVersions
    edmx_version: str
    schemas: List[EdmxSchema]


def _children(element, name: str) -> list:
    """Direct children by local name, so that every EDM namespace revision matches."""
    return element.xpath(f"./*[local-name()='{name}']")


def _attr(element, name: str, default: Optional[str] = None) -> Optional[str]:
    """Attribute by local name, e.g. 'HttpMethod' matches 'm:HttpMethod'."""
    value = element.get(name)
    if value is not None:
        return value
    for key, value in element.attrib.items():
        if etree.QName(key).localname == name:
            return value
    return default


def _flag(element, name: str, default: bool) -> bool:
    value = _attr(element, name)
    if value is None:
        return default
    return value.strip().lower() == "true"


def _required_attr(element, name: str) -> str:
    value = _attr(element, name)
    if not value:
        tag = etree.QName(element).localname
        raise MetadataParseError(f"Element <{tag}> lacks attribute [{name}]", identifier=tag,
                                 expected=f"{tag} with {name} attribute")
    return value


class MetadataParser:
    """Parses OData metadata documents into `ParsedMetadata`.

    Args:
        service_url: root URL of the service, only needed for `fetch()`
        auth: optional (user, password) tuple for basic authentication
        verbose: log progress to stderr
    """

    def __init__(self, service_url: Optional[str] = None, auth: Optional[Tuple[str, str]] = None,
                 verbose: bool = False):
        self.service_url = service_url.rstrip('/') if service_url else None
        self.metadata_url = f"{self.service_url}/$metadata" if self.service_url else None
        self.auth = auth
        self.verbose = verbose
        self.session = requests.Session()
        if auth:
            self.session.auth = auth
        self.session.headers.update({
            'Accept': 'application/xml',
            'User-Agent': 'OData-Codegen/1.0'
        })

    def _log_verbose(self, message: str):
        """Prints message to stderr only if verbose mode is enabled."""
        if self.verbose:
            timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
            print(f"[{timestamp} Parser VERBOSE] {message}", file=sys.stderr)

    def fetch(self) -> ParsedMetadata:
        """Fetch `$metadata` of the service and parse it."""
        if not self.metadata_url:
            raise ValueError("No service URL given, cannot fetch metadata")
        self._log_verbose(f"Fetching metadata from {self.metadata_url}...")
        response = self.session.get(self.metadata_url)
        response.raise_for_status()
        self._log_verbose("Metadata fetched successfully.")
        return self.parse_xml(response.content)

    def parse_file(self, path: str) -> ParsedMetadata:
        self._log_verbose(f"Reading metadata from {path}...")
        with open(path, 'rb') as f:
            return self.parse_xml(f.read())

    def parse_xml(self, content) -> ParsedMetadata:
        """Parse an EDMX document given as bytes or str."""
        if isinstance(content, str):
            content = content.encode('utf-8')
        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        try:
            root = etree.fromstring(content, parser)
        except etree.XMLSyntaxError as e:
            raise MetadataParseError(f"Metadata is not valid XML: {e}", expected="EDMX document") from e

        if etree.QName(root).localname != "Edmx":
            raise MetadataParseError(f"Root element <{etree.QName(root).localname}> is not <Edmx>",
                                     identifier=etree.QName(root).localname, expected="EDMX document")

        edmx_version = root.get("Version", "")
        version = EDMX_VERSIONS.get(edmx_version)
        if version is None:
            raise MetadataParseError(f"Unsupported EDMX version [{edmx_version}]", identifier=edmx_version,
                                     expected=f"one of {', '.join(EDMX_VERSIONS)}")

        schema_elements = root.xpath(".//*[local-name()='DataServices']/*[local-name()='Schema']")
        if not schema_elements:
            raise MetadataParseError("Metadata document contains no Schema", expected="DataServices/Schema")

        schemas = [self._parse_schema(s) for s in schema_elements]
        self._log_verbose(f"Parsing complete. EDMX {edmx_version}, {len(schemas)} schema(s): "
                          f"{', '.join(s.namespace for s in schemas)}")
        return ParsedMetadata(version=version, edmx_version=edmx_version, schemas=schemas)

    def _parse_schema(self, element) -> EdmxSchema:
        namespace = _required_attr(element, "Namespace")
        container = _children(element, "EntityContainer")
        return EdmxSchema(
            namespace=namespace,
            alias=_attr(element, "Alias"),
            entity_types=[self._parse_structured_type(e) for e in _children(element, "EntityType")],
            complex_types=[self._parse_structured_type(e) for e in _children(element, "ComplexType")],
            enum_types=[self._parse_enum_type(e) for e in _children(element, "EnumType")],
            functions=[self._parse_operation(e) for e in _children(element, "Function")],
            actions=[self._parse_operation(e) for e in _children(element, "Action")],
            associations=[self._parse_association(e) for e in _children(element, "Association")],
            entity_container=self._parse_entity_container(container[0]) if container else None,
        )

    def _parse_property(self, element) -> EdmxProperty:
        return EdmxProperty(
            name=_required_attr(element, "Name"),
            type=_required_attr(element, "Type"),
            nullable=_flag(element, "Nullable", True),
            max_length=_attr(element, "MaxLength"),
        )

    def _parse_structured_type(self, element) -> EdmxStructuredType:
        keys = []
        for key in _children(element, "Key"):
            keys.extend(_required_attr(ref, "Name") for ref in _children(key, "PropertyRef"))
        return EdmxStructuredType(
            name=_required_attr(element, "Name"),
            base_type=_attr(element, "BaseType"),
            abstract=_flag(element, "Abstract", False),
            open_type=_flag(element, "OpenType", False),
            keys=keys,
            properties=[self._parse_property(p) for p in _children(element, "Property")],
            navigation_properties=[
                EdmxNavigationProperty(
                    name=_required_attr(nav, "Name"),
                    type=_attr(nav, "Type"),
                    nullable=_flag(nav, "Nullable", True),
                    partner=_attr(nav, "Partner"),
                    relationship=_attr(nav, "Relationship"),
                    from_role=_attr(nav, "FromRole"),
                    to_role=_attr(nav, "ToRole"),
                )
                for nav in _children(element, "NavigationProperty")
            ],
        )

    def _parse_enum_type(self, element) -> EdmxEnumType:
        return EdmxEnumType(
            name=_required_attr(element, "Name"),
            is_flags=_flag(element, "IsFlags", False),
            members=[EdmxEnumMember(name=_required_attr(m, "Name"), value=_attr(m, "Value"))
                     for m in _children(element, "Member")],
        )

    def _parse_parameter(self, element) -> EdmxParameter:
        return EdmxParameter(
            name=_required_attr(element, "Name"),
            type=_required_attr(element, "Type"),
            nullable=_flag(element, "Nullable", True),
            mode=_attr(element, "Mode", "In"),
        )

    def _parse_operation(self, element) -> EdmxOperation:
        return_types = _children(element, "ReturnType")
        return EdmxOperation(
            name=_required_attr(element, "Name"),
            is_bound=_flag(element, "IsBound", False),
            is_composable=_flag(element, "IsComposable", False),
            entity_set_path=_attr(element, "EntitySetPath"),
            parameters=[self._parse_parameter(p) for p in _children(element, "Parameter")],
            return_type=EdmxReturnType(
                type=_required_attr(return_types[0], "Type"),
                nullable=_flag(return_types[0], "Nullable", True),
            ) if return_types else None,
        )

    def _parse_association(self, element) -> EdmxAssociation:
        return EdmxAssociation(
            name=_required_attr(element, "Name"),
            ends=[
                EdmxAssociationEnd(
                    role=_required_attr(end, "Role"),
                    type=_required_attr(end, "Type"),
                    multiplicity=_attr(end, "Multiplicity", "1"),
                )
                for end in _children(element, "End")
            ],
        )

    def _parse_bindings(self, element) -> List[EdmxNavigationPropertyBinding]:
        return [
            EdmxNavigationPropertyBinding(path=_required_attr(b, "Path"), target=_required_attr(b, "Target"))
            for b in _children(element, "NavigationPropertyBinding")
        ]

    def _parse_entity_container(self, element) -> EdmxEntityContainer:
        return EdmxEntityContainer(
            name=_attr(element, "Name", "Container"),
            entity_sets=[
                EdmxEntitySet(
                    name=_required_attr(es, "Name"),
                    entity_type=_required_attr(es, "EntityType"),
                    navigation_property_bindings=self._parse_bindings(es),
                )
                for es in _children(element, "EntitySet")
            ],
            singletons=[
                EdmxSingleton(
                    name=_required_attr(s, "Name"),
                    type=_required_attr(s, "Type"),
                    navigation_property_bindings=self._parse_bindings(s),
                )
                for s in _children(element, "Singleton")
            ],
            function_imports=[
                EdmxFunctionImport(
                    name=_required_attr(fi, "Name"),
                    function=_attr(fi, "Function"),
                    entity_set=_attr(fi, "EntitySet"),
                    http_method=_attr(fi, "HttpMethod"),
                    return_type=_attr(fi, "ReturnType"),
                    parameters=[self._parse_parameter(p) for p in _children(fi, "Parameter")],
                )
                for fi in _children(element, "FunctionImport")
            ],
            action_imports=[
                EdmxActionImport(
                    name=_required_attr(ai, "Name"),
                    action=_required_attr(ai, "Action"),
                    entity_set=_attr(ai, "EntitySet"),
                )
                for ai in _children(element, "ActionImport")
            ],
        )
