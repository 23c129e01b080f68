"""
Digestion of OData V2 schemas.

CSDL 3.0 documents share the V2 shape (associations, self-contained function
imports) and are digested here as well.
"""

from typing import Dict

from ..constants import ODataVersions
from ..edmx_models import EdmxAssociation, EdmxEntityContainer, EdmxSchema, EdmxStructuredType
from ..errors import ReferenceLookupError
from ..models import OperationKinds, PropertyModel
from .base import Digester


class V2Digester(Digester):
    version = ODataVersions.V2

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.associations: Dict[str, EdmxAssociation] = {}
        for schema in self.schemas:
            for association in schema.associations:
                self.associations[association.name] = association

    def map_navigation_property(self, schema: EdmxSchema, model: EdmxStructuredType, nav) -> PropertyModel:
        relationship = self.naming.strip_namespace(nav.relationship or "")
        association = self.associations.get(relationship)
        if association is None:
            raise ReferenceLookupError(
                f"Association [{nav.relationship}] of navigation property [{model.name}.{nav.name}] is not declared",
                identifier=nav.relationship, expected="Association of the service")

        end = next((e for e in association.ends if e.role == nav.to_role), None)
        if end is None:
            raise ReferenceLookupError(
                f"Role [{nav.to_role}] of navigation property [{model.name}.{nav.name}] is not an end "
                f"of association [{association.name}]",
                identifier=nav.to_role, expected="Association End role")

        if end.multiplicity == "*":
            return self.map_property(nav.name, f"Collection({end.type})", True, is_navigation=True)
        return self.map_property(nav.name, end.type, end.multiplicity != "1", is_navigation=True)

    def _digest_operations(self, schema: EdmxSchema):
        # V2 knows no Function / Action elements: each FunctionImport is its own root operation
        if schema.entity_container is None:
            return
        for fi in schema.entity_container.function_imports:
            http_method = (fi.http_method or "GET").upper()
            kind = OperationKinds.FUNCTION if http_method == "GET" else OperationKinds.ACTION
            self.add_operation(
                schema,
                fi.name,
                kind,
                [p for p in fi.parameters if p.mode.lower() != "out"],
                return_type=fi.return_type,
                http_method=http_method,
            )
            self._log_verbose(f"  FunctionImport {fi.name} ({http_method}) as {kind.value}")

    def _digest_operation_imports(self, schema: EdmxSchema, container: EdmxEntityContainer):
        for fi in container.function_imports:
            kind = OperationKinds.FUNCTION if (fi.http_method or "GET").upper() == "GET" else OperationKinds.ACTION
            self.add_operation_import(fi.name, fi.name, kind, fi.entity_set)
