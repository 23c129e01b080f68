"""
Digestion of OData V4 (CSDL 4.0 / 4.01) schemas.
"""

from ..constants import ODataVersions
from ..edmx_models import EdmxEntityContainer, EdmxSchema, EdmxStructuredType
from ..errors import SchemaError
from ..models import OperationKinds, PropertyModel
from .base import Digester


class V4Digester(Digester):
    version = ODataVersions.V4

    def map_navigation_property(self, schema: EdmxSchema, model: EdmxStructuredType, nav) -> PropertyModel:
        if not nav.type:
            raise SchemaError(f"Navigation property [{model.name}.{nav.name}] has no Type",
                              identifier=nav.name, expected="NavigationProperty with Type attribute")
        return self.map_property(nav.name, nav.type, nav.nullable, is_navigation=True)

    def _digest_operations(self, schema: EdmxSchema):
        for kind, operations in ((OperationKinds.FUNCTION, schema.functions),
                                 (OperationKinds.ACTION, schema.actions)):
            for op in operations:
                self.add_operation(
                    schema,
                    op.name,
                    kind,
                    op.parameters,
                    return_type=op.return_type.type if op.return_type else None,
                    is_bound=op.is_bound,
                    entity_set_path=op.entity_set_path,
                )
                self._log_verbose(f"  {kind.value} {op.name} (bound: {op.is_bound})")

    def _digest_operation_imports(self, schema: EdmxSchema, container: EdmxEntityContainer):
        for fi in container.function_imports:
            if not fi.function:
                raise SchemaError(f"FunctionImport [{fi.name}] does not reference a Function",
                                  identifier=fi.name, expected="FunctionImport with Function attribute")
            self.add_operation_import(fi.name, fi.function, OperationKinds.FUNCTION, fi.entity_set)
        for ai in container.action_imports:
            self.add_operation_import(ai.name, ai.action, OperationKinds.ACTION, ai.entity_set)
