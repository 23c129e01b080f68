"""
Shared plumbing of the artifact generators.
"""

import sys
from datetime import datetime
from typing import List, Optional

from ..models import DataModel, ModelType, OperationType, PropertyModel
from ..naming_helper import NamingHelper, SymbolTable
from ..options import GenerationOptions
from .artifacts import FieldDeclaration, OperationReference


def to_field(prop: PropertyModel, type_name: Optional[str] = None, required: Optional[bool] = None) -> FieldDeclaration:
    return FieldDeclaration(
        name=prop.name,
        odata_name=prop.odata_name,
        odata_type=prop.odata_type,
        type=type_name or prop.type,
        data_type=prop.data_type,
        is_collection=prop.is_collection,
        required=prop.required if required is None else required,
        is_navigation=prop.is_navigation,
    )


class BaseGenerator:
    """Base of the model, query object and service generators.

    A generator only reads the data model; every instance owns the symbol table
    of the module it declares.
    """

    component = "Generator"

    def __init__(self, data_model: DataModel, naming_helper: Optional[NamingHelper] = None,
                 options: Optional[GenerationOptions] = None):
        self.data_model = data_model
        self.options = options or GenerationOptions()
        self.naming = naming_helper or NamingHelper(self.options, data_model.service_name, data_model.namespaces)
        self.verbose = self.options.verbose
        self.symbols = SymbolTable(f"{self.component} module of {data_model.service_name}")

    def _log_verbose(self, message: str):
        """Prints message to stderr only if verbose mode is enabled."""
        if self.verbose:
            timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
            print(f"[{timestamp} {self.component} VERBOSE] {message}", file=sys.stderr)

    def operation_raw_name(self, op: OperationType) -> str:
        """Bound operations are qualified by their binding type, so that equally named
        operations of different types get distinct module symbols."""
        if not op.is_bound:
            return op.odata_name
        binding = self.data_model.model_types.get(op.binding)
        qualifier = binding.odata_name if binding else op.binding
        if op.is_collection_bound:
            qualifier += "Collection"
        return f"{qualifier}_{op.odata_name}"

    @staticmethod
    def operation_signature(op: OperationType) -> str:
        return f"{op.qualified_name}({', '.join(p.odata_type for p in op.parameters)})"

    def get_query_operation_name(self, op: OperationType) -> str:
        return self.naming.get_query_operation_name(self.operation_raw_name(op))

    def get_params_model_name(self, op: OperationType) -> str:
        return self.naming.get_operation_params_model_name(self.operation_raw_name(op), op.kind.value)

    def operation_params(self, op: OperationType) -> List[PropertyModel]:
        """Parameters as passed by callers: the binding parameter is implicit."""
        return list(op.parameters[1:] if op.is_bound else op.parameters)

    def bound_operations(self, model: ModelType) -> List[OperationType]:
        """Operations bound to the model or one of its base types; the nearest binding wins."""
        result = {}
        for m in self.data_model.get_base_chain(model):
            for op in self.data_model.get_operations_by_binding(m.name):
                result.setdefault((op.name, op.is_collection_bound), op)
        return list(result.values())

    def operation_reference(self, op: OperationType) -> OperationReference:
        return OperationReference(name=op.name, query_operation=self.get_query_operation_name(op),
                                  odata_name=op.odata_name)
