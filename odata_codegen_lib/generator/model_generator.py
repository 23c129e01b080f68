"""
Model generator: read and editable shapes of all model types, enums and operation parameters.
"""

from typing import List, Set

from ..constants import ROOT_OPERATION
from ..models import DataTypes, EnumType, ModelType, PropertyModel
from .artifacts import (
    EditableShape,
    EnumArtifact,
    EnumMemberDeclaration,
    ModelArtifact,
    ModelModuleArtifact,
    OperationParamsArtifact,
    ParamsShape,
)
from .base import BaseGenerator, to_field


class ModelGenerator(BaseGenerator):
    component = "ModelGenerator"

    def generate(self) -> list:
        artifacts = []
        for enum_type in self.data_model.get_enums():
            artifacts.append(self._generate_enum(enum_type))
        for model in self.data_model.get_models():
            artifacts.append(self._generate_model(model))
        for binding in self.data_model.get_operation_bindings():
            artifacts.append(self._generate_params(binding))

        artifacts.append(ModelModuleArtifact(
            name=self.data_model.service_name,
            symbols=tuple(self.symbols.symbols()),
            primitive_imports=self.data_model.primitive_type_imports,
        ))
        self._log_verbose(f"Generated {len(artifacts)} model artifacts.")
        return artifacts

    def _generate_enum(self, enum_type: EnumType) -> EnumArtifact:
        self.symbols.register(enum_type.name, f"EnumType {enum_type.odata_name}", "enum")
        return EnumArtifact(
            name=enum_type.name,
            odata_name=enum_type.odata_name,
            members=tuple(EnumMemberDeclaration(name=self.naming.get_enum_member_name(m), odata_name=m)
                          for m in enum_type.members),
            is_flags=enum_type.is_flags,
        )

    def _editable_field(self, prop: PropertyModel, keys: Set[str]):
        type_name = None
        if prop.data_type == DataTypes.MODEL:
            type_name = self.naming.get_editable_model_name(self.data_model.get_model(prop.type).odata_name)
        return to_field(prop, type_name=type_name, required=prop.required or prop.odata_name in keys)

    def _generate_model(self, model: ModelType) -> ModelArtifact:
        self.symbols.register(model.name, f"{'EntityType' if model.is_entity else 'ComplexType'} "
                                          f"{model.qualified_name}", "model")
        editable_name = self.symbols.register(self.naming.get_editable_model_name(model.odata_name),
                                              f"editable {model.qualified_name}", "editable model")
        keys = self.data_model.get_keys(model)

        flatten = self.options.flatten_editable_base_props
        source = self.data_model.get_all_props(model) if flatten else model.props
        editable_base = None
        if model.base_class and not flatten:
            editable_base = self.naming.get_editable_model_name(self.data_model.get_model(model.base_class).odata_name)

        return ModelArtifact(
            name=model.name,
            odata_name=model.odata_name,
            qualified_name=model.qualified_name,
            base_class=model.base_class,
            fields=tuple(to_field(p) for p in model.props),
            keys=tuple(keys),
            is_entity=model.is_entity,
            is_abstract=model.is_abstract,
            is_open=model.is_open,
            editable=EditableShape(
                name=editable_name,
                base_class=editable_base,
                # navigation properties are never part of a create / update payload
                fields=tuple(self._editable_field(p, set(keys)) for p in source if not p.is_navigation),
            ),
        )

    def _generate_params(self, binding: str) -> OperationParamsArtifact:
        shapes: List[ParamsShape] = []
        for op in self.data_model.get_operations_by_binding(binding):
            params = self.operation_params(op)
            if not params:
                continue
            name = self.symbols.register(self.get_params_model_name(op), self.operation_signature(op),
                                         "operation params")
            shapes.append(ParamsShape(name=name, operation=op.name, odata_name=op.odata_name,
                                      fields=tuple(to_field(p) for p in params)))
        return OperationParamsArtifact(
            name=self.data_model.service_name if binding == ROOT_OPERATION else binding,
            binding=binding,
            shapes=tuple(shapes),
        )


def generate_models(data_model, naming_helper=None, options=None) -> list:
    """Model family artifacts: enums, models, operation params, then the module."""
    return ModelGenerator(data_model, naming_helper, options).generate()
