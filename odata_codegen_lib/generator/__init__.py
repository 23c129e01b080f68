"""
Artifact generators over the digested data model.
"""

from typing import Optional

from ..models import DataModel
from ..naming_helper import NamingHelper
from ..options import GenerationOptions
from .artifacts import GenerationResult
from .model_generator import ModelGenerator, generate_models
from .query_object_generator import QueryObjectGenerator, generate_query_objects
from .service_generator import ServiceGenerator, generate_services


def generate_all(data_model: DataModel, naming_helper: Optional[NamingHelper] = None,
                 options: Optional[GenerationOptions] = None) -> GenerationResult:
    """Run all three generator families with one naming helper.

    The helper is pure, so the families agree on every cross-referenced symbol
    without sharing any further state.
    """
    options = options or GenerationOptions()
    options.check(data_model.version)
    naming_helper = naming_helper or NamingHelper(options, data_model.service_name, data_model.namespaces)
    return GenerationResult(
        version=data_model.version,
        service_name=data_model.service_name,
        models=tuple(generate_models(data_model, naming_helper, options)),
        query_objects=tuple(generate_query_objects(data_model, naming_helper, options)),
        services=tuple(generate_services(data_model, naming_helper, options)),
        primitive_imports=data_model.primitive_type_imports,
        converters=tuple(options.converters),
    )


__all__ = [
    "GenerationResult",
    "ModelGenerator",
    "QueryObjectGenerator",
    "ServiceGenerator",
    "generate_all",
    "generate_models",
    "generate_query_objects",
    "generate_services",
]
