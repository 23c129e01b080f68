"""
OData Codegen Library - digests OData V2/V4 metadata and generates typed client artifacts.
"""

from .constants import ODataVersions
from .errors import (
    CodegenError,
    ConfigurationError,
    IllegalStateError,
    MetadataParseError,
    ReferenceLookupError,
    SchemaError
)
from .options import GenerationOptions, NamingOptions, NameSettings, NamingStrategies, load_options
from .models import DataModel, DataTypes, ModelType, EnumType, OperationType, PropertyModel
from .metadata_parser import MetadataParser, ParsedMetadata
from .type_resolver import TypeResolver
from .naming_helper import NamingHelper, SymbolTable
from .digestion import digest, digest_metadata
from .generator import GenerationResult, generate_all, generate_models, generate_query_objects, generate_services

__all__ = [
    'ODataVersions',
    'CodegenError',
    'ConfigurationError',
    'IllegalStateError',
    'MetadataParseError',
    'ReferenceLookupError',
    'SchemaError',
    'GenerationOptions',
    'NamingOptions',
    'NameSettings',
    'NamingStrategies',
    'load_options',
    'DataModel',
    'DataTypes',
    'ModelType',
    'EnumType',
    'OperationType',
    'PropertyModel',
    'MetadataParser',
    'ParsedMetadata',
    'TypeResolver',
    'NamingHelper',
    'SymbolTable',
    'digest',
    'digest_metadata',
    'GenerationResult',
    'generate_all',
    'generate_models',
    'generate_query_objects',
    'generate_services'
]
