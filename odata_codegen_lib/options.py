"""
Generation options: the read-only configuration surface of a generation run.
"""

import json
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import ODataVersions
from .errors import ConfigurationError

_AFFIX_PATTERN = re.compile(r"^[A-Za-z0-9_]*$")


class NamingStrategies(str, Enum):
    PASCAL_CASE = "pascalCase"
    CAMEL_CASE = "camelCase"
    CONSTANT_CASE = "constantCase"
    SNAKE_CASE = "snakeCase"


class ArtifactKinds(str, Enum):
    MODEL = "models"
    EDITABLE_MODEL = "editable_models"
    MODEL_PROPERTY = "model_props"
    ENUM = "enums"
    ENUM_MEMBER = "enum_members"
    OPERATION_PARAMS = "operation_params"
    QUERY_OBJECT = "query_objects"
    QUERY_OPERATION = "query_operations"
    SERVICE = "services"
    COLLECTION_SERVICE = "collection_services"
    MAIN_SERVICE = "main_service"
    OPERATION = "operations"
    ENTRY_POINT = "entry_points"
    PRIVATE_FIELD = "private_fields"
    NAVIGATION_ACCESSOR = "navigation_accessors"


class NameSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    prefix: str = ""
    suffix: str = ""
    naming_strategy: Optional[NamingStrategies] = None


def _settings(strategy: NamingStrategies, prefix: str = "", suffix: str = ""):
    return Field(default_factory=lambda: NameSettings(prefix=prefix, suffix=suffix, naming_strategy=strategy))


class NamingOptions(BaseModel):
    """Independent naming settings per artifact kind.

    Operations use `functions` or `actions` depending on the operation kind.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    models: NameSettings = _settings(NamingStrategies.PASCAL_CASE)
    editable_models: NameSettings = _settings(NamingStrategies.PASCAL_CASE, prefix="Editable")
    model_props: NameSettings = _settings(NamingStrategies.SNAKE_CASE)
    enums: NameSettings = _settings(NamingStrategies.PASCAL_CASE)
    enum_members: NameSettings = _settings(NamingStrategies.CONSTANT_CASE)
    operation_params: NameSettings = _settings(NamingStrategies.PASCAL_CASE, suffix="Params")
    query_objects: NameSettings = _settings(NamingStrategies.PASCAL_CASE, prefix="Q")
    query_operations: NameSettings = _settings(NamingStrategies.PASCAL_CASE, prefix="Q")
    services: NameSettings = _settings(NamingStrategies.PASCAL_CASE, suffix="Service")
    collection_services: NameSettings = _settings(NamingStrategies.PASCAL_CASE, suffix="CollectionService")
    main_service: NameSettings = _settings(NamingStrategies.PASCAL_CASE, suffix="Service")
    functions: NameSettings = _settings(NamingStrategies.SNAKE_CASE)
    actions: NameSettings = _settings(NamingStrategies.SNAKE_CASE)
    entry_points: NameSettings = _settings(NamingStrategies.SNAKE_CASE)
    private_fields: NameSettings = _settings(NamingStrategies.SNAKE_CASE, prefix="_")
    navigation_accessors: NameSettings = _settings(NamingStrategies.SNAKE_CASE)

    def all_settings(self) -> Dict[str, NameSettings]:
        return {name: getattr(self, name) for name in type(self).model_fields}


class ConverterDeclaration(BaseModel):
    """Custom converters; passed through to the artifacts untouched."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    module: str
    use: List[str] = []


# Kinds whose generated names live side by side in one module and therefore must not coincide
_DISTINCT_KINDS = [
    ("models", "editable_models"),
    ("models", "query_objects"),
    ("models", "operation_params"),
    ("services", "collection_services"),
]


class GenerationOptions(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    service_name: Optional[str] = None
    model_prefix: str = ""
    model_suffix: str = ""
    naming: NamingOptions = Field(default_factory=NamingOptions)
    big_number_as_string: bool = False
    enable_primitive_property_services: bool = False
    flatten_editable_base_props: bool = True
    converters: List[ConverterDeclaration] = []
    verbose: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]] = None) -> "GenerationOptions":
        """Build options from a (partial) config mapping.

        Naming settings are merged per artifact kind onto the defaults, so
        `{"naming": {"services": {"suffix": "Srv"}}}` keeps the default strategy.
        """
        data = dict(data or {})
        naming = data.pop("naming", None) or {}
        if not isinstance(naming, dict):
            raise ConfigurationError("'naming' must be a mapping", identifier="naming", expected="mapping")

        defaults = {name: s.model_dump() for name, s in NamingOptions().all_settings().items()}
        for kind, overrides in naming.items():
            if kind not in defaults:
                raise ConfigurationError(
                    f"Unknown naming section [{kind}]", identifier=kind,
                    expected=f"one of {', '.join(sorted(defaults))}")
            if not isinstance(overrides, dict):
                raise ConfigurationError(
                    f"Naming section [{kind}] must be a mapping", identifier=kind, expected="mapping")
            defaults[kind] = {**defaults[kind], **overrides}

        try:
            options = cls(naming=NamingOptions(**defaults), **data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid generation options: {e}", expected="GenerationOptions") from e
        options.check()
        return options

    def check(self, version: Optional[ODataVersions] = None) -> None:
        """Reject option combinations that cannot produce a consistent artifact set."""
        for value, label in ((self.model_prefix, "model_prefix"), (self.model_suffix, "model_suffix")):
            if not _AFFIX_PATTERN.match(value):
                raise ConfigurationError(
                    f"Option [{label}] is not usable inside an identifier: '{value}'",
                    identifier=label, expected="identifier fragment")

        settings = self.naming.all_settings()
        for kind, s in settings.items():
            for affix in (s.prefix, s.suffix):
                if not _AFFIX_PATTERN.match(affix):
                    raise ConfigurationError(
                        f"Naming affix '{affix}' of [{kind}] is not usable inside an identifier",
                        identifier=kind, expected="identifier fragment")

        for first, second in _DISTINCT_KINDS:
            a, b = settings[first], settings[second]
            if first == "models":
                a = a.model_copy(update={
                    "prefix": self.model_prefix or a.prefix,
                    "suffix": self.model_suffix or a.suffix,
                })
            if a == b:
                raise ConfigurationError(
                    f"Naming of [{first}] and [{second}] is identical, generated names would collide",
                    identifier=second, expected="distinct prefix, suffix or naming strategy")

        if version == ODataVersions.V2 and self.big_number_as_string:
            raise ConfigurationError(
                "Option [big_number_as_string] is only supported for OData V4",
                identifier="big_number_as_string", expected="OData V4 metadata")


def load_options(config_file: Union[str, Path, None] = None) -> GenerationOptions:
    """Load generation options from a JSON file; defaults when no file is given."""
    if not config_file:
        return GenerationOptions()
    path = Path(config_file)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to load config file {path}: {e}", identifier=str(path),
                                 expected="JSON config file") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object", identifier=str(path),
                                 expected="JSON object")
    return GenerationOptions.from_dict(data)
