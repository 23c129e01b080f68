"""
Deterministic mapping of OData identifiers to generated symbol names.
"""

import keyword
import re
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import ConfigurationError
from .options import ArtifactKinds, GenerationOptions, NameSettings, NamingStrategies


def tokenize(name: str) -> List[str]:
    """Split an identifier into words.

    Underscores and any non-word characters split first, then every token is
    decomposed at CamelCase boundaries, keeping acronyms together
    ('XMLParser' -> ['XML', 'Parser']).
    """
    words = []
    for token in re.split(r'[\W_]+', name):
        if token:
            words.extend(_decompose_camel_case(token))
    return words


def _decompose_camel_case(word: str) -> List[str]:
    """Split CamelCase/PascalCase into constituent words."""
    parts = []
    current = []

    for i, char in enumerate(word):
        if i == 0:
            current.append(char)
        elif char.isupper():
            # Check if this starts a new word
            if current and (current[-1].islower() or current[-1].isdigit() or
                            (i + 1 < len(word) and word[i + 1].islower())):
                parts.append(''.join(current))
                current = [char]
            else:
                current.append(char)
        else:
            current.append(char)

    if current:
        parts.append(''.join(current))

    return parts


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def convert(name: str, strategy: Optional[NamingStrategies]) -> str:
    """Apply a case-conversion strategy; `None` keeps the name as it is."""
    if strategy is None:
        return name
    words = tokenize(name)
    if not words:
        return name
    if strategy == NamingStrategies.PASCAL_CASE:
        return ''.join(_capitalize(w) for w in words)
    if strategy == NamingStrategies.CAMEL_CASE:
        return words[0].lower() + ''.join(_capitalize(w) for w in words[1:])
    if strategy == NamingStrategies.CONSTANT_CASE:
        return '_'.join(w.upper() for w in words)
    return '_'.join(w.lower() for w in words)


class NamingHelper:
    """Maps raw OData identifiers to generated names per artifact kind.

    The helper only holds the immutable run configuration: every call with the same
    arguments returns the same string, so all generators of a run agree on each
    other's symbols without sharing any cache.

    Args:
        options: generation options holding the naming settings
        service_name: namespace of the main schema, source of the main service name
        namespaces: further namespaces or aliases to strip from qualified names
    """

    def __init__(self, options: Optional[GenerationOptions] = None, service_name: str = "",
                 namespaces: Iterable[str] = ()):
        self.options = options or GenerationOptions()
        self.service_name = service_name
        prefixes = {ns for ns in [service_name, *namespaces] if ns}
        # longest first, so that "Org.Sub" wins over "Org"
        self.namespaces: Tuple[str, ...] = tuple(sorted(prefixes, key=lambda ns: (-len(ns), ns)))

    def strip_namespace(self, token: str) -> str:
        """Remove a known namespace or alias prefix from a qualified name."""
        for ns in self.namespaces:
            if token.startswith(ns + "."):
                return token[len(ns) + 1:]
        return token

    def _settings_for(self, kind: ArtifactKinds, scope: Optional[str]) -> NameSettings:
        naming = self.options.naming
        if kind == ArtifactKinds.OPERATION:
            return naming.actions if scope == "Action" else naming.functions
        settings = getattr(naming, kind.value)
        if kind == ArtifactKinds.MODEL and (self.options.model_prefix or self.options.model_suffix):
            settings = settings.model_copy(update={
                "prefix": self.options.model_prefix or settings.prefix,
                "suffix": self.options.model_suffix or settings.suffix,
            })
        return settings

    def name_for(self, raw: str, kind: ArtifactKinds, scope: Optional[str] = None) -> str:
        """Generated name for a raw identifier.

        Args:
            raw: OData identifier, optionally namespace qualified
            kind: artifact kind which selects prefix, suffix and naming strategy
            scope: operation kind ("Function" / "Action") for operations

        Returns:
            The generated symbol name
        """
        if kind == ArtifactKinds.EDITABLE_MODEL:
            raw = self.name_for(raw, ArtifactKinds.MODEL)
        elif kind == ArtifactKinds.MAIN_SERVICE:
            raw = raw or self.service_name
        else:
            raw = self.strip_namespace(raw)

        settings = self._settings_for(kind, scope)
        if settings.naming_strategy is None:
            name = f"{settings.prefix}{raw}{settings.suffix}"
        else:
            joined = f"{settings.prefix}_{raw}_{settings.suffix}"
            name = convert(joined, settings.naming_strategy)
            # underscores are separators for the conversion, but leading/trailing ones are affixes
            lead = len(settings.prefix) - len(settings.prefix.lstrip("_"))
            trail = len(settings.suffix) - len(settings.suffix.rstrip("_"))
            name = "_" * lead + name + "_" * trail

        if name[:1].isdigit():
            name = "_" + name
        if keyword.iskeyword(name):
            name += "_"
        return name

    # Convenience accessors used throughout digestion and generation

    def get_model_name(self, name: str) -> str:
        return self.name_for(name, ArtifactKinds.MODEL)

    def get_editable_model_name(self, name: str) -> str:
        return self.name_for(name, ArtifactKinds.EDITABLE_MODEL)

    def get_model_prop_name(self, name: str) -> str:
        return self.name_for(name, ArtifactKinds.MODEL_PROPERTY)

    def get_enum_name(self, name: str) -> str:
        return self.name_for(name, ArtifactKinds.ENUM)

    def get_enum_member_name(self, name: str) -> str:
        return self.name_for(name, ArtifactKinds.ENUM_MEMBER)

    def get_operation_params_model_name(self, name: str, kind: str) -> str:
        return self.name_for(self.get_operation_name(name, kind), ArtifactKinds.OPERATION_PARAMS)

    def get_query_object_name(self, name: str) -> str:
        return self.name_for(name, ArtifactKinds.QUERY_OBJECT)

    def get_query_operation_name(self, name: str) -> str:
        return self.name_for(name, ArtifactKinds.QUERY_OPERATION)

    def get_service_name(self, name: str) -> str:
        return self.name_for(name, ArtifactKinds.SERVICE)

    def get_collection_service_name(self, name: str) -> str:
        return self.name_for(name, ArtifactKinds.COLLECTION_SERVICE)

    def get_main_service_name(self) -> str:
        return self.name_for(self.options.service_name or self.service_name, ArtifactKinds.MAIN_SERVICE)

    def get_operation_name(self, name: str, kind: str) -> str:
        return self.name_for(name, ArtifactKinds.OPERATION, scope=kind)

    def get_entry_point_name(self, name: str) -> str:
        return self.name_for(name, ArtifactKinds.ENTRY_POINT)

    def get_private_field_name(self, name: str) -> str:
        return self.name_for(name, ArtifactKinds.PRIVATE_FIELD)

    def get_navigation_accessor_name(self, name: str) -> str:
        return self.name_for(name, ArtifactKinds.NAVIGATION_ACCESSOR)


class SymbolTable:
    """Registry of generated symbols within one naming scope.

    Registering the same symbol twice for the same raw identifier is a no-op;
    two different raw identifiers ending up as one symbol is a naming collision.
    """

    def __init__(self, scope: str):
        self.scope = scope
        self._symbols: Dict[str, str] = {}

    def register(self, symbol: str, raw: str, kind: str = "symbol") -> str:
        existing = self._symbols.get(symbol)
        if existing is not None and existing != raw:
            raise ConfigurationError(
                f"Naming collision in {self.scope}: '{existing}' and '{raw}' both map to {kind} '{symbol}'",
                identifier=raw, expected=f"unique {kind} name")
        self._symbols[symbol] = raw
        return symbol

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._symbols

    def symbols(self) -> List[str]:
        return list(self._symbols)
