"""
Schema digestion: raw EDMX schemas -> immutable `DataModel`.
"""

from typing import List, Optional

from ..constants import ODataVersions
from ..edmx_models import EdmxSchema
from ..models import DataModel
from ..naming_helper import NamingHelper
from ..options import GenerationOptions
from .base import Digester
from .v2 import V2Digester
from .v4 import V4Digester

DIGESTERS = {
    ODataVersions.V2: V2Digester,
    ODataVersions.V4: V4Digester,
}


def digest(schemas: List[EdmxSchema], options: Optional[GenerationOptions] = None,
           naming_helper: Optional[NamingHelper] = None,
           version: Optional[ODataVersions] = None) -> DataModel:
    """Digest the ordered schemas of one metadata document.

    Each call builds its own digester, resolver and symbol tables; nothing is
    shared between calls.
    """
    digester = DIGESTERS[ODataVersions(version or ODataVersions.V4)](schemas, options, naming_helper)
    return digester.digest()


def digest_metadata(metadata, options: Optional[GenerationOptions] = None,
                    naming_helper: Optional[NamingHelper] = None) -> DataModel:
    """Digest the result of `MetadataParser.parse_xml()` / `fetch()`."""
    return digest(metadata.schemas, options, naming_helper, metadata.version)


__all__ = ["Digester", "V2Digester", "V4Digester", "digest", "digest_metadata"]
