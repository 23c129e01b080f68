"""
Constants used throughout the OData code generation library.
"""

from enum import Enum


class ODataVersions(int, Enum):
    V2 = 2
    V4 = 4


EDM_PREFIX = "Edm."
COLLECTION_PATTERN = r"^Collection\(([^)]+)\)$"

# Binding key of operations which are not bound to any model type
ROOT_OPERATION = "/"

# Wrapper types for primitives which travel as strings but carry a specific meaning
DATE_STRING = "DateString"
TIME_OF_DAY_STRING = "TimeOfDayString"
DATE_TIME_STRING = "DateTimeString"
DATE_TIME_OFFSET_STRING = "DateTimeOffsetString"
BINARY_STRING = "BinaryString"
GUID_STRING = "GuidString"
BIG_NUMBER_STRING = "BigNumberString"

# OData primitive type mappings to Python type names
ODATA_PRIMITIVE_TYPES = {
    "Edm.Boolean": "bool",
    "Edm.Byte": "int",
    "Edm.SByte": "int",
    "Edm.Int16": "int",
    "Edm.Int32": "int",
    "Edm.Int64": "int",
    "Edm.Single": "float",
    "Edm.Double": "float",
    "Edm.Decimal": "float",
    "Edm.String": "str",
    "Edm.Date": DATE_STRING,
    "Edm.TimeOfDay": TIME_OF_DAY_STRING,
    "Edm.Time": TIME_OF_DAY_STRING,
    "Edm.DateTime": DATE_TIME_STRING,
    "Edm.DateTimeOffset": DATE_TIME_OFFSET_STRING,
    "Edm.Binary": BINARY_STRING,
    "Edm.Guid": GUID_STRING,
}

# Primitive kinds which are routed to BIG_NUMBER_STRING in big-number mode
BIG_NUMBER_TYPES = {"Edm.Int64", "Edm.Decimal"}

# Types that need an import of their wrapper type
WRAPPER_TYPES = {
    DATE_STRING,
    TIME_OF_DAY_STRING,
    DATE_TIME_STRING,
    DATE_TIME_OFFSET_STRING,
    BINARY_STRING,
    GUID_STRING,
    BIG_NUMBER_STRING,
}

# Fallback for unknown (e.g. future) Edm primitives
DEFAULT_PRIMITIVE_TYPE = "str"

# Module which hosts the wrapper types referenced by generated artifacts
RUNTIME_TYPES_MODULE = "odata_codegen_lib.runtime.types"

# Namespaces for EDMX parsing
NAMESPACES = {
    'edmx': 'http://schemas.microsoft.com/ado/2007/06/edmx',
    'edmx4': 'http://docs.oasis-open.org/odata/ns/edmx',
    'm': 'http://schemas.microsoft.com/ado/2007/08/dataservices/metadata',
    'sap': 'http://www.sap.com/Protocols/SAPData',
}

# EDMX "Version" attribute -> digestion shape
EDMX_VERSIONS = {
    "1.0": ODataVersions.V2,
    "2.0": ODataVersions.V2,
    "3.0": ODataVersions.V2,
    "4.0": ODataVersions.V4,
    "4.01": ODataVersions.V4,
}
