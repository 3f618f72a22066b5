"""
SOAP Introspection Module

Discovers operations and data types from a SOAP client's introspection output.
Supports:
- Best-effort parsing of WSDL type strings (structs and scalars)
- Operation signature parsing
- Case-insensitive function tables
- Schema caching with configurable TTL
"""

from .type_parser import TypeDescriptorParser
from .schema_builder import SchemaBuilder

__all__ = [
    "TypeDescriptorParser",
    "SchemaBuilder",
]
