"""
Schema Builder - Builds the function/type schema snapshot of a SOAP service.

Features:
- Lazy discovery from the SOAP client's introspection output
- Write-through caching of both tables (see SchemaCache)
- Deterministic, key-sorted tables
- Explicit invalidation via refresh_table_cache()
"""

import logging
from typing import Dict, Optional

from soap_rest.cache.schema_cache import SchemaCache
from soap_rest.schema.models import FunctionSchema, SchemaSnapshot, TypeDescriptor

from .type_parser import TypeDescriptorParser

logger = logging.getLogger(__name__)

FUNCTIONS_KEY = "functions"
TYPES_KEY = "types"


class SchemaBuilder:
    """
    Owns the in-memory schema snapshot of one SOAP service

    Usage:
    ```python
    builder = SchemaBuilder(client, SchemaCache(service_id=7))
    functions = builder.get_functions()
    print(f"Found {len(functions)} operations")
    ```

    Errors raised by the client during introspection are not caught here.
    """

    def __init__(
        self,
        client,
        cache: SchemaCache,
        parser: Optional[TypeDescriptorParser] = None,
    ):
        """
        Args:
            client: SOAP capability exposing get_functions() and get_types()
            cache: Namespaced cache for the two tables
            parser: Type string parser (a fresh one by default)
        """
        self.client = client
        self.cache = cache
        self.parser = parser or TypeDescriptorParser()

        self._functions: Dict[str, FunctionSchema] = {}
        self._types: Dict[str, TypeDescriptor] = {}
        self.generation = 0
        self.last_dropped = 0

    @property
    def snapshot(self) -> SchemaSnapshot:
        """Current tables, without triggering discovery"""
        return SchemaSnapshot(functions=self._functions, types=self._types)

    def get_types(self, refresh: bool = False) -> Dict[str, TypeDescriptor]:
        """
        Get the types table, sorted by type name

        Args:
            refresh: Rebuild from the SOAP client, bypassing memory and cache

        Returns:
            Mapping of type name to TypeDescriptor
        """
        if not refresh and self._types:
            return self._types

        if not refresh:
            cached = self.cache.get(TYPES_KEY)
            if cached is not None:
                self._publish_types(
                    {name: TypeDescriptor.from_dict(data) for name, data in cached.items()}
                )
                return self._types

        raw_types = self.client.get_types()

        self.parser.reset_diagnostics()
        structures = self.parser.parse_all(raw_types)
        self.last_dropped = self.parser.dropped
        if self.last_dropped:
            logger.info(f"Dropped {self.last_dropped} malformed type declaration(s)")

        self._publish_types(structures)
        self.cache.put(
            TYPES_KEY,
            {name: descriptor.to_dict() for name, descriptor in structures.items()},
            persist=True,
        )

        logger.info(f"Discovered {len(structures)} SOAP types")
        return self._types

    def get_functions(self, refresh: bool = False) -> Dict[str, FunctionSchema]:
        """
        Get the functions table, keyed and sorted by lower-cased operation name

        Args:
            refresh: Rebuild from the SOAP client, bypassing memory and cache

        Returns:
            Mapping of lower-cased name to FunctionSchema
        """
        if not refresh and self._functions:
            return self._functions

        if not refresh:
            cached = self.cache.get(FUNCTIONS_KEY)
            if cached is not None:
                self._publish_functions(
                    {key: FunctionSchema.from_dict(data) for key, data in cached.items()}
                )
                return self._functions

        raw_functions = self.client.get_functions()
        structures = self.get_types(refresh)

        names: Dict[str, FunctionSchema] = {}
        for raw in raw_functions:
            try:
                schema = FunctionSchema.from_raw(raw)
            except ValueError as e:
                logger.warning(f"Skipping operation: {e}")
                continue

            schema.request_fields = structures.get(schema.request_type)
            schema.response_fields = structures.get(schema.response_type)
            if schema.key in names:
                logger.debug(f"Operation {schema.name} overrides {names[schema.key].name}")
            names[schema.key] = schema

        functions = dict(sorted(names.items()))
        self._publish_functions(functions)
        self.cache.put(
            FUNCTIONS_KEY,
            {key: schema.to_dict() for key, schema in functions.items()},
            persist=True,
        )

        logger.info(f"Discovered {len(functions)} SOAP operations")
        return self._functions

    def refresh_table_cache(self) -> None:
        """Drop both tables from memory and cache; the next access rebuilds"""
        self.cache.remove(FUNCTIONS_KEY)
        self._functions = {}
        self.cache.remove(TYPES_KEY)
        self._types = {}
        self.generation += 1
        logger.debug("Schema tables invalidated")

    def _publish_types(self, types: Dict[str, TypeDescriptor]) -> None:
        self._types = types
        self.generation += 1

    def _publish_functions(self, functions: Dict[str, FunctionSchema]) -> None:
        self._functions = functions
        self.generation += 1
