"""Route calls to SOAP operations by case-insensitive name."""
import logging
from typing import Any, Callable, Dict, Mapping, Union

from soap_rest.errors import InvalidArgumentError, NotFoundError
from soap_rest.introspection.schema_builder import SchemaBuilder

from .normalizer import normalize

logger = logging.getLogger(__name__)


class Dispatcher:
    """Resolves operation names and invokes them through the SOAP client."""

    def __init__(self, client, builder: SchemaBuilder):
        """
        Initialize dispatcher.

        Args:
            client: SOAP capability exposing operation(name) -> callable
            builder: Schema builder that owns the functions table
        """
        self.client = client
        self.builder = builder
        self._handles: Dict[str, Callable[[Any], Any]] = {}
        self._handles_generation = None

    def resolve(self, name: str, return_canonical: bool = False) -> Union[bool, str]:
        """
        Check whether an operation exists.

        Args:
            name: Operation name, any case
            return_canonical: Return the operation's declared name instead of True

        Returns:
            False if unknown, otherwise True or the canonical name

        Raises:
            InvalidArgumentError: If name is empty
        """
        if not name:
            raise InvalidArgumentError("Function name cannot be empty.")

        functions = self.builder.get_functions(False)

        schema = functions.get(name.lower())
        if schema is None:
            return False

        return schema.name if return_canonical else True

    def invoke(self, name: str, payload: Mapping[str, Any]) -> Any:
        """
        Call an operation and normalize its result.

        Raises:
            NotFoundError: If the operation does not exist
        """
        canonical = self.resolve(name, True)
        if canonical is False:
            raise NotFoundError(f"Function '{name}' does not exist on this service.")

        handle = self._handle_for(canonical)
        logger.debug(f"Calling SOAP operation: {canonical}")
        result = handle(payload)

        return normalize(result)

    def _handle_for(self, canonical: str) -> Callable[[Any], Any]:
        if self._handles_generation != self.builder.generation:
            self._handles = {}
            self._handles_generation = self.builder.generation

        handle = self._handles.get(canonical)
        if handle is None:
            handle = self.client.operation(canonical)
            self._handles[canonical] = handle
        return handle
