"""SOAP service exposed as a REST-style resource collection."""
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from config import AppConfig, ServiceConfig, app_config, get_bool
from soap_rest.api.access import AccessPolicy, Verb, mask_to_list
from soap_rest.api.dispatcher import Dispatcher
from soap_rest.api.soap_client import ZeepSoapClient
from soap_rest.cache.schema_cache import SchemaCache
from soap_rest.cache.stores import CacheStore, FileCacheStore, MemoryCacheStore, NullCacheStore
from soap_rest.docs.synthesizer import DocSynthesizer, base_api_doc
from soap_rest.errors import ForbiddenError, InvalidArgumentError
from soap_rest.introspection.schema_builder import SchemaBuilder
from soap_rest.schema.models import FunctionSchema, TypeDescriptor

logger = logging.getLogger(__name__)

_shared_memory_store: Optional[MemoryCacheStore] = None


def default_cache_store(config: ServiceConfig, app: AppConfig) -> CacheStore:
    """Pick the cache backend for a service."""
    global _shared_memory_store

    if not config.cache_enabled:
        return NullCacheStore()
    if app.cache_backend == "file":
        return FileCacheStore(Path(app.cache_dir))
    if _shared_memory_store is None:
        _shared_memory_store = MemoryCacheStore()
    return _shared_memory_store


class SoapService:
    """
    One configured SOAP service.

    Usage:
    ```python
    service = SoapService({"id": 3, "name": "weather", "config": {"wsdl": url}})
    service.call_function("getforecast", {"zip": "10001"})
    ```
    """

    def __init__(
        self,
        settings: Dict[str, Any],
        client=None,
        cache_store: Optional[CacheStore] = None,
        app: Optional[AppConfig] = None,
    ):
        """
        Initialize service.

        Args:
            settings: Service settings ({id, name, config: {wsdl, options, headers, ...}})
            client: SOAP capability; a zeep client is built from settings when omitted
            cache_store: Cache backend; chosen from settings and app config when omitted
            app: Process-wide configuration

        Raises:
            ConfigurationError: If neither a WSDL nor location/uri is configured
            ConstructionError: If the SOAP client cannot be set up
        """
        app = app or app_config
        self.config = ServiceConfig.from_dict(settings, app)
        self.id = self.config.id
        self.name = self.config.name

        if client is None:
            client = ZeepSoapClient.from_config(self.config)
        self.client = client

        store = cache_store if cache_store is not None else default_cache_store(self.config, app)
        self.cache = SchemaCache(self.id, store, ttl=self.config.cache_ttl)
        self.builder = SchemaBuilder(self.client, self.cache)
        self.dispatcher = Dispatcher(self.client, self.builder)
        self.access = AccessPolicy(self.config.access)

    def get_permissions(self, name: str) -> Verb:
        return self.access.permissions_of(name)

    def get_functions(self, refresh: bool = False) -> Dict[str, FunctionSchema]:
        return self.builder.get_functions(refresh)

    def get_types(self, refresh: bool = False) -> Dict[str, TypeDescriptor]:
        return self.builder.get_types(refresh)

    def refresh_table_cache(self) -> None:
        self.builder.refresh_table_cache()

    def does_function_exist(self, name: str, return_name: bool = False) -> Union[bool, str]:
        return self.dispatcher.resolve(name, return_name)

    def call_function(self, name: str, payload: Mapping[str, Any]) -> Any:
        return self.dispatcher.invoke(name, payload)

    def get_resources(self, refresh: bool = False) -> List[Dict[str, Any]]:
        """Functions the caller may access, each with its allowed verbs."""
        resources = []
        for function in self.get_functions(refresh).values():
            access = self.get_permissions(function.name)
            if access:
                out = function.to_dict()
                out["access"] = mask_to_list(access)
                resources.append(out)
        return resources

    def get_api_doc_info(self, base: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Swagger paths and definitions for this service."""
        self.get_functions()
        self.get_types()
        if base is None:
            base = base_api_doc(self.name, self.config.description)
        synthesizer = DocSynthesizer(self.name)
        return synthesizer.build_docs(self.builder.snapshot, self.get_permissions, base)

    def handle_request(
        self,
        verb: str,
        resource: Optional[str] = None,
        params: Optional[Mapping[str, Any]] = None,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Handle a GET or POST on the service or one of its functions.

        GET without a resource lists the functions; POST without one does nothing.

        Raises:
            ForbiddenError: If the verb is not allowed on the function
        """
        verb = verb.upper()
        if not resource:
            if verb == "GET":
                refresh = get_bool((params or {}).get("refresh", False))
                return {"resource": self.get_resources(refresh)}
            return None

        try:
            required = Verb[verb]
        except KeyError:
            raise InvalidArgumentError(f"Unsupported verb: {verb}")

        if not self.get_permissions(resource) & required:
            raise ForbiddenError(f"{verb} access to '{resource}' is not allowed.")

        data = params if verb == "GET" else payload
        logger.info(f"{verb} {self.name}/{resource}")
        return self.call_function(resource, dict(data or {}))
