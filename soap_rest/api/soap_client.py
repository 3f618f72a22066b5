"""
SOAP client - zeep-backed introspection and invocation.

Reports operations and types in the classic text forms:
- ``GetQuoteResponse GetQuote(GetQuote $parameters)``
- ``struct GetQuote { string symbol; int count; }``
- ``string CurrencyCode``
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Iterator, List, Optional

import requests
from requests.auth import HTTPBasicAuth
from zeep import Client, Settings
from zeep.cache import InMemoryCache
from zeep.transports import Transport
from zeep.xsd import ComplexType

from config import ServiceConfig
from soap_rest.errors import ConstructionError

from .headers import build_headers

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300
WSDL_CACHE_NONE = 0
XSD_NS = "http://www.w3.org/2001/XMLSchema"


class ZeepSoapClient:
    """
    Wraps a zeep Client behind the get_functions/get_types/operation interface

    Usage:
    ```python
    client = ZeepSoapClient.from_config(service_config)
    print(client.get_functions())
    result = client.operation("GetQuote")({"symbol": "ACME"})
    ```
    """

    def __init__(self, client: Client, address: Optional[str] = None):
        self.client = client
        self.address = address
        self._service = None

    @classmethod
    def from_config(cls, config: ServiceConfig) -> "ZeepSoapClient":
        """
        Create the zeep client, transport and headers for a service

        Raises:
            ConstructionError: On any failure while setting up the client
        """
        try:
            if not config.wsdl:
                raise ValueError("a WSDL document is required by the zeep transport")

            options = config.options
            session = requests.Session()
            if options.get("login") and options.get("password"):
                session.auth = HTTPBasicAuth(options["login"], options["password"])

            cache = None
            if int(options.get("cache_wsdl", 1)) != WSDL_CACHE_NONE:
                cache = InMemoryCache()

            transport = Transport(
                session=session,
                cache=cache,
                timeout=int(options.get("connection_timeout", DEFAULT_TIMEOUT)),
                operation_timeout=int(options["timeout"]) if options.get("timeout") else None,
            )
            settings = Settings(strict=bool(options.get("strict", False)), xml_huge_tree=True)

            wsse, soap_headers = build_headers(config.headers)
            client = Client(wsdl=config.wsdl, transport=transport, settings=settings, wsse=wsse)
            if soap_headers:
                client.set_default_soapheaders(soap_headers)

        except Exception as e:
            raise ConstructionError(f"Unexpected SOAP Service Exception:\n{e}") from e

        logger.info(f"SOAP client ready for {config.wsdl}")
        return cls(client, address=options.get("location"))

    @property
    def service(self):
        """Service proxy, bound to the configured address when one is set"""
        if self._service is None:
            if self.address:
                port = self._first_port()
                self._service = self.client.create_service(port.binding.name, self.address)
            else:
                self._service = self.client.service
        return self._service

    def _first_port(self):
        service = next(iter(self.client.wsdl.services.values()))
        return next(iter(service.ports.values()))

    def get_functions(self) -> List[str]:
        """Operation signatures of the first service port"""
        port = self._first_port()
        functions = []
        for name, operation in port.binding._operations.items():
            request_type = self._message_type_name(operation.input)
            response_type = self._message_type_name(operation.output) or "void"
            params = f"{request_type} $parameters" if request_type else ""
            functions.append(f"{response_type} {name}({params})")
        return functions

    def get_types(self) -> List[str]:
        """Declarations of all global types and anonymous element types"""
        return list(self._iter_type_declarations())

    def operation(self, name: str) -> Callable[[Any], Any]:
        """Callable for one operation, taking the payload as its only argument"""
        method = getattr(self.service, name)

        def call(payload: Any) -> Any:
            if isinstance(payload, Mapping):
                return method(**payload)
            return method(payload)

        return call

    def _iter_type_declarations(self) -> Iterator[str]:
        schema = self.client.wsdl.types
        for xsd_type in schema.types:
            if xsd_type.name and not _is_builtin(xsd_type):
                yield self._declare(xsd_type.name, xsd_type)

        # Anonymous element types are named after their element and never global.
        for element in schema.elements:
            element_type = getattr(element, "type", None)
            if not isinstance(element_type, ComplexType) or element_type.is_global:
                continue
            if element.qname.namespace == XSD_NS:
                continue
            yield self._declare(element.qname.localname, element_type)

    def _declare(self, name: str, xsd_type) -> str:
        if isinstance(xsd_type, ComplexType):
            body = "".join(
                f" {self._element_type_name(element)} {field_name};\n"
                for field_name, element in xsd_type.elements
            )
            return f"struct {name} {{\n{body}}}"
        return f"{self._simple_base_name(xsd_type)} {name}"

    @staticmethod
    def _element_type_name(element) -> str:
        xsd_type = getattr(element, "type", None)
        name = getattr(xsd_type, "name", None)
        if name:
            return name
        return ZeepSoapClient._simple_base_name(xsd_type) if xsd_type is not None else "anyType"

    @staticmethod
    def _simple_base_name(xsd_type) -> str:
        # Built-in xsd classes carry their own qname; restrictions reuse the class.
        for klass in type(xsd_type).__mro__:
            qname = klass.__dict__.get("_default_qname")
            if qname is not None:
                return qname.localname
        return "anyType"

    @staticmethod
    def _message_type_name(message) -> Optional[str]:
        body = getattr(message, "body", None)
        if body is None:
            return None

        name = getattr(getattr(body, "type", None), "name", None)
        if name:
            return name

        qname = getattr(body, "qname", None)
        if qname is not None:
            return qname.localname
        return getattr(body, "name", None)


def _is_builtin(xsd_type) -> bool:
    qname = getattr(xsd_type, "qname", None)
    return qname is not None and qname.namespace == XSD_NS
