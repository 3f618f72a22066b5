"""
Unit tests for SoapService, its configuration and the zeep client setup

Tests:
- Settings validation and option/header decoding
- Client construction errors
- Resources, docs and request handling
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from lxml import etree
from zeep import Client
from zeep.wsse.username import UsernameToken

from config import AppConfig, HeaderConfig, ServiceConfig, decode_header_data, resolve_options
from soap_rest.api.headers import SOAP_ENV_NS, build_generic_header, build_headers
from soap_rest.api.soap_client import ZeepSoapClient
from soap_rest.cache.stores import MemoryCacheStore, NullCacheStore
from soap_rest.errors import (
    ConfigurationError,
    ConstructionError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
)
from soap_rest.service import SoapService

from conftest import FakeSoapClient, RAW_FUNCTIONS, RAW_TYPES


GREETER_WSDL = Path(__file__).parent / "fixtures" / "greeter.wsdl"


def make_settings(**config):
    config.setdefault("wsdl", "http://example.com/greeter?wsdl")
    return {"id": 3, "name": "Greeter", "config": config}


@pytest.fixture
def client():
    return FakeSoapClient(
        functions=RAW_FUNCTIONS,
        types=RAW_TYPES,
        results={"SayHello": {"text": "Hello"}},
    )


@pytest.fixture
def service(client):
    return SoapService(make_settings(), client=client, cache_store=MemoryCacheStore())


# ============================================================================
# TEST: Configuration
# ============================================================================


class TestServiceConfig:
    """Tests for settings parsing"""

    def test_requires_wsdl_or_location_and_uri(self):
        with pytest.raises(ConfigurationError, match="WSDL"):
            ServiceConfig.from_dict({"id": 1, "name": "x", "config": {}})

        with pytest.raises(ConfigurationError):
            ServiceConfig.from_dict(
                {"id": 1, "name": "x", "config": {"options": {"location": "http://h/soap"}}}
            )

    def test_location_and_uri_accepted(self):
        config = ServiceConfig.from_dict(
            {"id": 1, "name": "x", "config": {"options": {"location": "http://h/soap", "uri": "urn:x"}}}
        )

        assert config.wsdl is None
        assert config.options["uri"] == "urn:x"

    def test_cache_settings(self):
        app = AppConfig(default_cache_ttl=42)

        default = ServiceConfig.from_dict(make_settings(), app)
        explicit = ServiceConfig.from_dict(make_settings(cache_enabled="true", cache_ttl="90"), app)

        assert default.cache_enabled is False
        assert default.cache_ttl == 42
        assert explicit.cache_enabled is True
        assert explicit.cache_ttl == 90

    def test_option_constants_resolved(self):
        options = resolve_options(
            {"soap_version": "SOAP_1_2", "cache_wsdl": "WSDL_CACHE_NONE", "timeout": "30", "x": "OTHER"}
        )

        assert options == {"soap_version": 2, "cache_wsdl": 0, "timeout": "30", "x": "OTHER"}

    def test_options_not_a_mapping(self):
        assert resolve_options("nope") == {}

    def test_header_data_decoding(self):
        assert decode_header_data('{\\"username\\": \\"ann\\"}') == {"username": "ann"}
        assert decode_header_data("not json") == {}
        assert decode_header_data("[1, 2]") == {}

    def test_header_from_dict(self):
        header = HeaderConfig.from_dict(
            {"type": "generic", "namespace": "urn:h", "name": "Auth", "data": '{"key": "k"}',
             "mustunderstand": "1", "actor": "urn:actor"}
        )

        assert header.data == {"key": "k"}
        assert header.must_understand is True
        assert header.actor == "urn:actor"


# ============================================================================
# TEST: Headers and client construction
# ============================================================================


class TestHeaders:
    """Tests for SOAP header building"""

    def test_wsse_requires_username_and_password(self):
        wsse, elements = build_headers([HeaderConfig(type="wsse", data={"username": "ann"})])

        assert wsse is None
        assert elements == []

    def test_wsse_token(self):
        wsse, _ = build_headers(
            [HeaderConfig(type="wsse", data={"username": "ann", "password": "secret"})]
        )

        assert isinstance(wsse, UsernameToken)

    def test_generic_header_requires_namespace_name_and_data(self):
        assert build_generic_header(HeaderConfig(namespace="urn:h", name="Auth")) is None
        assert build_generic_header(HeaderConfig(name="Auth", data={"k": "v"})) is None

    def test_generic_header_element(self):
        element = build_generic_header(
            HeaderConfig(namespace="urn:h", name="Auth", data={"key": "k", "nested": {"a": 1}},
                         must_understand=True, actor="urn:actor")
        )

        assert element.tag == "{urn:h}Auth"
        assert element.find("{urn:h}key").text == "k"
        assert element.find("{urn:h}nested/{urn:h}a").text == "1"
        assert element.get(f"{{{SOAP_ENV_NS}}}mustUnderstand") == "1"
        assert element.get(f"{{{SOAP_ENV_NS}}}actor") == "urn:actor"
        assert etree.tostring(element)


class TestClientConstruction:
    """Tests for ZeepSoapClient.from_config"""

    def test_location_only_cannot_build_zeep_client(self):
        settings = {"id": 1, "name": "x",
                    "config": {"options": {"location": "http://h/soap", "uri": "urn:x"}}}

        with pytest.raises(ConstructionError, match="Unexpected SOAP Service Exception"):
            SoapService(settings)

    @patch("soap_rest.api.soap_client.Client")
    def test_client_failure_wrapped(self, mock_client):
        mock_client.side_effect = Exception("WSDL could not be loaded")

        with pytest.raises(ConstructionError, match="WSDL could not be loaded"):
            SoapService(make_settings())

    @patch("soap_rest.api.soap_client.Client")
    def test_headers_attached(self, mock_client):
        settings = make_settings(
            options={"login": "u", "password": "p", "location": "http://h/alt"},
            headers=[
                {"type": "wsse", "data": '{"username": "ann", "password": "secret"}'},
                {"namespace": "urn:h", "name": "Tenant", "data": '{"id": "42"}'},
            ],
        )

        service = SoapService(settings)

        kwargs = mock_client.call_args.kwargs
        assert isinstance(kwargs["wsse"], UsernameToken)
        assert kwargs["transport"].session.auth.username == "u"
        headers = mock_client.return_value.set_default_soapheaders.call_args.args[0]
        assert [h.tag for h in headers] == ["{urn:h}Tenant"]
        assert isinstance(service.client, ZeepSoapClient)
        assert service.client.address == "http://h/alt"

    @patch("soap_rest.api.soap_client.InMemoryCache")
    @patch("soap_rest.api.soap_client.Client")
    def test_wsdl_cache_disabled_by_numeric_string(self, mock_client, mock_cache):
        SoapService(make_settings(options={"cache_wsdl": "0"}))

        assert not mock_cache.called
        assert mock_client.call_args.kwargs["transport"].cache is None

    @patch("soap_rest.api.soap_client.InMemoryCache")
    @patch("soap_rest.api.soap_client.Client")
    def test_wsdl_cache_enabled_by_default(self, mock_client, mock_cache):
        SoapService(make_settings())

        assert mock_cache.called


class TestZeepIntrospection:
    """Tests for the text forms reported by ZeepSoapClient"""

    def test_operation_signatures(self):
        operation = MagicMock()
        operation.input.body.type.name = None
        operation.input.body.qname.localname = "GetQuote"
        operation.output.body.type.name = "QuoteResult"
        port = MagicMock()
        port.binding._operations = {"GetQuote": operation}
        zeep_client = MagicMock()
        zeep_client.wsdl.services = {"Quotes": MagicMock(ports={"QuotesSoap": port})}

        functions = ZeepSoapClient(zeep_client).get_functions()

        assert functions == ["QuoteResult GetQuote(GetQuote $parameters)"]

    def test_types_from_wsdl(self):
        """Named types and anonymous wrapper elements, without xsd built-ins"""
        client = ZeepSoapClient(Client(wsdl=str(GREETER_WSDL)))

        types = client.get_types()

        assert sorted(types) == [
            "string Code",
            "struct Person {\n string name;\n int age;\n}",
            "struct SayHello {\n Person person;\n Code code;\n}",
            "struct SayHelloResponse {\n string greeting;\n}",
        ]

    def test_functions_from_wsdl(self):
        client = ZeepSoapClient(Client(wsdl=str(GREETER_WSDL)))

        assert client.get_functions() == ["SayHelloResponse SayHello(SayHello $parameters)"]

    def test_service_schema_from_wsdl(self):
        """Request and response types of a wrapped operation resolve to their fields"""
        service = SoapService(
            {"id": 5, "name": "greeter", "config": {"wsdl": str(GREETER_WSDL)}},
            cache_store=MemoryCacheStore(),
        )

        function = service.get_functions()["sayhello"]

        assert list(service.get_types()) == ["Code", "Person", "SayHello", "SayHelloResponse"]
        assert function.request_fields.fields == {"person": "Person", "code": "Code"}
        assert function.response_fields.fields == {"greeting": "string"}

        doc = service.get_api_doc_info()
        post = doc["paths"]["/greeter/SayHello"]["post"]
        refs = [post["parameters"][0]["schema"]["$ref"], post["responses"]["200"]["schema"]["$ref"]]
        for ref in refs:
            assert ref.rsplit("/", 1)[1] in doc["definitions"]

    def test_operation_payload_spread(self):
        zeep_client = MagicMock()
        zeep_client.service.GetQuote.return_value = "ok"

        call = ZeepSoapClient(zeep_client).operation("GetQuote")

        assert call({"symbol": "ACME"}) == "ok"
        zeep_client.service.GetQuote.assert_called_once_with(symbol="ACME")


# ============================================================================
# TEST: Service
# ============================================================================


class TestSoapService:
    """Tests for SoapService"""

    def test_call_function(self, service, client):
        assert service.call_function("SAYHELLO", {"name": "Ann"}) == {"text": "Hello"}
        assert client.calls == [("SayHello", {"name": "Ann"})]

    def test_does_function_exist(self, service):
        assert service.does_function_exist("getperson", True) == "GetPerson"
        assert service.does_function_exist("nope") is False
        with pytest.raises(InvalidArgumentError):
            service.does_function_exist("")

    def test_unknown_verb_in_access_rules(self, client):
        with pytest.raises(ConfigurationError, match="FETCH"):
            SoapService(make_settings(access={"SayHello": ["FETCH"]}), client=client)

    def test_cache_disabled_uses_null_store(self, client):
        service = SoapService(make_settings(), client=client)

        assert isinstance(service.cache.store, NullCacheStore)

    def test_cache_ttl_from_settings(self, client):
        service = SoapService(make_settings(cache_ttl=12), client=client)

        assert service.cache.ttl == 12
        assert service.cache.prefix == "service_3:"

    def test_resources_filtered_by_access(self, client):
        service = SoapService(
            make_settings(access={"SayHello": ["GET", "POST"]}), client=client
        )

        resources = service.get_resources()

        assert [r["name"] for r in resources] == ["SayHello"]
        assert resources[0]["access"] == ["GET", "POST"]
        assert resources[0]["request_fields"]["fields"] == {"name": "string", "age": "int"}

    def test_api_doc_info(self, service):
        doc = service.get_api_doc_info()

        assert doc["info"]["title"] == "Greeter"
        assert "/greeter/SayHello" in doc["paths"]
        assert "Person" in doc["definitions"]

    def test_handle_get_without_resource_lists(self, service):
        result = service.handle_request("GET")

        assert [r["name"] for r in result["resource"]] == ["GetPerson", "SayHello"]

    def test_handle_post_without_resource(self, service):
        assert service.handle_request("POST") is None

    def test_handle_post_calls_function(self, service, client):
        result = service.handle_request("POST", "sayhello", params={"x": 1}, payload={"name": "Ann"})

        assert result == {"text": "Hello"}
        assert client.calls == [("SayHello", {"name": "Ann"})]

    def test_handle_get_uses_params(self, service, client):
        service.handle_request("GET", "SayHello", params={"name": "Bob"})

        assert client.calls == [("SayHello", {"name": "Bob"})]

    def test_handle_forbidden_verb(self, client):
        service = SoapService(make_settings(access={"*": ["GET"]}), client=client)

        with pytest.raises(ForbiddenError):
            service.handle_request("POST", "SayHello", payload={})

    def test_handle_unknown_function(self, service):
        with pytest.raises(NotFoundError):
            service.handle_request("POST", "Missing", payload={})

    def test_refresh_table_cache(self, service, client):
        service.get_functions()
        service.refresh_table_cache()
        service.get_functions()

        assert client.function_introspections == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
