"""Shared fixtures: an in-memory stand-in for the SOAP client."""
import pytest

from soap_rest.cache.schema_cache import SchemaCache
from soap_rest.cache.stores import MemoryCacheStore
from soap_rest.introspection.schema_builder import SchemaBuilder


class FakeSoapClient:
    """Reports fixed operations/types and records every call"""

    def __init__(self, functions=None, types=None, results=None):
        self.functions = list(functions or [])
        self.types = list(types or [])
        self.results = dict(results or {})
        self.function_introspections = 0
        self.type_introspections = 0
        self.resolved = []
        self.calls = []

    def get_functions(self):
        self.function_introspections += 1
        return list(self.functions)

    def get_types(self):
        self.type_introspections += 1
        return list(self.types)

    def operation(self, name):
        self.resolved.append(name)

        def call(payload):
            self.calls.append((name, payload))
            result = self.results.get(name)
            return result(payload) if callable(result) else result

        return call


RAW_TYPES = [
    "struct Person { string name; int age }",
    "string Greeting",
]

RAW_FUNCTIONS = [
    "Greeting SayHello(Person $parameters)",
    "Person GetPerson(string $id)",
]


@pytest.fixture
def fake_client():
    return FakeSoapClient(functions=RAW_FUNCTIONS, types=RAW_TYPES)


@pytest.fixture
def store():
    return MemoryCacheStore()


@pytest.fixture
def builder(fake_client, store):
    return SchemaBuilder(fake_client, SchemaCache(7, store))
