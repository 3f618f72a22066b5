"""Modelos para representar o schema descoberto de um serviço SOAP."""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


# "GetQuoteResponse GetQuote(GetQuote $parameters)"
# "list(string $a, int $b) Split(string $value)"
_FUNCTION_PATTERN = re.compile(
    r"^\s*(?P<response>list\(.*?\)|\S+)\s+(?P<name>[^\s(]+)\s*\((?P<params>.*)\)\s*$"
)


@dataclass
class TypeDescriptor:
    """Representa um tipo: escalar (só o tipo base) ou struct (campos tipados)."""

    name: str
    declared_type: Optional[str] = None
    fields: Optional[Dict[str, str]] = None

    @classmethod
    def scalar(cls, name: str, declared_type: str) -> "TypeDescriptor":
        return cls(name=name, declared_type=declared_type)

    @classmethod
    def struct(cls, name: str, fields: Dict[str, str]) -> "TypeDescriptor":
        return cls(name=name, fields=dict(fields))

    @property
    def is_struct(self) -> bool:
        """Struct descriptors carry a field mapping, possibly empty."""
        return self.fields is not None

    def to_dict(self) -> Dict[str, Any]:
        """Converte para dicionário."""
        if self.is_struct:
            return {"name": self.name, "kind": "struct", "fields": dict(self.fields)}
        return {"name": self.name, "kind": "scalar", "type": self.declared_type}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TypeDescriptor":
        if data.get("kind") == "struct":
            return cls.struct(data["name"], data.get("fields") or {})
        return cls.scalar(data["name"], data.get("type"))


@dataclass
class FunctionSchema:
    """Representa uma operação SOAP e os tipos de entrada e saída."""

    name: str
    request_type: Optional[str] = None
    response_type: Optional[str] = None
    description: str = ""
    request_fields: Optional[TypeDescriptor] = None
    response_fields: Optional[TypeDescriptor] = None
    key: str = field(init=False)

    def __post_init__(self):
        self.key = self.name.lower()

    @classmethod
    def from_raw(cls, raw: str) -> "FunctionSchema":
        """
        Parse a raw operation descriptor.

        The descriptor has the form ``ResponseType name(RequestType $param, ...)``.
        Only the first parameter's type is kept as the request type.

        Raises:
            ValueError: If the descriptor does not have that form
        """
        match = _FUNCTION_PATTERN.match(raw or "")
        if not match:
            raise ValueError(f"Unrecognized operation descriptor: {raw!r}")

        request_type = None
        params = match.group("params").strip()
        if params:
            first = params.split(",")[0].strip().split(" ")
            request_type = first[0] or None

        return cls(
            name=match.group("name"),
            request_type=request_type,
            response_type=match.group("response"),
            description=raw.strip(),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Converte para dicionário."""
        return {
            "name": self.name,
            "description": self.description,
            "request_type": self.request_type,
            "response_type": self.response_type,
            "request_fields": self.request_fields.to_dict() if self.request_fields else None,
            "response_fields": self.response_fields.to_dict() if self.response_fields else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FunctionSchema":
        request_fields = data.get("request_fields")
        response_fields = data.get("response_fields")
        return cls(
            name=data["name"],
            request_type=data.get("request_type"),
            response_type=data.get("response_type"),
            description=data.get("description", ""),
            request_fields=TypeDescriptor.from_dict(request_fields) if request_fields else None,
            response_fields=TypeDescriptor.from_dict(response_fields) if response_fields else None,
        )


@dataclass
class SchemaSnapshot:
    """Representa o snapshot completo: tabelas de funções e de tipos."""

    functions: Dict[str, FunctionSchema] = field(default_factory=dict)
    types: Dict[str, TypeDescriptor] = field(default_factory=dict)
