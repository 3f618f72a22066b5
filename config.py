"""Configuração da aplicação e dos serviços SOAP."""
import json
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from soap_rest.errors import ConfigurationError

# Constantes aceitas em valores de options (ex.: "soap_version": "SOAP_1_2")
SOAP_CONSTANTS: Dict[str, Any] = {
    "SOAP_1_1": 1,
    "SOAP_1_2": 2,
    "SOAP_RPC": 1,
    "SOAP_DOCUMENT": 2,
    "SOAP_ENCODED": 1,
    "SOAP_LITERAL": 2,
    "SOAP_AUTHENTICATION_BASIC": 0,
    "SOAP_AUTHENTICATION_DIGEST": 1,
    "SOAP_COMPRESSION_ACCEPT": 32,
    "SOAP_COMPRESSION_GZIP": 0,
    "SOAP_SINGLE_ELEMENT_ARRAYS": 1,
    "SOAP_USE_XSI_ARRAY_TYPE": 4,
    "WSDL_CACHE_NONE": 0,
    "WSDL_CACHE_DISK": 1,
    "WSDL_CACHE_MEMORY": 2,
    "WSDL_CACHE_BOTH": 3,
}

_TRUE_VALUES = {"1", "true", "yes", "on", "y"}


def get_bool(value: Any) -> bool:
    """Interpreta valores booleanos vindos de JSON ou de formulários."""
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return bool(value)


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    try:
        float(str(value))
        return True
    except ValueError:
        return False


def resolve_options(options: Any) -> Dict[str, Any]:
    """Substitui nomes de constantes pelos seus valores; o resto fica como está."""
    if not isinstance(options, dict):
        return {}

    resolved = dict(options)
    for key, value in options.items():
        if isinstance(value, str) and not _is_numeric(value) and value in SOAP_CONSTANTS:
            resolved[key] = SOAP_CONSTANTS[value]
    return resolved


def decode_header_data(raw: Any) -> Dict[str, Any]:
    """Decodifica o campo data de um header (JSON, possivelmente com barras escapadas)."""
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str):
        return {}

    try:
        data = json.loads(re.sub(r"\\(.)", r"\1", raw))
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


@dataclass
class HeaderConfig:
    """Configuração de um header SOAP ("wsse" ou genérico)."""

    type: str = "generic"
    data: Dict[str, Any] = field(default_factory=dict)
    namespace: Optional[str] = None
    name: Optional[str] = None
    must_understand: bool = False
    actor: Optional[str] = None

    @classmethod
    def from_dict(cls, header: Dict[str, Any]) -> "HeaderConfig":
        return cls(
            type=header.get("type") or "generic",
            data=decode_header_data(header.get("data", "{}")),
            namespace=header.get("namespace"),
            name=header.get("name"),
            must_understand=get_bool(header.get("mustunderstand", False)),
            actor=header.get("actor"),
        )


@dataclass
class AppConfig:
    """Configuração global do processo."""

    default_cache_ttl: int = 300
    cache_backend: str = "memory"  # "memory" ou "file"
    cache_dir: str = "./.cache/soap"

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Carrega config de variáveis de ambiente."""
        return cls(
            default_cache_ttl=int(os.getenv("SOAP_REST_DEFAULT_CACHE_TTL", "300")),
            cache_backend=os.getenv("SOAP_REST_CACHE_BACKEND", "memory"),
            cache_dir=os.getenv("SOAP_REST_CACHE_DIR", "./.cache/soap"),
        )


@dataclass
class ServiceConfig:
    """Configuração de um serviço SOAP."""

    id: Any
    name: str
    label: str = ""
    description: str = ""
    wsdl: Optional[str] = None
    options: Dict[str, Any] = field(default_factory=dict)
    headers: List[HeaderConfig] = field(default_factory=list)
    cache_enabled: bool = False
    cache_ttl: int = 300
    access: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, settings: Dict[str, Any], app: Optional[AppConfig] = None) -> "ServiceConfig":
        """
        Carrega config a partir do dicionário de settings do serviço.

        Raises:
            ConfigurationError: Se não houver WSDL nem o par location/uri
        """
        app = app or app_config
        config = settings.get("config") or {}
        wsdl = config.get("wsdl") or None

        raw_options = config.get("options")
        if not wsdl:
            if not isinstance(raw_options, dict) or raw_options.get("location") is None \
                    or raw_options.get("uri") is None:
                raise ConfigurationError(
                    "SOAP Services require either a WSDL or both location and URI to be configured."
                )

        cache_ttl = config.get("cache_ttl")
        return cls(
            id=settings.get("id"),
            name=settings.get("name") or "",
            label=settings.get("label") or "",
            description=settings.get("description") or "",
            wsdl=wsdl,
            options=resolve_options(raw_options),
            headers=[HeaderConfig.from_dict(h) for h in config.get("headers") or []],
            cache_enabled=get_bool(config.get("cache_enabled", False)),
            cache_ttl=int(cache_ttl) if cache_ttl not in (None, "") else app.default_cache_ttl,
            access=config.get("access") or {},
        )


# Instância global
app_config = AppConfig.from_env()
