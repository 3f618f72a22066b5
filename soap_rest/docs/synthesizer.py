"""
Doc Synthesizer - Builds Swagger paths and definitions from a schema snapshot.

Every operation the caller may access becomes one ``POST /<service>/<operation>``
path; every known type becomes one model definition.
"""

import copy
import logging
import re
from typing import Any, Callable, Dict, Optional

from soap_rest.schema.models import FunctionSchema, SchemaSnapshot, TypeDescriptor

logger = logging.getLogger(__name__)

VOID_TYPE = "void"

ERROR_MODEL = {
    "type": "object",
    "properties": {
        "error": {
            "type": "object",
            "properties": {
                "code": {"type": "integer", "format": "int32", "description": "Error code."},
                "message": {"type": "string", "description": "String description of the error."},
            },
        },
    },
}


def camelize(name: str) -> str:
    """'my_soap-service' -> 'MySoapService'"""
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[\s_\-.]+", name) if part)


def base_api_doc(service_name: str, description: str = "") -> Dict[str, Any]:
    """Minimal Swagger 2.0 document to merge generated docs into"""
    return {
        "swagger": "2.0",
        "info": {"title": service_name, "description": description, "version": "2.0"},
        "paths": {},
        "definitions": {},
    }


class DocSynthesizer:
    """Projects a schema snapshot into Swagger paths and definitions"""

    def __init__(self, service_name: str):
        self.service_name = service_name
        self.tag = service_name.lower()
        self.capitalized = camelize(service_name)

    def build_docs(
        self,
        snapshot: SchemaSnapshot,
        permissions_of: Callable[[str], int],
        base: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Build API documentation

        Args:
            snapshot: Functions and types tables
            permissions_of: Access mask of an operation name; 0 hides the operation
            base: Document to merge into (not modified)

        Returns:
            New document with ``paths`` and ``definitions`` merged in
        """
        paths = {}
        for schema in snapshot.functions.values():
            if not permissions_of(schema.name):
                continue
            paths[f"/{self.tag}/{schema.name}"] = {"post": self._build_operation(schema)}

        models = {}
        for name, descriptor in snapshot.types.items():
            if name not in models:
                models[name] = self._build_model(name, descriptor)

        doc = copy.deepcopy(base) if base is not None else base_api_doc(self.service_name)
        doc["paths"] = {**doc.get("paths", {}), **paths}
        doc["definitions"] = {**doc.get("definitions", {}), **models}
        doc["definitions"].setdefault("Error", copy.deepcopy(ERROR_MODEL))

        logger.debug(f"Documented {len(paths)} operations and {len(models)} models")
        return doc

    def _build_operation(self, schema: FunctionSchema) -> Dict[str, Any]:
        operation_id = f"call{self.capitalized}{schema.name}"
        parameters = []
        if schema.request_type:
            parameters.append({
                "name": "body",
                "description": "Data containing name-value pairs of fields to send.",
                "schema": {"$ref": f"#/definitions/{schema.request_type}"},
                "in": "body",
                "required": True,
            })

        success: Dict[str, Any] = {"description": "Success"}
        if schema.response_type and schema.response_type != VOID_TYPE:
            success["schema"] = {"$ref": f"#/definitions/{schema.response_type}"}

        return {
            "tags": [self.tag],
            "operationId": operation_id,
            "summary": f"{operation_id}()",
            "description": schema.description,
            "x-publishedEvents": [
                f"{self.tag}.{schema.name}.call",
                f"{self.tag}.function_called",
            ],
            "parameters": parameters,
            "responses": {
                "200": success,
                "default": {
                    "description": "Error",
                    "schema": {"$ref": "#/definitions/Error"},
                },
            },
        }

    @staticmethod
    def _build_model(name: str, descriptor: TypeDescriptor) -> Dict[str, Any]:
        if descriptor.is_struct:
            fields = descriptor.fields
        else:
            fields = {"value": descriptor.declared_type}

        properties = {
            field: {"type": field_type, "description": ""}
            for field, field_type in fields.items()
        }
        return {"type": name, "properties": properties}
