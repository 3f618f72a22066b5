from .models import FunctionSchema, SchemaSnapshot, TypeDescriptor

__all__ = ["FunctionSchema", "SchemaSnapshot", "TypeDescriptor"]
