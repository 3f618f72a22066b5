"""SOAP services exposed as REST-style resource collections."""

__version__ = "0.1.0"
