"""Error taxonomy for SOAP services."""


class SoapServiceError(Exception):
    """Base error for the SOAP service layer."""

    status_code = 500


class ConfigurationError(SoapServiceError):
    """Service settings are incomplete or invalid."""


class ConstructionError(SoapServiceError):
    """The SOAP client or its headers could not be set up."""


class InvalidArgumentError(SoapServiceError, ValueError):
    """A request argument is malformed."""

    status_code = 400


class ForbiddenError(SoapServiceError):
    """The caller has no access to the requested operation."""

    status_code = 403


class NotFoundError(SoapServiceError, LookupError):
    """The requested operation does not exist on the service."""

    status_code = 404


class ResultNormalizationError(SoapServiceError):
    """A SOAP result graph could not be converted to plain data."""
