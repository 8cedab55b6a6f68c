"""
Datasource Exceptions

All errors raised by the datasource extend DatasourceError. They fall into
three groups:

1. Configuration errors, raised synchronously while wiring things up
2. Validation errors, raised before any request leaves the process
3. Service errors, wrapping whatever DynamoDB (or botocore) reported
"""

from typing import Any, Dict, Optional

from .base import DatasourceError


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(DatasourceError):
    """Raised when the datasource, a model or a schema is misconfigured.

    Used for:
    - Missing region or table prefix
    - Missing table name, primary key or schema definition
    - Schema definitions naming an unknown field type
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, original_error, context)


# =============================================================================
# Data Validation Errors
# =============================================================================

class ValidationError(DatasourceError):
    """Raised when an entity does not satisfy its schema.

    Used for:
    - Required field validation errors
    - Type tag mismatches
    - Unknown type tags passed to field validation
    """

    def __init__(self, message: str, errors: Optional[Dict[str, Any]] = None, original_error: Optional[Exception] = None):
        """Initialize validation error.

        Args:
            message: Human-readable error message
            errors: Dictionary of field-level validation errors
            original_error: The original exception that caused this error
        """
        self.errors = errors or {}
        super().__init__(message, original_error, {'field': ", ".join(self.errors) or None})


# =============================================================================
# Service Errors
# =============================================================================

class ServiceError(DatasourceError):
    """Raised when DynamoDB rejects or fails a request.

    The error code reported by the service is kept on ``code`` and the
    botocore exception on ``original_error``. Nothing is retried.
    """

    def __init__(self, message: str, code: Optional[str] = None, original_error: Optional[Exception] = None):
        """Initialize service error.

        Args:
            message: Human-readable error message
            code: DynamoDB error code (e.g. 'ProvisionedThroughputExceededException')
            original_error: The original exception that caused this error
        """
        self.code = code
        super().__init__(message, original_error, {'code': code})


class ConditionalCheckFailedError(ServiceError):
    """Raised when a conditional write fails.

    Used for:
    - Insert of a primary key that already exists
    - Update or delete of a primary key that does not exist
    """

    def __init__(self, message: str, resource_id: Optional[Any] = None, original_error: Optional[Exception] = None):
        """Initialize conditional check error.

        Args:
            message: Human-readable error message
            resource_id: Primary key value of the record the condition guarded
            original_error: The original exception that caused this error
        """
        self.resource_id = resource_id
        super().__init__(message, 'ConditionalCheckFailedException', original_error)
        self.add_context(resource_id=resource_id)


class ConnectionError(ServiceError):
    """Raised when DynamoDB cannot be reached.

    Used for:
    - Session or resource creation failures
    - Network and endpoint errors raised by botocore
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message, None, original_error)
