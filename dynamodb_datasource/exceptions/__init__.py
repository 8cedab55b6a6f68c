# Base exception class
from .base import DatasourceError

from .domain_exceptions import (
    ConditionalCheckFailedError,
    ConfigurationError,
    ConnectionError,
    ServiceError,
    ValidationError,
)

__all__ = [
    "DatasourceError",
    "ConditionalCheckFailedError",
    "ConfigurationError",
    "ConnectionError",
    "ServiceError",
    "ValidationError",
]
